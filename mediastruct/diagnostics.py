#############################################################################
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#
#############################################################################
#
#  Project Name        :    Media container structure inspector
#
#  Author              :    Alex Ashley
#
#############################################################################

from dataclasses import dataclass
import logging
from typing import Callable

@dataclass(slots=True, frozen=True, kw_only=True)
class Diagnostic:
    level: str
    message: str
    offset: int | None = None
    record_type: str | None = None

    def __str__(self) -> str:
        where: list[str] = []
        if self.record_type is not None:
            where.append(f'"{self.record_type}"')
        if self.offset is not None:
            where.append(f'@{self.offset}')
        if not where:
            return f'{self.level}: {self.message}'
        return f'{self.level}: {" ".join(where)}: {self.message}'


DiagnosticCallback = Callable[[str, Diagnostic], None]


class DiagnosticSink:
    """
    Collects the non-fatal observations made while parsing a file.

    Listeners can subscribe to a level ("debug", "info", "warning") or to
    "*" to receive every diagnostic. Each diagnostic is also sent to the
    "mediastruct" logger at the matching level.
    """

    LEVELS: dict[str, int] = {
        'debug': logging.DEBUG,
        'info': logging.INFO,
        'warning': logging.WARNING,
    }

    listeners: dict[str, list[DiagnosticCallback]]
    diagnostics: list[Diagnostic]

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.listeners = {}
        self.diagnostics = []
        if log is None:
            log = logging.getLogger('mediastruct')
        self.log = log

    def on(self, name: str, listener: DiagnosticCallback) -> None:
        try:
            ev_listeners: list[DiagnosticCallback] = self.listeners[name]
        except KeyError:
            ev_listeners = []
        ev_listeners.append(listener)
        self.listeners[name] = ev_listeners

    def off(self, name: str, listener: DiagnosticCallback) -> None:
        try:
            self.listeners[name] = list(
                filter(lambda item: item != listener, self.listeners[name]))
        except KeyError:
            pass

    def trigger(self, name: str, payload: Diagnostic) -> None:
        for key in (name, '*'):
            for cb in self.listeners.get(key, []):
                cb(name, payload)

    def add(self, level: str, message: str, *args,
            offset: int | None = None, record_type: str | None = None) -> Diagnostic:
        if level not in self.LEVELS:
            raise ValueError(f'Unknown diagnostic level "{level}"')
        if args:
            message = message % args
        diag = Diagnostic(
            level=level, message=message, offset=offset, record_type=record_type)
        self.diagnostics.append(diag)
        self.log.log(self.LEVELS[level], '%s', diag)
        self.trigger(level, diag)
        return diag

    def debug(self, message: str, *args, **kwargs) -> Diagnostic:
        return self.add('debug', message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs) -> Diagnostic:
        return self.add('info', message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs) -> Diagnostic:
        return self.add('warning', message, *args, **kwargs)

    def filter(self, level: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.level == level]

    def clear(self) -> None:
        self.diagnostics = []
