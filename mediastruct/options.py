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

from dataclasses import dataclass, field
import logging

from mediastruct.diagnostics import DiagnosticSink

@dataclass(slots=True, kw_only=True)
class Options:
    debug: bool = False
    strict: bool = False
    diagnostics: DiagnosticSink = field(default_factory=DiagnosticSink)
    log: logging.Logger = field(
        default_factory=lambda: logging.getLogger('mediastruct'))

    @classmethod
    def from_value(cls, options: "Options | dict | None") -> "Options":
        if options is None:
            return cls()
        if isinstance(options, dict):
            return cls(**options)
        return options
