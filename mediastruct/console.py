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
import json
import sys
from typing import TextIO

from termcolor import colored

from mediastruct.analyzer import MediaInfo
from mediastruct.element import Element

MAX_PROPERTIES = 12

# colour of a record name, by depth in the tree
DEPTH_COLORS = (
    'cyan', 'yellow', 'green', 'blue', 'magenta', 'red',
    'light_cyan', 'light_yellow', 'light_green', 'light_blue',
)

class Painter:
    """
    Applies terminal colours to console text, or passes it through
    unchanged when colour is disabled
    """

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled

    def paint(self, text: str, color: str) -> str:
        if not self.enabled:
            return text
        return colored(text, color, force_color=True)

    def name(self, text: str, depth: int) -> str:
        return self.paint(text, DEPTH_COLORS[depth % len(DEPTH_COLORS)])

    def dim(self, text: str) -> str:
        return self.paint(text, 'dark_grey')


def format_structure(items: list[Element], prefix: str = '', depth: int = 0,
                     color: bool = False) -> list[str]:
    painter = Painter(color)
    lines: list[str] = []
    for idx, item in enumerate(items):
        is_last = idx == len(items) - 1
        marker = '`---' if is_last else '!---'
        lines.append(
            f'{prefix}{painter.dim(marker)}{painter.name(item.name, depth)}')
        prop_prefix = prefix + ' ' * 8
        lines.append(
            f'{prop_prefix}{painter.dim("offset")}: {painter.dim(item.offset)}')
        lines.append(
            f'{prop_prefix}{painter.dim("size")}: {painter.dim(item.size)}')
        for prop in item.properties[:MAX_PROPERTIES]:
            lines.append(
                f'{prop_prefix}{prop.name}:  {painter.paint(prop.readable_value, "black")}')
        if len(item.properties) > MAX_PROPERTIES:
            lines.append(
                f'{prop_prefix}...:  {len(item.properties) - MAX_PROPERTIES} more')
        child_prefix = prefix + ('    ' if is_last else '!   ')
        lines += format_structure(item.children, child_prefix, depth + 1, color)
    return lines

def print_tree(info: MediaInfo, out: TextIO | None = None,
               color: bool = False) -> None:
    if out is None:
        out = sys.stdout
    painter = Painter(color)
    print(f'Format: {painter.paint(info.format.title(), "green")}', file=out)
    if info.header:
        fields = ', '.join(f'{k}={v}' for k, v in info.header.items())
        print(f'Header: {fields}', file=out)
    print('\nStructure:', file=out)
    for line in format_structure(info.structure(), color=color):
        print(line, file=out)
    if info.diagnostics:
        print('\nDiagnostics:', file=out)
        for diag in info.diagnostics:
            print(f'  {diag}', file=out)

def to_json(info: MediaInfo, indent: int | None = 2) -> str:
    return json.dumps(info.to_dict(), indent=indent)

def records_to_json(info: MediaInfo, indent: int | None = 2) -> str:
    return json.dumps(
        [rec.toJSON(pure=True) for rec in info.records], indent=indent)
