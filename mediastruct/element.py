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
from typing import Any, Callable, Iterable, Iterator

from mediastruct.utils.objects import JsonObject

@dataclass(slots=True)
class Property:
    name: str
    value: str
    readable_value: str

    def to_dict(self) -> JsonObject:
        return {
            'name': self.name,
            'value': self.value,
            'readable_value': self.readable_value,
        }


class PropertyList(list[Property]):
    """
    Ordered list of the properties of one element.

    Long lists of entries are truncated by add_list() so that a record
    with thousands of entries still produces a small element.
    """

    MAX_LIST_ENTRIES: int = 5

    def add(self, name: str, value: Any, readable_value: str | None = None) -> Property:
        value = str(value)
        if readable_value is None:
            readable_value = value
        prop = Property(name, value, readable_value)
        self.append(prop)
        return prop

    def add_list(self, items: Iterable[Any],
                 add_entry: Callable[["PropertyList", int, Any], None],
                 limit: int | None = None) -> None:
        if limit is None:
            limit = self.MAX_LIST_ENTRIES
        items = list(items)
        for idx, item in enumerate(items[:limit]):
            add_entry(self, idx, item)
        if len(items) > limit:
            more = len(items) - limit
            self.add('...', f'{more} more', f'{more} more entries')

    def get(self, name: str) -> Property | None:
        for prop in self:
            if prop.name == name:
                return prop
        return None


@dataclass(slots=True, kw_only=True)
class Element:
    name: str
    offset: str
    size: str
    description: str
    properties: PropertyList = field(default_factory=PropertyList)
    children: list["Element"] = field(default_factory=list)

    def property(self, name: str) -> Property | None:
        return self.properties.get(name)

    def value_of(self, name: str) -> str | None:
        prop = self.properties.get(name)
        if prop is None:
            return None
        return prop.value

    def walk(self) -> Iterator["Element"]:
        """
        Depth-first iteration over this element and all of its descendants
        """
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, name: str) -> "Element | None":
        for elt in self.walk():
            if elt.name == name:
                return elt
        return None

    def to_dict(self) -> JsonObject:
        return {
            'name': self.name,
            'offset': self.offset,
            'size': self.size,
            'description': self.description,
            'properties': [p.to_dict() for p in self.properties],
            'children': [c.to_dict() for c in self.children],
        }
