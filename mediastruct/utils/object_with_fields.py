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

from collections.abc import MutableMapping
from typing import AbstractSet, Any, Iterator

from mediastruct.utils.list_of import object_from
from mediastruct.utils.objects import JsonObject, as_python, flatten

class ObjectWithFields(MutableMapping):
    """
    An object whose public attributes are tracked as named fields, so
    that it can be used as a mapping and converted to JSON.
    """

    OBJECT_FIELDS: dict[str, Any] | None = None
    DEFAULT_VALUES: dict[str, Any] | None = None
    DEFAULT_EXCLUDE: AbstractSet[str] | None = None

    def __init__(self, **kwargs):
        self._fields = set()
        if self.OBJECT_FIELDS is None:
            self.OBJECT_FIELDS = dict()
        if self.DEFAULT_EXCLUDE is None:
            self.DEFAULT_EXCLUDE = set()
        if self.DEFAULT_VALUES is not None:
            self._copy_args(self.DEFAULT_VALUES)
        self._copy_args(kwargs)

    def apply_defaults(self, defaults: dict) -> None:
        for key, value in defaults.items():
            if key not in self._fields:
                if key not in self.__dict__:
                    setattr(self, key, value)
                self._fields.add(key)

    def add_field(self, name: str, value: Any) -> None:
        self._fields.add(name)
        setattr(self, name, value)

    def remove_field(self, name: str) -> bool:
        if name in self._fields:
            self._fields.remove(name)
            delattr(self, name)
            return True
        return False

    @classmethod
    def classname(clz) -> str:
        if clz.__module__.startswith('__'):
            return clz.__name__
        return clz.__module__ + '.' + clz.__name__

    def __repr__(self) -> str:
        return self.as_python()

    def as_python(self, exclude: AbstractSet | None = None) -> str:
        if exclude is None:
            exclude = self.DEFAULT_EXCLUDE
        fields = ', '.join(self._field_repr(exclude))
        return f'{self.classname()}({fields})'

    def toJSON(self, exclude: AbstractSet | None = None, pure: bool = False) -> JsonObject:
        if exclude is None:
            exclude = self.DEFAULT_EXCLUDE
        rv = self._to_json(exclude, pure)
        if pure:
            rv.pop('_type', None)
        return rv

    def _field_repr(self, exclude: AbstractSet) -> list[str]:
        rv: list[str] = []
        for k, v in self._to_json(exclude, False).items():
            if k != '_type':
                rv.append(f'{k}={as_python(v)}')
        return rv

    def _to_json(self, exclude: AbstractSet, pure: bool) -> JsonObject:
        rv = {
            '_type': self.classname(),
        }
        for k in sorted(self._fields):
            if k[0] == '_' or k in exclude:
                continue
            rv[k] = self._convert_value_to_json(k, getattr(self, k), exclude, pure)
        return rv

    def _convert_value_to_json(self, key: str, value: Any, exclude: AbstractSet,
                               pure: bool) -> Any:
        if value is None:
            return value
        if not pure:
            if isinstance(value, list):
                return [v.toJSON(exclude=exclude) if hasattr(v, 'toJSON') else v
                        for v in value]
            return value
        return flatten(value, exclude=exclude)

    def _copy_args(self, args: dict) -> None:
        for key, value in args.items():
            if key[0] == '_':
                object.__setattr__(self, key, value)
                continue
            self._fields.add(key)
            if key in self.OBJECT_FIELDS:
                value = object_from(self.OBJECT_FIELDS[key], value)
            object.__setattr__(self, key, value)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._fields))

    def __contains__(self, field: object) -> bool:
        return field in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __setitem__(self, field: str, value: Any) -> None:
        self.add_field(field, value)

    def __delitem__(self, name: str) -> None:
        if not self.remove_field(name):
            raise KeyError(name)

    def __getitem__(self, field: str) -> Any:
        if field not in self._fields:
            raise KeyError(field)
        return getattr(self, field)

    def __eq__(self, other: object) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)
