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

from collections.abc import Iterable
import datetime
import decimal
from typing import AbstractSet, Any, TypeAlias

from mediastruct.utils.date_time import to_iso_datetime

JsonObject: TypeAlias = dict[str, Any]

def flatten(value: Any, exclude: AbstractSet | None = None) -> Any:
    """
    Converts a value in to a form that can be passed to json.dumps().
    A list, tuple or dictionary will be recursively flattened.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if hasattr(value, 'toJSON'):
        return value.toJSON(pure=True, exclude=exclude)
    if isinstance(value, decimal.Decimal):
        return float(value)
    if isinstance(value, datetime.datetime):
        return to_iso_datetime(value)
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, dict):
        return flatten_iterable(value, exclude=exclude)
    if isinstance(value, Iterable):
        return flatten_iterable(list(value), exclude=exclude)
    return value

def flatten_iterable(items: dict | list, exclude: AbstractSet | None = None) -> dict | list:
    if exclude is None:
        exclude = set()
    if isinstance(items, dict):
        rv = {}
        for key, value in items.items():
            if callable(value) or key in exclude:
                continue
            rv[key] = flatten(value, exclude=exclude)
        return rv
    return [flatten(item, exclude=exclude) for item in items if not callable(item)]


def as_python(value: Any) -> str:
    """
    Convert the value into a string of Python code.
    """
    if value is None:
        return 'None'
    wrap_strings = True
    if hasattr(value, 'toJSON'):
        value = value.toJSON()
        wrap_strings = False
    if isinstance(value, (list, tuple)):
        items = [as_python(v) for v in list(value)]
        value = '[{}]'.format(', '.join(items))
    elif isinstance(value, dict):
        items = []
        clz = value.get('_type', None)
        for k, v in value.items():
            if k == '_type':
                continue
            if clz is None:
                items.append(f'"{k}": {as_python(v)}')
            else:
                items.append(f'{k}={as_python(v)}')
        if clz is None:
            value = '{' + ', '.join(items) + '}'
        else:
            value = '{}({})'.format(clz, ', '.join(items))
    elif wrap_strings and isinstance(value, str):
        value = repr(value)
    elif isinstance(value, (bytes, bytearray)):
        value = repr(bytes(value))
    elif isinstance(value, decimal.Decimal):
        value = f"decimal.Decimal('{value}')"
    else:
        value = str(value)
    return value
