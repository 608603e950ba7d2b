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

import decimal
import logging
from typing import Any, Callable

from mediastruct.utils.byte_cursor import ByteCursor

from .sizes import format_signed_bit_sizes

class FieldReader:
    """
    Reads named fields from a ByteCursor into a dictionary of keyword
    arguments.

    Supported sizes:
      int       that many raw bytes
      B H I Q   unsigned 8, 16, 32 and 64 bit integers
      h i q     signed 16, 32 and 64 bit integers
      3I        unsigned 24 bit integer
      S0        NUL terminated UTF-8 string
      Sn        n byte UTF-8 string with trailing NULs removed
      An        n byte text, invalid UTF-8 replaced
      Dm.n      signed m.n fixed point number, returned as a Decimal
    """

    __slots__ = ['name', 'src', 'kwargs', 'log']

    READERS: dict[str, Callable[[ByteCursor], int]] = {
        'B': ByteCursor.read_u8,
        'H': ByteCursor.read_u16,
        'h': ByteCursor.read_i16,
        '3I': ByteCursor.read_u24,
        'I': ByteCursor.read_u32,
        'i': ByteCursor.read_i32,
        'Q': ByteCursor.read_u64,
        'q': ByteCursor.read_i64,
    }

    def __init__(self, name: str, src: ByteCursor, kwargs: dict[str, Any],
                 debug: bool = False) -> None:
        self.name = name
        self.src = src
        self.kwargs = kwargs
        if debug:
            self.log = logging.getLogger('mediastruct.fio')
        else:
            self.log = None

    def read(self, size: int | str, field: str, mask: int | None = None,
             encoder: Callable | None = None) -> None:
        self.kwargs[field] = self.get(size, field, mask)
        if encoder is not None:
            self.kwargs[field] = encoder(self.kwargs[field])

    def get(self, size: int | str, field: str, mask: int | None = None) -> Any:
        if isinstance(size, int):
            value = self.src.read_bytes(size)
            if self.log and self.log.isEnabledFor(logging.DEBUG):
                self.log.debug('%s: read %s size=%d pos=%d value=0x%s', self.name, field,
                               size, self.src.tell(), value.hex())
            return value
        if size in self.READERS:
            value = self.READERS[size](self.src)
        elif size == 'S0':
            value = self.src.read_string_until_null()
        elif size[0] == 'S':
            value = self.src.read_string(int(size[1:]))
        elif size[0] == 'A':
            value = self.src.read_fixed_string(int(size[1:]))
        elif size[0] == 'D':
            bsz, asz = list(map(int, size[1:].split('.')))
            value = decimal.Decimal(
                self.get(format_signed_bit_sizes[bsz + asz], field)) / (1 << asz)
        else:
            raise ValueError("unsupported size: " + size)
        if mask is not None:
            value &= mask
        if self.log:
            self.log.debug(
                '%s: read %s size=%s pos=%d value=%r',
                self.name, field, size, self.src.tell(), value)
        return value

    def skip(self, size: int) -> None:
        if self.log:
            self.log.debug('%s: skip %d bytes pos=%d', self.name, size, self.src.tell())
        self.src.skip(size)
