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

import logging
from typing import Any, cast

import bitstring

from mediastruct.utils.byte_cursor import ByteCursor

class BitsFieldReader:
    """
    Reads bit fields from a block of bytes taken from a ByteCursor
    """

    __slots__ = ('name', 'data', 'src', 'kwargs', 'bitsize', 'log')

    name: str
    data: bytes
    bitsize: int
    src: bitstring.ConstBitStream
    log: logging.Logger | None

    def __init__(self, name: str, src: ByteCursor, kwargs: dict[str, Any],
                 size: int, debug: bool = False) -> None:
        self.name = name
        self.data = src.read_bytes(size)
        self.src = bitstring.ConstBitStream(bytes=self.data)
        self.kwargs = kwargs
        self.bitsize = 8 * size
        if debug:
            self.log = logging.getLogger('mediastruct.fio')
        else:
            self.log = None

    def read(self, size: int, field: str) -> None:
        self.kwargs[field] = self.get(size, field)

    def get(self, size: int, field: str) -> bool | int:
        if self.log:
            self.log.debug(
                '%s: read %s size=%d pos=%s', self.name, field, size,
                self.src.bitpos)
        if size == 1:
            return cast(bool, self.src.read('bool'))
        return cast(int, self.src.read('uint:%d' % size))

    def skip(self, size: int) -> None:
        self.src.bitpos += size

    def bitpos(self) -> int:
        return self.src.bitpos

    def remaining(self) -> int:
        return self.bitsize - self.src.bitpos
