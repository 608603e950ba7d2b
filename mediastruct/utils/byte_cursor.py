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

import io
import struct
from typing import BinaryIO

from mediastruct.errors import DecodeError, MediaIOError

class ByteCursor:
    """
    Sequential big-endian reader over a seekable binary stream.

    The cursor keeps its own absolute position counter, which is only
    advanced by successful operations. No data is buffered between calls.
    """

    __slots__ = ('src', 'pos')

    def __init__(self, src: BinaryIO, position: int | None = None) -> None:
        self.src = src
        if position is None:
            position = src.tell()
        else:
            src.seek(position)
        self.pos = position

    def _read_exact(self, size: int) -> bytes:
        if size < 0:
            raise DecodeError(f'Invalid read of {size} bytes at {self.pos}')
        data = self.src.read(size)
        if data is None or len(data) != size:
            got = 0 if data is None else len(data)
            self.src.seek(self.pos)
            raise MediaIOError(
                f'Unexpected end of stream at {self.pos}: wanted {size} bytes, got {got}')
        self.pos += size
        return data

    def _unpack(self, fmt: str, size: int) -> int:
        return struct.unpack(fmt, self._read_exact(size))[0]

    def read_u8(self) -> int:
        return self._read_exact(1)[0]

    def read_u16(self) -> int:
        return self._unpack('>H', 2)

    def read_u24(self) -> int:
        d = self._read_exact(3)
        return (d[0] << 16) + (d[1] << 8) + d[2]

    def read_u32(self) -> int:
        return self._unpack('>I', 4)

    def read_u64(self) -> int:
        return self._unpack('>Q', 8)

    def read_i16(self) -> int:
        return self._unpack('>h', 2)

    def read_i32(self) -> int:
        return self._unpack('>i', 4)

    def read_i64(self) -> int:
        return self._unpack('>q', 8)

    def read_bytes(self, size: int) -> bytes:
        return self._read_exact(size)

    def read_fixed_string(self, size: int) -> str:
        """
        Reads "size" bytes as UTF-8, replacing any invalid sequences
        """
        return str(self._read_exact(size), 'utf-8', errors='replace')

    def read_string(self, size: int) -> str:
        """
        Reads "size" bytes, drops trailing NUL padding and decodes
        the remainder as UTF-8.
        """
        pos = self.pos
        value = self._read_exact(size)
        while value and value[-1] == 0:
            value = value[:-1]
        try:
            return str(value, 'utf-8')
        except UnicodeDecodeError as err:
            raise DecodeError(f'Invalid UTF-8 string at {pos}: {err}') from err

    def read_string_until_null(self) -> str:
        pos = self.pos
        value = bytearray()
        d = self._read_exact(1)
        while d[0] != 0:
            value += d
            d = self._read_exact(1)
        try:
            return str(value, 'utf-8')
        except UnicodeDecodeError as err:
            raise DecodeError(f'Invalid UTF-8 string at {pos}: {err}') from err

    def skip(self, size: int) -> None:
        if size < 0:
            raise DecodeError(f'Invalid skip of {size} bytes at {self.pos}')
        if size == 0:
            return
        self.seek(size, io.SEEK_CUR)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_CUR:
            offset += self.pos
            whence = io.SEEK_SET
        try:
            self.pos = self.src.seek(offset, whence)
        except (OSError, OverflowError, ValueError) as err:
            raise MediaIOError(f'Failed to seek to {offset}: {err}') from err
        return self.pos

    def position(self) -> int:
        return self.pos

    def tell(self) -> int:
        return self.pos

    def size(self) -> int:
        """
        Length of the underlying stream, in bytes
        """
        try:
            end = self.src.seek(0, io.SEEK_END)
            self.src.seek(self.pos)
        except (OSError, OverflowError, ValueError) as err:
            raise MediaIOError(f'Failed to find length of stream: {err}') from err
        return end

    def remaining(self) -> int:
        return max(0, self.size() - self.pos)

    def at_eof(self) -> bool:
        return self.pos >= self.size()
