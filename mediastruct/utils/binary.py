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

import base64
from binascii import b2a_hex
from typing import AbstractSet, Union

class Binary:
    """
    Wrapper around an opaque block of bytes taken from a media file
    """

    BASE64 = 1
    HEX = 2

    def __init__(self, data: bytes, encoding: int = HEX) -> None:
        self.data = data
        self.encoding = encoding

    @classmethod
    def classname(clz) -> str:
        if clz.__module__.startswith('__'):
            return clz.__name__
        return clz.__module__ + '.' + clz.__name__

    def toJSON(self, pure: bool = False, exclude: AbstractSet | None = None):
        if self.data is None:
            return None
        if pure:
            return self.encode(self.encoding)
        rv = {
            '_type': self.classname(),
        }
        if self.encoding == self.BASE64:
            rv['b64'] = self.encode(self.BASE64)
        else:
            rv['hx'] = self.encode(self.HEX)
        return rv

    def encode(self, encoding: int | str) -> str:
        if encoding == self.HEX or encoding == 'hex':
            return str(b2a_hex(self.data), 'ascii')
        if encoding == self.BASE64 or encoding == 'base64':
            return str(base64.b64encode(self.data), 'ascii')
        raise ValueError(r'Unknown encoding format: "{0}"'.format(encoding))

    def __len__(self) -> int:
        if self.data is None:
            return 0
        return len(self.data)

    def __repr__(self) -> str:
        if self.data is None:
            return f'{self.classname()}(None)'
        if self.encoding == self.BASE64:
            return f'{self.classname()}(b64={self.encode(self.BASE64)})'
        return f'{self.classname()}(hx=0x{self.encode(self.HEX)})'

    def __eq__(self, other: Union["Binary", bytes]) -> bool:
        if isinstance(other, bytes):
            return self.data == other
        if not isinstance(other, Binary):
            return NotImplemented
        return self.data == other.data
