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

from enum import IntEnum
import logging
from pathlib import Path
from typing import ClassVar

from mediastruct.errors import MediaIOError, UnsupportedFormatError

class DetectionStrategy(IntEnum):
    """
    How the format of a file is chosen
    """

    EXTENSION = 1
    CONTENT = 2
    AUTO = 3

    @classmethod
    def from_string(cls, name: str) -> "DetectionStrategy":
        name = name.strip().upper()
        return cls[name]


class FileFormat(IntEnum):
    ISOBMFF = 1
    REAL_MEDIA = 2

    def title(self) -> str:
        return FORMAT_TITLES[self]


FORMAT_TITLES: dict[FileFormat, str] = {
    FileFormat.ISOBMFF: 'ISOBMFF',
    FileFormat.REAL_MEDIA: 'RealMedia',
}


class FormatDetector:
    EXTENSIONS: ClassVar[dict[str, FileFormat]] = {
        'mp4': FileFormat.ISOBMFF,
        'mov': FileFormat.ISOBMFF,
        'm4a': FileFormat.ISOBMFF,
        'm4v': FileFormat.ISOBMFF,
        'rm': FileFormat.REAL_MEDIA,
        'rmvb': FileFormat.REAL_MEDIA,
        'ra': FileFormat.REAL_MEDIA,
    }

    RMFF_MAGIC: ClassVar[bytes] = b'.RMF'

    ISOBMFF_BOX_TYPES: ClassVar[set[bytes]] = {
        b'ftyp', b'moov', b'mdat', b'free', b'wide', b'skip',
    }

    def __init__(self, strategy: DetectionStrategy = DetectionStrategy.AUTO) -> None:
        self.strategy = strategy
        self.log = logging.getLogger('mediastruct')

    def detect_format(self, path: Path | str) -> FileFormat:
        if self.strategy == DetectionStrategy.EXTENSION:
            return self.detect_by_extension(path)
        if self.strategy == DetectionStrategy.CONTENT:
            return self.detect_by_content(path)
        try:
            return self.detect_by_extension(path)
        except UnsupportedFormatError as err:
            self.log.debug('%s, checking file contents', err)
        return self.detect_by_content(path)

    def detect_by_extension(self, path: Path | str) -> FileFormat:
        ext = Path(path).suffix.lstrip('.').lower()
        try:
            return self.EXTENSIONS[ext]
        except KeyError:
            raise UnsupportedFormatError(f'Unknown file extension "{ext}"')

    def detect_by_content(self, path: Path | str) -> FileFormat:
        try:
            with open(path, 'rb') as src:
                magic = src.read(8)
        except OSError as err:
            raise MediaIOError(f'Failed to read "{path}": {err}') from err
        return self.detect_from_bytes(magic)

    def detect_from_bytes(self, magic: bytes) -> FileFormat:
        """
        Identifies the format from the first 8 bytes of a file
        """
        if magic[:4] == self.RMFF_MAGIC:
            return FileFormat.REAL_MEDIA
        if magic[:4] in self.ISOBMFF_BOX_TYPES:
            return FileFormat.ISOBMFF
        # the first box type follows its 32 bit size
        if magic[4:8] in self.ISOBMFF_BOX_TYPES:
            return FileFormat.ISOBMFF
        raise UnsupportedFormatError(f'Unknown magic number: {magic[:4]!r}')
