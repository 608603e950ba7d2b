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
from pathlib import Path
from typing import Any, ClassVar

from mediastruct.detector import DetectionStrategy, FileFormat, FormatDetector
from mediastruct.diagnostics import Diagnostic
from mediastruct.element import Element
from mediastruct.errors import MediaIOError
from mediastruct.mpeg.mp4 import BoxParser
from mediastruct.options import Options
from mediastruct.real.rmff import ChunkParser
from mediastruct.record import Record, RecordParser
from mediastruct.utils.objects import JsonObject

@dataclass(slots=True, kw_only=True)
class MediaInfo:
    path: str
    format: FileFormat
    records: list[Record]
    diagnostics: list[Diagnostic] = field(default_factory=list)
    header: dict[str, Any] = field(default_factory=dict)

    def structure(self) -> list[Element]:
        return [rec.to_element() for rec in self.records]

    def to_dict(self) -> JsonObject:
        return {
            'path': self.path,
            'format': self.format.title(),
            'header': dict(self.header),
            'structure': [elt.to_dict() for elt in self.structure()],
            'diagnostics': [
                {
                    'level': d.level,
                    'message': d.message,
                    'offset': d.offset,
                    'record_type': d.record_type,
                } for d in self.diagnostics],
        }


class MediaAnalyzer:
    """
    Detects the format of a file and builds its record tree
    """

    PARSERS: ClassVar[dict[FileFormat, type[RecordParser]]] = {
        FileFormat.ISOBMFF: BoxParser,
        FileFormat.REAL_MEDIA: ChunkParser,
    }

    def __init__(self, strategy: DetectionStrategy = DetectionStrategy.AUTO,
                 options: Options | dict | None = None) -> None:
        self.detector = FormatDetector(strategy)
        self.options = Options.from_value(options)
        self.log = logging.getLogger('mediastruct')

    def analyze(self, path: Path | str) -> MediaInfo:
        fmt = self.detector.detect_format(path)
        self.log.info('Parsing "%s" as %s', path, fmt.title())
        self.options.diagnostics.clear()
        Parser = self.PARSERS[fmt]
        try:
            src = open(path, 'rb')
        except OSError as err:
            raise MediaIOError(f'Failed to open "{path}": {err}') from err
        with src:
            parser = Parser(src, self.options)
            records = parser.parse()
        return MediaInfo(
            path=str(path), format=fmt, records=records,
            header=parser.header_fields(),
            diagnostics=list(self.options.diagnostics.diagnostics))
