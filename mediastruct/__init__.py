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

from mediastruct.analyzer import MediaAnalyzer, MediaInfo
from mediastruct.detector import DetectionStrategy, FileFormat, FormatDetector
from mediastruct.element import Element, Property
from mediastruct.errors import (
    DecodeError,
    InvalidFormatError,
    MediaError,
    MediaIOError,
    UnsupportedFormatError,
)
from mediastruct.mpeg.mp4 import BoxParser
from mediastruct.options import Options
from mediastruct.real.rmff import ChunkParser

__all__ = [
    'BoxParser',
    'ChunkParser',
    'DecodeError',
    'DetectionStrategy',
    'Element',
    'FileFormat',
    'FormatDetector',
    'InvalidFormatError',
    'MediaAnalyzer',
    'MediaError',
    'MediaIOError',
    'MediaInfo',
    'Options',
    'Property',
    'UnsupportedFormatError',
]
