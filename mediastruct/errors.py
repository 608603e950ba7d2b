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

class MediaError(Exception):
    """
    Base class of all errors raised while inspecting a media file
    """
    pass


class MediaIOError(MediaError, IOError):
    """
    The stream ended before the requested bytes could be read, or a
    seek failed.
    """
    pass


class InvalidFormatError(MediaError):
    pass


class UnsupportedFormatError(MediaError):
    pass


class DecodeError(MediaError, ValueError):
    """
    A field was read successfully but its content is malformed
    """
    pass
