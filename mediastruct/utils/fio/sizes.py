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

format_sizes = {
    'B': 1,
    'H': 2,
    'h': 2,
    '3I': 3,
    'I': 4,
    'i': 4,
    'Q': 8,
    'q': 8,
}

format_signed_bit_sizes = {
    16: 'h',
    32: 'i',
    64: 'q',
}
