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

def object_from(clz, value):
    if value is None:
        return None
    if isinstance(clz, type) and isinstance(value, clz):
        return value
    if isinstance(value, list):
        return clz(value)
    if isinstance(value, dict):
        return clz(**value)
    return clz(value)

class ListOf:
    """
    Field type of a list where every item is converted to "clazz"
    """

    def __init__(self, clazz):
        self.clazz = clazz

    def __call__(self, value):
        return [object_from(self.clazz, s) for s in value]

    def __repr__(self):
        return fr'ListOf({self.clazz.__name__})'
