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

import datetime
import re

# time values are in seconds since midnight, Jan. 1, 1904, in UTC time
ISO_EPOCH = datetime.datetime(year=1904, month=1, day=1, tzinfo=datetime.timezone.utc)

def from_iso_epoch(delta: int) -> datetime.datetime:
    return ISO_EPOCH + datetime.timedelta(seconds=delta)

def to_iso_datetime(value: datetime.datetime) -> str:
    """ Convert a datetime to an ISO8601 formatted dateTime string.

    :param value: the dateTime to convert
    :returns: an ISO8601 formatted string version of the dateTime
    """
    rv = value.isoformat()
    if value.tzinfo is None:
        rv += 'Z'
    else:
        # replace +00:00 timezone with Z
        rv = re.sub('[+-]00:00$', 'Z', rv)
    return rv

def format_iso_epoch(delta: int) -> str:
    """
    Human readable form of a creation or modification time. Values too
    large to be represented as a datetime are returned unchanged.
    """
    try:
        return to_iso_datetime(from_iso_epoch(delta))
    except OverflowError:
        return str(delta)
