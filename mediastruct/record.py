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
from typing import Any, Optional

from mediastruct.element import Element, PropertyList
from mediastruct.errors import DecodeError, MediaError
from mediastruct.options import Options
from mediastruct.utils.byte_cursor import ByteCursor
from mediastruct.utils.list_of import ListOf
from mediastruct.utils.object_with_fields import ObjectWithFields

def fourcc_to_str(data: bytes) -> str:
    """
    Text form of a four character code, or "????" if it is not printable
    """
    try:
        value = str(data, 'utf-8')
    except UnicodeDecodeError:
        return '????'
    if not value.isprintable():
        return '????'
    return value


class RecordEntry(ObjectWithFields):
    """
    Base class for the fixed size entries in a record's table
    """

    FIELD_FORMATS: tuple[tuple[str, str], ...] = ()

    @classmethod
    def parse(clz, reader) -> "RecordEntry":
        kwargs: dict[str, Any] = {}
        for fmt, name in clz.FIELD_FORMATS:
            kwargs[name] = reader.get(fmt, name)
        return clz(**kwargs)


class Record(ObjectWithFields):
    """
    One structural unit of a media file (an ISOBMFF box or an RMFF chunk)
    """

    parse_children = False
    DESCRIPTION = 'Unknown record'

    OBJECT_FIELDS = {
        'children': ListOf(ObjectWithFields),
    }
    DEFAULT_EXCLUDE = {'parent'}

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.apply_defaults({
            'children': [],
            'header_size': 8,
            'parent': None,
            'position': 0,
            'size': 0,
        })
        if 'atom_type' not in self._fields:
            raise KeyError('Missing atom_type')
        if self.parent is not None:
            self._fullname = fr'{self.parent._fullname}.{self.atom_type}'
        else:
            self._fullname = self.atom_type

    def __getattr__(self, name: str) -> "Record":
        if name[0] == '_' or name in self._fields:
            # __getattribute__ should have responded before __getattr__ called
            raise AttributeError(name)
        for c in self.__dict__.get('children', []):
            if c.atom_type == name:
                return c
        raise AttributeError(name)

    @property
    def end(self) -> int:
        return self.position + self.size

    @property
    def payload_start(self) -> int:
        return self.position + self.header_size

    @property
    def payload_size(self) -> int:
        return self.size - self.header_size

    @classmethod
    def parse(clz, src: ByteCursor, parent: Optional["Record"], options: Options,
              initial_data: dict[str, Any]) -> dict[str, Any]:
        """
        Decodes the payload of this kind of record. The cursor is positioned
        directly after the record's header. Returns the keyword arguments
        used to construct the record.
        """
        return dict(initial_data)

    @staticmethod
    def remaining(src: ByteCursor, kwargs: dict[str, Any]) -> int:
        return kwargs['position'] + kwargs['size'] - src.position()

    @classmethod
    def check_entries(clz, src: ByteCursor, kwargs: dict[str, Any], count: int,
                      entry_size: int) -> None:
        remaining = clz.remaining(src, kwargs)
        if count * entry_size > remaining:
            raise DecodeError(
                f'"{kwargs["atom_type"]}": {count} entries of {entry_size} bytes ' +
                f'do not fit in the remaining {remaining} bytes')

    def append_child(self, child: "Record") -> None:
        child.parent = self
        child._fullname = fr'{self._fullname}.{child.atom_type}'
        self.children.append(child)

    def find_child(self, atom_type: str) -> Optional["Record"]:
        for child in self.children:
            if child.atom_type == atom_type:
                return child
            child = child.find_child(atom_type)
            if child is not None:
                return child
        return None

    def description(self) -> str:
        return self.DESCRIPTION

    def fill_properties(self, props: PropertyList) -> None:
        pass

    def to_element(self) -> Element:
        props = PropertyList()
        self.fill_properties(props)
        return Element(
            name=self.atom_type,
            offset=f'{self.position:d}',
            size=f'{self.size:d}',
            description=self.description(),
            properties=props,
            children=[ch.to_element() for ch in self.children])


class RecordParser:
    """
    Base class for parsers that build a list of records from a stream.

    Sub-classes provide parse_record(), which reads one record header and
    uses load_record() to decode the rest of the record.
    """

    # size (4) and type (4)
    MIN_HEADER_SIZE = 8

    def __init__(self, src, options: Options | dict | None = None) -> None:
        self.options = Options.from_value(options)
        self.cursor = ByteCursor(src)
        self.log = logging.getLogger('mediastruct')

    def parse(self) -> list[Record]:
        self.parse_preamble()
        rv: list[Record] = []
        while True:
            if self.cursor.at_eof():
                self.log.debug('End of stream at %d', self.cursor.position())
                break
            position = self.cursor.position()
            try:
                rv.append(self.parse_record(None, None))
            except MediaError as err:
                if self.options.strict:
                    raise
                self.options.diagnostics.warning(
                    'Parsing stopped: %s', err, offset=position)
                break
        return rv

    def parse_preamble(self) -> None:
        """
        Reads any file header that comes before the first record
        """
        pass

    def header_fields(self) -> dict[str, Any]:
        """
        Values decoded by parse_preamble()
        """
        return {}

    def parse_record(self, parent: Record | None, end: int | None) -> Record:
        raise NotImplementedError()

    def check_bounds(self, hdr: dict[str, Any], end: int | None) -> None:
        if hdr['size'] < hdr['header_size']:
            raise DecodeError(
                f'"{hdr["atom_type"]}" at {hdr["position"]} has size {hdr["size"]} ' +
                f'which is smaller than its {hdr["header_size"]} byte header')
        rec_end = hdr['position'] + hdr['size']
        if end is not None:
            if rec_end > end:
                raise DecodeError(
                    f'"{hdr["atom_type"]}" at {hdr["position"]} ends at {rec_end}, ' +
                    f'beyond the end of its container at {end}')
        elif rec_end > self.cursor.size():
            self.options.diagnostics.warning(
                'size %d extends beyond the end of the stream', hdr['size'],
                offset=hdr['position'], record_type=hdr['atom_type'])

    def load_record(self, Rec: type[Record], hdr: dict[str, Any],
                    parent: Record | None) -> Record:
        self.log.debug('found "%s" type=%s pos=%d size=%d',
                       hdr['atom_type'], Rec.__name__, hdr['position'], hdr['size'])
        kwargs = Rec.parse(self.cursor, parent, self.options, hdr)
        kwargs['parent'] = parent
        rec = Rec(**kwargs)
        if rec.parse_children:
            self.parse_children(rec)
        self.check_payload(rec)
        return rec

    def parse_children(self, parent: Record) -> None:
        end = parent.end
        while self.cursor.position() < end:
            position = self.cursor.position()
            if end - position < self.MIN_HEADER_SIZE:
                self.options.diagnostics.warning(
                    'only %d bytes left for a child at %d', end - position, position,
                    offset=parent.position, record_type=parent.atom_type)
                self.cursor.seek(end)
                break
            try:
                child = self.parse_record(parent, end)
            except MediaError as err:
                self.options.diagnostics.warning(
                    'failed to parse child at %d: %s', position, err,
                    offset=parent.position, record_type=parent.atom_type)
                self.cursor.seek(end)
                break
            parent.append_child(child)

    def check_payload(self, rec: Record) -> None:
        consumed = self.cursor.position() - rec.position
        if consumed == rec.size:
            return
        if consumed < rec.size:
            self.options.diagnostics.info(
                'expected "%s" to contain %d bytes but parsed %d bytes',
                rec.atom_type, rec.size, consumed,
                offset=rec.position, record_type=rec.atom_type)
            self.cursor.skip(rec.size - consumed)
            return
        self.options.diagnostics.warning(
            'expected "%s" to contain %d bytes but read %d bytes',
            rec.atom_type, rec.size, consumed,
            offset=rec.position, record_type=rec.atom_type)
        self.cursor.seek(rec.end)
