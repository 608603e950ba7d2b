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

from typing import Any

from mediastruct.element import PropertyList
from mediastruct.errors import InvalidFormatError
from mediastruct.record import Record, RecordEntry, RecordParser, fourcc_to_str
from mediastruct.utils.binary import Binary
from mediastruct.utils.fio.field_reader import FieldReader
from mediastruct.utils.list_of import ListOf

def chunk_type(chunk_name: str):
    def func(cls):
        chunk_type.CHUNKS[chunk_name] = cls
        return cls
    return func


chunk_type.CHUNKS = {}  # map from chunk ID to RealMediaChunk class

class RealMediaChunk(Record):
    DESCRIPTION = 'Unknown chunk type'


class UnknownChunk(RealMediaChunk):
    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        src.skip(clz.remaining(src, rv))
        return rv


@chunk_type('PROP')
class PropertiesChunk(RealMediaChunk):
    DESCRIPTION = 'File Properties'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('I', 'max_bit_rate')
        r.read('I', 'avg_bit_rate')
        r.read('I', 'max_packet_size')
        r.read('I', 'avg_packet_size')
        r.read('I', 'num_packets')
        r.read('I', 'duration')
        r.read('I', 'preroll')
        r.read('I', 'index_offset')
        r.read('I', 'data_offset')
        r.read('H', 'num_streams')
        r.read('H', 'flags')
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        props.add('max_bit_rate', self.max_bit_rate, f'{self.max_bit_rate} bps')
        props.add('avg_bit_rate', self.avg_bit_rate, f'{self.avg_bit_rate} bps')
        props.add('max_packet_size', self.max_packet_size, f'{self.max_packet_size} bytes')
        props.add('avg_packet_size', self.avg_packet_size, f'{self.avg_packet_size} bytes')
        props.add('num_packets', self.num_packets, f'{self.num_packets} packets')
        props.add('duration', self.duration, f'{self.duration} ms')
        props.add('preroll', self.preroll, f'{self.preroll} ms')
        props.add('index_offset', self.index_offset, f'0x{self.index_offset:08x}')
        props.add('data_offset', self.data_offset, f'0x{self.data_offset:08x}')
        props.add('num_streams', self.num_streams, f'{self.num_streams} streams')
        props.add('flags', f'0x{self.flags:04x}')


@chunk_type('CONT')
class ContentDescriptionChunk(RealMediaChunk):
    DESCRIPTION = 'Content Description'
    TEXT_FIELDS = ('title', 'author', 'copyright', 'comment')

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        lengths = [r.get('H', f'{field}_len') for field in clz.TEXT_FIELDS]
        clz.check_entries(src, rv, 1, sum(lengths))
        for field, length in zip(clz.TEXT_FIELDS, lengths):
            rv[field] = src.read_string(length)
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        for field in self.TEXT_FIELDS:
            value = getattr(self, field)
            if value:
                props.add(field, value)


@chunk_type('MDPR')
class MediaPropertiesChunk(RealMediaChunk):
    DESCRIPTION = 'Media Properties'
    OBJECT_FIELDS = {
        'children': ListOf(Record),
        'type_specific_data': Binary,
    }

    # longest prefix of the type specific data shown in the readable value
    MAX_READABLE_DATA = 32

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('H', 'stream_number')
        r.read('I', 'max_bit_rate')
        r.read('I', 'avg_bit_rate')
        r.read('I', 'max_packet_size')
        r.read('I', 'avg_packet_size')
        r.read('I', 'start_time')
        r.read('I', 'preroll')
        r.read('I', 'duration')
        name_len = r.get('B', 'stream_name_size')
        mime_len = r.get('B', 'mime_type_size')
        data_len = r.get('I', 'type_specific_len')
        clz.check_entries(src, rv, 1, name_len + mime_len + data_len)
        rv['stream_name'] = src.read_string(name_len)
        rv['mime_type'] = src.read_string(mime_len)
        r.read(data_len, 'type_specific_data')
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        props.add('stream_number', self.stream_number, f'Stream #{self.stream_number}')
        props.add('max_bit_rate', self.max_bit_rate, f'{self.max_bit_rate} bps')
        props.add('avg_bit_rate', self.avg_bit_rate, f'{self.avg_bit_rate} bps')
        props.add('max_packet_size', self.max_packet_size, f'{self.max_packet_size} bytes')
        props.add('avg_packet_size', self.avg_packet_size, f'{self.avg_packet_size} bytes')
        props.add('start_time', self.start_time, f'{self.start_time} ms')
        props.add('preroll', self.preroll, f'{self.preroll} ms')
        props.add('duration', self.duration, f'{self.duration} ms')
        if self.stream_name:
            props.add('stream_name', self.stream_name)
        if self.mime_type:
            props.add('mime_type', self.mime_type)
        data = self.type_specific_data
        readable = '0x' + data.encode(Binary.HEX)[:2 * self.MAX_READABLE_DATA]
        if len(data) > self.MAX_READABLE_DATA:
            readable += '...'
        props.add('type_specific_data', f'{len(data)} bytes', readable)


@chunk_type('DATA')
class DataChunk(RealMediaChunk):
    DESCRIPTION = 'Media Data'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('I', 'num_packets')
        r.read('I', 'next_data_header')
        # packets are not decoded
        src.skip(max(0, clz.remaining(src, rv)))
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        props.add('num_packets', self.num_packets, f'{self.num_packets} packets')
        props.add('next_data_header', f'0x{self.next_data_header:08x}')


class IndexEntry(RecordEntry):
    FIELD_FORMATS = (
        ('I', 'timestamp'),
        ('I', 'offset'),
        ('I', 'packet_count'),
    )


@chunk_type('INDX')
class IndexChunk(RealMediaChunk):
    DESCRIPTION = 'Index'
    OBJECT_FIELDS = {
        'children': ListOf(Record),
        'entries': ListOf(IndexEntry),
    }

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('I', 'num_entries')
        r.read('H', 'stream_number')
        r.read('I', 'next_index_header')
        clz.check_entries(src, rv, rv['num_entries'], 12)
        rv['entries'] = [IndexEntry.parse(r) for _ in range(rv['num_entries'])]
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        props.add('num_entries', self.num_entries, f'{self.num_entries} entries')
        props.add('stream_number', self.stream_number, f'Stream #{self.stream_number}')
        props.add('next_index_header', f'0x{self.next_index_header:08x}')

        def add_entry(plist: PropertyList, idx: int, entry: IndexEntry) -> None:
            plist.add(f'entry[{idx}].timestamp', entry.timestamp, f'{entry.timestamp} ms')
            plist.add(f'entry[{idx}].offset', f'0x{entry.offset:08x}')
            plist.add(f'entry[{idx}].packet_count', entry.packet_count,
                      f'{entry.packet_count} packets')

        props.add_list(self.entries, add_entry)


class ChunkParser(RecordParser):
    """
    Parses the chunks of a RealMedia (.rm, .rmvb, .ra) file.

    Chunks are reported in the order they appear in the file. The index
    and data offsets in the PROP chunk are recorded but never followed.
    The values from the file header are kept in file_version and
    file_size.
    """

    MAGIC = b'.RMF'

    file_version: int | None = None
    file_size: int | None = None

    def parse_preamble(self) -> None:
        src = self.cursor
        magic = src.read_bytes(4)
        if magic != self.MAGIC:
            raise InvalidFormatError(f'Not a RealMedia file (magic={magic!r})')
        self.file_version = src.read_u32()
        if self.file_version != 0:
            raise InvalidFormatError(
                f'Unsupported RealMedia file version {self.file_version}')
        self.file_size = src.read_u32()

    def header_fields(self) -> dict[str, Any]:
        return {
            'file_version': self.file_version,
            'file_size': self.file_size,
        }

    def parse_record(self, parent: Record | None, end: int | None) -> Record:
        src = self.cursor
        hdr: dict[str, Any] = {
            'position': src.position(),
            'size': src.read_u32(),
            'atom_type': fourcc_to_str(src.read_bytes(4)),
            'header_size': 8,
        }
        self.check_bounds(hdr, end)
        Chunk = chunk_type.CHUNKS.get(hdr['atom_type'], UnknownChunk)
        return self.load_record(Chunk, hdr, parent)
