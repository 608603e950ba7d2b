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

from decimal import Decimal
from typing import Any, Optional

from mediastruct.element import PropertyList
from mediastruct.errors import DecodeError
from mediastruct.options import Options
from mediastruct.record import Record, RecordEntry, RecordParser, fourcc_to_str
from mediastruct.utils.binary import Binary
from mediastruct.utils.byte_cursor import ByteCursor
from mediastruct.utils.date_time import format_iso_epoch
from mediastruct.utils.fio.bits_field_reader import BitsFieldReader
from mediastruct.utils.fio.field_reader import FieldReader
from mediastruct.utils.fio.sizes import format_sizes
from mediastruct.utils.list_of import ListOf

def fourcc(box_name: str):
    def func(cls):
        fourcc.BOXES[box_name] = cls
        return cls
    return func


fourcc.BOXES = {}  # map from fourcc code to Mp4Atom class

def fixed_point(value: Decimal) -> str:
    return str(float(value))


class Mp4Atom(Record):
    DESCRIPTION = 'Unknown box type'


class UnknownBox(Mp4Atom):
    @classmethod
    def parse(clz, src: ByteCursor, parent: Optional[Mp4Atom], options: Options,
              initial_data: dict[str, Any]) -> dict[str, Any]:
        rv = super().parse(src, parent, options, initial_data)
        src.skip(clz.remaining(src, rv))
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        if 'usertype' in self:
            props.add('usertype', self.usertype)


class FullBox(Mp4Atom):
    @classmethod
    def parse(clz, src: ByteCursor, parent: Optional[Mp4Atom], options: Options,
              initial_data: dict[str, Any]) -> dict[str, Any]:
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('B', "version")
        r.read('3I', "flags")
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        props.add('version', self.version)
        props.add('flags', f'0x{self.flags:06x}', self.describe_flags())

    def describe_flags(self) -> str:
        return f'0x{self.flags:06x}'


@fourcc('ftyp')
class FileTypeBox(Mp4Atom):
    DESCRIPTION = 'File Type Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('A4', 'major_brand')
        r.read('I', 'minor_version')
        count = clz.remaining(src, rv) // 4
        rv['compatible_brands'] = [
            r.get('A4', 'compatible_brand') for _ in range(count)]
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        props.add('major brand', self.major_brand)
        props.add('minor version', self.minor_version)
        props.add('compatible brands', ', '.join(self.compatible_brands))


class ContainerBox(Mp4Atom):
    parse_children = True


@fourcc('moov')
class MovieBox(ContainerBox):
    DESCRIPTION = 'Movie Box'


@fourcc('trak')
class TrackBox(ContainerBox):
    DESCRIPTION = 'Track Box'


@fourcc('mdia')
class MediaBox(ContainerBox):
    DESCRIPTION = 'Media Box'


@fourcc('minf')
class MediaInformationBox(ContainerBox):
    DESCRIPTION = 'Media Information Box'


@fourcc('stbl')
class SampleTableBox(ContainerBox):
    DESCRIPTION = 'Sample Table Box'


@fourcc('dinf')
class DataInformationBox(ContainerBox):
    DESCRIPTION = 'Data Information Box'


@fourcc('edts')
class EditBox(ContainerBox):
    DESCRIPTION = 'Edit Box'


class TimedFullBox(FullBox):
    """
    A FullBox that starts with creation and modification times, which
    are 64 bit values in version 1 boxes and 32 bit values otherwise.
    """

    CREATION_TIME = 'creation time'
    MODIFICATION_TIME = 'modification time'

    @staticmethod
    def time_format(kwargs: dict[str, Any]) -> str:
        return 'Q' if kwargs["version"] == 1 else 'I'

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add(self.CREATION_TIME, self.creation_time,
                  format_iso_epoch(self.creation_time))
        props.add(self.MODIFICATION_TIME, self.modification_time,
                  format_iso_epoch(self.modification_time))

    @staticmethod
    def read_matrix(r: FieldReader) -> list[Decimal]:
        return [r.get('D16.16', 'matrix') for _ in range(9)]


@fourcc('mvhd')
class MovieHeaderBox(TimedFullBox):
    DESCRIPTION = 'Movie Header Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        sz = clz.time_format(rv)
        r.read(sz, 'creation_time')
        r.read(sz, 'modification_time')
        r.read('I', 'timescale')
        r.read(sz, 'duration')
        r.read('D16.16', 'rate')
        r.read('D8.8', 'volume')
        r.skip(2 + 8)  # reserved
        rv['matrix'] = clz.read_matrix(r)
        r.skip(6 * 4)  # pre_defined
        r.read('I', 'next_track_id')
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('timescale', self.timescale)
        props.add('duration', self.duration)
        props.add('rate', fixed_point(self.rate))
        props.add('volume', fixed_point(self.volume))
        props.add('matrix', [float(m) for m in self.matrix])
        props.add('next track ID', self.next_track_id)


@fourcc('tkhd')
class TrackHeaderBox(TimedFullBox):
    DESCRIPTION = 'Track Header Box'

    Track_enabled = 0x000001
    Track_in_movie = 0x000002
    Track_in_preview = 0x000004
    Track_size_is_aspect_ratio = 0x000008

    FLAG_NAMES = [
        (Track_enabled, 'enabled'),
        (Track_in_movie, 'in movie'),
        (Track_in_preview, 'in preview'),
        (Track_size_is_aspect_ratio, 'size is aspect ratio'),
    ]

    def describe_flags(self) -> str:
        names = [name for flag, name in self.FLAG_NAMES if self.flags & flag]
        if not names:
            return super().describe_flags()
        return f'0x{self.flags:06x} ({", ".join(names)})'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        sz = clz.time_format(rv)
        r.read(sz, 'creation_time')
        r.read(sz, 'modification_time')
        r.read('I', 'track_id')
        r.skip(4)  # reserved
        r.read(sz, 'duration')
        r.skip(8)  # reserved
        r.read('h', 'layer')
        r.read('h', 'alternate_group')
        r.read('D8.8', 'volume')
        r.skip(2)  # reserved
        rv['matrix'] = clz.read_matrix(r)
        r.read('D16.16', 'width')
        r.read('D16.16', 'height')
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('track ID', self.track_id)
        props.add('duration', self.duration)
        props.add('layer', self.layer)
        props.add('alternate group', self.alternate_group)
        props.add('volume', fixed_point(self.volume))
        props.add('matrix', [float(m) for m in self.matrix])
        props.add('width', fixed_point(self.width))
        props.add('height', fixed_point(self.height))


@fourcc('mdhd')
class MediaHeaderBox(TimedFullBox):
    DESCRIPTION = 'Media Header Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        sz = clz.time_format(rv)
        r.read(sz, 'creation_time')
        r.read(sz, 'modification_time')
        r.read('I', 'timescale')
        r.read(sz, 'duration')
        bits = BitsFieldReader(clz.classname(), src, rv, size=2, debug=options.debug)
        bits.skip(1)  # pad
        chars = [bits.get(5, 'language') for _ in range(3)]
        rv['language'] = ''.join([chr(0x60 + c) for c in chars])
        r.skip(2)  # pre_defined
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('timescale', self.timescale)
        props.add('duration', self.duration)
        props.add('language', self.language)


@fourcc('hdlr')
class HandlerBox(FullBox):
    DESCRIPTION = 'Handler Reference Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.skip(4)  # pre_defined
        r.read('A4', 'handler_type')
        r.skip(12)  # reserved
        name_len = max(0, clz.remaining(src, rv))
        rv['name'] = r.get(f'A{name_len}', 'name').rstrip('\0')
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('handler_type', self.handler_type)
        props.add('name', self.name)


@fourcc('vmhd')
class VideoMediaHeaderBox(FullBox):
    DESCRIPTION = 'Video Media Header Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('H', 'graphics_mode')
        rv['op_color'] = [r.get('H', 'op_color') for _ in range(3)]
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('graphics_mode', self.graphics_mode)
        props.add('op_color', self.op_color)


@fourcc('smhd')
class SoundMediaHeaderBox(FullBox):
    DESCRIPTION = 'Sound Media Header Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('D8.8', 'balance')
        r.skip(2)  # reserved
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('balance', fixed_point(self.balance))


class TimeToSampleEntry(RecordEntry):
    FIELD_FORMATS = (('I', 'sample_count'), ('I', 'sample_delta'))


class SampleToChunkEntry(RecordEntry):
    FIELD_FORMATS = (
        ('I', 'first_chunk'),
        ('I', 'samples_per_chunk'),
        ('I', 'sample_description_index'),
    )


class EntryTableBox(FullBox):
    """
    A FullBox containing a 32 bit entry count followed by a table of
    fixed size entries.
    """

    ENTRY_CLASS: type[RecordEntry] = RecordEntry
    OBJECT_FIELDS = {
        'children': ListOf(Mp4Atom),
        'entries': ListOf(RecordEntry),
    }

    @classmethod
    def entry_size(clz) -> int:
        return sum([format_sizes[fmt] for fmt, _ in clz.ENTRY_CLASS.FIELD_FORMATS])

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        entry_count = r.get('I', 'entry_count')
        clz.check_entries(src, rv, entry_count, clz.entry_size())
        rv['entries'] = [clz.ENTRY_CLASS.parse(r) for _ in range(entry_count)]
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('entry_count', len(self.entries))

        def add_entry(plist: PropertyList, idx: int, entry: RecordEntry) -> None:
            for _, name in self.ENTRY_CLASS.FIELD_FORMATS:
                plist.add(f'entry[{idx}].{name}', entry[name])

        props.add_list(self.entries, add_entry)


@fourcc('stts')
class TimeToSampleBox(EntryTableBox):
    DESCRIPTION = 'Time To Sample Box'
    ENTRY_CLASS = TimeToSampleEntry


@fourcc('stsc')
class SampleToChunkBox(EntryTableBox):
    DESCRIPTION = 'Sample To Chunk Box'
    ENTRY_CLASS = SampleToChunkEntry


@fourcc('stsz')
class SampleSizeBox(FullBox):
    DESCRIPTION = 'Sample Size Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('I', 'sample_size')
        r.read('I', 'sample_count')
        rv['entry_sizes'] = []
        if rv['sample_size'] == 0:
            clz.check_entries(src, rv, rv['sample_count'], 4)
            rv['entry_sizes'] = [
                r.get('I', 'entry_size') for _ in range(rv['sample_count'])]
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('sample_size', self.sample_size)
        props.add('sample_count', self.sample_count)
        if self.sample_size == 0:
            props.add('entry_sizes', f'{len(self.entry_sizes)} entries')
            props.add_list(
                self.entry_sizes,
                lambda plist, idx, size: plist.add(f'entry_size[{idx}]', size))


@fourcc('stco')
class ChunkOffsetBox(FullBox):
    DESCRIPTION = 'Chunk Offset Box'
    OFFSET_FORMAT = 'I'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        entry_count = r.get('I', 'entry_count')
        clz.check_entries(src, rv, entry_count, format_sizes[clz.OFFSET_FORMAT])
        rv['offsets'] = [
            r.get(clz.OFFSET_FORMAT, 'offset') for _ in range(entry_count)]
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('entry_count', len(self.offsets))
        props.add_list(
            self.offsets,
            lambda plist, idx, offset: plist.add(f'offset[{idx}]', f'0x{offset:x}', str(offset)))


@fourcc('co64')
class ChunkLargeOffsetBox(ChunkOffsetBox):
    DESCRIPTION = 'Chunk Large Offset Box'
    OFFSET_FORMAT = 'Q'


class SampleEntry(RecordEntry):
    OBJECT_FIELDS = {
        'data': Binary,
    }

    # size (4), type (4), reserved (6), data_reference_index (2)
    HEADER_SIZE = 16


@fourcc('stsd')
class SampleDescriptionBox(FullBox):
    DESCRIPTION = 'Sample Description Box'
    OBJECT_FIELDS = {
        'children': ListOf(Mp4Atom),
        'entries': ListOf(SampleEntry),
    }

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('I', 'entry_count')
        entries = []
        for idx in range(rv['entry_count']):
            entry_size = r.get('I', 'size')
            if entry_size < SampleEntry.HEADER_SIZE:
                raise DecodeError(
                    f'stsd: entry {idx} has invalid size {entry_size}')
            clz.check_entries(src, rv, 1, entry_size - 4)
            entry_type = fourcc_to_str(r.get(4, 'type'))
            r.skip(6)  # reserved
            data_reference_index = r.get('H', 'data_reference_index')
            data = r.get(entry_size - SampleEntry.HEADER_SIZE, 'data')
            entries.append(SampleEntry(
                entry_type=entry_type, size=entry_size,
                data_reference_index=data_reference_index, data=data))
        rv['entries'] = entries
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('entry_count', self.entry_count)

        def add_entry(plist: PropertyList, idx: int, entry: SampleEntry) -> None:
            plist.add(f'entry[{idx}].type', entry.entry_type)
            plist.add(f'entry[{idx}].data_reference_index', entry.data_reference_index)
            plist.add(f'entry[{idx}].data', f'{len(entry.data)} bytes')

        props.add_list(self.entries, add_entry)


class DataEntryUrlBox(RecordEntry):
    SELF_CONTAINED = 0x000001

    def describe(self) -> str:
        return f'flags=0x{self.flags:06x}, location={self.location}'


class DataEntryUrnBox(RecordEntry):
    def describe(self) -> str:
        return f'flags=0x{self.flags:06x}, name={self.name}, location={self.location}'


@fourcc('dref')
class DataReferenceBox(FullBox):
    DESCRIPTION = 'Data Reference Box'
    OBJECT_FIELDS = {
        'children': ListOf(Mp4Atom),
        'entries': ListOf(RecordEntry),
    }

    # size (4), type (4), version (1), flags (3)
    ENTRY_HEADER_SIZE = 12

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        r.read('I', 'entry_count')
        entries = []
        for idx in range(rv['entry_count']):
            start = src.position()
            entry_size = r.get('I', 'size')
            if entry_size < clz.ENTRY_HEADER_SIZE:
                raise DecodeError(f'dref: entry {idx} has invalid size {entry_size}')
            clz.check_entries(src, rv, 1, entry_size - 4)
            entry_type = fourcc_to_str(r.get(4, 'type'))
            version = r.get('B', 'version')
            flags = r.get('3I', 'flags')
            remaining = entry_size - clz.ENTRY_HEADER_SIZE
            if entry_type == 'url ':
                location = ''
                if (flags & DataEntryUrlBox.SELF_CONTAINED) == 0 and remaining > 0:
                    location = r.get(f'S{remaining}', 'location')
                entries.append(DataEntryUrlBox(
                    entry_type=entry_type, version=version, flags=flags,
                    location=location))
            elif entry_type == 'urn ':
                name, location, terminated = clz.split_strings(r.get(remaining, 'strings'))
                if not terminated:
                    options.diagnostics.info(
                        'dref: urn entry %d has an unterminated string', idx,
                        offset=start, record_type=entry_type)
                entries.append(DataEntryUrnBox(
                    entry_type=entry_type, version=version, flags=flags,
                    name=name, location=location))
            else:
                options.log.debug('dref: skipping unknown entry type "%s"', entry_type)
            src.seek(start + entry_size)
        rv['entries'] = entries
        return rv

    @staticmethod
    def split_strings(data: bytes) -> tuple[str, str, bool]:
        """
        Splits the payload of a urn entry into its NUL terminated name
        and location. The flag is False if either string ran to the end
        of the entry without a NUL.
        """
        name, sep, rest = data.partition(b'\0')
        terminated = bool(sep)
        location = b''
        if rest:
            location, sep, _ = rest.partition(b'\0')
            terminated = bool(sep)
        try:
            return (str(name, 'utf-8'), str(location, 'utf-8'), terminated)
        except UnicodeDecodeError as err:
            raise DecodeError(f'dref: invalid UTF-8 in urn entry: {err}') from err

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('entry_count', len(self.entries))

        def add_entry(plist: PropertyList, idx: int, entry: RecordEntry) -> None:
            kind = entry.entry_type.strip()
            plist.add(f'{kind}[{idx}]', entry.describe())

        props.add_list(self.entries, add_entry)


class EditListEntry(RecordEntry):
    pass


@fourcc('elst')
class EditListBox(FullBox):
    DESCRIPTION = 'Edit List Box'
    OBJECT_FIELDS = {
        'children': ListOf(Mp4Atom),
        'entries': ListOf(EditListEntry),
    }

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        r = FieldReader(clz.classname(), src, rv, debug=options.debug)
        if rv['version'] == 1:
            dur_fmt, time_fmt = 'Q', 'q'
        else:
            dur_fmt, time_fmt = 'I', 'i'
        entry_count = r.get('I', 'entry_count')
        clz.check_entries(src, rv, entry_count, 2 * format_sizes[dur_fmt] + 4)
        entries = []
        for _ in range(entry_count):
            entries.append(EditListEntry(
                segment_duration=r.get(dur_fmt, 'segment_duration'),
                media_time=r.get(time_fmt, 'media_time'),
                media_rate_integer=r.get('h', 'media_rate_integer'),
                media_rate_fraction=r.get('h', 'media_rate_fraction')))
        rv['entries'] = entries
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        super().fill_properties(props)
        props.add('entry_count', len(self.entries))

        def add_entry(plist: PropertyList, idx: int, entry: EditListEntry) -> None:
            plist.add(f'entry[{idx}].duration', entry.segment_duration)
            plist.add(f'entry[{idx}].media_time', entry.media_time)
            plist.add(f'entry[{idx}].media_rate',
                      f'{entry.media_rate_integer}.{entry.media_rate_fraction}')

        props.add_list(self.entries, add_entry)


@fourcc('mdat')
class MediaDataBox(Mp4Atom):
    DESCRIPTION = 'Media Data Box'

    @classmethod
    def parse(clz, src, parent, options, initial_data):
        rv = super().parse(src, parent, options, initial_data)
        rv['data_size'] = clz.remaining(src, rv)
        src.skip(rv['data_size'])
        return rv

    def fill_properties(self, props: PropertyList) -> None:
        props.add('data size', self.data_size, f'{self.data_size} bytes')


@fourcc('free')
@fourcc('skip')
@fourcc('wide')
class FreeSpaceBox(MediaDataBox):
    DESCRIPTION = 'Free Space Box'


class BoxParser(RecordParser):
    """
    Parses the box tree of an ISO base media file (MP4, MOV, M4A)
    """

    def parse_record(self, parent: Mp4Atom | None, end: int | None) -> Mp4Atom:
        src = self.cursor
        position = src.position()
        size = src.read_u32()
        raw_type = src.read_bytes(4)
        atom_type = fourcc_to_str(raw_type)
        header_size = 8
        if size == 1:
            self.check_header_room(atom_type, position, 16, end)
            size = src.read_u64()
            header_size = 16
        elif size == 0:
            # box extends to the end of its container
            limit = end if end is not None else src.size()
            size = limit - position
        hdr: dict[str, Any] = {
            'atom_type': atom_type,
            'position': position,
            'size': size,
            'header_size': header_size,
        }
        if raw_type == b'uuid':
            self.check_header_room(atom_type, position, header_size + 16, end)
            hdr['usertype'] = src.read_bytes(16).hex()
            hdr['header_size'] += 16
        self.check_bounds(hdr, end)
        Box = fourcc.BOXES.get(atom_type, UnknownBox)
        return self.load_record(Box, hdr, parent)

    @staticmethod
    def check_header_room(atom_type: str, position: int, header_size: int,
                          end: int | None) -> None:
        if end is not None and position + header_size > end:
            raise DecodeError(
                f'"{atom_type}" at {position} needs a {header_size} byte header ' +
                f'but its container ends at {end}')
