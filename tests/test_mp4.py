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
import io
import struct
import unittest

from mediastruct.errors import DecodeError, MediaIOError
from mediastruct.mpeg import mp4
from mediastruct.options import Options
from mediastruct.record import Record

from .mixins.mixin import TestCaseMixin
from .mixins import stream_builder as sb

class Mp4Tests(TestCaseMixin, unittest.TestCase):
    def parse(self, data: bytes, **kwargs) -> tuple[list[mp4.Mp4Atom], Options]:
        options = Options(**kwargs)
        atoms = mp4.BoxParser(io.BytesIO(data), options).parse()
        return (atoms, options)

    def build_movie(self) -> bytes:
        stbl = sb.box('stbl', b''.join([
            sb.stsd(sb.sample_entry('avc1', bytes(70))),
            sb.table_box('stts', '>II', [(10, 1001)]),
            sb.table_box('stsc', '>III', [(1, 10, 1)]),
            sb.stsz(0, [100, 200, 300, 400, 500, 600, 700, 800, 900, 1000]),
            sb.table_box('stco', '>I', [(0x30,)]),
        ]))
        dinf = sb.box('dinf', sb.dref(sb.url_entry()))
        minf = sb.box('minf', sb.full_box('vmhd', 0, 1, bytes(8)) + dinf + stbl)
        mdia = sb.box('mdia', sb.mdhd(lang='eng') + sb.hdlr() + minf)
        edts = sb.box('edts', sb.elst([(1000, 0, 1, 0)]))
        trak = sb.box('trak', sb.tkhd(width=1280, height=720) + edts + mdia)
        moov = sb.box('moov', sb.mvhd(duration=10010) + trak)
        return sb.ftyp() + moov + sb.box('mdat', bytes(64))

    def check_sibling_accounting(self, records: list[Record], start: int, end: int) -> None:
        pos = start
        for rec in records:
            self.assertEqual(rec.position, pos, f'"{rec.atom_type}" starts at wrong offset')
            if rec.children:
                self.check_sibling_accounting(rec.children, rec.payload_start, rec.end)
            pos = rec.end
        self.assertEqual(pos, end)

    def test_file_type_box(self):
        atoms, options = self.parse(sb.ftyp())
        self.assertEqual(len(atoms), 1)
        ftyp = atoms[0]
        self.assertIsInstance(ftyp, mp4.FileTypeBox)
        self.assertEqual(ftyp.atom_type, 'ftyp')
        self.assertEqual(ftyp.position, 0)
        self.assertEqual(ftyp.size, 20)
        elt = ftyp.to_element()
        self.assertEqual(elt.name, 'ftyp')
        self.assertEqual(elt.offset, '0')
        self.assertEqual(elt.size, '20')
        self.assertEqual(elt.description, 'File Type Box')
        self.assertPropertyEqual(elt, 'major brand', 'isom')
        self.assertPropertyEqual(elt, 'minor version', '512')
        self.assertPropertyEqual(elt, 'compatible brands', 'isom')
        self.assertNoDiagnostics(options.diagnostics, 'info')
        self.assertNoDiagnostics(options.diagnostics, 'warning')

    def test_multiple_compatible_brands(self):
        atoms, _ = self.parse(sb.ftyp('mp42', 0, ('mp42', 'isom', 'avc1')))
        self.assertEqual(atoms[0].compatible_brands, ['mp42', 'isom', 'avc1'])
        self.assertPropertyEqual(
            atoms[0].to_element(), 'compatible brands', 'mp42, isom, avc1')

    def test_parse_movie(self):
        data = self.build_movie()
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['ftyp', 'moov', 'mdat'])
        self.check_sibling_accounting(atoms, 0, len(data))
        self.assertNoDiagnostics(options.diagnostics)
        moov = atoms[1]
        self.assertEqual([c.atom_type for c in moov.children], ['mvhd', 'trak'])
        self.assertEqual([c.atom_type for c in moov.trak.children],
                         ['tkhd', 'edts', 'mdia'])
        stbl = moov.find_child('stbl')
        self.assertIsInstance(stbl, mp4.SampleTableBox)
        self.assertEqual([c.atom_type for c in stbl.children],
                         ['stsd', 'stts', 'stsc', 'stsz', 'stco'])
        self.assertEqual(moov.trak.mdia.mdhd.language, 'eng')
        self.assertEqual(moov.trak.mdia.hdlr.handler_type, 'vide')
        self.assertEqual(moov.trak.mdia.hdlr.name, 'VideoHandler')
        self.assertEqual(atoms[2].data_size, 64)
        for atom in atoms:
            self.assertEqual(atom.parent, None)
        self.assertIs(moov.trak.parent, moov)

    def test_element_tree_matches_records(self):
        data = self.build_movie()
        atoms, _ = self.parse(data)
        elt = atoms[1].to_element()
        self.assertEqual(elt.description, 'Movie Box')
        self.assertEqual(
            [e.name for e in elt.walk()],
            ['moov', 'mvhd', 'trak', 'tkhd', 'edts', 'elst', 'mdia', 'mdhd', 'hdlr',
             'minf', 'vmhd', 'dinf', 'dref', 'stbl', 'stsd', 'stts', 'stsc', 'stsz',
             'stco'])
        descriptions = {e.name: e.description for e in elt.walk()}
        self.assertEqual(descriptions['trak'], 'Track Box')
        self.assertEqual(descriptions['mdia'], 'Media Box')
        self.assertEqual(descriptions['minf'], 'Media Information Box')
        self.assertEqual(descriptions['stbl'], 'Sample Table Box')
        self.assertEqual(descriptions['dinf'], 'Data Information Box')
        self.assertEqual(descriptions['edts'], 'Edit Box')
        for e in elt.walk():
            self.assertEqual(e.offset, str(int(e.offset)))

    def test_parsing_is_idempotent(self):
        data = self.build_movie()
        first, _ = self.parse(data)
        second, _ = self.parse(data)
        self.assertEqual(
            [a.toJSON(pure=True) for a in first],
            [a.toJSON(pure=True) for a in second])
        self.assertEqual(
            [a.to_element().to_dict() for a in first],
            [a.to_element().to_dict() for a in second])

    def test_large_size(self):
        data = sb.box('mdat', bytes(32), large=True) + sb.box('free')
        atoms, options = self.parse(data)
        self.assertEqual(len(atoms), 2)
        mdat = atoms[0]
        self.assertEqual(mdat.header_size, 16)
        self.assertEqual(mdat.size, 48)
        self.assertEqual(mdat.data_size, 32)
        self.assertEqual(atoms[1].position, 48)
        self.assertEqual(atoms[1].data_size, 0)
        self.assertNoDiagnostics(options.diagnostics)

    def test_large_size_beyond_addressable_range(self):
        data = sb.ftyp() + struct.pack('>I4sQ', 1, b'mdat', 0xFFFFFFFFFFFFFFFF)
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['ftyp'])
        self.assertDiagnostic(options.diagnostics, 'warning', 'extends beyond the end')
        diag = self.assertDiagnostic(options.diagnostics, 'warning', 'Parsing stopped')
        self.assertEqual(diag.offset, 20)
        with self.assertRaises(MediaIOError):
            self.parse(data, strict=True)

    def test_large_size_header_past_container(self):
        child = struct.pack('>I4s', 1, b'mdat') + bytes(4)
        data = sb.box('moov', child) + sb.box('free', bytes(4))
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['moov', 'free'])
        self.assertEqual(atoms[0].children, [])
        self.assertEqual(atoms[1].position, 20)
        self.assertEqual(atoms[1].data_size, 4)
        self.assertDiagnostic(options.diagnostics, 'warning', 'needs a 16 byte header')

    def test_size_zero_extends_to_end_of_stream(self):
        data = sb.ftyp() + sb.box('mdat', bytes(100), size=0)
        atoms, options = self.parse(data)
        self.assertEqual(len(atoms), 2)
        self.assertEqual(atoms[1].size, 108)
        self.assertEqual(atoms[1].data_size, 100)
        self.assertNoDiagnostics(options.diagnostics)

    def test_uuid_box(self):
        usertype = bytes(range(16))
        data = sb.box('uuid', usertype + b'payload')
        atoms, _ = self.parse(data)
        self.assertEqual(len(atoms), 1)
        box = atoms[0]
        self.assertIsInstance(box, mp4.UnknownBox)
        self.assertEqual(box.header_size, 24)
        self.assertEqual(box.usertype, usertype.hex())
        self.assertPropertyEqual(box.to_element(), 'usertype', usertype.hex())

    def test_uuid_header_past_container(self):
        child = struct.pack('>I4s', 24, b'uuid') + bytes(8)
        data = sb.box('moov', child) + sb.box('free')
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['moov', 'free'])
        self.assertEqual(atoms[0].children, [])
        self.assertEqual(atoms[1].position, atoms[0].end)
        self.assertDiagnostic(options.diagnostics, 'warning', 'needs a 24 byte header')

    def test_unknown_box(self):
        data = sb.box('abcd', bytes(10)) + sb.ftyp()
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['abcd', 'ftyp'])
        self.assertIsInstance(atoms[0], mp4.UnknownBox)
        elt = atoms[0].to_element()
        self.assertEqual(elt.description, 'Unknown box type')
        self.assertEqual(len(elt.properties), 0)
        self.assertEqual(atoms[1].position, 18)
        self.assertNoDiagnostics(options.diagnostics)

    def test_unprintable_box_type(self):
        data = struct.pack('>I', 12) + b'\x00\x01\x02\x03' + bytes(4)
        atoms, _ = self.parse(data)
        self.assertEqual(atoms[0].atom_type, '????')

    def test_free_space_boxes(self):
        data = sb.box('free', bytes(4)) + sb.box('skip', bytes(2)) + sb.box('wide')
        atoms, _ = self.parse(data)
        self.assertEqual([type(a) for a in atoms], [mp4.FreeSpaceBox] * 3)
        self.assertEqual([a.data_size for a in atoms], [4, 2, 0])
        self.assertPropertyEqual(atoms[0].to_element(), 'data size', '4', '4 bytes')

    def test_movie_header_version_0(self):
        data = sb.mvhd(creation_time=3600, modification_time=7200,
                       timescale=600, duration=6000, rate=1.0, volume=1.0)
        atoms, options = self.parse(data)
        mvhd = atoms[0]
        self.assertEqual(mvhd.size, 108)
        self.assertObjectEqual({
            'version': 0,
            'flags': 0,
            'creation_time': 3600,
            'modification_time': 7200,
            'timescale': 600,
            'duration': 6000,
            'rate': Decimal(1),
            'volume': Decimal(1),
            'next_track_id': 2,
        }, mvhd)
        self.assertEqual(mvhd.matrix[0], Decimal(1))
        self.assertEqual(mvhd.matrix[8], Decimal(16384))
        elt = mvhd.to_element()
        self.assertEqual(elt.description, 'Movie Header Box')
        self.assertPropertyEqual(elt, 'flags', '0x000000')
        self.assertPropertyEqual(elt, 'creation time', '3600', '1904-01-01T01:00:00Z')
        self.assertPropertyEqual(elt, 'rate', '1.0')
        self.assertPropertyEqual(elt, 'volume', '1.0')
        self.assertPropertyEqual(
            elt, 'matrix', '[1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 16384.0]')
        self.assertPropertyEqual(elt, 'next track ID', '2')
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_movie_header_version_1(self):
        duration = 0x123456789
        data = sb.mvhd(version=1, creation_time=0x100000000, timescale=90000,
                       duration=duration, rate=2.0, volume=0.5)
        atoms, options = self.parse(data)
        mvhd = atoms[0]
        self.assertEqual(mvhd.size, 120)
        self.assertEqual(mvhd.version, 1)
        self.assertEqual(mvhd.creation_time, 0x100000000)
        self.assertEqual(mvhd.duration, duration)
        self.assertEqual(mvhd.rate, Decimal(2))
        self.assertEqual(mvhd.volume, Decimal('0.5'))
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_out_of_range_creation_time(self):
        data = sb.mvhd(version=1, creation_time=0xFFFFFFFFFFFFFFFF)
        atoms, _ = self.parse(data)
        self.assertPropertyEqual(
            atoms[0].to_element(), 'creation time', str(0xFFFFFFFFFFFFFFFF),
            str(0xFFFFFFFFFFFFFFFF))

    def test_track_header_version_0(self):
        data = sb.tkhd(track_id=3, duration=1000, layer=-1, alternate_group=2,
                       volume=1.0, width=1920, height=1080)
        atoms, _ = self.parse(data)
        tkhd = atoms[0]
        self.assertEqual(tkhd.size, 92)
        self.assertObjectEqual({
            'version': 0,
            'flags': 3,
            'track_id': 3,
            'duration': 1000,
            'layer': -1,
            'alternate_group': 2,
            'volume': Decimal(1),
            'width': Decimal(1920),
            'height': Decimal(1080),
        }, tkhd)
        elt = tkhd.to_element()
        self.assertPropertyEqual(elt, 'flags', '0x000003', '0x000003 (enabled, in movie)')
        self.assertPropertyEqual(elt, 'track ID', '3')
        self.assertPropertyEqual(elt, 'width', '1920.0')
        self.assertPropertyEqual(elt, 'height', '1080.0')
        self.assertPropertyEqual(elt, 'layer', '-1')

    def test_track_header_version_1(self):
        data = sb.tkhd(version=1, flags=0, track_id=1, duration=0x200000000,
                       width=640.5, height=480)
        atoms, options = self.parse(data)
        tkhd = atoms[0]
        self.assertEqual(tkhd.size, 104)
        self.assertEqual(tkhd.duration, 0x200000000)
        self.assertEqual(tkhd.width, Decimal('640.5'))
        self.assertPropertyEqual(tkhd.to_element(), 'flags', '0x000000', '0x000000')
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_media_header(self):
        for version in (0, 1):
            data = sb.mdhd(version=version, timescale=48000, duration=96000, lang='fra')
            atoms, options = self.parse(data)
            mdhd = atoms[0]
            self.assertEqual(mdhd.size, 44 if version == 1 else 32)
            self.assertEqual(mdhd.version, version)
            self.assertEqual(mdhd.timescale, 48000)
            self.assertEqual(mdhd.duration, 96000)
            self.assertEqual(mdhd.language, 'fra')
            elt = mdhd.to_element()
            self.assertPropertyEqual(elt, 'language', 'fra')
            self.assertPropertyEqual(elt, 'creation time', '0', '1904-01-01T00:00:00Z')
            self.assertPropertyEqual(
                elt, 'modification time', '0', '1904-01-01T00:00:00Z')
            self.assertIsNone(elt.property('creation_time'))
            self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_handler_box(self):
        atoms, _ = self.parse(sb.hdlr('soun', 'SoundHandler'))
        hdlr = atoms[0]
        self.assertEqual(hdlr.handler_type, 'soun')
        self.assertEqual(hdlr.name, 'SoundHandler')
        elt = hdlr.to_element()
        self.assertEqual(elt.description, 'Handler Reference Box')
        self.assertPropertyEqual(elt, 'handler_type', 'soun')
        self.assertPropertyEqual(elt, 'name', 'SoundHandler')

    def test_handler_box_without_name(self):
        data = sb.full_box('hdlr', 0, 0, bytes(4) + b'meta' + bytes(12))
        atoms, _ = self.parse(data)
        self.assertEqual(atoms[0].handler_type, 'meta')
        self.assertEqual(atoms[0].name, '')

    def test_media_header_boxes(self):
        data = sb.full_box('vmhd', 0, 1, struct.pack('>HHHH', 64, 1, 2, 3))
        data += sb.full_box('smhd', 0, 0, sb.fixed_point(-0.5, 8, 16) + bytes(2))
        atoms, options = self.parse(data)
        vmhd, smhd = atoms
        self.assertEqual(vmhd.graphics_mode, 64)
        self.assertEqual(vmhd.op_color, [1, 2, 3])
        self.assertPropertyEqual(vmhd.to_element(), 'op_color', '[1, 2, 3]')
        self.assertPropertyEqual(vmhd.to_element(), 'flags', '0x000001')
        self.assertEqual(smhd.balance, Decimal('-0.5'))
        self.assertPropertyEqual(smhd.to_element(), 'balance', '-0.5')
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_time_to_sample_box(self):
        data = sb.table_box('stts', '>II', [(10, 1001), (1, 2002)])
        atoms, _ = self.parse(data)
        stts = atoms[0]
        self.assertEqual(len(stts.entries), 2)
        self.assertEqual(stts.entries[1].sample_count, 1)
        self.assertEqual(stts.entries[1].sample_delta, 2002)
        elt = stts.to_element()
        self.assertPropertyEqual(elt, 'entry_count', '2')
        self.assertPropertyEqual(elt, 'entry[0].sample_count', '10')
        self.assertPropertyEqual(elt, 'entry[0].sample_delta', '1001')
        self.assertPropertyEqual(elt, 'entry[1].sample_delta', '2002')

    def test_sample_to_chunk_box(self):
        entries = [(i + 1, 5, 1) for i in range(7)]
        atoms, _ = self.parse(sb.table_box('stsc', '>III', entries))
        stsc = atoms[0]
        self.assertEqual(len(stsc.entries), 7)
        self.assertEqual(stsc.entries[6].first_chunk, 7)
        elt = stsc.to_element()
        self.assertPropertyEqual(elt, 'entry[4].sample_description_index', '1')
        self.assertIsNone(elt.property('entry[5].first_chunk'))
        self.assertPropertyEqual(elt, '...', '2 more')

    def test_sample_size_box_fixed(self):
        atoms, options = self.parse(sb.stsz(sample_size=512, sample_count=100))
        stsz = atoms[0]
        self.assertEqual(stsz.sample_size, 512)
        self.assertEqual(stsz.sample_count, 100)
        self.assertEqual(stsz.entry_sizes, [])
        self.assertEqual(stsz.size, 20)
        self.assertIsNone(stsz.to_element().property('entry_sizes'))
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_sample_size_box_variable(self):
        atoms, _ = self.parse(sb.stsz(0, [10, 20, 30]))
        stsz = atoms[0]
        self.assertEqual(stsz.sample_count, 3)
        self.assertEqual(stsz.entry_sizes, [10, 20, 30])
        elt = stsz.to_element()
        self.assertPropertyEqual(elt, 'entry_sizes', '3 entries')
        self.assertPropertyEqual(elt, 'entry_size[2]', '30')

    def test_chunk_offset_box(self):
        offsets = [0x1000 * (i + 1) for i in range(8)]
        atoms, _ = self.parse(sb.table_box('stco', '>I', [(o,) for o in offsets]))
        stco = atoms[0]
        self.assertEqual(stco.offsets, offsets)
        elt = stco.to_element()
        self.assertEqual(elt.description, 'Chunk Offset Box')
        self.assertPropertyEqual(elt, 'entry_count', '8')
        self.assertPropertyEqual(elt, 'offset[0]', '0x1000', '4096')
        self.assertPropertyEqual(elt, 'offset[4]', '0x5000')
        self.assertIsNone(elt.property('offset[5]'))
        self.assertPropertyEqual(elt, '...', '3 more')

    def test_chunk_large_offset_box(self):
        offsets = [0x100000000, 0x200000000]
        atoms, _ = self.parse(sb.table_box('co64', '>Q', [(o,) for o in offsets]))
        co64 = atoms[0]
        self.assertIsInstance(co64, mp4.ChunkLargeOffsetBox)
        self.assertEqual(co64.offsets, offsets)
        self.assertPropertyEqual(co64.to_element(), 'offset[1]', '0x200000000')

    def test_sample_description_box(self):
        data = sb.stsd(sb.sample_entry('mp4a', bytes(20), 1),
                       sb.sample_entry('avc1', bytes(70), 2))
        atoms, options = self.parse(data)
        stsd = atoms[0]
        self.assertEqual(stsd.entry_count, 2)
        self.assertEqual(stsd.entries[0].entry_type, 'mp4a')
        self.assertEqual(len(stsd.entries[0].data), 20)
        self.assertEqual(stsd.entries[1].data_reference_index, 2)
        elt = stsd.to_element()
        self.assertPropertyEqual(elt, 'entry_count', '2')
        self.assertPropertyEqual(elt, 'entry[1].type', 'avc1')
        self.assertPropertyEqual(elt, 'entry[1].data', '70 bytes')
        self.assertNoDiagnostics(options.diagnostics, 'info')
        js = stsd.toJSON(pure=True)
        self.assertEqual(js['entries'][0]['data'], '00' * 20)

    def test_sample_description_entry_too_small(self):
        bad_entry = struct.pack('>I4s', 8, b'avc1')
        data = sb.box('moov', sb.stsd(bad_entry)) + sb.box('free')
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['moov', 'free'])
        self.assertEqual(len(atoms[0].children), 0)
        self.assertDiagnostic(options.diagnostics, 'warning', 'invalid size 8')

    def test_data_reference_box(self):
        data = sb.dref(sb.url_entry(),
                       sb.url_entry('http://example.com/media.mp4', flags=0),
                       sb.urn_entry('urn:example', 'file.mp4'),
                       sb.full_box('abcd', 0, 0, bytes(4)))
        atoms, options = self.parse(data)
        dref = atoms[0]
        self.assertEqual(dref.entry_count, 4)
        self.assertEqual(len(dref.entries), 3)
        self.assertEqual(dref.entries[0].location, '')
        self.assertEqual(dref.entries[1].location, 'http://example.com/media.mp4')
        self.assertEqual(dref.entries[2].name, 'urn:example')
        self.assertEqual(dref.entries[2].location, 'file.mp4')
        elt = dref.to_element()
        self.assertPropertyEqual(elt, 'entry_count', '3')
        self.assertPropertyEqual(elt, 'url[0]', 'flags=0x000001, location=')
        self.assertPropertyEqual(
            elt, 'url[1]', 'flags=0x000000, location=http://example.com/media.mp4')
        self.assertPropertyEqual(
            elt, 'urn[2]', 'flags=0x000000, name=urn:example, location=file.mp4')
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_data_reference_urn_without_location(self):
        urn = sb.full_box('urn ', 0, 0, b'a\0')
        self.assertEqual(len(urn), 14)
        data = sb.box('dinf', sb.dref(urn, sb.url_entry()))
        atoms, options = self.parse(data)
        dref = atoms[0].children[0]
        self.assertEqual(dref.end, atoms[0].end)
        self.assertEqual(len(dref.entries), 2)
        self.assertEqual(dref.entries[0].name, 'a')
        self.assertEqual(dref.entries[0].location, '')
        self.assertEqual(dref.entries[1].entry_type, 'url ')
        self.assertEqual(dref.entries[1].flags, 1)
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_data_reference_urn_unterminated_location(self):
        urn = sb.full_box('urn ', 0, 0, b'a\0loc')
        data = sb.dref(urn, sb.url_entry())
        atoms, options = self.parse(data)
        dref = atoms[0]
        self.assertEqual(len(dref.entries), 2)
        self.assertEqual(dref.entries[0].location, 'loc')
        self.assertEqual(dref.entries[1].entry_type, 'url ')
        diag = self.assertDiagnostic(options.diagnostics, 'info', 'unterminated string')
        self.assertEqual(diag.offset, 16)
        self.assertNoDiagnostics(options.diagnostics)

    def test_edit_list_version_0(self):
        atoms, options = self.parse(sb.elst([(1000, -1, 1, 0), (5000, 2002, 1, 0)]))
        elst = atoms[0]
        self.assertEqual(len(elst.entries), 2)
        self.assertObjectEqual({
            'segment_duration': 1000,
            'media_time': -1,
            'media_rate_integer': 1,
            'media_rate_fraction': 0,
        }, elst.entries[0])
        elt = elst.to_element()
        self.assertPropertyEqual(elt, 'entry[0].media_time', '-1')
        self.assertPropertyEqual(elt, 'entry[1].duration', '5000')
        self.assertPropertyEqual(elt, 'entry[1].media_rate', '1.0')
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_edit_list_version_1(self):
        atoms, options = self.parse(
            sb.elst([(0x123456789, 0x100000000, 1, 0)], version=1))
        elst = atoms[0]
        self.assertEqual(elst.size, 16 + 20)
        self.assertEqual(elst.entries[0].segment_duration, 0x123456789)
        self.assertEqual(elst.entries[0].media_time, 0x100000000)
        self.assertNoDiagnostics(options.diagnostics, 'info')

    def test_truncated_child_of_container(self):
        trunc = struct.pack('>I4s', 500, b'trak') + bytes(8)
        data = sb.box('moov', sb.mvhd() + trunc) + sb.box('free', bytes(4))
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['moov', 'free'])
        moov = atoms[0]
        self.assertEqual(len(moov.children), 1)
        self.assertEqual(moov.children[0].atom_type, 'mvhd')
        self.assertEqual(len(moov.to_element().children), 1)
        self.assertEqual(atoms[1].position, moov.end)
        self.assertDiagnostic(options.diagnostics, 'warning', 'beyond the end of its container')

    def test_container_with_trailing_bytes(self):
        data = sb.box('moov', sb.mvhd() + bytes(4)) + sb.box('free', bytes(4))
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['moov', 'free'])
        moov = atoms[0]
        self.assertEqual([c.atom_type for c in moov.children], ['mvhd'])
        free = atoms[1]
        self.assertEqual(free.position, moov.end)
        self.assertEqual(free.data_size, 4)
        diag = self.assertDiagnostic(options.diagnostics, 'warning', 'only 4 bytes left')
        self.assertEqual(diag.offset, 0)
        self.assertEqual(diag.record_type, 'moov')
        self.assertEqual(len(options.diagnostics.filter('warning')), 1)

    def test_excessive_entry_count(self):
        stco = sb.full_box('stco', 0, 0, struct.pack('>II', 0xFFFFFFFF, 0))
        data = sb.box('stbl', stco)
        atoms, options = self.parse(data)
        self.assertEqual(len(atoms), 1)
        self.assertEqual(len(atoms[0].children), 0)
        self.assertDiagnostic(options.diagnostics, 'warning', 'do not fit')

    def test_size_smaller_than_header(self):
        data = sb.ftyp() + struct.pack('>I4s', 4, b'free')
        atoms, options = self.parse(data)
        self.assertEqual(len(atoms), 1)
        self.assertDiagnostic(options.diagnostics, 'warning', 'smaller than its 8 byte header')
        with self.assertRaises(DecodeError):
            self.parse(data, strict=True)

    def test_partial_header_at_end_of_stream(self):
        data = sb.ftyp() + b'\x00\x00\x00'
        atoms, options = self.parse(data)
        self.assertEqual(len(atoms), 1)
        diag = self.assertDiagnostic(options.diagnostics, 'warning', 'Parsing stopped')
        self.assertEqual(diag.offset, 20)
        with self.assertRaises(MediaIOError):
            self.parse(data, strict=True)

    def test_truncated_payload(self):
        data = sb.ftyp() + sb.mvhd()[:50]
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['ftyp'])
        self.assertDiagnostic(options.diagnostics, 'warning', 'extends beyond the end')
        self.assertDiagnostic(options.diagnostics, 'warning', 'Parsing stopped')

    def test_truncated_media_data(self):
        data = sb.ftyp() + sb.box('mdat', bytes(10), size=1000)
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['ftyp', 'mdat'])
        self.assertEqual(atoms[1].data_size, 992)
        self.assertDiagnostic(options.diagnostics, 'warning', 'extends beyond the end')
        self.assertEqual(len(options.diagnostics.filter('warning')), 1)

    def test_empty_stream(self):
        atoms, options = self.parse(b'')
        self.assertEqual(atoms, [])
        self.assertEqual(options.diagnostics.diagnostics, [])

    def test_payload_shortfall_is_padded(self):
        vmhd = sb.full_box('vmhd', 0, 1, bytes(8) + b'junk')
        data = vmhd + sb.ftyp()
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['vmhd', 'ftyp'])
        self.assertEqual(atoms[0].size, 24)
        self.assertEqual(atoms[1].position, 24)
        diag = self.assertDiagnostic(options.diagnostics, 'info', 'parsed 20 bytes')
        self.assertEqual(diag.record_type, 'vmhd')
        self.assertNoDiagnostics(options.diagnostics)

    def test_over_read_returns_to_declared_end(self):
        short_ftyp = sb.box('ftyp', b'isom')
        data = short_ftyp + sb.box('free', bytes(4))
        atoms, options = self.parse(data)
        self.assertEqual([a.atom_type for a in atoms], ['ftyp', 'free'])
        self.assertEqual(atoms[1].position, 12)
        self.assertEqual(atoms[1].data_size, 4)
        self.assertDiagnostic(options.diagnostics, 'warning', 'but read 16 bytes')

    def test_options_as_dict(self):
        parser = mp4.BoxParser(io.BytesIO(sb.ftyp()), {'strict': True, 'debug': True})
        self.assertTrue(parser.options.strict)
        atoms = parser.parse()
        self.assertEqual(len(atoms), 1)

    def test_box_registry(self):
        for name, clz in [('moov', mp4.MovieBox), ('mvhd', mp4.MovieHeaderBox),
                          ('stsd', mp4.SampleDescriptionBox), ('skip', mp4.FreeSpaceBox),
                          ('co64', mp4.ChunkLargeOffsetBox)]:
            self.assertIs(mp4.fourcc.BOXES[name], clz)
        containers = {name for name, clz in mp4.fourcc.BOXES.items() if clz.parse_children}
        self.assertEqual(containers, {'moov', 'trak', 'mdia', 'minf', 'stbl', 'dinf', 'edts'})


if __name__ == "__main__":
    unittest.main()
