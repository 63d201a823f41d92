# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import struct

import pytest
from fontTools.ttLib import TTFont, newTable
from fontTools.ttLib.tables._c_m_a_p import CmapSubtable

from typeforge.core.binary_reader import BinaryReader
from typeforge.core.cmap import CharacterMap, CMapTable
from typeforge.core.error import InvalidFontTable, UnexpectedEndOfFile, UnsupportedCmapFormat

_GLYPHS = TTFont()
_GLYPHS.setGlyphOrder(['.notdef'] + [f'g{i}' for i in range(1, 700)])


def _subtable(fmt, mapping, platform_id=3, encoding_id=1):
    subtable = CmapSubtable.newSubtable(fmt)
    subtable.platformID = platform_id
    subtable.platEncID = encoding_id
    subtable.language = 0
    subtable.cmap = {cp: _GLYPHS.getGlyphName(gid) for cp, gid in mapping.items()}
    return subtable


def _load(*subtables):
    table = newTable('cmap')
    table.tableVersion = 0
    table.tables = list(subtables)
    return CMapTable.load(BinaryReader(table.compile(_GLYPHS), tag='cmap'))


def _format4_bytes(mapping):
    return _subtable(4, mapping).compile(_GLYPHS)


def _format4_reader(data):
    reader = BinaryReader(bytes(data))
    reader.skip(2)
    return reader


def test_identity_segment():
    table = _load(_subtable(4, {cp: cp for cp in range(0x41, 0x5B)}))
    assert table.glyph_id(0x41) == 0x41
    assert table.glyph_id(0x5A) == 0x5A
    assert table.glyph_id(0x61) == 0
    assert table.glyph_id(0xFFFF) == 0


def test_agrees_with_fonttools_mapping():
    # scattered ids force fontTools to mix delta and range-offset segments
    mapping = {0x20: 3, 0x30: 7, 0x31: 2, 0x32: 9, 0x33: 4, 0x41: 1, 0x42: 2, 0x43: 3,
               0xC5: 5, 0x2019: 650, 0xFB01: 12}
    table = _load(_subtable(4, mapping))
    for cp, gid in mapping.items():
        assert table.glyph_id(cp) == gid
    assert table.glyph_id(0x34) == 0
    assert dict(table.character_map.code_points()) == mapping


def test_delta_wraps_modulo_65536():
    cmap = CharacterMap.from_segments([0x41, 0xFFFF], [0x43, 0xFFFF], [-0x40, 1], [0, 0])
    assert cmap.glyph_id(0x41) == 1
    assert cmap.glyph_id(0x43) == 3
    wrapped = CharacterMap.from_segments([0xFFF0], [0xFFF2], [0x20], [0])
    assert wrapped.glyph_id(0xFFF0) == 0x10


def test_range_offset_indexes_glyph_array():
    # Segment 0 uses the glyph array: its offset slot is 2 slots (4 bytes)
    # before the array's first entry.
    cmap = CharacterMap.from_segments([0x30, 0xFFFF], [0x32, 0xFFFF], [0, 1], [4, 0],
                                      glyph_ids=(7, 0, 9))
    assert cmap.glyph_id(0x30) == 7
    assert cmap.glyph_id(0x31) == 0
    assert cmap.glyph_id(0x32) == 9


def test_range_offset_glyph_ignores_delta():
    cmap = CharacterMap.from_segments([0x41, 0xFFFF], [0x41, 0xFFFF], [5, 1], [4, 0], glyph_ids=(7,))
    assert cmap.glyph_id(0x41) == 7


def test_range_offset_out_of_array_is_notdef():
    cmap = CharacterMap.from_segments([0x30, 0xFFFF], [0x35, 0xFFFF], [0, 1], [4, 0], glyph_ids=(7,))
    assert cmap.glyph_id(0x30) == 7
    assert cmap.glyph_id(0x35) == 0


def test_first_matching_segment_wins():
    cmap = CharacterMap.from_segments([0x41, 0x40], [0x45, 0x50], [1, 100], [0, 0])
    assert cmap.glyph_id(0x42) == 0x43
    assert cmap.glyph_id(0x40) == 0x40 + 100


def test_code_points_outside_bmp_are_notdef():
    cmap = CharacterMap.from_segments([0], [0xFFFF], [0], [0])
    assert cmap.glyph_id(0x1F600) == 0
    assert cmap.glyph_id(-1) == 0


def test_contains_and_code_points():
    cmap = CharacterMap.from_segments([0x41, 0xFFFF], [0x42, 0xFFFF], [-0x40, 1], [0, 0])
    assert 0x41 in cmap
    assert 0x43 not in cmap
    assert list(cmap.code_points()) == [(0x41, 1), (0x42, 2)]


def test_prefers_windows_unicode_subtable():
    table = _load(_subtable(4, {0x41: 10}, 0, 3), _subtable(4, {0x41: 20}, 3, 1))
    assert (table.platform_id, table.encoding_id) == (3, 1)
    assert table.glyph_id(0x41) == 20


def test_skips_other_formats():
    table = _load(_subtable(0, {0x41: 5}, 1, 0), _subtable(4, {0x41: 0x42}, 0, 3))
    assert (table.platform_id, table.encoding_id) == (0, 3)
    assert table.glyph_id(0x41) == 0x42


def test_no_format4_raises():
    with pytest.raises(UnsupportedCmapFormat) as exc:
        _load(_subtable(0, {0x41: 5}, 1, 0))
    assert exc.value.formats == (0,)


def test_odd_segment_count_is_invalid():
    data = bytearray(_format4_bytes({0x41: 1}))
    struct.pack_into('>H', data, 6, 3)
    with pytest.raises(InvalidFontTable):
        CharacterMap.load_format4(_format4_reader(data))


def test_length_too_small_is_invalid():
    data = bytearray(_format4_bytes({0x41: 1}))
    struct.pack_into('>H', data, 2, 20)
    with pytest.raises(InvalidFontTable):
        CharacterMap.load_format4(_format4_reader(data))


def test_truncated_subtable():
    data = _format4_bytes({0x41: 1})[:20]
    with pytest.raises(UnexpectedEndOfFile):
        CharacterMap.load_format4(_format4_reader(data))
