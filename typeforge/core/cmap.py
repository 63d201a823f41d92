# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Character to glyph mapping (cmap table, format 4).

Format 4 maps the Basic Multilingual Plane through a list of segments.
Each segment covers [start, end] and maps a code point either by adding
idDelta (modulo 65536) or, when idRangeOffset is non-zero, through the
glyphIdArray that follows the segment arrays.

Subtable layout:
    uint16 format           (4)
    uint16 length
    uint16 language
    uint16 segCountX2
    uint16 searchRange, entrySelector, rangeShift
    uint16 endCode[segCount]      last segment ends at 0xFFFF
    uint16 reservedPad
    uint16 startCode[segCount]
    int16  idDelta[segCount]
    uint16 idRangeOffset[segCount]
    uint16 glyphIdArray[]         fills the rest of the subtable
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from .binary_reader import BinaryReader
from .error import InvalidFontTable, UnsupportedCmapFormat

logger = logging.getLogger(__name__)

NOTDEF = 0

# (platformID, encodingID) preference order for Unicode BMP subtables
_PREFERRED_ENCODINGS = ((3, 1), (0, 3), (0, 4), (0, 1), (0, 0), (0, 2), (3, 0))


class Segment(NamedTuple):
    """One format 4 range; index is the segment's position in the table."""
    start: int
    end: int
    delta: int
    id_range_offset: int
    index: int


class CharacterMap:
    """Immutable format 4 character map."""
    __slots__ = ('_segments', '_glyph_ids', 'language')

    def __init__(self, segments: tuple[Segment, ...], glyph_ids: tuple[int, ...], language: int = 0) -> None:
        self._segments = tuple(segments)
        self._glyph_ids = tuple(glyph_ids)
        self.language = language

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    @property
    def glyph_ids(self) -> tuple[int, ...]:
        return self._glyph_ids

    def glyph_id(self, code_point: int) -> int:
        """Map a code point to a glyph index, 0 (notdef) when unmapped.

        Segments are scanned in table order and the first one containing
        the code point decides the result.
        """
        if code_point < 0 or code_point > 0xFFFF:
            return NOTDEF

        seg_count = len(self._segments)
        for seg in self._segments:
            if seg.start <= code_point <= seg.end:
                if seg.id_range_offset == 0:
                    return (code_point + seg.delta) & 0xFFFF
                # idRangeOffset is relative to its own slot in the offsets
                # array; rebase it onto glyphIdArray
                offset = seg.id_range_offset // 2 + (code_point - seg.start) - seg_count + seg.index
                if offset < 0 or offset >= len(self._glyph_ids):
                    return NOTDEF
                # the array entry is the glyph id as stored; idDelta only
                # applies to segments without a range offset
                return self._glyph_ids[offset]
        return NOTDEF

    def __contains__(self, code_point: int) -> bool:
        return self.glyph_id(code_point) != NOTDEF

    def code_points(self):
        """Yield (code_point, glyph_id) for every mapped code point."""
        for seg in self._segments:
            if seg.start == 0xFFFF:
                continue
            for cp in range(seg.start, seg.end + 1):
                gid = self.glyph_id(cp)
                if gid != NOTDEF:
                    yield cp, gid

    @classmethod
    def from_segments(cls, starts, ends, deltas, id_range_offsets, glyph_ids=(), language: int = 0) -> CharacterMap:
        """Build a map from parallel segment arrays."""
        segments = tuple(
            Segment(start, end, delta, offset, i)
            for i, (start, end, delta, offset) in enumerate(zip(starts, ends, deltas, id_range_offsets))
        )
        return cls(segments, tuple(glyph_ids), language)

    @classmethod
    def load_format4(cls, reader: BinaryReader) -> CharacterMap:
        """Decode a format 4 subtable; the reader sits just past the format field.

        Raises:
            InvalidFontTable: segCountX2 is odd or the declared length is
                too small to hold the segment arrays.
            UnexpectedEndOfFile: The subtable is truncated.
        """
        length = reader.read_uint16()
        language = reader.read_uint16()
        seg_count_x2 = reader.read_uint16()
        if seg_count_x2 & 1:
            raise InvalidFontTable(f"odd segCountX2 {seg_count_x2}", "cmap")
        reader.skip(6)  # searchRange, entrySelector, rangeShift
        seg_count = seg_count_x2 // 2

        ends = reader.read_uint16_array(seg_count)
        reader.skip(2)  # reservedPad
        starts = reader.read_uint16_array(seg_count)
        deltas = reader.read_int16_array(seg_count)
        offsets = reader.read_uint16_array(seg_count)

        header_length = 16 + seg_count * 8
        glyph_id_count = (length - header_length) // 2
        if glyph_id_count < 0:
            raise InvalidFontTable(
                f"length {length} shorter than its {seg_count} segments need", "cmap")
        glyph_ids = reader.read_uint16_array(glyph_id_count)

        if seg_count and ends[-1] != 0xFFFF:
            logger.debug("cmap format 4: last segment ends at 0x%04X, not 0xFFFF", ends[-1])
        return cls.from_segments(starts, ends, deltas, offsets, glyph_ids, language)


class CMapTable:
    """The cmap table: picks the Unicode BMP format 4 subtable."""

    def __init__(self, character_map: CharacterMap, platform_id: int, encoding_id: int) -> None:
        self.character_map = character_map
        self.platform_id = platform_id
        self.encoding_id = encoding_id

    def glyph_id(self, code_point: int) -> int:
        return self.character_map.glyph_id(code_point)

    @classmethod
    def load(cls, reader: BinaryReader) -> CMapTable:
        """
        Raises:
            UnsupportedCmapFormat: No encoding record points at a format 4
                subtable.
        """
        reader.skip(2)  # version
        num_tables = reader.read_uint16()
        records = []
        for _ in range(num_tables):
            platform_id = reader.read_uint16()
            encoding_id = reader.read_uint16()
            offset = reader.read_uint32()
            records.append((platform_id, encoding_id, offset))

        def rank(record):
            key = (record[0], record[1])
            if key in _PREFERRED_ENCODINGS:
                return _PREFERRED_ENCODINGS.index(key)
            return len(_PREFERRED_ENCODINGS)

        formats = []
        for platform_id, encoding_id, offset in sorted(records, key=rank):
            reader.seek(offset)
            fmt = reader.read_uint16()
            formats.append(fmt)
            if fmt != 4:
                logger.debug("Skipping cmap subtable format %d (platform %d, encoding %d)",
                             fmt, platform_id, encoding_id)
                continue
            if rank((platform_id, encoding_id)) == len(_PREFERRED_ENCODINGS):
                logger.debug("Skipping non-Unicode cmap subtable (platform %d, encoding %d)",
                             platform_id, encoding_id)
                continue
            return cls(CharacterMap.load_format4(reader), platform_id, encoding_id)

        raise UnsupportedCmapFormat(formats)
