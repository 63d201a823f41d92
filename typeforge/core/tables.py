# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Metric and naming tables of a TrueType font.

Each reader takes a BinaryReader positioned at the start of its table and
returns an immutable record. The character map and glyph programs live in
cmap.py and glyph_decoder.py.

Tables handled:
  head  - unitsPerEm, font bounding box, macStyle, loca format
  hhea  - ascender/descender/lineGap, number of long metrics
  maxp  - glyph count
  OS/2  - weight, fsSelection, typographic metrics
  hmtx  - per-glyph advance width and left side bearing
  loca  - glyph offsets into glyf
  kern  - format 0 pair kerning
  name  - family / subfamily / full / PostScript names
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .binary_reader import BinaryReader
from .error import InvalidFontTable, UnexpectedEndOfFile


# ---------------------------------------------------------------------------
# head
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeadTable:
    units_per_em: int
    x_min: int
    y_min: int
    x_max: int
    y_max: int
    mac_style: int
    index_to_loc_format: int

    # macStyle bits
    BOLD = 0x01
    ITALIC = 0x02

    @classmethod
    def load(cls, reader: BinaryReader) -> HeadTable:
        reader.skip(4 + 4 + 4 + 4)  # version, fontRevision, checkSumAdjustment, magicNumber
        reader.skip(2)  # flags
        units_per_em = reader.read_uint16()
        if not 16 <= units_per_em <= 16384:
            raise InvalidFontTable(f"unitsPerEm {units_per_em} outside 16..16384", "head")
        reader.skip(8 + 8)  # created, modified
        x_min, y_min, x_max, y_max = reader.read_int16_array(4)
        mac_style = reader.read_uint16()
        reader.skip(2 + 2)  # lowestRecPPEM, fontDirectionHint
        index_to_loc_format = reader.read_int16()
        if index_to_loc_format not in (0, 1):
            raise InvalidFontTable(f"indexToLocFormat {index_to_loc_format}", "head")
        return cls(units_per_em, x_min, y_min, x_max, y_max, mac_style, index_to_loc_format)


# ---------------------------------------------------------------------------
# hhea
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HorizontalHeadTable:
    ascender: int
    descender: int
    line_gap: int
    advance_width_max: int
    number_of_h_metrics: int

    @classmethod
    def load(cls, reader: BinaryReader) -> HorizontalHeadTable:
        reader.skip(4)  # version
        ascender = reader.read_int16()
        descender = reader.read_int16()
        line_gap = reader.read_int16()
        advance_width_max = reader.read_uint16()
        # minLeftSideBearing .. metricDataFormat
        reader.skip(2 + 2 + 2 + 2 + 2 + 2 + 8 + 2)
        number_of_h_metrics = reader.read_uint16()
        return cls(ascender, descender, line_gap, advance_width_max, number_of_h_metrics)


# ---------------------------------------------------------------------------
# maxp
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MaximumProfileTable:
    num_glyphs: int

    @classmethod
    def load(cls, reader: BinaryReader) -> MaximumProfileTable:
        reader.skip(4)  # version (0.5 or 1.0; the glyph count is all we need)
        return cls(reader.read_uint16())


# ---------------------------------------------------------------------------
# OS/2
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OS2Table:
    weight_class: int
    fs_selection: int
    typo_ascender: int
    typo_descender: int
    typo_line_gap: int

    # fsSelection bits
    ITALIC = 0x0001
    BOLD = 0x0020
    REGULAR = 0x0040

    @classmethod
    def load(cls, reader: BinaryReader, hhea: HorizontalHeadTable) -> OS2Table:
        """Read OS/2; a version 0 table cut short before the typographic
        metrics takes them from hhea."""
        reader.skip(2 + 2)  # version, xAvgCharWidth
        weight_class = reader.read_uint16()
        # usWidthClass .. achVendID
        reader.skip(2 + 2 + 2 * 10 + 2 + 10 + 16 + 4)
        fs_selection = reader.read_uint16()
        reader.skip(2 + 2)  # usFirstCharIndex, usLastCharIndex
        if reader.remaining < 6:
            return cls(weight_class, fs_selection,
                       hhea.ascender, hhea.descender, hhea.line_gap)
        typo_ascender, typo_descender, typo_line_gap = reader.read_int16_array(3)
        return cls(weight_class, fs_selection, typo_ascender, typo_descender, typo_line_gap)

    @classmethod
    def from_hhea(cls, hhea: HorizontalHeadTable, head: HeadTable) -> OS2Table:
        """Synthesize the fields we use for fonts without an OS/2 table."""
        fs_selection = 0
        if head.mac_style & HeadTable.BOLD:
            fs_selection |= cls.BOLD
        if head.mac_style & HeadTable.ITALIC:
            fs_selection |= cls.ITALIC
        weight = 700 if fs_selection & cls.BOLD else 400
        return cls(weight, fs_selection, hhea.ascender, hhea.descender, hhea.line_gap)


# ---------------------------------------------------------------------------
# hmtx
# ---------------------------------------------------------------------------

class HorizontalMetricsTable:
    """Advance widths and left side bearings indexed by glyph.

    Glyphs past numberOfHMetrics share the last advance width and carry only
    a left side bearing.
    """
    __slots__ = ('advance_widths', 'left_side_bearings')

    def __init__(self, advance_widths: tuple[int, ...], left_side_bearings: tuple[int, ...]) -> None:
        self.advance_widths = advance_widths
        self.left_side_bearings = left_side_bearings

    @classmethod
    def load(cls, reader: BinaryReader, number_of_h_metrics: int, num_glyphs: int) -> HorizontalMetricsTable:
        if number_of_h_metrics == 0 and num_glyphs > 0:
            raise InvalidFontTable("numberOfHMetrics is zero", "hmtx")
        advances = []
        bearings = []
        for _ in range(number_of_h_metrics):
            advances.append(reader.read_uint16())
            bearings.append(reader.read_int16())
        extra = max(0, num_glyphs - number_of_h_metrics)
        # Some fonts truncate the trailing bearing array; treat missing values as 0
        available = min(extra, reader.remaining // 2)
        bearings.extend(reader.read_int16_array(available))
        bearings.extend([0] * (extra - available))
        return cls(tuple(advances), tuple(bearings))

    def advance_width(self, glyph_index: int) -> int:
        if not self.advance_widths:
            return 0
        if glyph_index < len(self.advance_widths):
            return self.advance_widths[glyph_index]
        return self.advance_widths[-1]

    def left_side_bearing(self, glyph_index: int) -> int:
        if glyph_index < len(self.left_side_bearings):
            return self.left_side_bearings[glyph_index]
        return 0


# ---------------------------------------------------------------------------
# loca
# ---------------------------------------------------------------------------

class IndexLocationTable:
    """Glyph offsets into glyf; entry i..i+1 brackets glyph i."""
    __slots__ = ('offsets',)

    def __init__(self, offsets: tuple[int, ...]) -> None:
        self.offsets = offsets

    @classmethod
    def load(cls, reader: BinaryReader, num_glyphs: int, index_to_loc_format: int) -> IndexLocationTable:
        if index_to_loc_format == 0:
            offsets = tuple(o * 2 for o in reader.read_uint16_array(num_glyphs + 1))
        else:
            offsets = reader.read_uint32_array(num_glyphs + 1)
        for i in range(num_glyphs):
            if offsets[i + 1] < offsets[i]:
                raise InvalidFontTable(f"offsets decrease at glyph {i}", "loca")
        return cls(offsets)

    def __len__(self) -> int:
        return max(0, len(self.offsets) - 1)

    def glyph_range(self, glyph_index: int) -> tuple[int, int]:
        return self.offsets[glyph_index], self.offsets[glyph_index + 1]


class GlyphTable:
    """Raw glyf bytes sliced per glyph through loca."""
    __slots__ = ('_reader', '_loca')

    def __init__(self, reader: BinaryReader, loca: IndexLocationTable) -> None:
        self._reader = reader
        self._loca = loca
        last = loca.offsets[-1] if loca.offsets else 0
        if last > len(reader):
            raise UnexpectedEndOfFile(last, len(reader), "glyf")

    @property
    def glyph_count(self) -> int:
        return len(self._loca)

    def glyph_reader(self, glyph_index: int) -> BinaryReader | None:
        """Reader over one glyph's program, or None for an empty glyph."""
        start, end = self._loca.glyph_range(glyph_index)
        if end == start:
            return None
        return self._reader.sub_reader(start, end - start)


# ---------------------------------------------------------------------------
# kern
# ---------------------------------------------------------------------------

class KerningTable:
    """Format 0 pair adjustments, keyed by (left glyph, right glyph).

    Values are (dx, dy) in font units. Horizontal subtables adjust x;
    cross-stream subtables adjust y. Pairs from several subtables add up.
    """
    __slots__ = ('pairs',)

    # coverage bits
    HORIZONTAL = 0x01
    MINIMUM = 0x02
    CROSS_STREAM = 0x04
    OVERRIDE = 0x08

    def __init__(self, pairs: dict[tuple[int, int], tuple[int, int]] | None = None) -> None:
        self.pairs = pairs or {}

    @classmethod
    def load(cls, reader: BinaryReader) -> KerningTable:
        version = reader.read_uint16()
        if version != 0:
            # Apple's version 1.0 kern (32-bit header) is not handled
            return cls()
        n_tables = reader.read_uint16()
        pairs: dict[tuple[int, int], tuple[int, int]] = {}
        for _ in range(n_tables):
            start = reader.tell()
            reader.skip(2)  # subtable version
            length = reader.read_uint16()
            coverage = reader.read_uint16()
            fmt = coverage >> 8
            if fmt == 0 and coverage & cls.HORIZONTAL and not coverage & cls.MINIMUM:
                cross_stream = bool(coverage & cls.CROSS_STREAM)
                override = bool(coverage & cls.OVERRIDE)
                n_pairs = reader.read_uint16()
                reader.skip(6)  # searchRange, entrySelector, rangeShift
                for _ in range(n_pairs):
                    left = reader.read_uint16()
                    right = reader.read_uint16()
                    value = reader.read_int16()
                    delta = (0, value) if cross_stream else (value, 0)
                    old = pairs.get((left, right))
                    if old is not None and not override:
                        delta = (old[0] + delta[0], old[1] + delta[1])
                    pairs[(left, right)] = delta
            reader.seek(start + length)
        return cls(pairs)

    def offset(self, left: int, right: int) -> tuple[int, int]:
        return self.pairs.get((left, right), (0, 0))

    def __len__(self) -> int:
        return len(self.pairs)


# ---------------------------------------------------------------------------
# name
# ---------------------------------------------------------------------------

NAME_FAMILY = 1
NAME_SUBFAMILY = 2
NAME_FULL = 4
NAME_POSTSCRIPT = 6
NAME_TYPOGRAPHIC_FAMILY = 16
NAME_TYPOGRAPHIC_SUBFAMILY = 17


@dataclass(frozen=True)
class NameTable:
    names: dict[int, str] = field(default_factory=dict)

    @classmethod
    def load(cls, reader: BinaryReader) -> NameTable:
        """Decode name records, preferring Windows Unicode BMP (UTF-16BE)
        and falling back to Mac Roman."""
        reader.skip(2)  # format
        count = reader.read_uint16()
        string_offset = reader.read_uint16()
        windows: dict[int, str] = {}
        unicode: dict[int, str] = {}
        mac: dict[int, str] = {}
        for _ in range(count):
            platform_id, encoding_id, _lang_id, name_id, length, offset = reader.read_uint16_array(6)
            pos = string_offset + offset
            if pos + length > len(reader):
                continue
            here = reader.tell()
            reader.seek(pos)
            raw = reader.read_bytes(length)
            reader.seek(here)
            if platform_id == 3 and encoding_id in (0, 1, 10):
                target = windows
                text = raw.decode('utf-16-be', errors='replace')
            elif platform_id == 0:
                target = unicode
                text = raw.decode('utf-16-be', errors='replace')
            elif platform_id == 1 and encoding_id == 0:
                target = mac
                text = raw.decode('mac_roman', errors='replace')
            else:
                continue
            target.setdefault(name_id, text)
        names = dict(mac)
        names.update(unicode)
        names.update(windows)
        return cls(names)

    def get(self, name_id: int, default: str = '') -> str:
        return self.names.get(name_id, default)

    @property
    def family_name(self) -> str:
        return self.get(NAME_TYPOGRAPHIC_FAMILY) or self.get(NAME_FAMILY)

    @property
    def subfamily_name(self) -> str:
        return self.get(NAME_TYPOGRAPHIC_SUBFAMILY) or self.get(NAME_SUBFAMILY)

    @property
    def full_name(self) -> str:
        return self.get(NAME_FULL)

    @property
    def postscript_name(self) -> str:
        return self.get(NAME_POSTSCRIPT)
