# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TrueType test fonts compiled with fontTools.

FontFixture collects glyphs, mappings and kerning and compiles them through
fontTools' FontBuilder, so the parsers are checked against an independent
encoder. The byte helpers at the bottom patch compiled fonts for the
malformed cases fontTools refuses to write.
"""

from __future__ import annotations

import io
import struct
from typing import NamedTuple

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen, TTGlyphPointPen
from fontTools.ttLib import TTCollection, TTFont, newTable
from fontTools.ttLib.sfnt import SFNTReader, SFNTWriter
from fontTools.ttLib.tables._g_l_y_f import ROUND_XY_TO_GRID, SCALED_COMPONENT_OFFSET
from fontTools.ttLib.tables._k_e_r_n import KernTable_format_0

# kern subtable coverage bits
KERN_HORIZONTAL = 0x01
KERN_CROSS_STREAM = 0x04


class Component(NamedTuple):
    """One composite component; transforms follow (xx, xy, yx, yy)."""
    glyph_index: int
    dx: int = 0
    dy: int = 0
    anchor: tuple[int, int] | None = None
    scale: float | None = None
    xy_scale: tuple[float, float] | None = None
    matrix: tuple[float, float, float, float] | None = None
    round_xy: bool = False
    scaled_offset: bool = False

    def transformation(self) -> tuple[float, ...]:
        if self.scale is not None:
            xx, xy, yx, yy = self.scale, 0, 0, self.scale
        elif self.xy_scale is not None:
            xx, xy, yx, yy = self.xy_scale[0], 0, 0, self.xy_scale[1]
        elif self.matrix is not None:
            xx, xy, yx, yy = self.matrix
        else:
            xx, xy, yx, yy = 1, 0, 0, 1
        return (xx, xy, yx, yy, self.dx, self.dy)


def draw_polygon(pen, points) -> None:
    pen.moveTo(points[0])
    for point in points[1:]:
        pen.lineTo(point)
    pen.closePath()


class FontFixture:
    """Glyphs, character mappings and kerning for one TrueType face.

    Glyphs are addressed by index; names are generated for fontTools.
    Glyph 0 is a notdef rectangle.
    """

    def __init__(self, family='Test Sans', subfamily='Regular', units_per_em=1000,
                 ascender=800, descender=-200, line_gap=0, fs_selection=0x40, mac_style=None,
                 notdef_advance=500):
        self.family = family
        self.subfamily = subfamily
        self.units_per_em = units_per_em
        self.ascender = ascender
        self.descender = descender
        self.line_gap = line_gap
        self.fs_selection = fs_selection
        if mac_style is None:
            mac_style = (1 if fs_selection & 0x20 else 0) | (2 if fs_selection & 0x01 else 0)
        self.mac_style = mac_style
        self.glyph_order: list[str] = []
        self.glyphs = {}
        self.advances: dict[str, int] = {}
        self.mapping: dict[int, str] = {}
        self.kerning: dict[tuple[int, int], int] = {}
        self.cross_stream_kerning = False
        pen = TTGlyphPen(None)
        draw_polygon(pen, [(50, 0), (50, 700), (450, 700), (450, 0)])
        self._add('.notdef', pen.glyph(), notdef_advance, None)

    def _add(self, name, glyph, advance: int, code_point: int | None) -> int:
        self.glyph_order.append(name)
        self.glyphs[name] = glyph
        self.advances[name] = advance
        if code_point is not None:
            self.mapping[code_point] = name
        return len(self.glyph_order) - 1

    def _name(self, name: str | None) -> str:
        return name or f'glyph{len(self.glyph_order)}'

    def add_drawn_glyph(self, draw, advance: int, code_point: int | None = None,
                        name: str | None = None) -> int:
        """Add a glyph drawn by draw(pen) with segment pen calls."""
        pen = TTGlyphPen(None)
        draw(pen)
        return self._add(self._name(name), pen.glyph(), advance, code_point)

    def add_glyph(self, contours, advance: int, code_point: int | None = None,
                  name: str | None = None, instructions: bytes = b'') -> int:
        """Add a simple glyph from contours of (x, y, on_curve) points, kept in order."""
        pen = TTGlyphPointPen(None)
        for contour in contours:
            pen.beginPath()
            for x, y, on_curve in contour:
                pen.addPoint((x, y), 'line' if on_curve else None)
            pen.endPath()
        glyph = pen.glyph()
        if instructions:
            glyph.program.fromBytecode(instructions)
        return self._add(self._name(name), glyph, advance, code_point)

    def add_empty_glyph(self, advance: int, code_point: int | None = None,
                        name: str | None = None) -> int:
        return self._add(self._name(name), TTGlyphPen(None).glyph(), advance, code_point)

    def add_composite_glyph(self, components, advance: int, code_point: int | None = None,
                            name: str | None = None) -> int:
        """Add a composite of glyphs already in the font."""
        pen = TTGlyphPen(self.glyphs)
        for component in components:
            pen.addComponent(self.glyph_order[component.glyph_index], component.transformation())
        glyph = pen.glyph(componentFlags=0)
        for component, compiled in zip(components, glyph.components):
            if component.round_xy:
                compiled.flags |= ROUND_XY_TO_GRID
            if component.scaled_offset:
                compiled.flags |= SCALED_COMPONENT_OFFSET
            if component.anchor is not None:
                compiled.firstPt, compiled.secondPt = component.anchor
        return self._add(self._name(name), glyph, advance, code_point)

    def map(self, code_point: int, glyph_index: int) -> None:
        # fontTools writes 'gidN' names as raw glyph ids, even past the end of the font
        if glyph_index < len(self.glyph_order):
            self.mapping[code_point] = self.glyph_order[glyph_index]
        else:
            self.mapping[code_point] = f'gid{glyph_index}'

    def kern(self, left: int, right: int, value: int) -> None:
        self.kerning[(left, right)] = value

    # ------------------------------------------------------------------
    # Compiling
    # ------------------------------------------------------------------

    def _kern_table(self):
        subtable = KernTable_format_0()
        subtable.version = 0
        subtable.format = 0
        subtable.coverage = KERN_HORIZONTAL
        if self.cross_stream_kerning:
            subtable.coverage |= KERN_CROSS_STREAM
        subtable.kernTable = {
            (self.glyph_order[left], self.glyph_order[right]): value
            for (left, right), value in self.kerning.items()
        }
        table = newTable('kern')
        table.version = 0
        table.kernTables = [subtable]
        return table

    def ttfont(self) -> TTFont:
        fb = FontBuilder(self.units_per_em, isTTF=True)
        fb.setupGlyphOrder(list(self.glyph_order))
        fb.setupCharacterMap(dict(self.mapping))
        fb.setupGlyf(dict(self.glyphs))
        glyf = fb.font['glyf']
        fb.setupHorizontalMetrics({
            name: (self.advances[name], getattr(glyf[name], 'xMin', 0))
            for name in self.glyph_order
        })
        fb.setupHorizontalHeader(ascent=self.ascender, descent=self.descender,
                                 lineGap=self.line_gap)
        fb.setupOS2(
            usWeightClass=700 if self.fs_selection & 0x20 else 400,
            fsSelection=self.fs_selection,
            sTypoAscender=self.ascender,
            sTypoDescender=self.descender,
            sTypoLineGap=self.line_gap,
            usWinAscent=self.ascender,
            usWinDescent=-self.descender,
        )
        full_name = self.family if self.subfamily == 'Regular' else f'{self.family} {self.subfamily}'
        fb.setupNameTable({
            'familyName': self.family,
            'styleName': self.subfamily,
            'fullName': full_name,
            'psName': f'{self.family}-{self.subfamily}'.replace(' ', ''),
        })
        fb.setupPost()
        fb.setupMaxp()
        fb.font['head'].macStyle = self.mac_style
        if self.kerning:
            fb.font['kern'] = self._kern_table()
        return fb.font

    def build(self) -> bytes:
        stream = io.BytesIO()
        self.ttfont().save(stream)
        return stream.getvalue()


def build_collection(fixtures) -> bytes:
    """Compile a 'ttcf' collection holding one face per fixture."""
    collection = TTCollection()
    collection.fonts = [fixture.ttfont() for fixture in fixtures]
    stream = io.BytesIO()
    collection.save(stream)
    return stream.getvalue()


# ---------------------------------------------------------------------------
# Compiled font surgery
# ---------------------------------------------------------------------------

def read_tables(data: bytes) -> dict[str, bytes]:
    reader = SFNTReader(io.BytesIO(data), checkChecksums=0)
    return {str(tag): reader[tag] for tag in reader.keys()}


def write_sfnt(tables: dict[str, bytes]) -> bytes:
    stream = io.BytesIO()
    writer = SFNTWriter(stream, len(tables))
    for tag in sorted(tables):
        writer[tag] = tables[tag]
    writer.close()
    return stream.getvalue()


def without_table(data: bytes, tag: str) -> bytes:
    tables = read_tables(data)
    del tables[tag]
    return write_sfnt(tables)


def patch_table(data: bytes, tag: str, offset: int, fmt: str, *values) -> bytes:
    """Overwrite a field inside one table of a compiled font."""
    reader = SFNTReader(io.BytesIO(data), checkChecksums=0)
    patched = bytearray(data)
    struct.pack_into(fmt, patched, reader.tables[tag].offset + offset, *values)
    return bytes(patched)


def glyph_location(data: bytes, glyph_index: int) -> tuple[int, int]:
    """(offset, length) of a glyph's data within the glyf table."""
    loca = TTFont(io.BytesIO(data))['loca']
    return loca[glyph_index], loca[glyph_index + 1] - loca[glyph_index]


def glyph_data(data: bytes, glyph_index: int) -> bytes:
    """The compiled glyf entry of one glyph, padding included."""
    offset, length = glyph_location(data, glyph_index)
    return read_tables(data)['glyf'][offset:offset + length]


def patch_glyph(data: bytes, glyph_index: int, offset: int, fmt: str, *values) -> bytes:
    """Overwrite a field inside one compiled glyph."""
    start, _length = glyph_location(data, glyph_index)
    return patch_table(data, 'glyf', start + offset, fmt, *values)


# Offset of the first component's glyphIndex in a composite glyph
FIRST_COMPONENT_INDEX = 10 + 2


# ---------------------------------------------------------------------------
# Standard test font
# ---------------------------------------------------------------------------

GID_NOTDEF = 0
GID_A = 1
GID_B = 2
GID_SPACE = 3
GID_O = 4
GID_ARING = 5

A_ADVANCE = 600
B_ADVANCE = 700
SPACE_ADVANCE = 250
O_ADVANCE = 650
AB_KERNING = -100


def _draw_o(pen) -> None:
    pen.qCurveTo((0, 300), (300, 600), (600, 300), (300, 0), None)
    pen.closePath()


def standard_font(**kwargs) -> FontFixture:
    """Font with notdef, 'A' (triangle), 'B' (square), space, 'O' (all
    off-curve) and 'Å' (composite of A and a scaled B), kerning A-B."""
    font = FontFixture(**kwargs)
    font.add_drawn_glyph(lambda pen: draw_polygon(pen, [(0, 0), (300, 700), (600, 0)]),
                         advance=A_ADVANCE, code_point=ord('A'), name='A')
    font.add_drawn_glyph(lambda pen: draw_polygon(pen, [(100, 0), (100, 600), (600, 600), (600, 0)]),
                         advance=B_ADVANCE, code_point=ord('B'), name='B')
    font.add_empty_glyph(SPACE_ADVANCE, code_point=ord(' '), name='space')
    font.map(ord('\t'), GID_SPACE)
    font.add_drawn_glyph(_draw_o, advance=O_ADVANCE, code_point=ord('O'), name='O')
    font.add_composite_glyph(
        [Component(GID_A), Component(GID_B, dx=100, dy=800, scale=0.5)],
        advance=A_ADVANCE, code_point=0xC5, name='Aring')
    font.kern(GID_A, GID_B, AB_KERNING)
    return font
