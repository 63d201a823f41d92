# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Parsed TrueType font.

FontProgram combines the metric tables, the character map and the glyph
decoder of one font face. It is immutable apart from its glyph slots: one
optional slot per glyph index, filled on first access. Decoding is pure, so
two threads that miss the same slot at once both decode it and publish equal
values with a single list store; readers only ever see an empty slot or a
complete GlyphInstance.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from .cmap import NOTDEF, CMapTable
from .error import GlyphNotFound
from .font_reader import FontReader
from .glyph_cache import CachedGlyphPath, GlyphPathCache, make_cache_key
from .glyph_decoder import Bounds, GlyphOutline, GlyphOutlineDecoder
from .glyph_geometry import Path, glyph_bounding_box, glyph_path, translate_command
from .glyph_geometry import CurveTo, LineTo, MoveTo, QuadTo
from .glyph_renderer import GlyphRenderer, GlyphRendererParameters
from .tables import (
    GlyphTable, HeadTable, HorizontalHeadTable, HorizontalMetricsTable,
    IndexLocationTable, KerningTable, MaximumProfileTable, NameTable, OS2Table,
)

logger = logging.getLogger(__name__)


class FontStyle(enum.Enum):
    REGULAR = 0
    BOLD = 1
    ITALIC = 2
    BOLD_ITALIC = 3

    @classmethod
    def from_flags(cls, bold: bool, italic: bool) -> FontStyle:
        return cls((1 if bold else 0) | (2 if italic else 0))

    @classmethod
    def parse(cls, name: str) -> FontStyle:
        """Parse 'bold', 'Bold Italic', 'bold-italic', 'BoldItalic' and so on."""
        key = name.strip().lower().replace('-', '').replace('_', '').replace(' ', '')
        for style in cls:
            if style.name.lower().replace('_', '') == key:
                return style
        raise ValueError(f"unknown font style '{name}'")


@dataclass(frozen=True)
class FontDescription:
    family_name: str
    subfamily_name: str
    full_name: str
    postscript_name: str
    style: FontStyle

    @classmethod
    def from_tables(cls, name: NameTable, os2: OS2Table, head: HeadTable) -> FontDescription:
        bold = bool(os2.fs_selection & OS2Table.BOLD or head.mac_style & HeadTable.BOLD)
        italic = bool(os2.fs_selection & OS2Table.ITALIC or head.mac_style & HeadTable.ITALIC)
        return cls(
            family_name=name.family_name,
            subfamily_name=name.subfamily_name,
            full_name=name.full_name or name.family_name,
            postscript_name=name.postscript_name,
            style=FontStyle.from_flags(bold, italic),
        )


class GlyphInstance:
    """A decoded glyph of a particular font face."""
    __slots__ = ('font', 'outline', 'height', 'scale_factor')

    def __init__(self, font: FontProgram, outline: GlyphOutline) -> None:
        self.font = font
        self.outline = outline
        self.height = font.units_per_em - outline.bounds.y_min
        self.scale_factor = font.units_per_em * 72.0

    @property
    def index(self) -> int:
        return self.outline.glyph_index

    @property
    def advance_width(self) -> int:
        return self.outline.advance_width

    @property
    def left_side_bearing(self) -> int:
        return self.outline.left_side_bearing

    @property
    def bounds(self) -> Bounds:
        return self.outline.bounds

    @property
    def units_per_em(self) -> int:
        return self.font.units_per_em

    def __repr__(self) -> str:
        return f"<GlyphInstance {self.index} of {self.font.description.full_name!r}>"

    def bounding_box(self, origin: tuple[float, float],
                     scaled_point_size: tuple[float, float]) -> tuple[float, float, float, float]:
        """Device box (x, y, width, height) of the glyph drawn at origin.

        Args:
            origin: Pen position in device units.
            scaled_point_size: Point size multiplied by (dpi_x, dpi_y).
        """
        return glyph_bounding_box(self.outline.bounds, self.font.units_per_em, origin, scaled_point_size)

    def path(self, point_size: float, dpi: tuple[float, float] = (72.0, 72.0),
             cubic: bool = False, cache: GlyphPathCache | None = None) -> Path:
        """Origin-relative device path, optionally through a path cache."""
        if cache is None:
            return glyph_path(self.outline, self.font.units_per_em, point_size, dpi, cubic)
        key = make_cache_key(self.font, self.index, point_size, dpi, cubic)
        entry = cache.get(key)
        if entry is None:
            entry = CachedGlyphPath(
                glyph_path(self.outline, self.font.units_per_em, point_size, dpi, cubic), self.font)
            cache.put(key, entry)
        return entry.path

    def render_to(self, sink: GlyphRenderer, point_size: float, location: tuple[float, float],
                  dpi: tuple[float, float], line_height: float = 0.0,
                  cache: GlyphPathCache | None = None, cubic: bool = False) -> None:
        """Stream the glyph's path commands to sink.

        Args:
            sink: Receives begin_glyph/figures/end_glyph calls.
            point_size: Size in points.
            location: Pen position in layout units (inches).
            dpi: (x, y) resolution converting layout units to device units.
            line_height: Height of the line the glyph was laid out on.
            cache: Optional path cache shared across calls.
            cubic: Elevate quadratic segments to cubics.
        """
        origin = (location[0] * dpi[0], location[1] * dpi[1])
        box = self.bounding_box(origin, (point_size * dpi[0], point_size * dpi[1]))
        parameters = GlyphRendererParameters(
            self.font.description.full_name, self.index, point_size, (dpi[0], dpi[1]))

        if sink.begin_glyph(box, parameters):
            for subpath in self.path(point_size, dpi, cubic, cache):
                sink.begin_figure()
                for command in subpath:
                    command = translate_command(command, origin[0], origin[1])
                    if isinstance(command, LineTo):
                        sink.line_to(command.p)
                    elif isinstance(command, QuadTo):
                        sink.quadratic_bezier_to(command.c, command.p)
                    elif isinstance(command, CurveTo):
                        sink.cubic_bezier_to(command.c1, command.c2, command.p)
                    elif isinstance(command, MoveTo):
                        sink.move_to(command.p)
                sink.end_figure()
        sink.end_glyph()


class FontProgram:
    """Immutable parsed font face with a lazily filled glyph arena."""

    def __init__(self, head: HeadTable, hhea: HorizontalHeadTable, maxp: MaximumProfileTable,
                 os2: OS2Table, hmtx: HorizontalMetricsTable, cmap: CMapTable,
                 glyphs: GlyphTable, kern: KerningTable | None = None,
                 name: NameTable | None = None) -> None:
        self._head = head
        self._hhea = hhea
        self._os2 = os2
        self._hmtx = hmtx
        self._cmap = cmap
        self._kern = kern or KerningTable()
        self._decoder = GlyphOutlineDecoder(glyphs, hmtx)
        self._glyph_count = min(maxp.num_glyphs, glyphs.glyph_count)
        self._glyphs: list[GlyphInstance | None] = [None] * self._glyph_count
        self.description = FontDescription.from_tables(name or NameTable(), os2, head)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: str, font_index: int = 0) -> FontProgram:
        """Load a .ttf (or one face of a .ttc) from disk."""
        with open(path, 'rb') as f:
            data = f.read()
        font = cls.from_bytes(data, font_index)
        logger.debug("Loaded %s from %s", font.description.full_name or '<unnamed>', path)
        return font

    @classmethod
    def from_bytes(cls, data: bytes, font_index: int = 0) -> FontProgram:
        return cls.from_reader(FontReader(data, font_index))

    @classmethod
    def from_stream(cls, stream, font_index: int = 0) -> FontProgram:
        return cls.from_bytes(stream.read(), font_index)

    @classmethod
    def from_reader(cls, reader: FontReader) -> FontProgram:
        """Parse the tables in the recommended loading order.

        Raises:
            MissingFontTable: head, hhea, maxp, hmtx, cmap, loca or glyf
                is absent.
            UnsupportedCmapFormat: No format 4 character map.
            MalformedTable: Any table is structurally invalid.
        """
        head = HeadTable.load(reader.require_table('head'))
        hhea = HorizontalHeadTable.load(reader.require_table('hhea'))
        maxp = MaximumProfileTable.load(reader.require_table('maxp'))

        os2_reader = reader.get_table('OS/2')
        if os2_reader is not None:
            os2 = OS2Table.load(os2_reader, hhea)
        else:
            os2 = OS2Table.from_hhea(hhea, head)

        hmtx = HorizontalMetricsTable.load(
            reader.require_table('hmtx'), hhea.number_of_h_metrics, maxp.num_glyphs)
        cmap = CMapTable.load(reader.require_table('cmap'))
        loca = IndexLocationTable.load(
            reader.require_table('loca'), maxp.num_glyphs, head.index_to_loc_format)
        glyphs = GlyphTable(reader.require_table('glyf'), loca)

        kern_reader = reader.get_table('kern')
        kern = KerningTable.load(kern_reader) if kern_reader is not None else None
        name_reader = reader.get_table('name')
        name = NameTable.load(name_reader) if name_reader is not None else None

        return cls(head, hhea, maxp, os2, hmtx, cmap, glyphs, kern, name)

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    @property
    def units_per_em(self) -> int:
        return self._head.units_per_em

    @property
    def ascender(self) -> int:
        return self._os2.typo_ascender

    @property
    def descender(self) -> int:
        return self._os2.typo_descender

    @property
    def line_gap(self) -> int:
        return self._os2.typo_line_gap

    @property
    def line_height(self) -> int:
        return self.ascender - self.descender + self.line_gap

    @property
    def glyph_count(self) -> int:
        return self._glyph_count

    @property
    def character_map(self):
        return self._cmap.character_map

    @property
    def kerning_pairs(self) -> dict[tuple[int, int], tuple[int, int]]:
        return dict(self._kern.pairs)

    # ------------------------------------------------------------------
    # Glyph access
    # ------------------------------------------------------------------

    def glyph_index(self, code_point: int) -> int:
        return self._cmap.glyph_id(code_point)

    def glyph(self, code_point: int) -> GlyphInstance:
        """Glyph for a code point; unmapped code points give the notdef glyph."""
        index = self._cmap.glyph_id(code_point)
        if index >= self._glyph_count:
            logger.debug("U+%04X maps to missing glyph %d, using notdef", code_point, index)
            index = NOTDEF
        return self.glyph_by_index(index)

    def glyph_by_index(self, index: int) -> GlyphInstance:
        """
        Raises:
            GlyphNotFound: index is outside the font.
        """
        if not 0 <= index < self._glyph_count:
            raise GlyphNotFound(index, self._glyph_count)
        instance = self._glyphs[index]
        if instance is None:
            instance = GlyphInstance(self, self._decoder.decode(index))
            self._glyphs[index] = instance
        return instance

    def outline(self, index: int) -> GlyphOutline:
        return self.glyph_by_index(index).outline

    def offset(self, glyph: GlyphInstance, previous: GlyphInstance | None) -> tuple[int, int]:
        """Kerning adjustment of glyph when it follows previous, in font units."""
        if previous is None:
            return (0, 0)
        return self._kern.offset(previous.index, glyph.index)

    def __repr__(self) -> str:
        return f"<FontProgram {self.description.full_name!r} ({self._glyph_count} glyphs)>"
