# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Text layout.

TextLayoutEngine turns a run of UTF-16 code units plus per-range styling into
positioned GlyphLayout records. Locations are in layout units (inches): the
pen's baseline position of each glyph, already wrapped, kerned and aligned.
Multiply by the DPI to get device units.

The pass is single left-to-right with one reflow step whenever a line
overflows the wrapping width: the records after the last whitespace run are
moved to the next line and the whitespace between is dropped.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Sequence, Union

from .font_program import FontProgram, GlyphInstance
from .glyph_cache import GlyphPathCache
from .glyph_renderer import GlyphRenderer

DEFAULT_DPI = 72.0
DEFAULT_TAB_WIDTH = 4.0

_HIGH_SURROGATES = range(0xD800, 0xDC00)
_LOW_SURROGATES = range(0xDC00, 0xE000)

TAB = 0x09
LINE_FEED = 0x0A
CARRIAGE_RETURN = 0x0D
SPACE = 0x20


class HorizontalAlignment(enum.Enum):
    LEFT = 'left'
    CENTER = 'center'
    RIGHT = 'right'


class VerticalAlignment(enum.Enum):
    TOP = 'top'
    CENTER = 'center'
    BOTTOM = 'bottom'


@dataclass(frozen=True)
class Font:
    """A font program at a point size."""
    program: FontProgram
    point_size: float

    @property
    def line_height(self) -> float:
        """Line height in points."""
        return self.program.line_height * self.point_size / self.program.units_per_em

    def glyph(self, code_point: int) -> Glyph:
        return Glyph(self.program.glyph(code_point), self.point_size)


@dataclass(frozen=True)
class Glyph:
    """A glyph instance paired with the point size it is drawn at."""
    instance: GlyphInstance
    point_size: float

    def bounding_box(self, location: tuple[float, float],
                     dpi: tuple[float, float]) -> tuple[float, float, float, float]:
        """Device box of the glyph with its pen position at location (device units)."""
        return self.instance.bounding_box(
            location, (self.point_size * dpi[0], self.point_size * dpi[1]))

    def render_to(self, sink: GlyphRenderer, location: tuple[float, float],
                  dpi: tuple[float, float], line_height: float = 0.0,
                  cache: GlyphPathCache | None = None) -> None:
        self.instance.render_to(sink, self.point_size, location, dpi, line_height, cache)


@dataclass(frozen=True)
class StyleSpan:
    """Styling of the code units in [start, end)."""
    start: int
    end: int
    font: FontProgram
    point_size: float
    apply_kerning: bool = True
    tab_width: float = DEFAULT_TAB_WIDTH

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"span end {self.end} before start {self.start}")


StyleResolver = Callable[[int, int], StyleSpan]


@dataclass(frozen=True)
class GlyphLayout:
    """One positioned glyph. location is the pen position in inches."""
    code_point: int
    glyph: Glyph
    location: tuple[float, float]
    width: float
    height: float
    line_height: float
    start_of_line: bool = False
    is_whitespace: bool = False
    is_control_character: bool = False

    def bounding_box(self, dpi: tuple[float, float]) -> tuple[float, float, float, float]:
        x, y, width, height = self.glyph.bounding_box(
            (self.location[0] * dpi[0], self.location[1] * dpi[1]), dpi)
        if self.is_whitespace:
            width = self.width * dpi[0]
        return (x, y, width, height)

    def __str__(self) -> str:
        parts = []
        if self.start_of_line:
            parts.append('@ ')
        if self.is_whitespace:
            parts.append('!')
        if self.code_point == TAB:
            char = '\\t'
        elif self.code_point == LINE_FEED:
            char = '\\n'
        elif self.code_point == CARRIAGE_RETURN:
            char = '\\r'
        else:
            char = chr(self.code_point)
        parts.append(f"'{char}' ")
        parts.append(f"{self.location[0]:g},{self.location[1]:g} {self.width:g}x{self.height:g}")
        return ''.join(parts)


@dataclass
class LayoutOptions:
    """Options for one layout call.

    origin and wrapping_width are in device units; a wrapping_width of zero
    or less disables wrapping. Styling comes from style_resolver when given,
    otherwise from spans, otherwise from font over the whole text.
    """
    font: Font | None = None
    dpi: tuple[float, float] = (DEFAULT_DPI, DEFAULT_DPI)
    origin: tuple[float, float] = (0.0, 0.0)
    wrapping_width: float = 0.0
    horizontal_alignment: HorizontalAlignment = HorizontalAlignment.LEFT
    vertical_alignment: VerticalAlignment = VerticalAlignment.TOP
    apply_kerning: bool = True
    tab_width: float = DEFAULT_TAB_WIDTH
    style_resolver: StyleResolver | None = None
    spans: Sequence[StyleSpan] = field(default_factory=tuple)

    def get_style(self, start: int, end: int) -> StyleSpan:
        """Style of the span containing code unit start; text ends at end.

        Raises:
            ValueError: No span covers start, or no styling is configured.
        """
        if self.style_resolver is not None:
            return self.style_resolver(start, end)
        if self.spans:
            for span in self.spans:
                if span.start <= start < span.end:
                    return span
            raise ValueError(f"no style span covers code unit {start}")
        if self.font is None:
            raise ValueError("LayoutOptions needs a font, spans or a style resolver")
        return StyleSpan(start, end, self.font.program, self.font.point_size,
                         self.apply_kerning, self.tab_width)


Text = Union[str, Sequence[int]]


def to_code_units(text: Text) -> list[int]:
    """UTF-16 code units of text. Lone surrogates in a str survive as-is."""
    if isinstance(text, str):
        data = text.encode('utf-16-be', 'surrogatepass')
        return [int.from_bytes(data[i:i + 2], 'big') for i in range(0, len(data), 2)]
    return [int(unit) for unit in text]


def _is_whitespace(unit: int) -> bool:
    return chr(unit).isspace()


class TextLayoutEngine:
    """Lays out styled text into GlyphLayout records.

    Engines hold no state between calls; construct one and hand it to the
    measurer and renderer that should share it.
    """

    def generate_layout(self, text: Text, options: LayoutOptions) -> list[GlyphLayout]:
        units = to_code_units(text)
        count = len(units)
        output: list[GlyphLayout] = []
        if count == 0:
            return output

        dpi_x, dpi_y = options.dpi
        origin = (options.origin[0] / dpi_x, options.origin[1] / dpi_y)

        max_width = float('inf')
        origin_x = 0.0
        if options.wrapping_width > 0:
            max_width = options.wrapping_width / dpi_x
            if options.horizontal_alignment is HorizontalAlignment.RIGHT:
                origin_x = max_width
            elif options.horizontal_alignment is HorizontalAlignment.CENTER:
                origin_x = 0.5 * max_width

        span = options.get_style(0, count)
        unscaled_line_height = 0
        line_height = 0.0
        unscaled_max_ascender = 0
        line_max_ascender = 0.0
        x = y = 0.0
        first_line_height = 0.0
        # distance between the first line's box top and its tallest ascender
        top = 0.0

        first_line = True
        previous: GlyphInstance | None = None
        last_wrappable = -1
        start_of_line = True
        total_height = 0.0

        for i, unit in enumerate(units):
            if unit in _LOW_SURROGATES:
                # consumed with its high surrogate, or unpaired
                continue

            if i >= span.end:
                span = options.get_style(i, count)
                if not span.start <= i < span.end:
                    raise ValueError(f"style span [{span.start}, {span.end}) does not cover code unit {i}")
                previous = None

            font = span.font
            scale = font.units_per_em * 72.0
            if font.line_height > unscaled_line_height:
                unscaled_line_height = font.line_height
                line_height = unscaled_line_height * span.point_size / scale
            if font.ascender > unscaled_max_ascender:
                unscaled_max_ascender = font.ascender
                line_max_ascender = unscaled_max_ascender * span.point_size / scale

            if first_line:
                first_line_height = max(first_line_height, line_height)
                top = first_line_height - line_max_ascender

            if options.wrapping_width > 0 and _is_whitespace(unit):
                # never start a wrapped line with whitespace
                for j in range(len(output) - 1, -1, -1):
                    if not output[j].is_whitespace:
                        last_wrappable = j + 1
                        break

            is_pair = unit in _HIGH_SURROGATES
            if is_pair:
                if i + 1 < count and units[i + 1] in _LOW_SURROGATES:
                    code_point = 0x10000 + ((unit - 0xD800) << 10) + (units[i + 1] - 0xDC00)
                else:
                    code_point = 0
            else:
                code_point = unit

            instance = font.glyph(code_point)
            glyph_width = instance.advance_width * span.point_size / scale
            glyph_height = instance.height * span.point_size / scale
            glyph = Glyph(instance, span.point_size)

            if is_pair or unit not in (CARRIAGE_RETURN, LINE_FEED, TAB, SPACE):
                glyph_x, glyph_y = x, y
                if span.apply_kerning and previous is not None:
                    dx, dy = font.offset(instance, previous)
                    glyph_x += dx * span.point_size / scale
                    glyph_y += dy * span.point_size / scale
                    x = glyph_x

                output.append(GlyphLayout(code_point, glyph, (glyph_x, glyph_y), glyph_width,
                                          glyph_height, line_height, start_of_line))
                start_of_line = False
                x += glyph_width

                if x >= max_width and 0 < last_wrappable < len(output):
                    x = self._reflow(output, last_wrappable, line_height, x)
                    start_of_line = False
                    y += line_height
                    first_line = False
                    last_wrappable = -1

                total_height = max(total_height, y + line_height)
                previous = instance

            elif unit == CARRIAGE_RETURN:
                x = 0.0
                previous = None
                output.append(GlyphLayout(code_point, glyph, (x, y), 0.0, glyph_height, line_height,
                                          True, True, True))
                start_of_line = False

            elif unit == LINE_FEED:
                output.append(GlyphLayout(code_point, glyph, (x, y), 0.0, glyph_height, line_height,
                                          start_of_line, True, True))
                x = 0.0
                y += line_height
                unscaled_line_height = 0
                unscaled_max_ascender = 0
                previous = None
                first_line = False
                last_wrappable = -1
                start_of_line = True

            elif unit == TAB:
                tab_stop = glyph_width * span.tab_width
                final_width = tab_stop - x % tab_stop if tab_stop > 0 else 0.0
                if final_width < glyph_width:
                    final_width += tab_stop
                output.append(GlyphLayout(code_point, glyph, (x, y), final_width, glyph_height,
                                          line_height, start_of_line, True, False))
                start_of_line = False
                x += final_width
                previous = None

            else:
                output.append(GlyphLayout(code_point, glyph, (x, y), glyph_width, glyph_height,
                                          line_height, start_of_line, True, False))
                start_of_line = False
                x += glyph_width
                previous = None

        self._align(output, options, origin, origin_x, total_height - top, first_line_height - top)
        return output

    @staticmethod
    def _reflow(output: list[GlyphLayout], wrap_at: int, line_height: float, x: float) -> float:
        """Move records from wrap_at onwards to the next line.

        Whitespace records are dropped and their width is folded into the
        shift of the records after them. Returns the new pen X.
        """
        wrapping_offset = output[wrap_at].location[0]
        start_of_line = True
        j = wrap_at
        while j < len(output):
            record = output[j]
            if record.is_whitespace:
                wrapping_offset += record.width
                del output[j]
                continue
            moved = replace(
                record,
                location=(record.location[0] - wrapping_offset, record.location[1] + line_height),
                start_of_line=start_of_line,
            )
            start_of_line = False
            x = moved.location[0] + moved.width
            output[j] = moved
            j += 1
        return x

    @staticmethod
    def _align(output: list[GlyphLayout], options: LayoutOptions, origin: tuple[float, float],
               origin_x: float, total_height: float, offset_y: float) -> None:
        if options.vertical_alignment is VerticalAlignment.CENTER:
            offset_y -= 0.5 * total_height
        elif options.vertical_alignment is VerticalAlignment.BOTTOM:
            offset_y -= total_height

        line_offset_x = 0.0
        for i, record in enumerate(output):
            if record.start_of_line:
                width = record.width
                for following in output[i + 1:]:
                    if following.start_of_line:
                        break
                    width = following.location[0] + following.width
                if options.horizontal_alignment is HorizontalAlignment.RIGHT:
                    line_offset_x = origin_x - width
                elif options.horizontal_alignment is HorizontalAlignment.CENTER:
                    line_offset_x = origin_x - width / 2.0
                else:
                    line_offset_x = origin_x

            output[i] = replace(record, location=(
                record.location[0] + line_offset_x + origin[0],
                record.location[1] + offset_y + origin[1],
            ))


def layout_lines(layouts: Iterable[GlyphLayout]) -> list[list[GlyphLayout]]:
    """Group records into lines at each start-of-line record."""
    lines: list[list[GlyphLayout]] = []
    for record in layouts:
        if record.start_of_line or not lines:
            lines.append([])
        lines[-1].append(record)
    return lines
