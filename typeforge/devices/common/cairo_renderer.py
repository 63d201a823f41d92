# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Shared Cairo renderer for output devices.

CairoGlyphRenderer is a GlyphRenderer sink that builds each glyph as a Cairo
path and fills it with the non-zero winding rule, matching TrueType fill
semantics. Quadratic segments are degree-elevated since Cairo only has cubic
curves.

prepare_page() and draw_text() are the pieces every device shares: size a
surface around the ink bounds of the text, then paint background and glyphs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import cairo

from ...core.glyph_renderer import GlyphRenderer
from ...core.layout import GlyphLayout, LayoutOptions, Text, TextLayoutEngine
from ...core.text_measurer import layout_bounds
from ...core.text_renderer import TextRenderer
from .cairo_utils import _safe_rgb

# Anti-aliasing modes, selectable by name
ANTIALIAS_MODE = cairo.ANTIALIAS_GRAY

ANTIALIAS_MAP = {
    "none": cairo.ANTIALIAS_NONE,
    "fast": cairo.ANTIALIAS_FAST,
    "good": cairo.ANTIALIAS_GOOD,
    "best": cairo.ANTIALIAS_BEST,
    "gray": cairo.ANTIALIAS_GRAY,
    "subpixel": cairo.ANTIALIAS_SUBPIXEL,
}

DEFAULT_PADDING = 4


def get_antialias_mode(name: str | None) -> int:
    if name is None:
        return ANTIALIAS_MODE
    return ANTIALIAS_MAP.get(name.lower(), ANTIALIAS_MODE)


class CairoGlyphRenderer(GlyphRenderer):
    """Fills glyph outlines on a cairo.Context."""

    def __init__(self, cairo_ctx: cairo.Context, color=(0, 0, 0)) -> None:
        self.ctx = cairo_ctx
        self.color = _safe_rgb(color)
        self.glyph_count = 0

    def begin_glyph(self, bounds, parameters) -> bool:
        self.ctx.new_path()
        return True

    def end_glyph(self) -> None:
        self.ctx.set_source_rgb(*self.color)
        self.ctx.set_fill_rule(cairo.FILL_RULE_WINDING)
        self.ctx.fill()
        self.glyph_count += 1

    def begin_figure(self) -> None:
        pass

    def end_figure(self) -> None:
        self.ctx.close_path()

    def move_to(self, point) -> None:
        self.ctx.move_to(point[0], point[1])

    def line_to(self, point) -> None:
        self.ctx.line_to(point[0], point[1])

    def quadratic_bezier_to(self, control, point) -> None:
        x0, y0 = self.ctx.get_current_point()
        self.ctx.curve_to(
            x0 + 2.0 / 3.0 * (control[0] - x0), y0 + 2.0 / 3.0 * (control[1] - y0),
            point[0] + 2.0 / 3.0 * (control[0] - point[0]), point[1] + 2.0 / 3.0 * (control[1] - point[1]),
            point[0], point[1],
        )

    def cubic_bezier_to(self, control1, control2, point) -> None:
        self.ctx.curve_to(control1[0], control1[1], control2[0], control2[1], point[0], point[1])


@dataclass(frozen=True)
class PageGeometry:
    """Surface size in device pixels and the translation placing the text on it."""
    width: int
    height: int
    offset_x: float
    offset_y: float


def prepare_page(layouts: list[GlyphLayout], dpi: tuple[float, float],
                 padding: float = DEFAULT_PADDING) -> PageGeometry:
    """Size a page around the ink bounds of layouts plus padding on every side."""
    x, y, w, h = layout_bounds(layouts, dpi)
    width = max(1, math.ceil(w + 2 * padding))
    height = max(1, math.ceil(h + 2 * padding))
    return PageGeometry(width, height, padding - x, padding - y)


def paint_background(cairo_ctx: cairo.Context, geometry: PageGeometry, background) -> None:
    if background is None:
        return
    cairo_ctx.set_source_rgb(*_safe_rgb(background))
    cairo_ctx.rectangle(0, 0, geometry.width, geometry.height)
    cairo_ctx.fill()


def draw_text(cairo_ctx: cairo.Context, layouts: list[GlyphLayout], dpi: tuple[float, float],
              geometry: PageGeometry, color=(0, 0, 0),
              text_renderer: TextRenderer | None = None) -> int:
    """Fill the glyphs of layouts, shifted onto the page.

    Returns:
        The number of glyphs drawn.
    """
    renderer = text_renderer or TextRenderer()
    sink = CairoGlyphRenderer(cairo_ctx, color)
    cairo_ctx.save()
    cairo_ctx.translate(geometry.offset_x, geometry.offset_y)
    renderer.render_layout(sink, layouts, dpi)
    cairo_ctx.restore()
    return sink.glyph_count


def layout_text(text: Text, options: LayoutOptions,
                text_renderer: TextRenderer | None = None) -> list[GlyphLayout]:
    engine = text_renderer.engine if text_renderer is not None else TextLayoutEngine()
    return engine.generate_layout(text, options)
