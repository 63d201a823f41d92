# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
PNG Output Device

Renders laid out text to a PNG image file using Cairo. The image is sized
to the ink bounds of the text plus padding, one pixel per device unit.
A background of None leaves the image transparent.
"""

import logging

import cairo

from ...core.layout import LayoutOptions, Text
from ...core.text_renderer import TextRenderer
from ..common.cairo_renderer import (
    DEFAULT_PADDING, draw_text, get_antialias_mode, layout_text, paint_background, prepare_page,
)

logger = logging.getLogger(__name__)


def render_png(text: Text, options: LayoutOptions, output_file: str,
               color=(0, 0, 0), background=(1, 1, 1), antialias: str | None = None,
               padding: float = DEFAULT_PADDING,
               text_renderer: TextRenderer | None = None) -> tuple[int, int]:
    """
    Render text to a PNG file.

    Args:
        text: Text to lay out.
        options: Layout options; dpi sets device units per inch.
        output_file: Destination path.
        color: Glyph fill (r, g, b) in 0..1.
        background: Background (r, g, b), or None for transparent.
        antialias: Name from ANTIALIAS_MAP.
        padding: Margin around the ink bounds, in pixels.
        text_renderer: Renderer whose engine and path cache to use.

    Returns:
        (width, height) of the image in pixels.
    """
    layouts = layout_text(text, options, text_renderer)
    geometry = prepare_page(layouts, options.dpi, padding)

    fmt = cairo.FORMAT_RGB24 if background is not None else cairo.FORMAT_ARGB32
    surface = cairo.ImageSurface(fmt, geometry.width, geometry.height)
    cc = cairo.Context(surface)
    cc.set_antialias(get_antialias_mode(antialias))

    paint_background(cc, geometry, background)
    count = draw_text(cc, layouts, options.dpi, geometry, color, text_renderer)

    surface.write_to_png(output_file)
    logger.info("Wrote %s (%dx%d, %d glyphs)", output_file, geometry.width, geometry.height, count)
    return geometry.width, geometry.height
