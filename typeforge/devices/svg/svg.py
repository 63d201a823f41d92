# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
SVG Output Device

Renders laid out text to an SVG file using Cairo's SVGSurface. Glyphs are
emitted as filled outline paths. The document is sized in points; device
units are scaled by 72 / dpi so the drawing keeps its physical size.
"""

import logging

import cairo

from ...core.layout import LayoutOptions, Text
from ...core.text_renderer import TextRenderer
from ..common.cairo_renderer import DEFAULT_PADDING, draw_text, layout_text, paint_background, prepare_page

logger = logging.getLogger(__name__)


def render_svg(text: Text, options: LayoutOptions, output_file, color=(0, 0, 0),
               background=(1, 1, 1), padding: float = DEFAULT_PADDING,
               text_renderer: TextRenderer | None = None) -> tuple[float, float]:
    """
    Render text to an SVG file (a path or a writable binary stream).

    Returns:
        (width, height) of the document in points.
    """
    dpi_x, dpi_y = options.dpi
    scale_x = 72.0 / dpi_x
    scale_y = 72.0 / dpi_y

    layouts = layout_text(text, options, text_renderer)
    geometry = prepare_page(layouts, options.dpi, padding)
    width_svg = geometry.width * scale_x
    height_svg = geometry.height * scale_y

    surface = cairo.SVGSurface(output_file, width_svg, height_svg)
    surface.set_document_unit(cairo.SVG_UNIT_PT)
    cc = cairo.Context(surface)

    # Apply scale matrix (at 72 DPI this is identity)
    cc.set_matrix(cairo.Matrix(scale_x, 0, 0, scale_y, 0, 0))

    paint_background(cc, geometry, background)
    count = draw_text(cc, layouts, options.dpi, geometry, color, text_renderer)

    # Finish Cairo surface to flush SVG output
    surface.finish()
    logger.info("Wrote SVG %.1fx%.1fpt, %d glyphs", width_svg, height_svg, count)
    return width_svg, height_svg
