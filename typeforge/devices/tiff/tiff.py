# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
TIFF Output Device

Renders laid out text with Cairo and encodes it with Pillow. render_image()
returns the Pillow image for callers that want to compose it further;
render_tiff() writes it with the layout resolution as TIFF DPI metadata.
"""

import logging
from typing import Any

import cairo
from PIL import Image

from ...core.layout import LayoutOptions, Text
from ...core.text_renderer import TextRenderer
from ..common.cairo_renderer import (
    DEFAULT_PADDING, draw_text, get_antialias_mode, layout_text, paint_background, prepare_page,
)

logger = logging.getLogger(__name__)


def _cairo_surface_to_pil(surface: cairo.ImageSurface) -> Image.Image:
    """Convert a Cairo RGB24 ImageSurface to a PIL RGB Image.

    Uses direct buffer access (no PNG round-trip).
    """
    surface.flush()
    width = surface.get_width()
    height = surface.get_height()
    buf = surface.get_data()

    # Cairo FORMAT_RGB24 stores as BGRX (32-bit, X=unused alpha)
    img = Image.frombuffer("RGBA", (width, height), bytes(buf), "raw", "BGRA",
                           surface.get_stride(), 1)
    return img.convert("RGB")


def render_image(text: Text, options: LayoutOptions, color=(0, 0, 0), background=(1, 1, 1),
                 antialias: str | None = None, padding: float = DEFAULT_PADDING,
                 text_renderer: TextRenderer | None = None) -> Image.Image:
    """Render text to an RGB Pillow image. A None background renders on white."""
    layouts = layout_text(text, options, text_renderer)
    geometry = prepare_page(layouts, options.dpi, padding)

    surface = cairo.ImageSurface(cairo.FORMAT_RGB24, geometry.width, geometry.height)
    cc = cairo.Context(surface)
    cc.set_antialias(get_antialias_mode(antialias))

    paint_background(cc, geometry, background if background is not None else (1, 1, 1))
    draw_text(cc, layouts, options.dpi, geometry, color, text_renderer)
    return _cairo_surface_to_pil(surface)


def render_tiff(text: Text, options: LayoutOptions, output_file: str,
                color=(0, 0, 0), background=(1, 1, 1), antialias: str | None = None,
                padding: float = DEFAULT_PADDING, compression: str = "tiff_lzw",
                text_renderer: TextRenderer | None = None) -> tuple[int, int]:
    """
    Render text to a TIFF file.

    Returns:
        (width, height) of the image in pixels.
    """
    img = render_image(text, options, color, background, antialias, padding, text_renderer)

    save_kwargs: dict[str, Any] = {
        'format': 'TIFF',
        'compression': compression,
        'dpi': (float(options.dpi[0]), float(options.dpi[1])),
    }
    img.save(output_file, **save_kwargs)
    logger.info("Wrote %s (%dx%d)", output_file, img.width, img.height)
    return img.size
