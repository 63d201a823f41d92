# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Text rendering driver.

Lays text out and streams every visible glyph into a GlyphRenderer sink.
Glyph paths go through a GlyphPathCache so a glyph repeated in the text is
flattened once per size and resolution.
"""

from __future__ import annotations

import logging

from .glyph_cache import GlyphPathCache
from .glyph_renderer import GlyphRenderer, GlyphRendererParameters, PathRecorder
from .layout import GlyphLayout, LayoutOptions, Text, TextLayoutEngine
from .text_measurer import layout_bounds

logger = logging.getLogger(__name__)

__all__ = [
    'GlyphRenderer', 'GlyphRendererParameters', 'PathRecorder', 'TextRenderer',
]


class TextRenderer:
    """Feeds laid out glyphs to a sink."""

    def __init__(self, engine: TextLayoutEngine | None = None,
                 cache: GlyphPathCache | None = None) -> None:
        self.engine = engine or TextLayoutEngine()
        self.cache = cache if cache is not None else GlyphPathCache()

    def render_text(self, sink: GlyphRenderer, text: Text, options: LayoutOptions) -> list[GlyphLayout]:
        """Render text into sink.

        Returns:
            The layout that was rendered.
        """
        layouts = self.engine.generate_layout(text, options)
        self.render_layout(sink, layouts, options.dpi)
        return layouts

    def render_layout(self, sink: GlyphRenderer, layouts: list[GlyphLayout],
                      dpi: tuple[float, float]) -> None:
        sink.begin_text(layout_bounds(layouts, dpi))
        rendered = 0
        for record in layouts:
            if record.is_whitespace:
                continue
            record.glyph.render_to(sink, record.location, dpi, record.line_height, self.cache)
            rendered += 1
        sink.end_text()
        logger.debug("Rendered %d glyphs, path cache %s", rendered, self.cache.stats())
