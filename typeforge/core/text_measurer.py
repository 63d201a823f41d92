# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Text measurement.

All results are in device units: layout locations multiplied by the DPI of
the options used for the layout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .layout import GlyphLayout, LayoutOptions, Text, TextLayoutEngine

Rect = tuple[float, float, float, float]
EMPTY_RECT: Rect = (0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class GlyphMetric:
    """Device-space box of one laid out character."""
    code_point: int
    bounds: Rect
    is_control_character: bool


def layout_size(layouts: Sequence[GlyphLayout], dpi: tuple[float, float]) -> tuple[float, float]:
    """Size of the advance boxes of layouts.

    A record's location is on its baseline, so a line's box runs from
    location.y - line_height down to that plus the glyph height.
    """
    if not layouts:
        return (0.0, 0.0)
    left = min(g.location[0] for g in layouts)
    right = max(g.location[0] + g.width for g in layouts)
    top = min(g.location[1] - g.line_height for g in layouts)
    bottom = max(g.location[1] - g.line_height + g.height for g in layouts)
    return ((right - left) * dpi[0], (bottom - top) * dpi[1])


def layout_bounds(layouts: Sequence[GlyphLayout], dpi: tuple[float, float]) -> Rect:
    """Union of the glyph boxes, control characters excluded."""
    left = top = float('inf')
    right = bottom = float('-inf')
    has_size = False
    for g in layouts:
        if g.is_control_character:
            continue
        has_size = True
        x, y, w, h = g.bounding_box(dpi)
        left = min(left, x)
        top = min(top, y)
        right = max(right, x + w)
        bottom = max(bottom, y + h)
    if not has_size:
        return EMPTY_RECT
    return (left, top, right - left, bottom - top)


def character_bounds(layouts: Sequence[GlyphLayout],
                     dpi: tuple[float, float]) -> tuple[bool, list[GlyphMetric]]:
    metrics = [GlyphMetric(g.code_point, g.bounding_box(dpi), g.is_control_character)
               for g in layouts]
    has_size = any(not m.is_control_character for m in metrics)
    return has_size, metrics


class TextMeasurer:
    """Measures text with an explicit layout engine."""

    def __init__(self, engine: TextLayoutEngine | None = None) -> None:
        self.engine = engine or TextLayoutEngine()

    def measure(self, text: Text, options: LayoutOptions) -> tuple[float, float]:
        """(width, height) of the text's advance boxes."""
        return layout_size(self.engine.generate_layout(text, options), options.dpi)

    def measure_bounds(self, text: Text, options: LayoutOptions) -> Rect:
        """(x, y, width, height) enclosing the ink boxes of all glyphs."""
        return layout_bounds(self.engine.generate_layout(text, options), options.dpi)

    def measure_character_bounds(self, text: Text,
                                 options: LayoutOptions) -> tuple[bool, list[GlyphMetric]]:
        """Per-character boxes.

        Returns:
            (has_size, metrics): has_size is False when every record is a
            control character (or the text is empty).
        """
        return character_bounds(self.engine.generate_layout(text, options), options.dpi)
