# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shared Cairo rendering utilities."""

from __future__ import annotations

_NAMED_COLORS = {
    "black": (0.0, 0.0, 0.0),
    "white": (1.0, 1.0, 1.0),
    "red": (1.0, 0.0, 0.0),
    "green": (0.0, 0.5, 0.0),
    "lime": (0.0, 1.0, 0.0),
    "blue": (0.0, 0.0, 1.0),
    "yellow": (1.0, 1.0, 0.0),
    "cyan": (0.0, 1.0, 1.0),
    "magenta": (1.0, 0.0, 1.0),
    "gray": (0.5, 0.5, 0.5),
    "grey": (0.5, 0.5, 0.5),
}

TRANSPARENT = ("none", "transparent")


def _safe_rgb(color):
    """Normalize a color sequence to an (r, g, b) tuple, defaulting to black."""
    if not color:
        return (0, 0, 0)
    if len(color) >= 3:
        return (color[0], color[1], color[2])
    if len(color) == 1:
        return (color[0], color[0], color[0])
    return (0, 0, 0)


def parse_color(value: str | None) -> tuple[float, float, float] | None:
    """Parse a color into (r, g, b) components in 0..1.

    Accepts '#rgb', '#rrggbb', a few color names, or comma separated
    components ('0.2,0.4,1' or a single gray level). 'none' and
    'transparent' give None.

    Raises:
        ValueError: The value is not a color.
    """
    if value is None:
        return None
    text = value.strip().lower()
    if text in TRANSPARENT:
        return None
    if text in _NAMED_COLORS:
        return _NAMED_COLORS[text]
    if text.startswith("#"):
        digits = text[1:]
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        if len(digits) != 6:
            raise ValueError(f"bad hex color '{value}'")
        try:
            return tuple(int(digits[i:i + 2], 16) / 255.0 for i in (0, 2, 4))
        except ValueError:
            raise ValueError(f"bad hex color '{value}'") from None
    try:
        components = [float(part) for part in text.split(",")]
    except ValueError:
        raise ValueError(f"unknown color '{value}'") from None
    if len(components) not in (1, 3) or not all(0.0 <= c <= 1.0 for c in components):
        raise ValueError(f"color components must be 1 or 3 values in 0..1: '{value}'")
    return _safe_rgb(components)
