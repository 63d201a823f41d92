# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
CLI argument parsing for TypeForge.

Handles command-line argument definition, parsing and output file naming.
"""

from __future__ import annotations

import argparse
import os
from importlib import metadata

from .core.font_program import FontStyle
from .core.glyph_cache import GlyphPathCache
from .core.layout import DEFAULT_DPI, DEFAULT_TAB_WIDTH, HorizontalAlignment, VerticalAlignment

AVAILABLE_DEVICES = ["png", "svg", "tiff"]

_DEVICE_EXTENSIONS = {"png": ".png", "svg": ".svg", "tiff": ".tif"}

DEFAULT_POINT_SIZE = 24.0


def _parse_style(value: str) -> FontStyle:
    try:
        return FontStyle.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: '{value}'")
    return number


def get_output_file(outputfile: str | None, device: str) -> str:
    """
    Derive the output file name from the -o argument and the device.

    A name without an extension gets the device's extension; no name at all
    gives 'text' plus the extension.
    """
    extension = _DEVICE_EXTENSIONS[device]
    if not outputfile:
        return "text" + extension
    if not os.path.splitext(outputfile)[1]:
        return outputfile + extension
    return outputfile


def _get_version() -> str:
    """Installed distribution version."""
    try:
        return metadata.version("typeforge")
    except metadata.PackageNotFoundError:
        return "unknown"


def build_argument_parser(available_devices: list[str] | None = None) -> argparse.ArgumentParser:
    """
    Create and configure the TypeForge argument parser.

    Args:
        available_devices: Output device names (default AVAILABLE_DEVICES).

    Returns:
        Configured ArgumentParser instance.
    """
    devices = available_devices or AVAILABLE_DEVICES
    parser = argparse.ArgumentParser(
        prog="typeforge",
        description="TypeForge - TrueType outline and text layout engine",
        epilog="Use \\n in TEXT for a line break and \\t for a tab.",
    )
    parser.add_argument(
        "-V", "--version", action="version",
        version=f"TypeForge {_get_version()}"
    )
    parser.add_argument("text", nargs="?", help="Text to lay out and render")

    font = parser.add_mutually_exclusive_group()
    font.add_argument("-f", "--font", help="Path to a .ttf or .ttc font file")
    font.add_argument("--family", help="Name of an installed system font family")
    parser.add_argument(
        "--face-index", type=int, default=0,
        help="Face to use from a .ttc collection (default: 0)"
    )
    parser.add_argument(
        "--style", type=_parse_style, default=FontStyle.REGULAR,
        help="Style within the family: regular, bold, italic, bolditalic (default: regular)"
    )
    parser.add_argument(
        "-s", "--size", type=_positive_float, default=DEFAULT_POINT_SIZE,
        help=f"Point size (default: {DEFAULT_POINT_SIZE:g})"
    )
    parser.add_argument(
        "-r", "--resolution", type=_positive_float, default=DEFAULT_DPI,
        help=f"Device resolution in DPI (default: {DEFAULT_DPI:g})"
    )
    parser.add_argument(
        "-w", "--wrap", type=float, default=0.0,
        help="Wrapping width in device pixels; 0 disables wrapping (default: 0)"
    )
    parser.add_argument(
        "--halign", choices=[a.value for a in HorizontalAlignment], default="left",
        help="Horizontal alignment (default: left)"
    )
    parser.add_argument(
        "--valign", choices=[a.value for a in VerticalAlignment], default="top",
        help="Vertical alignment (default: top)"
    )
    parser.add_argument(
        "--no-kerning", action="store_true",
        help="Disable pair kerning from the font's kern table"
    )
    parser.add_argument(
        "--tab-width", type=_positive_float, default=DEFAULT_TAB_WIDTH,
        help=f"Tab stop width in multiples of the tab glyph's advance (default: {DEFAULT_TAB_WIDTH:g})"
    )
    parser.add_argument(
        "-d", "--device", choices=devices, default=devices[0],
        help=f'Specify output device ({", ".join(devices)}; default: {devices[0]})',
    )
    parser.add_argument(
        "-o", "--output", dest="outputfile", help="Specify output filename"
    )
    parser.add_argument(
        "--color", default="black",
        help="Text color: name, #rrggbb or r,g,b in 0..1 (default: black)"
    )
    parser.add_argument(
        "--background", default="white",
        help="Background color, or 'none' for transparent PNG output (default: white)"
    )
    parser.add_argument(
        "--antialias",
        choices=["none", "fast", "good", "best", "gray", "subpixel"],
        help="Set anti-aliasing mode for Cairo rendering (default: gray)"
    )
    parser.add_argument(
        "--cache-size", type=int, default=GlyphPathCache.DEFAULT_MAX_ENTRIES,
        help=f"Glyph path cache entries (default: {GlyphPathCache.DEFAULT_MAX_ENTRIES})"
    )
    parser.add_argument(
        "--measure", action="store_true",
        help="Print size and bounds of the text as JSON instead of rendering"
    )
    parser.add_argument(
        "--list-fonts", action="store_true",
        help="List installed system font families and exit"
    )
    parser.add_argument(
        "--rebuild-font-cache", action="store_true",
        help="Force rebuild of the system font discovery cache and exit"
    )
    parser.add_argument(
        "--cache-stats", action="store_true",
        help="Print glyph path cache statistics after rendering"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose output"
    )

    return parser
