# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TypeForge command line.

Lays out a line (or paragraph) of text in a TrueType font and renders it
to PNG, SVG or TIFF, or prints its measurements as JSON.

Examples:
    typeforge "Hello, world" -f DejaVuSans.ttf -s 36 -o hello.png
    typeforge "Wrapped text here" --family "DejaVu Sans" -w 200 --halign center -d svg
    typeforge "Measure me" -f font.ttf --measure
"""

from __future__ import annotations

import json
import logging
import sys

from .cli_args import build_argument_parser, get_output_file
from .core.error import FontError
from .core.font_collection import FontCollection, FontFamily
from .core.glyph_cache import GlyphPathCache
from .core.layout import HorizontalAlignment, LayoutOptions, VerticalAlignment
from .core.system_font_cache import SystemFontCache, SystemFontCollection
from .core.text_measurer import TextMeasurer
from .core.text_renderer import TextRenderer
from .devices.common.cairo_utils import parse_color

logger = logging.getLogger(__name__)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


def _unescape(text: str) -> str:
    """Expand \\n, \\t, \\r and \\\\ typed on the command line."""
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in _ESCAPES:
            out.append(_ESCAPES[text[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _load_family(args) -> FontFamily:
    if args.font:
        return FontCollection().install(args.font, args.face_index)
    return SystemFontCollection().find(args.family)


def _render(args, text: str, options: LayoutOptions, renderer: TextRenderer,
            color, background) -> str:
    output_file = get_output_file(args.outputfile, args.device)
    if args.device == "png":
        from .devices.png.png import render_png
        size = render_png(text, options, output_file, color, background, args.antialias,
                          text_renderer=renderer)
    elif args.device == "svg":
        from .devices.svg.svg import render_svg
        size = render_svg(text, options, output_file, color, background, text_renderer=renderer)
    else:
        from .devices.tiff.tiff import render_tiff
        size = render_tiff(text, options, output_file, color, background, args.antialias,
                           text_renderer=renderer)
    print(f"Wrote {output_file} ({size[0]:g}x{size[1]:g})")
    return output_file


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the TypeForge command line.

    Returns:
        Exit code: 0 for success, 1 for error
    """
    parser = build_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.rebuild_font_cache:
        cache = SystemFontCache.get_instance()
        cache.rebuild()
        print(f"System font cache rebuilt: {len(cache.families())} families, "
              f"{cache.font_count()} faces")
        return 0

    if args.list_fonts:
        for name in SystemFontCache.get_instance().families():
            print(name)
        return 0

    if args.text is None:
        parser.error("TEXT is required unless --list-fonts or --rebuild-font-cache is given")
    if not args.font and not args.family:
        parser.error("one of -f/--font or --family is required")

    try:
        color = parse_color(args.color) or (0.0, 0.0, 0.0)
        background = parse_color(args.background)
    except ValueError as e:
        parser.error(str(e))

    text = _unescape(args.text)

    try:
        family = _load_family(args)
        font = family.create_font(args.size, args.style)
        logger.debug("Using %s at %gpt", font.program.description.full_name, args.size)

        options = LayoutOptions(
            font=font,
            dpi=(args.resolution, args.resolution),
            wrapping_width=args.wrap,
            horizontal_alignment=HorizontalAlignment(args.halign),
            vertical_alignment=VerticalAlignment(args.valign),
            apply_kerning=not args.no_kerning,
            tab_width=args.tab_width,
        )
        renderer = TextRenderer(cache=GlyphPathCache(args.cache_size))

        if args.measure:
            measurer = TextMeasurer(renderer.engine)
            width, height = measurer.measure(text, options)
            bounds = measurer.measure_bounds(text, options)
            print(json.dumps({
                "font": font.program.description.full_name,
                "point_size": args.size,
                "dpi": args.resolution,
                "size": {"width": width, "height": height},
                "bounds": {"x": bounds[0], "y": bounds[1], "width": bounds[2], "height": bounds[3]},
            }, indent=2))
        else:
            _render(args, text, options, renderer, color, background)

        if args.cache_stats:
            stats = renderer.cache.stats()
            print(f"Glyph path cache: {stats['hits']} hits, {stats['misses']} misses, "
                  f"{stats['hit_rate']:.1%} hit rate, {stats['entries']} entries")
    except (FontError, OSError) as e:
        print(f"TypeForge Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
