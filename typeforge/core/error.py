# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Font error taxonomy.

Every error raised while reading font data derives from FontError so callers
can skip a bad font file with a single except clause.

    FontError
    ├── MalformedTable            structurally invalid lengths/counts
    │   ├── InvalidFontTable      a table whose derived sizes are impossible
    │   ├── UnexpectedEndOfFile   read past the end of a table or file
    │   ├── InvalidGlyphData      glyph program that violates its invariants
    │   └── MissingFontTable      a required table is absent
    ├── UnsupportedCmapFormat     no format 4 character map
    ├── UnsupportedFontFormat     CFF outlines or an unknown sfnt version
    ├── CompositeCycleError       composite glyph that references itself
    ├── GlyphNotFound             glyph index outside the font
    └── FamilyNotFound            no installed family with that name
"""

from __future__ import annotations


class FontError(Exception):
    """Base class for all font loading and decoding errors."""
    pass


class MalformedTable(FontError):
    """A table is structurally invalid (bad lengths or counts)."""

    def __init__(self, message: str, tag: str | None = None) -> None:
        if tag:
            message = f"'{tag}' table: {message}"
        super().__init__(message)
        self.tag = tag


class InvalidFontTable(MalformedTable):
    """A table's declared sizes cannot describe valid data."""
    pass


class UnexpectedEndOfFile(MalformedTable):
    """A read ran past the end of the available bytes."""

    def __init__(self, wanted: int, available: int, tag: str | None = None) -> None:
        super().__init__(
            f"unexpected end of data: wanted {wanted} bytes, {available} available", tag)
        self.wanted = wanted
        self.available = available


class InvalidGlyphData(MalformedTable):
    """A glyph program violates an outline invariant."""

    def __init__(self, message: str, glyph_index: int | None = None) -> None:
        if glyph_index is not None:
            message = f"glyph {glyph_index}: {message}"
        super().__init__(message, "glyf")
        self.glyph_index = glyph_index


class MissingFontTable(MalformedTable):
    """A table required to load the font is not present."""

    def __init__(self, tag: str) -> None:
        super().__init__("required table is missing", tag)


class UnsupportedCmapFormat(FontError):
    """The font has no character map subtable in a supported format."""

    def __init__(self, formats: list[int] | tuple[int, ...] = ()) -> None:
        found = ", ".join(str(f) for f in formats) or "none"
        super().__init__(f"no format 4 cmap subtable (found formats: {found})")
        self.formats = tuple(formats)


class UnsupportedFontFormat(FontError):
    """The file is not a TrueType-outline sfnt."""
    pass


class CompositeCycleError(FontError):
    """A composite glyph references itself directly or through its children."""

    def __init__(self, glyph_index: int, chain: list[int] | tuple[int, ...]) -> None:
        path = " -> ".join(str(g) for g in (*chain, glyph_index))
        super().__init__(f"composite glyph cycle: {path}")
        self.glyph_index = glyph_index
        self.chain = tuple(chain)


class GlyphNotFound(FontError, KeyError):
    """A glyph index is outside the font's glyph range."""

    def __init__(self, glyph_index: int, glyph_count: int) -> None:
        super().__init__(f"glyph index {glyph_index} out of range (font has {glyph_count} glyphs)")
        self.glyph_index = glyph_index
        self.glyph_count = glyph_count

    def __str__(self) -> str:
        return self.args[0]


class FamilyNotFound(FontError, KeyError):
    """No font family with the requested name is installed."""

    def __init__(self, family_name: str) -> None:
        super().__init__(f"the font family '{family_name}' could not be found")
        self.family_name = family_name

    def __str__(self) -> str:
        return self.args[0]
