# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
Glyph Path Cache

LRU cache of flattened glyph paths. Converting an outline to path commands
is repeated for every occurrence of a glyph in a text run; caching the
origin-relative path lets the renderer translate a stored path instead of
walking the contours again.

Architecture:
- GlyphCacheKey: font identity, glyph index, point size, resolution, curve mode
- GlyphPathCache: LRU path cache with configurable size limit

Cache Key Design:
- font_id: id() of the FontProgram - a program is immutable and the cache
  entry holds a reference to it, so the id cannot be reused while cached
- point_size and dpi are rounded to 3 decimals so float noise from unit
  conversions does not split entries
- Translation is excluded: the same glyph at different positions shares
  one entry
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any

from .glyph_geometry import Path


@dataclass(frozen=True)
class GlyphCacheKey:
    """Unique identifier for a cached glyph path.

    Frozen dataclass for automatic __hash__ and __eq__, so it can be used
    as a dictionary key.
    """
    font_id: int           # id() of the FontProgram
    glyph_index: int
    point_size: float      # rounded to 3 decimals
    dpi: tuple             # (x, y) rounded to 3 decimals
    cubic: bool            # quadratics degree-elevated to cubics


@dataclass
class CachedGlyphPath:
    """Origin-relative device path of a glyph.

    Keeps a reference to the font program so the id() in the key stays
    unique for the entry's lifetime.
    """
    path: Path
    font: Any


class GlyphPathCache:
    """LRU cache for flattened glyph paths.

    Uses OrderedDict for O(1) LRU operations. When a glyph is accessed,
    it moves to the end (most recently used). When capacity is exceeded,
    the first item (least recently used) is evicted.

    Thread Safety: This implementation is NOT thread-safe. Share one cache
    per rendering thread.
    """
    DEFAULT_MAX_ENTRIES = 2048

    def __init__(self, max_entries: int | None = None) -> None:
        """Initialize glyph cache with optional size limit.

        Args:
            max_entries: Maximum cached paths before LRU eviction.
                        Defaults to DEFAULT_MAX_ENTRIES (2048).
        """
        self._cache: OrderedDict[GlyphCacheKey, CachedGlyphPath] = OrderedDict()
        self._max_entries = max_entries or self.DEFAULT_MAX_ENTRIES
        self._hits = 0
        self._misses = 0

    def get(self, key: GlyphCacheKey) -> CachedGlyphPath | None:
        """Retrieve cached path, updating LRU order.

        Args:
            key: Cache key identifying the glyph

        Returns:
            CachedGlyphPath if found, None otherwise
        """
        if key in self._cache:
            self._hits += 1
            self._cache.move_to_end(key)  # Update LRU position
            return self._cache[key]
        self._misses += 1
        return None

    def put(self, key: GlyphCacheKey, entry: CachedGlyphPath) -> None:
        """Cache a path with LRU eviction.

        If the key already exists, updates value and LRU position.
        If cache is full, evicts least recently used entry.
        """
        if key in self._cache:
            self._cache.move_to_end(key)
            self._cache[key] = entry
        else:
            if len(self._cache) >= self._max_entries:
                self._cache.popitem(last=False)  # Evict oldest (first) item
            self._cache[key] = entry

    def clear(self) -> None:
        """Clear entire cache and reset statistics."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> dict:
        """Return cache statistics for debugging/profiling.

        Returns:
            Dictionary with entries count, max_entries, hits, misses, and hit_rate
        """
        total = self._hits + self._misses
        return {
            'entries': len(self._cache),
            'max_entries': self._max_entries,
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': self._hits / total if total > 0 else 0.0
        }

    def __len__(self) -> int:
        """Return number of cached entries."""
        return len(self._cache)


def make_cache_key(font: Any, glyph_index: int, point_size: float,
                   dpi: tuple[float, float], cubic: bool = False) -> GlyphCacheKey:
    """Create cache key from font, glyph, size and resolution.

    Args:
        font: FontProgram the glyph belongs to
        glyph_index: Glyph index within the font
        point_size: Requested size in points
        dpi: (x, y) resolution
        cubic: Whether the path uses cubic segments

    Returns:
        GlyphCacheKey suitable for cache lookup
    """
    return GlyphCacheKey(
        id(font),
        glyph_index,
        round(point_size, 3),
        (round(dpi[0], 3), round(dpi[1], 3)),
        cubic,
    )
