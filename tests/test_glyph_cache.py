# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from fontfixtures import GID_A
from typeforge.core.glyph_cache import CachedGlyphPath, GlyphPathCache, make_cache_key
from typeforge.core.glyph_geometry import Path


def _entry():
    return CachedGlyphPath(Path(), None)


def test_key_rounds_size_and_dpi(program):
    a = make_cache_key(program, GID_A, 12.00001, (72.0, 72.0))
    b = make_cache_key(program, GID_A, 12.0, (72.00004, 72.0))
    assert a == b
    assert make_cache_key(program, GID_A, 12.0, (72, 72), cubic=True) != b


def test_lru_eviction():
    cache = GlyphPathCache(max_entries=2)
    keys = [make_cache_key(object(), i, 10.0, (72, 72)) for i in range(3)]
    cache.put(keys[0], _entry())
    cache.put(keys[1], _entry())
    assert cache.get(keys[0]) is not None
    cache.put(keys[2], _entry())
    assert len(cache) == 2
    assert cache.get(keys[1]) is None
    assert cache.get(keys[0]) is not None


def test_stats_and_clear():
    cache = GlyphPathCache()
    key = make_cache_key(object(), 1, 10.0, (72, 72))
    assert cache.get(key) is None
    cache.put(key, _entry())
    cache.get(key)
    stats = cache.stats()
    assert stats == {'entries': 1, 'max_entries': GlyphPathCache.DEFAULT_MAX_ENTRIES,
                     'hits': 1, 'misses': 1, 'hit_rate': 0.5}
    cache.clear()
    assert len(cache) == 0
    assert cache.stats()['hits'] == 0


def test_glyph_path_uses_cache(program):
    cache = GlyphPathCache()
    glyph = program.glyph_by_index(GID_A)
    first = glyph.path(24.0, (96.0, 96.0), cache=cache)
    second = glyph.path(24.0, (96.0, 96.0), cache=cache)
    assert first is second
    assert glyph.path(24.0, (96.0, 96.0)) == first
