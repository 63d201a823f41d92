# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from fontfixtures import GID_A, GID_B, GID_O
from typeforge.core.glyph_cache import GlyphPathCache
from typeforge.core.text_renderer import PathRecorder, TextRenderer


def test_render_sequence(options):
    sink = PathRecorder()
    layouts = TextRenderer().render_text(sink, 'AB', options)
    assert len(layouts) == 2
    names = sink.names()
    assert names[0] == 'begin_text'
    assert names[-1] == 'end_text'
    assert names.count('begin_glyph') == 2
    assert names.count('end_glyph') == 2
    assert [p.glyph_index for p in sink.glyphs] == [GID_A, GID_B]


def test_whitespace_is_not_rendered(options):
    sink = PathRecorder()
    TextRenderer().render_text(sink, 'A \tA\n', options)
    assert [p.glyph_index for p in sink.glyphs] == [GID_A, GID_A]


def test_text_bounds_passed_to_begin_text(options):
    sink = PathRecorder()
    TextRenderer().render_text(sink, 'AB', options)
    assert sink.commands[0][1] == pytest.approx((0.0, 7.2, 79.2, 50.4))


def test_figures_are_positioned(options):
    sink = PathRecorder()
    TextRenderer().render_text(sink, 'AB', options)
    a_figure, b_figure = sink.figures()
    assert a_figure[0] == ('move_to', pytest.approx((0.0, 57.6)))
    # B's first point (100, 0) with the pen at 0.5in
    assert b_figure[0] == ('move_to', pytest.approx((36.0 + 7.2, 57.6)))
    assert len(b_figure) == 4


def test_quadratic_figures(options):
    sink = PathRecorder()
    TextRenderer().render_text(sink, 'O', options)
    (figure,) = sink.figures()
    assert [cmd[0] for cmd in figure] == ['move_to'] + ['quadratic_bezier_to'] * 4
    assert sink.glyphs[0].glyph_index == GID_O


def test_cache_reuses_paths(options):
    cache = GlyphPathCache()
    renderer = TextRenderer(cache=cache)
    renderer.render_text(PathRecorder(), 'AAB', options)
    stats = cache.stats()
    assert stats['entries'] == 2
    assert stats['misses'] == 2
    assert stats['hits'] == 1


def test_render_layout_with_precomputed_layout(options):
    renderer = TextRenderer()
    layouts = renderer.engine.generate_layout('AB', options)
    first = PathRecorder()
    second = PathRecorder()
    renderer.render_layout(first, layouts, options.dpi)
    renderer.render_text(second, 'AB', options)
    assert first.commands == second.commands
