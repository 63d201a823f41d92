# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import json

import pytest

from fontfixtures import standard_font
from typeforge import cli
from typeforge.cli_args import build_argument_parser, get_output_file
from typeforge.core.font_program import FontStyle
from typeforge.core.system_font_cache import SystemFontCache


@pytest.fixture
def system_fonts(tmp_path, monkeypatch):
    root = tmp_path / 'fonts'
    root.mkdir()
    (root / 'TestSans.ttf').write_bytes(standard_font().build())
    cache = SystemFontCache([str(root)], str(tmp_path / 'fonts.json'))
    monkeypatch.setattr(SystemFontCache, 'get_instance', classmethod(lambda cls: cache))
    return cache


def test_unescape():
    assert cli._unescape(r'A\nB\tC\\n') == 'A\nB\tC\\n'
    assert cli._unescape('trailing\\') == 'trailing\\'


@pytest.mark.parametrize('outputfile, device, expected', [
    (None, 'png', 'text.png'),
    ('out', 'svg', 'out.svg'),
    ('out.tiff', 'tiff', 'out.tiff'),
    ('dir/name', 'tiff', 'dir/name.tif'),
])
def test_get_output_file(outputfile, device, expected):
    assert get_output_file(outputfile, device) == expected


def test_parser_defaults():
    args = build_argument_parser().parse_args(['hello', '-f', 'x.ttf'])
    assert args.size == 24.0
    assert args.resolution == 72.0
    assert args.style is FontStyle.REGULAR
    assert args.device == 'png'
    assert args.halign == 'left'
    assert not args.no_kerning


def test_parser_style_and_validation(capsys):
    parser = build_argument_parser()
    assert parser.parse_args(['x', '--style', 'Bold Italic']).style is FontStyle.BOLD_ITALIC
    with pytest.raises(SystemExit):
        parser.parse_args(['x', '--style', 'heavy'])
    with pytest.raises(SystemExit):
        parser.parse_args(['x', '-s', '-3'])
    with pytest.raises(SystemExit):
        parser.parse_args(['x', '-f', 'a.ttf', '--family', 'Foo'])


def test_measure(font_file, capsys):
    assert cli.main(['AB', '-f', font_file, '-s', '72', '--measure']) == 0
    result = json.loads(capsys.readouterr().out)
    assert result['font'] == 'Test Sans'
    assert result['point_size'] == 72.0
    assert result['size']['width'] == pytest.approx(1.2 * 72)
    assert result['size']['height'] == pytest.approx(72.0)
    assert result['bounds']['width'] == pytest.approx(79.2)


def test_measure_escapes_and_options(font_file, capsys):
    assert cli.main(['A\\nA', '-f', font_file, '-s', '72', '-r', '144', '--no-kerning',
                     '--measure']) == 0
    result = json.loads(capsys.readouterr().out)
    assert result['size']['height'] == pytest.approx(288.0)


def test_cache_stats(font_file, capsys):
    assert cli.main(['AAA', '-f', font_file, '--measure', '--cache-stats']) == 0
    assert 'Glyph path cache:' in capsys.readouterr().out


def test_missing_font_file(tmp_path, capsys):
    assert cli.main(['AB', '-f', str(tmp_path / 'missing.ttf'), '--measure']) == 1
    assert 'TypeForge Error' in capsys.readouterr().err


def test_invalid_font_file(tmp_path, capsys):
    path = tmp_path / 'bad.ttf'
    path.write_bytes(b'\x00\x01\x00\x00' + bytes(8))
    assert cli.main(['AB', '-f', str(path), '--measure']) == 1
    assert 'TypeForge Error' in capsys.readouterr().err


def test_text_and_font_are_required(font_file):
    with pytest.raises(SystemExit) as exc:
        cli.main(['-f', font_file])
    assert exc.value.code == 2
    with pytest.raises(SystemExit):
        cli.main(['AB'])


def test_bad_color(font_file):
    with pytest.raises(SystemExit):
        cli.main(['AB', '-f', font_file, '--color', 'not-a-color'])


def test_list_fonts(system_fonts, capsys):
    assert cli.main(['--list-fonts']) == 0
    assert capsys.readouterr().out.split() == ['Test', 'Sans']


def test_rebuild_font_cache(system_fonts, capsys):
    assert cli.main(['--rebuild-font-cache']) == 0
    assert '1 families, 1 faces' in capsys.readouterr().out


def test_family_lookup(system_fonts, capsys):
    assert cli.main(['A', '--family', 'test sans', '--measure']) == 0
    assert json.loads(capsys.readouterr().out)['font'] == 'Test Sans'


def test_unknown_family(system_fonts, capsys):
    assert cli.main(['A', '--family', 'Nope', '--measure']) == 1
    assert "'Nope'" in capsys.readouterr().err


def test_render_png(font_file, tmp_path, capsys):
    pytest.importorskip('cairo')
    output = tmp_path / 'hello'
    assert cli.main(['AB', '-f', font_file, '-o', str(output)]) == 0
    written = tmp_path / 'hello.png'
    assert written.read_bytes()[:8] == b'\x89PNG\r\n\x1a\n'
    assert f'Wrote {written}' in capsys.readouterr().out
