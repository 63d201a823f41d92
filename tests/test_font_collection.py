# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import io

import pytest

from fontfixtures import standard_font, without_table
from typeforge.core.error import FamilyNotFound, FontError
from typeforge.core.font_collection import FontCollection
from typeforge.core.font_program import FontProgram, FontStyle


@pytest.fixture
def collection(program, bold_program):
    fonts = FontCollection()
    fonts.install(program)
    fonts.install(bold_program)
    return fonts


def test_install_groups_by_family(collection):
    assert collection.family_count == 1
    assert collection.instance_count == 2
    family = collection.find('Test Sans')
    assert family.name == 'Test Sans'
    assert sorted(s.value for s in family.available_styles) == [0, 1]


def test_lookup_is_case_insensitive(collection):
    assert collection.find('test sans') == collection.find('TEST SANS')
    assert 'test SANS' in collection


def test_unknown_family(collection):
    assert collection.try_find('Nope') is None
    assert 'Nope' not in collection
    with pytest.raises(FamilyNotFound) as exc:
        collection.find('Nope')
    assert isinstance(exc.value, KeyError)
    assert 'Nope' in str(exc.value)


def test_instance_by_style(collection, bold_program):
    family = collection.find('Test Sans')
    assert family.instance(FontStyle.BOLD) is bold_program
    assert family.instance().description.style is FontStyle.REGULAR


def test_missing_style_falls_back_to_first(collection, program):
    assert collection.find('Test Sans').instance(FontStyle.ITALIC) is program


def test_create_font(collection, bold_program):
    font = collection.find('Test Sans').create_font(18.0, FontStyle.BOLD)
    assert font.program is bold_program
    assert font.point_size == 18.0


def test_descriptions(collection):
    names = [d.subfamily_name for d in collection.descriptions('Test Sans')]
    assert names == ['Regular', 'Bold']


def test_install_from_path_and_stream(font_file, font_bytes):
    fonts = FontCollection()
    fonts.install(font_file)
    fonts.install(io.BytesIO(standard_font(family='Other Sans').build()))
    assert sorted(f.name for f in fonts) == ['Other Sans', 'Test Sans']


def test_install_bad_file(tmp_path):
    path = tmp_path / 'broken.ttf'
    path.write_bytes(b'not a font at all')
    with pytest.raises(FontError):
        FontCollection().install(str(path))
    with pytest.raises(OSError):
        FontCollection().install(str(tmp_path / 'missing.ttf'))


def test_install_font_without_family_name():
    data = without_table(standard_font().build(), 'name')
    with pytest.raises(ValueError):
        FontCollection().install(FontProgram.from_bytes(data))


def test_clear(collection):
    collection.clear()
    assert collection.family_count == 0
    assert collection.families == []


def test_family_identity(collection):
    other = FontCollection()
    other.install(collection.find('Test Sans').instance())
    assert collection.find('Test Sans') != other.find('Test Sans')
    assert hash(collection.find('Test Sans')) == hash(other.find('test sans'))
