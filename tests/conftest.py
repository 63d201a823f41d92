# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from fontfixtures import standard_font
from typeforge.core.font_program import FontProgram
from typeforge.core.layout import Font, LayoutOptions


@pytest.fixture
def font_bytes():
    return standard_font().build()


@pytest.fixture
def program(font_bytes):
    return FontProgram.from_bytes(font_bytes)


@pytest.fixture
def bold_program():
    return FontProgram.from_bytes(
        standard_font(subfamily='Bold', fs_selection=0x20, mac_style=1).build())


@pytest.fixture
def font(program):
    # 72pt at 72dpi: one font unit is 1/1000 inch and one device unit is 1/72 inch
    return Font(program, 72.0)


@pytest.fixture
def options(font):
    return LayoutOptions(font=font)


@pytest.fixture
def font_file(tmp_path, font_bytes):
    path = tmp_path / 'TestSans-Regular.ttf'
    path.write_bytes(font_bytes)
    return str(path)
