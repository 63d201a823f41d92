# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Font families and collections.

A FontCollection groups installed FontPrograms by family name (matched
case-insensitively). A FontFamily hands out Fonts, a program at a point
size, picking the instance of the requested style.
"""

from __future__ import annotations

import logging
import threading
from typing import BinaryIO, Iterator, Union

from .error import FamilyNotFound
from .font_program import FontDescription, FontProgram, FontStyle
from .layout import Font

logger = logging.getLogger(__name__)

FontSource = Union[str, BinaryIO, FontProgram]


class FontFamily:
    """A named family inside a collection."""

    def __init__(self, name: str, collection: FontCollection) -> None:
        self.name = name
        self._collection = collection

    def __repr__(self) -> str:
        return f"<FontFamily {self.name!r}>"

    def __eq__(self, other) -> bool:
        if not isinstance(other, FontFamily):
            return NotImplemented
        return self.name.lower() == other.name.lower() and self._collection is other._collection

    def __hash__(self) -> int:
        return hash(self.name.lower())

    @property
    def available_styles(self) -> list[FontStyle]:
        return [program.description.style for program in self._collection.instances(self.name)]

    def instance(self, style: FontStyle = FontStyle.REGULAR) -> FontProgram:
        """Program of the given style, or the family's first instance."""
        instances = self._collection.instances(self.name)
        if not instances:
            raise FamilyNotFound(self.name)
        for program in instances:
            if program.description.style is style:
                return program
        logger.debug("Family %r has no %s style, using %s",
                     self.name, style.name, instances[0].description.style.name)
        return instances[0]

    def create_font(self, point_size: float, style: FontStyle = FontStyle.REGULAR) -> Font:
        return Font(self.instance(style), point_size)


class FontCollection:
    """Registry of installed fonts keyed by family name.

    Mutation and lookup are serialised by a lock, so a collection can be
    shared between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._instances: dict[str, list[FontProgram]] = {}
        self._families: dict[str, FontFamily] = {}

    def install(self, source: FontSource, font_index: int = 0) -> FontFamily:
        """Install a font from a path, a binary stream or a parsed program.

        Raises:
            FontError: The font could not be parsed.
            OSError: The file could not be read.
        """
        if isinstance(source, FontProgram):
            program = source
        elif isinstance(source, str):
            program = FontProgram.load(source, font_index)
        else:
            program = FontProgram.from_stream(source, font_index)
        return self.install_program(program)

    def install_program(self, program: FontProgram) -> FontFamily:
        description = program.description
        if not description.family_name:
            raise ValueError("font has no family name")
        key = description.family_name.lower()
        with self._lock:
            family = self._families.get(key)
            if family is None:
                family = FontFamily(description.family_name, self)
                self._families[key] = family
            self._instances.setdefault(key, []).append(program)
        logger.debug("Installed %s (%s) into family %r",
                     description.full_name, description.style.name, family.name)
        return family

    def find(self, name: str) -> FontFamily:
        """
        Raises:
            FamilyNotFound: No family of that name is installed.
        """
        family = self.try_find(name)
        if family is None:
            raise FamilyNotFound(name)
        return family

    def try_find(self, name: str) -> FontFamily | None:
        with self._lock:
            return self._families.get(name.lower())

    def instances(self, name: str) -> list[FontProgram]:
        with self._lock:
            return list(self._instances.get(name.lower(), ()))

    def descriptions(self, name: str) -> list[FontDescription]:
        return [program.description for program in self.instances(name)]

    @property
    def families(self) -> list[FontFamily]:
        with self._lock:
            return list(self._families.values())

    def __iter__(self) -> Iterator[FontFamily]:
        return iter(self.families)

    def __contains__(self, name: str) -> bool:
        return self.try_find(name) is not None

    @property
    def family_count(self) -> int:
        with self._lock:
            return len(self._families)

    @property
    def instance_count(self) -> int:
        with self._lock:
            return sum(len(programs) for programs in self._instances.values())

    def clear(self) -> None:
        with self._lock:
            self._instances.clear()
            self._families.clear()
