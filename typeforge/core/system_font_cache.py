# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

"""
System font cache - scans platform font directories for installed TrueType
fonts, extracts family and style names, and persists the mapping in a JSON
cache file.

Supported font formats:
  .ttf  - TrueType (name, head and OS/2 tables)
  .ttc  - TrueType collection (every face)

Cache layout:
  {"version": 1,
   "dir_mtimes": {dir: mtime},
   "fonts": {family_lower: {"family": name, "faces": {style: [path, index]}}}}
"""

import json
import logging
import os
import sys

from .error import FamilyNotFound, FontError
from .font_collection import FontCollection, FontFamily
from .font_program import FontDescription
from .font_reader import FontReader
from .tables import HeadTable, HorizontalHeadTable, NameTable, OS2Table

logger = logging.getLogger(__name__)

# Platform-specific font directories
_FONT_DIRS = {
    "linux": [
        "/usr/share/fonts",
        "/usr/local/share/fonts",
        os.path.expanduser("~/.local/share/fonts"),
        os.path.expanduser("~/.fonts"),
    ],
    "darwin": [
        "/System/Library/Fonts",
        "/Library/Fonts",
        "/Network/Library/Fonts",
        os.path.expanduser("~/Library/Fonts"),
    ],
    "win32": [
        os.path.join(os.environ.get("WINDIR", r"C:\Windows"), "Fonts"),
    ],
}

# Supported file extensions (lowercase, with dot)
_SUPPORTED_EXTENSIONS = frozenset({".ttf", ".ttc"})

# Cache file location
_CACHE_DIR = os.path.join(os.path.expanduser("~"), ".cache", "typeforge")
_CACHE_FILE = os.path.join(_CACHE_DIR, "system_fonts.json")

_CACHE_VERSION = 1


class SystemFontCache:
    """Cache mapping family names to the files holding their faces."""

    _instance = None

    def __init__(self, font_dirs: list[str] | None = None, cache_file: str | None = None) -> None:
        self._font_dirs = font_dirs
        self._cache_file = cache_file or _CACHE_FILE
        self._fonts: dict[str, dict] = {}         # {family_lower: {"family", "faces"}}
        self._dir_mtimes: dict[str, float] = {}   # {dir_path: mtime}
        self._loaded: bool = False

    @classmethod
    def get_instance(cls) -> SystemFontCache:
        """Return the shared instance for the platform directories."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def font_dirs(self) -> list[str]:
        if self._font_dirs is not None:
            return self._font_dirs
        return _get_platform_font_dirs()

    def get_faces(self, family: str) -> dict[str, tuple[str, int]]:
        """Look up a family's faces.

        Rebuilds the cache automatically if stale or not yet loaded.

        Returns:
            {style_name: (file_path, face_index)}, empty when unknown.
        """
        self._ensure_loaded()
        entry = self._fonts.get(family.lower())
        if entry is None:
            return {}
        return {style: (path, index) for style, (path, index) in entry["faces"].items()}

    def families(self) -> list[str]:
        """Display names of every cached family, sorted."""
        self._ensure_loaded()
        return sorted(entry["family"] for entry in self._fonts.values())

    def rebuild(self) -> None:
        """Force a full rescan of the font directories and persist the cache."""
        self._fonts.clear()
        self._dir_mtimes.clear()

        for d in self.font_dirs:
            if os.path.isdir(d):
                try:
                    self._dir_mtimes[d] = os.stat(d).st_mtime
                except OSError:
                    continue
                self._scan_directory(d)

        self._persist()
        self._loaded = True
        logger.info("System font cache rebuilt: %d families, %d faces",
                    len(self._fonts), self.font_count())

    def font_count(self) -> int:
        """Return the number of cached faces."""
        return sum(len(entry["faces"]) for entry in self._fonts.values())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self._load_or_rebuild()
        elif not self._is_fresh():
            self.rebuild()

    def _load_or_rebuild(self) -> None:
        """Load cache from disk if fresh, otherwise rebuild."""
        if os.path.exists(self._cache_file):
            try:
                with open(self._cache_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if data.get("version") != _CACHE_VERSION:
                    self.rebuild()
                    return
                self._dir_mtimes = data["dir_mtimes"]
                self._fonts = data["fonts"]
                self._loaded = True
                if not self._is_fresh():
                    self.rebuild()
                return
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError, OSError) as exc:
                logger.debug("Discarding unreadable font cache %s: %s", self._cache_file, exc)
        self.rebuild()

    def _is_fresh(self) -> bool:
        """Check whether cached directory mtimes match current filesystem."""
        existing_dirs = {d for d in self.font_dirs if os.path.isdir(d)}

        # Check for new or removed directories
        if existing_dirs != set(self._dir_mtimes):
            return False

        for d in existing_dirs:
            try:
                current_mtime = os.stat(d).st_mtime
            except OSError:
                return False
            if self._dir_mtimes.get(d) != current_mtime:
                return False

        return True

    def _persist(self) -> None:
        """Write the cache to disk as JSON."""
        try:
            os.makedirs(os.path.dirname(self._cache_file) or ".", exist_ok=True)
            data = {
                "version": _CACHE_VERSION,
                "dir_mtimes": self._dir_mtimes,
                "fonts": self._fonts,
            }
            with open(self._cache_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as exc:
            logger.warning("Could not write system font cache: %s", exc)

    def _scan_directory(self, root: str) -> None:
        """Recursively scan root for font files and record their faces."""
        for dirpath, _dirnames, filenames in os.walk(root):
            for fname in sorted(filenames):
                ext = os.path.splitext(fname)[1].lower()
                if ext not in _SUPPORTED_EXTENSIONS:
                    continue
                full_path = os.path.join(dirpath, fname)
                try:
                    faces = describe_font_file(full_path)
                except (FontError, OSError) as exc:
                    logger.debug("Skipping %s: %s", full_path, exc)
                    continue
                for index, description in faces:
                    self._add_face(description, full_path, index)

    def _add_face(self, description: FontDescription, path: str, index: int) -> None:
        if not description.family_name:
            return
        entry = self._fonts.setdefault(
            description.family_name.lower(), {"family": description.family_name, "faces": {}})
        # First face found wins (avoids overwriting with duplicates)
        entry["faces"].setdefault(description.style.name, [path, index])


class SystemFontCollection:
    """Read-only collection over the system fonts.

    Families are parsed and installed the first time they are looked up.
    """

    def __init__(self, cache: SystemFontCache | None = None) -> None:
        self._cache = cache or SystemFontCache.get_instance()
        self._collection = FontCollection()

    @property
    def family_names(self) -> list[str]:
        return self._cache.families()

    def try_find(self, family: str) -> FontFamily | None:
        found = self._collection.try_find(family)
        if found is not None:
            return found
        for style, (path, index) in self._cache.get_faces(family).items():
            try:
                found = self._collection.install(path, index)
            except (FontError, OSError) as exc:
                logger.debug("Cannot load %s face of %s from %s: %s", style, family, path, exc)
        return found

    def find(self, family: str) -> FontFamily:
        """
        Raises:
            FamilyNotFound: No installed system font has that family name.
        """
        found = self.try_find(family)
        if found is None:
            raise FamilyNotFound(family)
        return found


# ------------------------------------------------------------------
# Platform helper
# ------------------------------------------------------------------

def _get_platform_font_dirs() -> list[str]:
    """Return the list of font directories for the current platform."""
    if sys.platform.startswith("linux"):
        key = "linux"
    elif sys.platform == "darwin":
        key = "darwin"
    elif sys.platform == "win32":
        key = "win32"
    else:
        key = "linux"  # best guess
    return _FONT_DIRS.get(key, [])


# ------------------------------------------------------------------
# Face descriptions
# ------------------------------------------------------------------

def describe_font_file(path: str) -> list[tuple[int, FontDescription]]:
    """Describe every face of a .ttf or .ttc file.

    Only head, hhea, OS/2 and name are read, so this is much cheaper than
    loading the fonts.

    Raises:
        FontError: The file is not a usable TrueType font.
        OSError: The file could not be read.
    """
    with open(path, "rb") as f:
        data = f.read()
    return [(index, describe_face(FontReader(data, index)))
            for index in range(FontReader.face_count(data))]


def describe_face(reader: FontReader) -> FontDescription:
    head = HeadTable.load(reader.require_table("head"))
    name_reader = reader.get_table("name")
    name = NameTable.load(name_reader) if name_reader is not None else NameTable()
    os2_reader = reader.get_table("OS/2")
    hhea = HorizontalHeadTable.load(reader.require_table("hhea"))
    if os2_reader is not None:
        os2 = OS2Table.load(os2_reader, hhea)
    else:
        os2 = OS2Table.from_hhea(hhea, head)
    return FontDescription.from_tables(name, os2, head)
