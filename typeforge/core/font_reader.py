# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
sfnt table directory reader.

Locates the table blobs inside a TrueType file (or one face of a TrueType
collection) and hands out a BinaryReader positioned at each table.
"""

from __future__ import annotations

import logging
import struct

from .binary_reader import BinaryReader
from .error import MissingFontTable, UnexpectedEndOfFile, UnsupportedFontFormat

logger = logging.getLogger(__name__)

# sfnt versions carrying TrueType (glyf) outlines
_TRUETYPE_MAGIC = (b'\x00\x01\x00\x00', b'true')
_CFF_MAGIC = b'OTTO'
_COLLECTION_MAGIC = b'ttcf'


class TableRecord:
    __slots__ = ('tag', 'checksum', 'offset', 'length')

    def __init__(self, tag: str, checksum: int, offset: int, length: int) -> None:
        self.tag = tag
        self.checksum = checksum
        self.offset = offset
        self.length = length

    def __repr__(self) -> str:
        return f"TableRecord({self.tag!r}, offset={self.offset}, length={self.length})"


class FontReader:
    """Table directory of a single TrueType face."""

    def __init__(self, data: bytes, font_index: int = 0) -> None:
        """
        Args:
            data: Complete font file contents.
            font_index: Face to read when data is a TrueType collection.

        Raises:
            UnsupportedFontFormat: CFF outlines or unknown sfnt version.
            UnexpectedEndOfFile: Truncated header or table directory.
        """
        self._data = bytes(data)
        if len(self._data) < 12:
            raise UnexpectedEndOfFile(12, len(self._data))

        header_offset = 0
        magic = self._data[:4]
        if magic == _COLLECTION_MAGIC:
            header_offset = self._collection_offset(font_index)
            magic = self._data[header_offset:header_offset + 4]

        if magic == _CFF_MAGIC:
            raise UnsupportedFontFormat("OpenType fonts with CFF outlines are not supported")
        if magic not in _TRUETYPE_MAGIC:
            raise UnsupportedFontFormat(f"unrecognised sfnt version {magic!r}")

        self.tables: dict[str, TableRecord] = {}
        reader = BinaryReader(self._data, header_offset)
        reader.skip(4)
        num_tables = reader.read_uint16()
        reader.skip(6)  # searchRange, entrySelector, rangeShift
        for _ in range(num_tables):
            tag = reader.read_tag()
            checksum, offset, length = reader.read_uint32_array(3)
            if offset + length > len(self._data):
                raise UnexpectedEndOfFile(offset + length, len(self._data), tag)
            self.tables[tag] = TableRecord(tag, checksum, offset, length)
        logger.debug("Read table directory: %s", ", ".join(sorted(self.tables)))

    def _collection_offset(self, font_index: int) -> int:
        """Resolve the offset table of one face in a 'ttcf' collection."""
        if len(self._data) < 12:
            raise UnexpectedEndOfFile(12, len(self._data))
        num_fonts = struct.unpack_from('>I', self._data, 8)[0]
        if not 0 <= font_index < num_fonts:
            raise UnsupportedFontFormat(
                f"collection has {num_fonts} fonts, index {font_index} requested")
        entry = 12 + font_index * 4
        if entry + 4 > len(self._data):
            raise UnexpectedEndOfFile(entry + 4, len(self._data))
        return struct.unpack_from('>I', self._data, entry)[0]

    @staticmethod
    def face_count(data: bytes) -> int:
        """Number of faces in data (1 unless it is a collection)."""
        if len(data) >= 12 and data[:4] == _COLLECTION_MAGIC:
            return struct.unpack_from('>I', data, 8)[0]
        return 1

    @property
    def table_tags(self) -> list[str]:
        return list(self.tables)

    def has_table(self, tag: str) -> bool:
        return tag in self.tables

    def get_table(self, tag: str) -> BinaryReader | None:
        """Return a reader positioned at the start of the table, or None."""
        record = self.tables.get(tag)
        if record is None:
            return None
        return BinaryReader(self._data, record.offset, record.length, tag)

    def require_table(self, tag: str) -> BinaryReader:
        reader = self.get_table(tag)
        if reader is None:
            raise MissingFontTable(tag)
        return reader
