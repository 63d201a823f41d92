# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Big-endian binary cursor over a font table.

All sfnt data is big-endian. Reads advance the cursor; any read that would
run past the end of the buffer raises UnexpectedEndOfFile instead of
returning short data.
"""

from __future__ import annotations

import struct

from .error import UnexpectedEndOfFile

_U16 = struct.Struct('>H')
_I16 = struct.Struct('>h')
_U32 = struct.Struct('>I')
_I32 = struct.Struct('>i')


class BinaryReader:
    """Sequential reader over an immutable byte buffer."""
    __slots__ = ('_data', '_pos', '_start', '_end', 'tag')

    def __init__(self, data: bytes, offset: int = 0, length: int | None = None,
                 tag: str | None = None) -> None:
        """
        Args:
            data: Backing buffer (not copied).
            offset: Start of the readable window within data.
            length: Size of the window; defaults to the rest of data.
            tag: Table tag used in error messages.
        """
        end = len(data) if length is None else offset + length
        if offset < 0 or end > len(data) or offset > end:
            raise UnexpectedEndOfFile(end - offset, max(0, len(data) - offset), tag)
        self._data = data
        self._start = offset
        self._end = end
        self._pos = offset
        self.tag = tag

    def __len__(self) -> int:
        return self._end - self._start

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    def tell(self) -> int:
        """Position relative to the start of the window."""
        return self._pos - self._start

    def seek(self, position: int) -> None:
        """Move to a position relative to the start of the window."""
        if position < 0 or position > self._end - self._start:
            raise UnexpectedEndOfFile(position, self._end - self._start, self.tag)
        self._pos = self._start + position

    def skip(self, count: int) -> None:
        self._need(count)
        self._pos += count

    def _need(self, count: int) -> None:
        if self._pos + count > self._end:
            raise UnexpectedEndOfFile(count, self._end - self._pos, self.tag)

    def read_bytes(self, count: int) -> bytes:
        self._need(count)
        start = self._pos
        self._pos += count
        return bytes(self._data[start:self._pos])

    def read_uint8(self) -> int:
        self._need(1)
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_int8(self) -> int:
        value = self.read_uint8()
        return value - 256 if value > 127 else value

    def read_uint16(self) -> int:
        self._need(2)
        value = _U16.unpack_from(self._data, self._pos)[0]
        self._pos += 2
        return value

    def read_int16(self) -> int:
        self._need(2)
        value = _I16.unpack_from(self._data, self._pos)[0]
        self._pos += 2
        return value

    def read_uint32(self) -> int:
        self._need(4)
        value = _U32.unpack_from(self._data, self._pos)[0]
        self._pos += 4
        return value

    def read_int32(self) -> int:
        self._need(4)
        value = _I32.unpack_from(self._data, self._pos)[0]
        self._pos += 4
        return value

    def read_f2dot14(self) -> float:
        """Read a 2.14 signed fixed-point number."""
        return self.read_int16() / 16384.0

    def read_fixed(self) -> float:
        """Read a 16.16 signed fixed-point number."""
        return self.read_int32() / 65536.0

    def read_tag(self) -> str:
        return self.read_bytes(4).decode('latin-1')

    def read_uint16_array(self, count: int) -> tuple[int, ...]:
        self._need(count * 2)
        values = struct.unpack_from(f'>{count}H', self._data, self._pos)
        self._pos += count * 2
        return values

    def read_int16_array(self, count: int) -> tuple[int, ...]:
        self._need(count * 2)
        values = struct.unpack_from(f'>{count}h', self._data, self._pos)
        self._pos += count * 2
        return values

    def read_uint32_array(self, count: int) -> tuple[int, ...]:
        self._need(count * 4)
        values = struct.unpack_from(f'>{count}I', self._data, self._pos)
        self._pos += count * 4
        return values

    def sub_reader(self, offset: int, length: int, tag: str | None = None) -> BinaryReader:
        """Return a new reader over [offset, offset+length) of this window."""
        if offset < 0 or length < 0 or offset + length > self._end - self._start:
            raise UnexpectedEndOfFile(offset + length, self._end - self._start, tag or self.tag)
        return BinaryReader(self._data, self._start + offset, length, tag or self.tag)
