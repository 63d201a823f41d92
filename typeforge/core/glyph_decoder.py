# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
TrueType glyph program decoder.

A glyf entry starts with a signed contour count and a bounding box:

  numberOfContours >= 0   simple glyph: contour end indices, hinting
                          instructions (skipped), run-length encoded flags,
                          then delta encoded x and y coordinates
  numberOfContours <  0   composite glyph: a list of components, each naming
                          a child glyph, an offset (or a pair of anchor
                          points to align) and an optional 2x2 transform

Each entry is read once into a SimpleGlyph or CompositeGlyph record.
GlyphOutlineDecoder then resolves composites recursively into one flat
GlyphOutline, tracking the chain of glyphs being expanded so a composite
that references itself fails with CompositeCycleError instead of
recursing forever.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Union

from .binary_reader import BinaryReader
from .error import CompositeCycleError, GlyphNotFound, InvalidGlyphData
from .tables import GlyphTable, HorizontalMetricsTable

# Simple glyph flags
ON_CURVE_POINT = 0x01
X_SHORT_VECTOR = 0x02
Y_SHORT_VECTOR = 0x04
REPEAT_FLAG = 0x08
X_IS_SAME_OR_POSITIVE = 0x10
Y_IS_SAME_OR_POSITIVE = 0x20

# Composite component flags
ARG_1_AND_2_ARE_WORDS = 0x0001
ARGS_ARE_XY_VALUES = 0x0002
ROUND_XY_TO_GRID = 0x0004
WE_HAVE_A_SCALE = 0x0008
MORE_COMPONENTS = 0x0020
WE_HAVE_AN_X_AND_Y_SCALE = 0x0040
WE_HAVE_A_TWO_BY_TWO = 0x0080
WE_HAVE_INSTRUCTIONS = 0x0100
USE_MY_METRICS = 0x0200
SCALED_COMPONENT_OFFSET = 0x0800
UNSCALED_COMPONENT_OFFSET = 0x1000


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned box in font units."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    def union(self, other: Bounds | None) -> Bounds:
        if other is None:
            return self
        return Bounds(min(self.x_min, other.x_min), min(self.y_min, other.y_min),
                      max(self.x_max, other.x_max), max(self.y_max, other.y_max))

    def transformed(self, xx: float, xy: float, yx: float, yy: float,
                    dx: float = 0.0, dy: float = 0.0) -> Bounds:
        """Bounding box of this box's corners under x' = xx*x + yx*y + dx,
        y' = xy*x + yy*y + dy."""
        xs = []
        ys = []
        for x, y in ((self.x_min, self.y_min), (self.x_min, self.y_max),
                     (self.x_max, self.y_min), (self.x_max, self.y_max)):
            xs.append(xx * x + yx * y + dx)
            ys.append(xy * x + yy * y + dy)
        return Bounds(min(xs), min(ys), max(xs), max(ys))

    @classmethod
    def load(cls, reader: BinaryReader) -> Bounds:
        return cls(*reader.read_int16_array(4))


EMPTY_BOUNDS = Bounds(0, 0, 0, 0)


@dataclass(frozen=True)
class GlyphOutline:
    """Flat, fully resolved outline of one glyph in font units.

    on_curve has one entry per control point; contour_ends holds the index
    of the last point of each contour, strictly increasing.
    """
    control_points: tuple[tuple[float, float], ...]
    on_curve: tuple[bool, ...]
    contour_ends: tuple[int, ...]
    bounds: Bounds
    advance_width: int = 0
    left_side_bearing: int = 0
    glyph_index: int = 0

    @property
    def point_count(self) -> int:
        return len(self.control_points)

    @property
    def is_empty(self) -> bool:
        return not self.control_points

    def contours(self) -> Iterator[list[tuple[float, float, bool]]]:
        """Yield each contour as a list of (x, y, on_curve) tuples."""
        start = 0
        for end in self.contour_ends:
            yield [(self.control_points[i][0], self.control_points[i][1], self.on_curve[i])
                   for i in range(start, end + 1)]
            start = end + 1


@dataclass(frozen=True)
class CompositeComponent:
    """One child reference inside a composite glyph.

    The child's points map through x' = xx*x + yx*y + dx and
    y' = xy*x + yy*y + dy. When anchor is set, (dx, dy) is ignored and the
    offset aligns child point anchor[1] with parent point anchor[0].
    """
    glyph_index: int
    flags: int
    xx: float = 1.0
    xy: float = 0.0
    yx: float = 0.0
    yy: float = 1.0
    dx: float = 0.0
    dy: float = 0.0
    anchor: tuple[int, int] | None = None

    @property
    def round_xy(self) -> bool:
        return bool(self.flags & ROUND_XY_TO_GRID)

    @property
    def scaled_offset(self) -> bool:
        return bool(self.flags & SCALED_COMPONENT_OFFSET) and not self.flags & UNSCALED_COMPONENT_OFFSET

    @property
    def is_identity(self) -> bool:
        return self.xx == 1.0 and self.xy == 0.0 and self.yx == 0.0 and self.yy == 1.0

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Apply the 2x2 part of the transform."""
        if self.is_identity:
            return x, y
        return self.xx * x + self.yx * y, self.xy * x + self.yy * y


@dataclass(frozen=True)
class SimpleGlyph:
    outline: GlyphOutline


@dataclass(frozen=True)
class CompositeGlyph:
    bounds: Bounds
    components: tuple[CompositeComponent, ...]


GlyphProgram = Union[SimpleGlyph, CompositeGlyph]


# ---------------------------------------------------------------------------
# glyf entry parsing
# ---------------------------------------------------------------------------

def read_glyph_program(reader: BinaryReader | None, glyph_index: int = 0) -> GlyphProgram:
    """Read one glyf entry into a SimpleGlyph or CompositeGlyph.

    Args:
        reader: Reader over the glyph's bytes, or None for an empty glyph.
        glyph_index: Used in error messages.

    Raises:
        UnexpectedEndOfFile: The entry is truncated.
        InvalidGlyphData: Contour end indices are not strictly increasing.
    """
    if reader is None:
        return SimpleGlyph(GlyphOutline((), (), (), EMPTY_BOUNDS, glyph_index=glyph_index))

    contour_count = reader.read_int16()
    bounds = Bounds.load(reader)
    if contour_count >= 0:
        return SimpleGlyph(_read_simple_outline(reader, contour_count, bounds, glyph_index))
    return CompositeGlyph(bounds, _read_components(reader))


def _read_simple_outline(reader: BinaryReader, contour_count: int, bounds: Bounds,
                         glyph_index: int) -> GlyphOutline:
    contour_ends = reader.read_uint16_array(contour_count)
    for i in range(1, contour_count):
        if contour_ends[i] <= contour_ends[i - 1]:
            raise InvalidGlyphData(
                f"contour end {contour_ends[i]} does not follow {contour_ends[i - 1]}", glyph_index)
    if contour_count == 0:
        return GlyphOutline((), (), (), bounds, glyph_index=glyph_index)

    num_points = contour_ends[-1] + 1

    # Hinting instructions are not executed
    instruction_length = reader.read_uint16()
    reader.skip(instruction_length)

    flags = []
    while len(flags) < num_points:
        flag = reader.read_uint8()
        flags.append(flag)
        if flag & REPEAT_FLAG:
            repeat = reader.read_uint8()
            flags.extend([flag] * repeat)
    if len(flags) > num_points:
        raise InvalidGlyphData(f"flag repeat overruns {num_points} points", glyph_index)

    xs = _read_coordinates(reader, flags, X_SHORT_VECTOR, X_IS_SAME_OR_POSITIVE)
    ys = _read_coordinates(reader, flags, Y_SHORT_VECTOR, Y_IS_SAME_OR_POSITIVE)

    return GlyphOutline(
        control_points=tuple(zip(xs, ys)),
        on_curve=tuple(bool(f & ON_CURVE_POINT) for f in flags),
        contour_ends=tuple(contour_ends),
        bounds=bounds,
        glyph_index=glyph_index,
    )


def _read_coordinates(reader: BinaryReader, flags: list[int], short_bit: int, same_bit: int) -> list[int]:
    """Decode one axis of delta encoded coordinates into absolute values."""
    coords = []
    value = 0
    for flag in flags:
        if flag & short_bit:
            delta = reader.read_uint8()
            value += delta if flag & same_bit else -delta
        elif not flag & same_bit:
            value += reader.read_int16()
        # else: same as previous
        coords.append(value)
    return coords


def _read_components(reader: BinaryReader) -> tuple[CompositeComponent, ...]:
    components = []
    flags = MORE_COMPONENTS
    while flags & MORE_COMPONENTS:
        flags = reader.read_uint16()
        glyph_index = reader.read_uint16()

        if flags & ARGS_ARE_XY_VALUES:
            if flags & ARG_1_AND_2_ARE_WORDS:
                arg1, arg2 = reader.read_int16(), reader.read_int16()
            else:
                arg1, arg2 = reader.read_int8(), reader.read_int8()
        elif flags & ARG_1_AND_2_ARE_WORDS:
            arg1, arg2 = reader.read_uint16(), reader.read_uint16()
        else:
            arg1, arg2 = reader.read_uint8(), reader.read_uint8()

        xx, xy, yx, yy = 1.0, 0.0, 0.0, 1.0
        if flags & WE_HAVE_A_SCALE:
            xx = yy = reader.read_f2dot14()
        elif flags & WE_HAVE_AN_X_AND_Y_SCALE:
            xx = reader.read_f2dot14()
            yy = reader.read_f2dot14()
        elif flags & WE_HAVE_A_TWO_BY_TWO:
            xx = reader.read_f2dot14()
            xy = reader.read_f2dot14()
            yx = reader.read_f2dot14()
            yy = reader.read_f2dot14()

        if flags & ARGS_ARE_XY_VALUES:
            components.append(CompositeComponent(glyph_index, flags, xx, xy, yx, yy, arg1, arg2))
        else:
            components.append(CompositeComponent(glyph_index, flags, xx, xy, yx, yy, anchor=(arg1, arg2)))

    # Any WE_HAVE_INSTRUCTIONS bytecode after the last component is ignored
    return tuple(components)


# ---------------------------------------------------------------------------
# Outline decoding
# ---------------------------------------------------------------------------

class GlyphOutlineDecoder:
    """Decodes glyph indices into flat outlines.

    decode() is a pure function of the font bytes: the same index always
    yields an equal outline, so callers may cache or recompute freely.
    """

    def __init__(self, glyphs: GlyphTable, metrics: HorizontalMetricsTable | None = None) -> None:
        self._glyphs = glyphs
        self._metrics = metrics

    @property
    def glyph_count(self) -> int:
        return self._glyphs.glyph_count

    def program(self, glyph_index: int) -> GlyphProgram:
        """Read the undecoded program of one glyph."""
        if not 0 <= glyph_index < self._glyphs.glyph_count:
            raise GlyphNotFound(glyph_index, self._glyphs.glyph_count)
        return read_glyph_program(self._glyphs.glyph_reader(glyph_index), glyph_index)

    def decode(self, glyph_index: int) -> GlyphOutline:
        """Decode a glyph with its horizontal metrics attached.

        Raises:
            GlyphNotFound: glyph_index is outside the font.
            CompositeCycleError: A composite references itself.
            UnexpectedEndOfFile: Glyph data is truncated.
            InvalidGlyphData: Contour ends, anchor points or component
                indices are invalid.
        """
        outline = self._resolve(glyph_index, ())
        advance = left_side_bearing = 0
        if self._metrics is not None:
            advance = self._metrics.advance_width(glyph_index)
            left_side_bearing = self._metrics.left_side_bearing(glyph_index)
        return GlyphOutline(outline.control_points, outline.on_curve, outline.contour_ends,
                            outline.bounds, advance, left_side_bearing, glyph_index)

    def _resolve(self, glyph_index: int, chain: tuple[int, ...]) -> GlyphOutline:
        if glyph_index in chain:
            raise CompositeCycleError(glyph_index, chain)
        program = self.program(glyph_index)
        if isinstance(program, SimpleGlyph):
            return program.outline
        return self._compose(glyph_index, program, chain + (glyph_index,))

    def _compose(self, glyph_index: int, program: CompositeGlyph, chain: tuple[int, ...]) -> GlyphOutline:
        points: list[tuple[float, float]] = []
        on_curve: list[bool] = []
        contour_ends: list[int] = []
        bounds: Bounds | None = None

        for component in program.components:
            if not 0 <= component.glyph_index < self._glyphs.glyph_count:
                raise InvalidGlyphData(
                    f"component glyph {component.glyph_index} outside the font", glyph_index)
            child = self._resolve(component.glyph_index, chain)
            moved = [component.apply(x, y) for x, y in child.control_points]

            if component.anchor is not None:
                parent_index, child_index = component.anchor
                if parent_index >= len(points) or child_index >= len(moved):
                    raise InvalidGlyphData(
                        f"anchor points ({parent_index}, {child_index}) out of range", glyph_index)
                dx = points[parent_index][0] - moved[child_index][0]
                dy = points[parent_index][1] - moved[child_index][1]
            else:
                dx, dy = component.dx, component.dy
                if component.scaled_offset:
                    dx, dy = component.apply(dx, dy)
                if component.round_xy:
                    dx, dy = math.floor(dx + 0.5), math.floor(dy + 0.5)

            base = len(points)
            if dx or dy:
                points.extend((x + dx, y + dy) for x, y in moved)
            else:
                points.extend(moved)
            on_curve.extend(child.on_curve)
            contour_ends.extend(end + base for end in child.contour_ends)

            if not child.is_empty:
                child_bounds = child.bounds
                if component.is_identity:
                    child_bounds = Bounds(child_bounds.x_min + dx, child_bounds.y_min + dy,
                                          child_bounds.x_max + dx, child_bounds.y_max + dy)
                else:
                    child_bounds = child_bounds.transformed(
                        component.xx, component.xy, component.yx, component.yy, dx, dy)
                bounds = child_bounds.union(bounds)

        return GlyphOutline(tuple(points), tuple(on_curve), tuple(contour_ends),
                            bounds if bounds is not None else program.bounds,
                            glyph_index=glyph_index)
