# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Glyph outline to path conversion.

Turns a GlyphOutline in font units into renderer-agnostic path commands in
device units, scaled for a point size and resolution. Font space is Y-up
and device space is Y-down, so Y is flipped.

TrueType contours are closed quadratic B-splines. Walking a contour:
- start on an on-curve point; when the first point is off-curve start on the
  last point if that one is on-curve, otherwise at the midpoint of the two
- an on-curve point ends the pending segment (a line, or a quadratic when a
  control point is pending)
- two consecutive off-curve points imply an on-curve point at their midpoint
- the closing segment back to the start is implicit in the closed figure
  unless a control point is still pending

The pending control points travel through the walk as a small immutable
ControlPoints value: push() adds one, flush() emits the segment ending at a
given point and returns an empty accumulator.
"""

from __future__ import annotations

from typing import NamedTuple, Union

from .glyph_decoder import Bounds, GlyphOutline


class Point(NamedTuple):
    x: float
    y: float


class MoveTo(NamedTuple):
    p: Point


class LineTo(NamedTuple):
    p: Point


class QuadTo(NamedTuple):
    c: Point
    p: Point


class CurveTo(NamedTuple):
    c1: Point
    c2: Point
    p: Point


PathCommand = Union[MoveTo, LineTo, QuadTo, CurveTo]


class SubPath(list):
    """One figure: a MoveTo followed by segments. Glyph figures are closed."""

    def __init__(self, *args) -> None:
        super().__init__(*args)
        self.closed = False


class Path(list):
    """A list of SubPaths."""
    pass


def _quad_to_cubic(p0: Point, c: Point, p: Point) -> CurveTo:
    """Degree-elevate a quadratic segment starting at p0."""
    return CurveTo(
        Point(p0.x + 2.0 / 3.0 * (c.x - p0.x), p0.y + 2.0 / 3.0 * (c.y - p0.y)),
        Point(p.x + 2.0 / 3.0 * (c.x - p.x), p.y + 2.0 / 3.0 * (c.y - p.y)),
        p,
    )


class ControlPoints(NamedTuple):
    """Off-curve control points waiting for the segment's end point."""
    points: tuple[Point, ...] = ()

    @property
    def count(self) -> int:
        return len(self.points)

    @property
    def last(self) -> Point:
        return self.points[-1]

    def push(self, point: Point) -> ControlPoints:
        if len(self.points) >= 2:
            raise ValueError("too many control points")
        return ControlPoints(self.points + (point,))

    def flush(self, subpath: SubPath, current: Point, end: Point, cubic: bool = False) -> ControlPoints:
        """Emit the segment from current to end and clear the accumulator.

        0 pending points make a line, 1 a quadratic (or its cubic equivalent
        when cubic is set), 2 a cubic.
        """
        count = len(self.points)
        if count == 0:
            subpath.append(LineTo(end))
        elif count == 1:
            if cubic:
                subpath.append(_quad_to_cubic(current, self.points[0], end))
            else:
                subpath.append(QuadTo(self.points[0], end))
        else:
            subpath.append(CurveTo(self.points[0], self.points[1], end))
        return ControlPoints()


def _midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2.0, (a.y + b.y) / 2.0)


def contour_to_subpath(points: list[tuple[float, float, bool]], cubic: bool = False) -> SubPath | None:
    """Convert one contour of (x, y, on_curve) points into a closed SubPath.

    Points are taken as already in device space. Returns None for an
    empty contour.
    """
    n = len(points)
    if n == 0:
        return None

    first = Point(points[0][0], points[0][1])
    last = Point(points[-1][0], points[-1][1])
    if points[0][2]:
        start = first
        rest = points[1:]
    elif points[-1][2]:
        start = last
        rest = points[:-1]
    else:
        start = _midpoint(first, last)
        rest = points

    subpath = SubPath([MoveTo(start)])
    current = start
    pending = ControlPoints()
    for x, y, on in rest:
        point = Point(x, y)
        if on:
            pending = pending.flush(subpath, current, point, cubic)
            current = point
            continue
        if pending.count:
            mid = _midpoint(pending.last, point)
            pending = pending.flush(subpath, current, mid, cubic)
            current = mid
        pending = pending.push(point)

    if pending.count:
        pending.flush(subpath, current, start, cubic)

    subpath.closed = True
    return subpath


def scale_factor(units_per_em: int, point_size: float, dpi: float) -> float:
    """Font units to device units: point_size * dpi / (unitsPerEm * 72)."""
    return point_size * dpi / (units_per_em * 72.0)


def glyph_path(outline: GlyphOutline, units_per_em: int, point_size: float,
               dpi: tuple[float, float] = (72.0, 72.0), cubic: bool = False) -> Path:
    """Build the device-space path of a glyph with its origin at (0, 0).

    Args:
        outline: Decoded glyph outline in font units.
        units_per_em: The font's em size.
        point_size: Requested size in points.
        dpi: Horizontal and vertical resolution.
        cubic: Emit cubic Beziers instead of quadratics.

    Returns:
        Path with one closed SubPath per non-empty contour.
    """
    sx = scale_factor(units_per_em, point_size, dpi[0])
    sy = scale_factor(units_per_em, point_size, dpi[1])
    path = Path()
    for contour in outline.contours():
        scaled = [(x * sx, -y * sy, on) for x, y, on in contour]
        subpath = contour_to_subpath(scaled, cubic)
        if subpath is not None:
            path.append(subpath)
    return path


def glyph_bounding_box(bounds: Bounds, units_per_em: int, origin: tuple[float, float],
                       scaled_point_size: tuple[float, float]) -> tuple[float, float, float, float]:
    """Device-space box (x, y, width, height) of a glyph placed at origin.

    scaled_point_size is point size times DPI on each axis. The box's top
    edge comes from the glyph's y_max, flipped.
    """
    factor = units_per_em * 72.0
    width = bounds.width * scaled_point_size[0] / factor
    height = bounds.height * scaled_point_size[1] / factor
    x = origin[0] + bounds.x_min * scaled_point_size[0] / factor
    y = origin[1] - bounds.y_max * scaled_point_size[1] / factor
    return (x, y, width, height)


def translate_command(command: PathCommand, dx: float, dy: float) -> PathCommand:
    """Return a copy of command moved by (dx, dy)."""
    if dx == 0 and dy == 0:
        return command
    return type(command)(*(Point(p.x + dx, p.y + dy) for p in command))


def translate_path(path: Path, dx: float, dy: float) -> Path:
    moved = Path()
    for subpath in path:
        new_subpath = SubPath(translate_command(cmd, dx, dy) for cmd in subpath)
        new_subpath.closed = subpath.closed
        moved.append(new_subpath)
    return moved


def path_extents(path: Path) -> tuple[float, float, float, float] | None:
    """(x_min, y_min, x_max, y_max) over every point of path, control
    points included; None for an empty path."""
    xs = []
    ys = []
    for subpath in path:
        for cmd in subpath:
            for p in cmd:
                xs.append(p.x)
                ys.append(p.y)
    if not xs:
        return None
    return (min(xs), min(ys), max(xs), max(ys))
