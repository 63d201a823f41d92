# TypeForge - TrueType Outline and Text Layout Engine
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Glyph rendering sink contract.

A renderer receives, per text run:

    begin_text(bounds)
      begin_glyph(bounds, parameters) -> bool
        begin_figure()
          move_to / line_to / quadratic_bezier_to / cubic_bezier_to ...
        end_figure()
        ...
      end_glyph()
      ...
    end_text()

All coordinates are device units with Y growing downwards. Returning False
from begin_glyph skips the figures of that glyph (for example when the
renderer already has it cached); end_glyph is still called.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GlyphRendererParameters:
    """Identifies a glyph rendering independently of its position."""
    font_name: str
    glyph_index: int
    point_size: float
    dpi: tuple[float, float]


class GlyphRenderer(ABC):
    """Abstract base class for glyph path sinks."""

    def begin_text(self, bounds: tuple[float, float, float, float]) -> None:
        """Called once before any glyph of a text run, with the run's box."""
        pass

    def end_text(self) -> None:
        """Called once after the last glyph of a text run."""
        pass

    @abstractmethod
    def begin_glyph(self, bounds: tuple[float, float, float, float],
                    parameters: GlyphRendererParameters) -> bool:
        """Start a glyph; return False to skip its figures."""
        pass

    @abstractmethod
    def end_glyph(self) -> None:
        pass

    @abstractmethod
    def begin_figure(self) -> None:
        pass

    @abstractmethod
    def end_figure(self) -> None:
        """Close the current figure."""
        pass

    @abstractmethod
    def move_to(self, point: tuple[float, float]) -> None:
        pass

    @abstractmethod
    def line_to(self, point: tuple[float, float]) -> None:
        pass

    @abstractmethod
    def quadratic_bezier_to(self, control: tuple[float, float], point: tuple[float, float]) -> None:
        pass

    @abstractmethod
    def cubic_bezier_to(self, control1: tuple[float, float], control2: tuple[float, float],
                        point: tuple[float, float]) -> None:
        pass


class PathRecorder(GlyphRenderer):
    """Sink that records every call as a tuple, mostly for inspection and tests.

    Each entry is (command_name, *arguments), e.g. ('line_to', (x, y)).
    """

    def __init__(self) -> None:
        self.commands: list[tuple] = []
        self.glyphs: list[GlyphRendererParameters] = []

    def begin_text(self, bounds):
        self.commands.append(('begin_text', bounds))

    def end_text(self):
        self.commands.append(('end_text',))

    def begin_glyph(self, bounds, parameters):
        self.glyphs.append(parameters)
        self.commands.append(('begin_glyph', bounds, parameters))
        return True

    def end_glyph(self):
        self.commands.append(('end_glyph',))

    def begin_figure(self):
        self.commands.append(('begin_figure',))

    def end_figure(self):
        self.commands.append(('end_figure',))

    def move_to(self, point):
        self.commands.append(('move_to', tuple(point)))

    def line_to(self, point):
        self.commands.append(('line_to', tuple(point)))

    def quadratic_bezier_to(self, control, point):
        self.commands.append(('quadratic_bezier_to', tuple(control), tuple(point)))

    def cubic_bezier_to(self, control1, control2, point):
        self.commands.append(('cubic_bezier_to', tuple(control1), tuple(control2), tuple(point)))

    def names(self) -> list[str]:
        """Command names in call order."""
        return [cmd[0] for cmd in self.commands]

    def figures(self) -> list[list[tuple]]:
        """Commands grouped per figure, begin/end markers removed."""
        result = []
        current = None
        for cmd in self.commands:
            if cmd[0] == 'begin_figure':
                current = []
            elif cmd[0] == 'end_figure':
                result.append(current)
                current = None
            elif current is not None:
                current.append(cmd)
        return result
