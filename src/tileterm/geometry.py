"""Cell coordinates and inclusive rectangles."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Point:
    x: int = 0
    y: int = 0


@dataclass
class Rect:
    """Inclusive rectangle of terminal cells, ``min`` top-left, ``max`` bottom-right."""

    min: Point = field(default_factory=Point)
    max: Point = field(default_factory=Point)

    @classmethod
    def of(cls, x0: int, y0: int, x1: int, y1: int) -> Rect:
        return cls(Point(x0, y0), Point(x1, y1))

    @property
    def width(self) -> int:
        return self.max.x - self.min.x + 1

    @property
    def height(self) -> int:
        return self.max.y - self.min.y + 1

    def copy(self) -> Rect:
        return Rect(Point(self.min.x, self.min.y), Point(self.max.x, self.max.y))


def dec_rect(r: Rect) -> Rect:
    """Shrink *r* by one cell on every side, leaving room for a border."""
    return Rect.of(r.min.x + 1, r.min.y + 1, r.max.x - 1, r.max.y - 1)


def inc_rect(r: Rect) -> Rect:
    """Grow *r* by one cell on every side."""
    return Rect.of(r.min.x - 1, r.min.y - 1, r.max.x + 1, r.max.y + 1)
