"""Immediate-mode accumulation of coloured line segments."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import product
from typing import List, Sequence, Tuple

import numpy as np

__all__ = ["LineVertex", "DrawLines"]

WHITE = (0xFF, 0xFF, 0xFF, 0xFF)

Color = Tuple[int, int, int, int]


@dataclass(frozen=True)
class LineVertex:
    position: Tuple[float, float, float]
    color: Color


def _color(color: Sequence[int]) -> Color:
    values = tuple(int(c) for c in color)
    if len(values) != 4 or not all(0 <= c <= 0xFF for c in values):
        raise ValueError("color must be four values in 0..255")
    return values


def _point(p) -> Tuple[float, float, float]:
    values = tuple(float(v) for v in p)
    if len(values) != 3:
        raise ValueError("points must have three coordinates")
    return values


# the twelve edges of the [-1,1]^3 cube, grouped by the axis they run along
def _box_edges():
    for axis in range(3):
        others = [a for a in range(3) if a != axis]
        for high, low in product((-1.0, 1.0), repeat=2):
            start = [0.0, 0.0, 0.0]
            start[others[0]], start[others[1]] = low, high
            end = list(start)
            start[axis], end[axis] = -1.0, 1.0
            yield tuple(start), tuple(end)


_BOX_EDGES = tuple(_box_edges())


class DrawLines:
    """Collects line segments (pairs of vertices) for one world-to-clip transform."""

    def __init__(self, world_to_clip) -> None:
        matrix = np.array(world_to_clip, dtype=float)
        if matrix.shape != (4, 4):
            raise ValueError("world_to_clip must be a 4x4 matrix")
        self.world_to_clip = matrix
        self.attribs: List[LineVertex] = []

    def draw(self, a, b, color: Sequence[int] = WHITE) -> None:
        """Add a line from ``a`` to ``b`` in world space."""
        c = _color(color)
        self.attribs.append(LineVertex(_point(a), c))
        self.attribs.append(LineVertex(_point(b), c))

    def draw_box(self, mat, color: Sequence[int] = WHITE) -> None:
        """Add the wireframe of the [-1,1]^3 cube transformed by the 3x4 ``mat``."""
        m = np.array(mat, dtype=float)
        if m.shape == (4, 4):
            m = m[:3]
        if m.shape != (3, 4):
            raise ValueError("box matrix must be 3x4 or 4x4")
        for start, end in _BOX_EDGES:
            self.draw(m @ (*start, 1.0), m @ (*end, 1.0), color)