"""Batching of textured, tinted sprite quads from a single atlas."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import List, Protocol, Sequence, Tuple

import numpy as np

__all__ = ["AlignMode", "SpriteVertex", "SpriteBatch"]

WHITE = (0xFF, 0xFF, 0xFF, 0xFF)

Vec2 = Tuple[float, float]
Color = Tuple[int, int, int, int]


class _Sprite(Protocol):
    min_px: Sequence[float]
    max_px: Sequence[float]
    anchor_px: Sequence[float]


class AlignMode(enum.Enum):
    PIXEL_PERFECT = "pixel_perfect"
    SLOPPY = "sloppy"


@dataclass(frozen=True)
class SpriteVertex:
    position: Vec2
    tex_coord: Vec2
    color: Color


def _vec2(value, what: str) -> np.ndarray:
    arr = np.array(value, dtype=float)
    if arr.shape != (2,):
        raise ValueError(f"{what} must have two components")
    return arr


def _color(color: Sequence[int]) -> Color:
    values = tuple(int(c) for c in color)
    if len(values) != 4 or not all(0 <= c <= 0xFF for c in values):
        raise ValueError("tint must be four values in 0..255")
    return values


class SpriteBatch:
    """Collects sprite quads (two triangles each) mapped from a view rectangle to clip space."""

    def __init__(
        self,
        tex_size,
        view_min,
        view_max,
        drawable_size,
        mode: AlignMode = AlignMode.SLOPPY,
    ) -> None:
        self.tex_size = _vec2(tex_size, "tex_size")
        self.view_min = _vec2(view_min, "view_min")
        self.view_max = _vec2(view_max, "view_max")
        self.drawable_size = _vec2(drawable_size, "drawable_size")
        self.mode = AlignMode(mode)
        self.attribs: List[SpriteVertex] = []

        if np.any(self.tex_size <= 0):
            raise ValueError("tex_size must be positive")
        if np.any(self.drawable_size <= 0):
            raise ValueError("drawable_size must be positive")
        if np.any(self.view_max <= self.view_min):
            raise ValueError("view must have positive extent")

        if self.mode is AlignMode.PIXEL_PERFECT:
            self.to_clip = self._pixel_perfect_transform()
        else:
            self.to_clip = self._sloppy_transform()

    def _pixel_perfect_transform(self) -> np.ndarray:
        size = self.drawable_size
        view_min, view_max = self.view_min, self.view_max
        # largest scale that still maps view pixels one-to-one (or integer multiples)
        scale = float(np.min(size / (view_max - view_min)))
        if scale > 1.0:
            scale = math.floor(scale)

        offset = (
            -np.floor(scale * (view_max + view_min) * 0.5)
            + np.floor(0.5 * size)
            - 0.5 * size
        )
        return np.array(
            [
                [scale * 2.0 / size[0], 0.0, 0.0, 2.0 / size[0] * offset[0]],
                [0.0, scale * 2.0 / size[1], 0.0, 2.0 / size[1] * offset[1]],
                [0.0, 0.0, 1.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    def _sloppy_transform(self) -> np.ndarray:
        size = self.drawable_size
        view_min, view_max = self.view_min, self.view_max
        window_min = np.empty(2)
        window_max = np.empty(2)
        if (view_max[0] - view_min[0]) * size[1] < size[0] * (view_max[1] - view_min[1]):
            # stretch wider to match aspect
            w = (view_max[1] - view_min[1]) * size[0] / size[1]
            cx = 0.5 * (view_min[0] + view_max[0])
            window_min[:] = (cx - 0.5 * w, view_min[1])
            window_max[:] = (cx + 0.5 * w, view_max[1])
        else:
            # stretch taller to match aspect
            h = (view_max[0] - view_min[0]) * size[1] / size[0]
            cy = 0.5 * (view_min[1] + view_max[1])
            window_min[:] = (view_min[0], cy - 0.5 * h)
            window_max[:] = (view_max[0], cy + 0.5 * h)

        scale = 2.0 / (window_max - window_min)
        center = 0.5 * (window_min + window_max)
        return np.array(
            [
                [scale[0], 0.0, 0.0, -scale[0] * center[0]],
                [0.0, scale[1], 0.0, -scale[1] * center[1]],
                [0.0, 0.0, 1.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    def draw(self, sprite: _Sprite, center, scale: float = 1.0, tint: Sequence[int] = WHITE) -> None:
        """Add ``sprite`` with its anchor at ``center``, scaled by ``scale``."""
        color = _color(tint)
        c = _vec2(center, "center")
        min_px = _vec2(sprite.min_px, "sprite.min_px")
        max_px = _vec2(sprite.max_px, "sprite.max_px")
        anchor_px = _vec2(sprite.anchor_px, "sprite.anchor_px")

        if self.mode is AlignMode.PIXEL_PERFECT:
            # put the pixel center nearest the anchor exactly on a pixel center
            ofs = (np.floor(anchor_px) + 0.5) - anchor_px
            c = c + ofs * scale
            c = np.floor(c) + 0.5
            c = c - ofs * scale

        lo = c + scale * (min_px - anchor_px)
        hi = c + scale * (max_px - anchor_px)
        lo_tc = min_px / self.tex_size
        hi_tc = max_px / self.tex_size

        def vertex(px, py, tx, ty) -> SpriteVertex:
            return SpriteVertex((float(px), float(py)), (float(tx), float(ty)), color)

        self.attribs.extend(
            (
                vertex(lo[0], lo[1], lo_tc[0], lo_tc[1]),
                vertex(hi[0], lo[1], hi_tc[0], lo_tc[1]),
                vertex(hi[0], hi[1], hi_tc[0], hi_tc[1]),
                vertex(lo[0], lo[1], lo_tc[0], lo_tc[1]),
                vertex(hi[0], hi[1], hi_tc[0], hi_tc[1]),
                vertex(lo[0], hi[1], lo_tc[0], hi_tc[1]),
            )
        )