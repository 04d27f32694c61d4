"""Z-up trackball-style camera controls, plus the demo scene's material roughness rule."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple

import numpy as np

__all__ = ["OrbitCamera", "roughness_for"]

PI = 3.1415926

MIN_RADIUS = 1e-1
MAX_RADIUS = 1e6


def _round_half_away(x: float) -> float:
    """Round to the nearest integer, with halves going away from zero."""
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [-pi, pi]."""
    turns = angle / (2.0 * PI)
    turns -= _round_half_away(turns)
    return turns * 2.0 * PI


def _axis_angle(axis: Sequence[float], angle: float) -> np.ndarray:
    """Rotation matrix for ``angle`` radians about the unit ``axis``."""
    x, y, z = axis
    c = math.cos(angle)
    s = math.sin(angle)
    t = 1.0 - c
    return np.array(
        [
            [t * x * x + c, t * x * y - s * z, t * x * z + s * y],
            [t * x * y + s * z, t * y * y + c, t * y * z - s * x],
            [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
        ]
    )


def _window_delta(xrel: float, yrel: float, window_size) -> Tuple[float, float]:
    """Mouse motion as a fraction of a normalized [-a,a]x[-1,1] window."""
    width, height = (float(v) for v in window_size)
    if width <= 0 or height <= 0:
        raise ValueError("window_size must be positive")
    dx = xrel / width * 2.0
    dx *= height / width
    dy = yrel / height * -2.0
    return dx, dy


@dataclass
class OrbitCamera:
    """A camera orbiting ``target`` at ``radius``.

    ``azimuth`` is the angle counter-clockwise of the -y axis and ``elevation``
    the angle above the ground, both in radians in [-pi, pi].
    """

    radius: float = 20.0
    azimuth: float = 0.5 * PI
    elevation: float = 0.2 * PI
    target: np.ndarray = field(default_factory=lambda: np.zeros(3))
    flip_x: bool = False

    def __post_init__(self) -> None:
        self.target = np.array(self.target, dtype=float)
        if self.target.shape != (3,):
            raise ValueError("target must have three components")

    def begin_drag(self) -> None:
        """Start a drag; azimuth input is reversed if the camera is upside-down."""
        self.flip_x = abs(self.elevation) > 0.5 * PI

    def tumble(self, xrel: float, yrel: float, window_size) -> None:
        """Rotate about the target by a mouse motion of (xrel, yrel) pixels."""
        dx, dy = _window_delta(xrel, yrel, window_size)
        self.azimuth -= 3.0 * dx * (-1.0 if self.flip_x else 1.0)
        self.elevation -= 3.0 * dy
        self.azimuth = _wrap_angle(self.azimuth)
        self.elevation = _wrap_angle(self.elevation)

    def pan(self, xrel: float, yrel: float, window_size) -> None:
        """Move the target in the view plane by a mouse motion of (xrel, yrel) pixels."""
        dx, dy = _window_delta(xrel, yrel, window_size)
        frame = self.rotation()
        self.target = self.target - (
            frame[:, 0] * (dx * self.radius) + frame[:, 1] * (dy * self.radius)
        )

    def dolly(self, wheel_y: float) -> None:
        """Move toward (positive) or away from (negative) the target by wheel clicks."""
        self.radius *= 0.5 ** (0.1 * wheel_y)
        self.radius = min(max(self.radius, MIN_RADIUS), MAX_RADIUS)

    def rotation(self) -> np.ndarray:
        """The camera's orientation as a 3x3 rotation matrix (columns are its axes)."""
        return _axis_angle((0.0, 0.0, 1.0), self.azimuth) @ _axis_angle(
            (1.0, 0.0, 0.0), 0.5 * PI - self.elevation
        )

    def position(self) -> np.ndarray:
        """The camera's position in world space."""
        return self.target + self.radius * (self.rotation() @ np.array([0.0, 0.0, 1.0]))


def roughness_for(name: str, y: float) -> float:
    """Material roughness for a scene object: icospheres vary with their y position."""
    if name[:9] == "Icosphere":
        return (y + 10.0) / 18.0
    return 1.0