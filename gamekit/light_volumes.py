"""Bounding volumes drawn for each light in a deferred lighting pass.

It also holds the choice of which intermediate buffer is shown on screen.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

import numpy as np

from .lighting import Light, LightType, light_shader_params

__all__ = ["VolumeMesh", "LightVolume", "BufferView", "light_volume", "view_for_key"]

# a light's contribution below 1/256 of its energy is treated as invisible
_VISIBLE_FRACTION = 256.0
# spot light volumes are hard-limited to this length
_SPOT_LENGTH = 5.0


class VolumeMesh(enum.Enum):
    """Which mesh bounds the pixels a light can affect."""

    CUBE = "cube"
    CONE = "cone"
    EVERYTHING = "everything"


class BufferView(enum.Enum):
    """Which deferred buffer is copied to the screen."""

    OUTPUT = "output"
    POSITION = "position"
    NORMAL_ROUGHNESS = "normal_roughness"
    ALBEDO = "albedo"


_VIEW_KEYS = {
    "1": BufferView.OUTPUT,
    "2": BufferView.POSITION,
    "3": BufferView.NORMAL_ROUGHNESS,
    "4": BufferView.ALBEDO,
}


@dataclass
class LightVolume:
    """The shader values and scaled volume transform for one light."""

    type_code: int
    cutoff: float
    mesh: VolumeMesh
    light_to_world: np.ndarray
    location: np.ndarray
    direction: np.ndarray
    energy: np.ndarray


def _scale(x: float, y: float, z: float) -> np.ndarray:
    return np.diag((x, y, z, 1.0))


def light_volume(light: Light) -> LightVolume:
    """Return the volume that covers everything ``light`` can noticeably light."""
    type_code, cutoff = light_shader_params(light)
    base = light.transform

    if light.type is LightType.POINT:
        radius = math.sqrt(_VISIBLE_FRACTION * float(np.max(light.energy)))
        mesh = VolumeMesh.CUBE
        scale = _scale(radius, radius, radius)
    elif light.type is LightType.SPOT:
        length = _SPOT_LENGTH
        spread = math.tan(0.5 * light.spot_fov)
        mesh = VolumeMesh.CONE
        scale = _scale(spread * length, spread * length, length)
    else:
        mesh = VolumeMesh.EVERYTHING
        scale = np.eye(4)

    return LightVolume(
        type_code=type_code,
        cutoff=cutoff,
        mesh=mesh,
        light_to_world=base @ scale,
        location=light.location,
        direction=light.direction,
        energy=light.energy.copy(),
    )


def view_for_key(key, current: BufferView) -> BufferView:
    """Return the buffer view selected by key ``1``-``4``, or ``current`` otherwise."""
    return _VIEW_KEYS.get(str(key), current)