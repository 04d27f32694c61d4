"""Scene lights and the per-light uniform values a forward lighting pass uploads."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

import numpy as np

__all__ = ["MAX_LIGHTS", "LightType", "Light", "LightUniforms", "light_uniforms", "light_shader_params"]

MAX_LIGHTS = 40


class LightType(enum.IntEnum):
    """Light kinds; the values are the codes the shaders expect."""

    POINT = 0
    HEMISPHERE = 1
    SPOT = 2
    DIRECTIONAL = 3


@dataclass
class Light:
    """A light with a local-to-world transform; it shines along its local -z axis."""

    type: LightType
    energy: np.ndarray = field(default_factory=lambda: np.ones(3))
    transform: np.ndarray = field(default_factory=lambda: np.eye(4))
    spot_fov: float = 0.0

    def __post_init__(self) -> None:
        self.type = LightType(self.type)
        self.energy = np.array(self.energy, dtype=float)
        if self.energy.shape != (3,):
            raise ValueError("energy must have three components")
        self.transform = np.array(self.transform, dtype=float)
        if self.transform.shape != (4, 4):
            raise ValueError("transform must be a 4x4 matrix")

    @property
    def location(self) -> np.ndarray:
        return self.transform[:3, 3].copy()

    @property
    def direction(self) -> np.ndarray:
        return -self.transform[:3, 2]


@dataclass
class LightUniforms:
    """Arrays of per-light values, ``count`` entries each."""

    count: int
    types: List[int]
    locations: np.ndarray
    directions: np.ndarray
    energies: np.ndarray
    cutoffs: List[float]


def light_shader_params(light: Light) -> Tuple[int, float]:
    """Return the shader's (type code, cutoff) for ``light``.

    The cutoff is the cosine of half the cone angle for spot lights and 1.0
    otherwise.
    """
    if light.type is LightType.SPOT:
        return int(light.type), math.cos(0.5 * light.spot_fov)
    return int(light.type), 1.0


def light_uniforms(lights: Iterable[Light], max_lights: int = MAX_LIGHTS) -> LightUniforms:
    """Collect uniforms for at most ``max_lights`` of ``lights``, in order."""
    if max_lights < 0:
        raise ValueError("max_lights must not be negative")
    chosen = list(lights)[:max_lights]
    params = [light_shader_params(light) for light in chosen]

    def stack(vectors) -> np.ndarray:
        return np.array(vectors, dtype=float).reshape(len(chosen), 3)

    return LightUniforms(
        count=len(chosen),
        types=[code for code, _ in params],
        locations=stack([light.location for light in chosen]),
        directions=stack([light.direction for light in chosen]),
        energies=stack([light.energy for light in chosen]),
        cutoffs=[cutoff for _, cutoff in params],
    )