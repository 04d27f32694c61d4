import math

import numpy as np
import pytest

from gamekit.light_volumes import (
    BufferView,
    LightVolume,
    VolumeMesh,
    light_volume,
    view_for_key,
)
from gamekit.lighting import Light, LightType


def _translated(x, y, z):
    m = np.eye(4)
    m[:3, 3] = (x, y, z)
    return m


def test_point_light_uses_cube_scaled_by_visible_radius():
    light = Light(LightType.POINT, energy=(1.0, 4.0, 2.0), transform=_translated(1, 2, 3))
    volume = light_volume(light)
    assert volume.mesh is VolumeMesh.CUBE
    assert volume.type_code == 0
    assert volume.cutoff == 1.0
    diag = np.diag(volume.light_to_world)[:3]
    assert diag[0] == pytest.approx(diag[1])
    assert diag[1] == pytest.approx(diag[2])
    assert diag[0] ** 2 == pytest.approx(256.0 * 4.0)
    np.testing.assert_allclose(volume.light_to_world[:3, 3], (1, 2, 3))


def test_spot_light_cone_is_limited_to_five_units():
    fov = 0.8
    light = Light(LightType.SPOT, energy=(100.0, 100.0, 100.0), spot_fov=fov)
    volume = light_volume(light)
    assert volume.mesh is VolumeMesh.CONE
    assert volume.type_code == 2
    assert volume.light_to_world[2, 2] == pytest.approx(5.0)
    assert volume.light_to_world[0, 0] == pytest.approx(volume.light_to_world[1, 1])
    ratio = volume.light_to_world[0, 0] / volume.light_to_world[2, 2]
    assert math.atan(ratio) == pytest.approx(0.5 * fov)
    assert math.acos(volume.cutoff) == pytest.approx(0.5 * fov)


@pytest.mark.parametrize("kind,code", [(LightType.HEMISPHERE, 1), (LightType.DIRECTIONAL, 3)])
def test_unbounded_lights_cover_everything_unscaled(kind, code):
    transform = _translated(-4, 0.5, 7)
    volume = light_volume(Light(kind, transform=transform))
    assert volume.mesh is VolumeMesh.EVERYTHING
    assert volume.type_code == code
    assert volume.cutoff == 1.0
    np.testing.assert_allclose(volume.light_to_world, transform)


def test_location_direction_and_energy_come_from_light():
    transform = _translated(3, -2, 5)
    light = Light(LightType.POINT, energy=(0.5, 0.25, 1.0), transform=transform)
    volume = light_volume(light)
    np.testing.assert_allclose(volume.location, (3, -2, 5))
    np.testing.assert_allclose(volume.direction, (0, 0, -1))
    np.testing.assert_allclose(volume.energy, (0.5, 0.25, 1.0))


def test_volume_energy_is_independent_copy():
    light = Light(LightType.POINT, energy=(1.0, 1.0, 1.0))
    volume = light_volume(light)
    volume.energy[0] = 9.0
    assert light.energy[0] == 1.0


def test_volume_is_light_volume_with_4x4_transform():
    volume = light_volume(Light(LightType.DIRECTIONAL))
    assert isinstance(volume, LightVolume)
    assert volume.light_to_world.shape == (4, 4)


@pytest.mark.parametrize(
    "key,expected",
    [
        ("1", BufferView.OUTPUT),
        ("2", BufferView.POSITION),
        ("3", BufferView.NORMAL_ROUGHNESS),
        ("4", BufferView.ALBEDO),
        (2, BufferView.POSITION),
    ],
)
def test_number_keys_select_views(key, expected):
    assert view_for_key(key, BufferView.ALBEDO if expected is not BufferView.ALBEDO else BufferView.OUTPUT) is expected


@pytest.mark.parametrize("key", ["5", "a", "escape", ""])
def test_other_keys_keep_current_view(key):
    assert view_for_key(key, BufferView.NORMAL_ROUGHNESS) is BufferView.NORMAL_ROUGHNESS