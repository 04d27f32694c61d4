from dataclasses import dataclass

import numpy as np
import pytest

from gamekit.sprite_batch import AlignMode, SpriteBatch, SpriteVertex


@dataclass
class FakeSprite:
    min_px: tuple
    max_px: tuple
    anchor_px: tuple


def to_clip(batch, x, y):
    return (batch.to_clip @ np.array([x, y, 0.0, 1.0]))[:2]


@pytest.mark.parametrize("mode", [AlignMode.SLOPPY, AlignMode.PIXEL_PERFECT])
def test_view_corners_map_to_clip_corners(mode):
    batch = SpriteBatch((16, 16), (0, 0), (320, 200), (640, 400), mode)
    assert np.allclose(to_clip(batch, 0, 0), (-1, -1))
    assert np.allclose(to_clip(batch, 320, 200), (1, 1))


def test_sloppy_wider_window_keeps_view_inside():
    batch = SpriteBatch((16, 16), (0, 0), (100, 100), (200, 100))
    lo = to_clip(batch, 0, 0)
    hi = to_clip(batch, 100, 100)
    assert lo[1] == pytest.approx(-1.0)
    assert hi[1] == pytest.approx(1.0)
    assert -1.0 < lo[0] < hi[0] < 1.0
    assert lo[0] == pytest.approx(-hi[0])


def test_sloppy_taller_window_keeps_view_inside():
    batch = SpriteBatch((16, 16), (0, 0), (100, 100), (100, 200))
    lo = to_clip(batch, 0, 0)
    hi = to_clip(batch, 100, 100)
    assert lo[0] == pytest.approx(-1.0)
    assert hi[0] == pytest.approx(1.0)
    assert lo[1] == pytest.approx(-hi[1])


def test_draw_emits_two_triangles():
    batch = SpriteBatch((16, 16), (0, 0), (320, 200), (640, 400))
    sprite = FakeSprite((0, 0), (8, 8), (0, 0))
    batch.draw(sprite, (10, 20), 2.0, (1, 2, 3, 4))
    assert len(batch.attribs) == 6
    positions = [v.position for v in batch.attribs]
    assert positions[0] == (10.0, 20.0)
    assert positions[2] == (26.0, 36.0)
    assert positions[0] == positions[3]
    assert positions[2] == positions[4]
    assert batch.attribs[2].tex_coord == (0.5, 0.5)
    assert all(v.color == (1, 2, 3, 4) for v in batch.attribs)


def test_draw_default_tint_is_white():
    batch = SpriteBatch((8, 8), (0, 0), (10, 10), (10, 10))
    batch.draw(FakeSprite((0, 0), (1, 1), (0, 0)), (0, 0))
    assert batch.attribs[0] == SpriteVertex((0.0, 0.0), (0.0, 0.0), (255, 255, 255, 255))


def test_pixel_perfect_snaps_to_pixel_grid():
    batch = SpriteBatch((16, 16), (0, 0), (320, 200), (640, 400), AlignMode.PIXEL_PERFECT)
    batch.draw(FakeSprite((0, 0), (4, 4), (0, 0)), (10.3, 20.7))
    for vertex in batch.attribs:
        x, y = vertex.position
        assert x == int(x) and y == int(y)
    assert batch.attribs[0].position[0] <= 10.3 < batch.attribs[0].position[0] + 1


def test_bad_tint_rejected():
    batch = SpriteBatch((16, 16), (0, 0), (10, 10), (10, 10))
    with pytest.raises(ValueError):
        batch.draw(FakeSprite((0, 0), (1, 1), (0, 0)), (0, 0), 1.0, (0, 0, 300, 0))


@pytest.mark.parametrize(
    "args",
    [
        ((16, 16), (0, 0), (10, 10), (0, 10)),
        ((16, 16), (5, 5), (5, 10), (10, 10)),
        ((0, 16), (0, 0), (10, 10), (10, 10)),
    ],
)
def test_degenerate_sizes_rejected(args):
    with pytest.raises(ValueError):
        SpriteBatch(*args)