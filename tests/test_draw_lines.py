from collections import Counter

import numpy as np
import pytest

from gamekit.draw_lines import DrawLines, LineVertex


def test_world_to_clip_is_kept():
    m = np.arange(16.0).reshape(4, 4)
    lines = DrawLines(m)
    assert np.array_equal(lines.world_to_clip, m)
    assert lines.attribs == []


def test_world_to_clip_must_be_4x4():
    with pytest.raises(ValueError):
        DrawLines(np.eye(3))


def test_draw_adds_two_vertices_with_default_white():
    lines = DrawLines(np.eye(4))
    lines.draw((1, 2, 3), (4, 5, 6))
    assert lines.attribs == [
        LineVertex((1.0, 2.0, 3.0), (255, 255, 255, 255)),
        LineVertex((4.0, 5.0, 6.0), (255, 255, 255, 255)),
    ]


def test_draw_uses_given_color():
    lines = DrawLines(np.eye(4))
    lines.draw((0, 0, 0), (1, 1, 1), (10, 20, 30, 40))
    assert {v.color for v in lines.attribs} == {(10, 20, 30, 40)}


def test_draw_rejects_bad_color():
    lines = DrawLines(np.eye(4))
    with pytest.raises(ValueError):
        lines.draw((0, 0, 0), (1, 1, 1), (300, 0, 0, 0))


def test_identity_box_edges():
    lines = DrawLines(np.eye(4))
    lines.draw_box(np.eye(3, 4))
    assert len(lines.attribs) == 24
    assert lines.attribs[0].position == (-1.0, -1.0, -1.0)
    assert lines.attribs[1].position == (1.0, -1.0, -1.0)
    corners = Counter(v.position for v in lines.attribs)
    assert len(corners) == 8
    assert set(corners.values()) == {3}
    for start, end in zip(lines.attribs[::2], lines.attribs[1::2]):
        diffs = [a != b for a, b in zip(start.position, end.position)]
        assert sum(diffs) == 1


def test_transformed_box_stays_in_bounds():
    mat = np.array([[2.0, 0, 0, 5.0], [0, 3.0, 0, -1.0], [0, 0, 1.0, 0.5]])
    lines = DrawLines(np.eye(4))
    lines.draw_box(mat, (1, 2, 3, 4))
    positions = np.array([v.position for v in lines.attribs])
    assert np.allclose(positions.min(axis=0), mat[:, 3] - np.diag(mat[:, :3]))
    assert np.allclose(positions.max(axis=0), mat[:, 3] + np.diag(mat[:, :3]))
    assert all(v.color == (1, 2, 3, 4) for v in lines.attribs)


def test_box_accepts_4x4_matrix():
    a = DrawLines(np.eye(4))
    b = DrawLines(np.eye(4))
    mat = np.eye(4)
    mat[:3, 3] = (1, 2, 3)
    a.draw_box(mat)
    b.draw_box(mat[:3])
    assert a.attribs == b.attribs


def test_box_rejects_bad_matrix():
    lines = DrawLines(np.eye(4))
    with pytest.raises(ValueError):
        lines.draw_box(np.eye(2))