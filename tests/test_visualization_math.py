"""
Projection helpers of the reference host; no window is opened.
"""

import numpy as np
import pytest

from visualization import world_to_screen, screen_to_world


def test_origin_projects_to_center():
    xs, ys, visible = world_to_screen(np.zeros(3, dtype=np.float32), 1280, 720)
    assert (xs[0], ys[0]) == (640, 360)
    assert visible[0]


def test_screen_to_world_inverts_projection_on_plane():
    x, y = screen_to_world(900.0, 200.0, 1280, 720)
    xs, ys, visible = world_to_screen(np.array([x, y, 0.0]), 1280, 720)
    assert abs(xs[0] - 900) <= 1 and abs(ys[0] - 200) <= 1
    assert x > 0 and y > 0


def test_points_behind_camera_are_hidden():
    xs, ys, visible = world_to_screen(np.array([0.0, 0.0, 20.0, 50.0, 0.0, 0.0]), 800, 600)
    assert not visible[0]
    assert not visible[1]


def test_visible_height_matches_field_of_view():
    # At the camera distance of 14 with a 50 degree vertical fov,
    # the top edge of the window sees y = 14 * tan(25 deg).
    _, y = screen_to_world(400.0, 0.0, 800, 600)
    assert y == pytest.approx(14 * np.tan(np.radians(25.0)))
