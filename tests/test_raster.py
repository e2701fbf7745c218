"""
Raster target tests (text and image), run headless through SDL's dummy driver.
"""

import numpy as np
import pygame
import pytest

import raster
from raster import (
    pixels_to_world, extract_points, letterbox,
    generate_text_target, generate_image_target
)


def test_pixels_to_world_mapping():
    pts = pixels_to_world(np.array([0, 512, 1024]), np.array([0, 256, 512]), 1024, 512, 8.0)
    np.testing.assert_allclose(pts[0], [-8.0, 4.0, 0.0])
    np.testing.assert_allclose(pts[1], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(pts[2], [8.0, -4.0, 0.0])


def test_extract_points_respects_threshold_and_stride():
    alpha = np.zeros((8, 4), dtype=np.uint8)  # (width, height)
    alpha[2, 0] = 200   # on the stride grid
    alpha[4, 2] = 200   # on the stride grid
    alpha[3, 1] = 255   # off the stride grid
    alpha[6, 2] = 5     # below threshold
    pts = extract_points(alpha, threshold=10, stride=2, world_scale=4.0)
    expected = pixels_to_world(np.array([2, 4]), np.array([0, 2]), 8, 4, 4.0)
    np.testing.assert_allclose(pts, expected)


def test_extract_points_scan_order_is_row_major():
    alpha = np.zeros((4, 4), dtype=np.uint8)
    alpha[3, 0] = 255
    alpha[0, 2] = 255
    pts = extract_points(alpha, threshold=0, stride=1, world_scale=1.0)
    # Row y=0 comes before row y=2 even though its x is larger.
    assert pts[0, 1] > pts[1, 1]


def test_letterbox_wide_and_tall():
    assert letterbox((200, 100), (1024, 512)) == (0, 0, 1024, 512)
    assert letterbox((100, 100), (1024, 512)) == (256, 0, 512, 512)
    assert letterbox((400, 100), (1024, 512)) == (0, 128, 1024, 256)


def test_text_target_is_sized_and_planar():
    out = generate_text_target("HI", 1500, stride=4)
    pts = out.reshape(-1, 3)
    assert out.shape == (4500,)
    assert np.any(pts[:, :2] != 0.0)
    assert np.all(np.abs(pts[:, 2]) <= 0.01 + 1e-6)
    assert np.all(np.abs(pts[:, 0]) <= 8.0 + 0.02)
    assert np.all(np.abs(pts[:, 1]) <= 4.0 + 0.02)


def test_text_target_deterministic():
    assert generate_text_target("AB", 800).tobytes() == generate_text_target("AB", 800).tobytes()


def test_text_target_differs_by_text():
    assert generate_text_target("I", 800).tobytes() != generate_text_target("WWW", 800).tobytes()


def test_text_rasterizer_failure_collapses_to_origin(monkeypatch):
    def broken(*args, **kwargs):
        raise pygame.error("no drawable surface")

    monkeypatch.setattr(raster, "render_text_mask", broken)
    out = generate_text_target("HI", 100)
    assert out.shape == (300,)
    assert not out.any()


def test_image_target_none_without_image():
    assert generate_image_target(None, 100) is None


def test_image_target_samples_silhouette(silhouette):
    out = generate_image_target(silhouette, 1000, stride=4)
    pts = out.reshape(-1, 3)
    assert out.shape == (3000,)
    # The disk of radius 40 in a 100 px tall image letterboxes to radius 204.8 px
    # on a 512 px canvas, i.e. 3.2 world units.
    assert np.all(np.hypot(pts[:, 0], pts[:, 1]) <= 3.2 + 0.1)
    assert np.hypot(pts[:, 0], pts[:, 1]).max() > 2.5


def test_image_without_alpha_fills_letterbox():
    pygame.init()
    opaque = pygame.Surface((100, 100))
    opaque.fill((10, 10, 10))
    pts = generate_image_target(opaque, 2000, stride=8).reshape(-1, 3)
    # Square image letterboxed into 1024x512: x spans +-4 world units.
    assert np.all(np.abs(pts[:, 0]) <= 4.0 + 0.1)
    assert pts[:, 0].min() < -3.5


def test_image_rasterizer_failure_collapses_to_origin(monkeypatch, silhouette):
    def broken(*args, **kwargs):
        raise pygame.error("no drawable surface")

    monkeypatch.setattr(raster, "render_image_mask", broken)
    out = generate_image_target(silhouette, 50)
    assert out is not None
    assert not out.any()
