# raster.py
"""
Raster targets: text and image silhouettes.

Content is drawn onto an off-screen pygame surface, the alpha channel is
sampled on a coarse stride grid and every sample above the threshold
becomes a world-space point on the z = 0 plane. The resulting list is
normalized to the particle count by the resampler.
"""
import logging
import numpy as np
import pygame
from resample import resample_to_count
from constants import (
    DEFAULT_TEXT, TEXT_SEED, IMAGE_SEED, RASTER_WIDTH, RASTER_HEIGHT,
    WORLD_SCALE, RESAMPLE_JITTER
)
from typing import Optional, Tuple

# --- Data Contracts ---
#
# pixels_to_world(xs, ys, width, height, world_scale) -> np.ndarray:
#   - Outputs: (M, 3) float64 array; pixel (x, y) maps to
#     ((x / W - 0.5) * world_scale * W / H, (0.5 - y / H) * world_scale, 0).
#
# extract_points(alpha, threshold, stride, world_scale) -> np.ndarray:
#   - Inputs: alpha, a (W, H) array as returned by pygame.surfarray.
#   - Outputs: (M, 3) points in row-major scan order (y outer, x inner).
#
# generate_text_target(text, count, ...) -> np.ndarray (3 * count float32)
# generate_image_target(image, count, ...) -> Optional[np.ndarray]
#   - Outputs None when no image is available.
#   - Degrades to an all-zero buffer when the rasterizer fails.


def pixels_to_world(xs: np.ndarray, ys: np.ndarray, width: int, height: int, world_scale: float) -> np.ndarray:
    """Maps canvas pixels to centered, y-up, aspect-corrected world coordinates."""
    aspect = width / height
    points = np.zeros((len(xs), 3), dtype=np.float64)
    points[:, 0] = (np.asarray(xs) / width - 0.5) * world_scale * aspect
    points[:, 1] = (0.5 - np.asarray(ys) / height) * world_scale
    return points


def extract_points(alpha: np.ndarray, threshold: int, stride: int, world_scale: float) -> np.ndarray:
    """Samples an alpha mask every `stride` pixels and keeps values above `threshold`."""
    width, height = alpha.shape
    rows = np.asarray(alpha).T[::stride, ::stride]
    ys, xs = np.nonzero(rows > threshold)
    return pixels_to_world(xs * stride, ys * stride, width, height, world_scale)


def _ensure_font():
    if not pygame.font.get_init():
        pygame.font.init()


def render_text_mask(text: str, width: int, height: int, font_size: int, font_name: Optional[str] = None, bold: bool = True) -> np.ndarray:
    """Renders white text centered on a transparent canvas and returns its alpha mask."""
    _ensure_font()
    canvas = pygame.Surface((width, height), pygame.SRCALPHA)
    canvas.fill((0, 0, 0, 0))
    font = pygame.font.SysFont(font_name, font_size, bold=bold)
    glyphs = font.render(text or DEFAULT_TEXT, True, (255, 255, 255))
    canvas.blit(glyphs, glyphs.get_rect(center=(width // 2, height // 2)))
    return pygame.surfarray.array_alpha(canvas)


def letterbox(image_size: Tuple[int, int], canvas_size: Tuple[int, int]) -> Tuple[int, int, int, int]:
    """
    Fits an image into the canvas preserving its aspect ratio.

    Returns (offset_x, offset_y, draw_width, draw_height).
    """
    image_w, image_h = image_size
    width, height = canvas_size
    image_aspect = image_w / image_h
    canvas_aspect = width / height

    draw_w, draw_h = float(width), float(height)
    if image_aspect > canvas_aspect:
        draw_h = width / image_aspect
    else:
        draw_w = height * image_aspect

    draw_w = max(int(round(draw_w)), 1)
    draw_h = max(int(round(draw_h)), 1)
    return (width - draw_w) // 2, (height - draw_h) // 2, draw_w, draw_h


def render_image_mask(image: pygame.Surface, width: int, height: int) -> np.ndarray:
    """Letterboxes an image onto a transparent canvas and returns its alpha mask."""
    canvas = pygame.Surface((width, height), pygame.SRCALPHA)
    canvas.fill((0, 0, 0, 0))
    offset_x, offset_y, draw_w, draw_h = letterbox(image.get_size(), (width, height))
    try:
        scaled = pygame.transform.smoothscale(image, (draw_w, draw_h))
    except ValueError:
        # smoothscale only accepts 24 and 32 bit surfaces
        scaled = pygame.transform.scale(image, (draw_w, draw_h))
    canvas.blit(scaled, (offset_x, offset_y))
    return pygame.surfarray.array_alpha(canvas)


def generate_text_target(
    text: str,
    count: int,
    width: int = RASTER_WIDTH,
    height: int = RASTER_HEIGHT,
    font_size: int = 220,
    font_name: Optional[str] = None,
    threshold: int = 10,
    stride: int = 4,
    world_scale: float = WORLD_SCALE,
) -> np.ndarray:
    """Rasterizes `text` and resamples its foreground pixels to `count` points."""
    try:
        alpha = render_text_mask(text, width, height, font_size, font_name)
        points = extract_points(alpha, threshold, stride, world_scale)
    except pygame.error as e:
        logging.warning(f"Text rasterizer unavailable ({e}); text target collapses to the origin.")
        points = np.zeros((0, 3))

    logging.debug(f"Text target '{text}': {len(points)} raster samples for {count} particles.")
    return resample_to_count(points, count, TEXT_SEED + count, RESAMPLE_JITTER)


def generate_image_target(
    image: Optional[pygame.Surface],
    count: int,
    width: int = RASTER_WIDTH,
    height: int = RASTER_HEIGHT,
    alpha_threshold: int = 30,
    stride: int = 4,
    world_scale: float = WORLD_SCALE,
) -> Optional[np.ndarray]:
    """Samples the silhouette of a decoded image, or returns None without one."""
    if image is None:
        return None

    try:
        alpha = render_image_mask(image, width, height)
        points = extract_points(alpha, alpha_threshold, stride, world_scale)
    except pygame.error as e:
        logging.warning(f"Image rasterizer unavailable ({e}); image target collapses to the origin.")
        points = np.zeros((0, 3))

    logging.debug(f"Image target: {len(points)} raster samples for {count} particles.")
    return resample_to_count(points, count, IMAGE_SEED + count, RESAMPLE_JITTER)
