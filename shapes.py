# shapes.py
"""
Procedural shape targets: cloud, circle and heart.

Each generator returns a flat float32 buffer holding exactly `count`
points and draws all of its randomness from a SeededRng seeded with
(kind offset + count). Draws are taken in blocks and reshaped so that row
i holds the values particle i consumes, in the order it consumes them.
"""
import logging
import numpy as np
from rng import SeededRng
from constants import (
    CLOUD_SEED, CIRCLE_SEED, HEART_SEED, CLOUD_SPREAD_XY, CLOUD_SPREAD_Z
)

# --- Data Contracts ---
#
# generate_cloud_target(count, spread_xy=12, spread_z=4) -> np.ndarray
# generate_circle_target(count, radius=4, filled=True, jitter=0.015) -> np.ndarray
# generate_heart_target(count, scale=0.27, filled=True, jitter=0.02, ...) -> np.ndarray
#   - Outputs: flat float32 array of length 3 * count.
#   - Invariants: byte-identical for identical arguments; the heart always
#     yields count points, however low the rejection hit rate is.

TAU = np.pi * 2.0

# Bounding box of the implicit heart (x^2 + y^2 - 1)^3 - x^2 y^3 <= 0.
HEART_BOX_X = (-1.2, 1.2)
HEART_BOX_Y = (-1.1, 1.35)
# Maps implicit-curve units onto the parametric curve's units
# (x = 16 sin^3 t spans +-16, the cusp sits at y = -17).
HEART_IMPLICIT_X_SCALE = 14.0
HEART_IMPLICIT_Y_SCALE = 13.0
HEART_IMPLICIT_Y_SHIFT = -4.0
HEART_ATTEMPTS_PER_POINT = 80


def generate_cloud_target(count: int, spread_xy: float = CLOUD_SPREAD_XY, spread_z: float = CLOUD_SPREAD_Z) -> np.ndarray:
    """Uniform points in a box centered at the origin."""
    draws = SeededRng(CLOUD_SEED + count).uniform(count * 3).reshape(count, 3)
    out = np.empty((count, 3), dtype=np.float64)
    out[:, 0] = (draws[:, 0] - 0.5) * spread_xy
    out[:, 1] = (draws[:, 1] - 0.5) * spread_xy
    out[:, 2] = (draws[:, 2] - 0.5) * spread_z
    return out.reshape(-1).astype(np.float32)


def generate_circle_target(count: int, radius: float = 4.0, filled: bool = True, jitter: float = 0.015) -> np.ndarray:
    """
    Points on a ring, or spread over a disk when `filled`.

    The disk radius is radius * sqrt(u), which keeps the areal density
    uniform instead of crowding the center.
    """
    per_point = 5 if filled else 4
    draws = SeededRng(CIRCLE_SEED + count).uniform(count * per_point).reshape(count, per_point)

    angle = draws[:, 0] * TAU
    if filled:
        r = np.sqrt(draws[:, 1]) * radius
        noise = draws[:, 2:5]
    else:
        r = np.full(count, float(radius))
        noise = draws[:, 1:4]

    out = np.empty((count, 3), dtype=np.float64)
    out[:, 0] = np.cos(angle) * r + (noise[:, 0] - 0.5) * jitter
    out[:, 1] = np.sin(angle) * r + (noise[:, 1] - 0.5) * jitter
    out[:, 2] = (noise[:, 2] - 0.5) * jitter
    return out.reshape(-1).astype(np.float32)


def heart_curve(t: np.ndarray):
    """Parametric heart: x = 16 sin^3 t, y = 13 cos t - 5 cos 2t - 2 cos 3t - cos 4t."""
    x = 16.0 * np.sin(t) ** 3
    y = 13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)
    return x, y


def _inside_heart(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    return (x * x + y * y - 1.0) ** 3 - x * x * y ** 3 <= 0.0


def _sample_heart_interior(rng: SeededRng, count: int, max_attempts: int) -> np.ndarray:
    """Rejection-samples up to `count` interior points, in curve units."""
    accepted = np.empty((count, 2), dtype=np.float64)
    filled = 0
    attempts = 0

    while filled < count and attempts < max_attempts:
        batch = min(max(2 * (count - filled), 64), max_attempts - attempts)
        draws = rng.uniform(batch * 2).reshape(batch, 2)
        attempts += batch

        x = HEART_BOX_X[0] + draws[:, 0] * (HEART_BOX_X[1] - HEART_BOX_X[0])
        y = HEART_BOX_Y[0] + draws[:, 1] * (HEART_BOX_Y[1] - HEART_BOX_Y[0])
        hits = np.flatnonzero(_inside_heart(x, y))[:count - filled]

        accepted[filled:filled + len(hits), 0] = x[hits] * HEART_IMPLICIT_X_SCALE
        accepted[filled:filled + len(hits), 1] = y[hits] * HEART_IMPLICIT_Y_SCALE + HEART_IMPLICIT_Y_SHIFT
        filled += len(hits)

    logging.debug(f"Heart rejection sampling: {filled}/{count} points in {attempts} attempts.")
    return accepted[:filled]


def generate_heart_target(
    count: int,
    scale: float = 0.27,
    filled: bool = True,
    jitter: float = 0.02,
    y_offset: float = -2.0,
    attempts_per_point: int = HEART_ATTEMPTS_PER_POINT,
) -> np.ndarray:
    """
    Heart-shaped target.

    The filled variant rejection-samples the implicit heart inside its
    bounding box with a budget of attempts_per_point * count tries. Slots the
    budget leaves empty are filled from the parametric curve pulled toward
    the center by sqrt(u). The outline variant uses the parametric curve only.
    Curve units are mapped to world space as (x * scale, (y + y_offset) * scale).
    """
    rng = SeededRng(HEART_SEED + count)
    points = np.empty((count, 2), dtype=np.float64)

    done = 0
    if filled and count > 0:
        interior = _sample_heart_interior(rng, count, attempts_per_point * count)
        done = len(interior)
        points[:done] = interior

    remaining = count - done
    if remaining > 0:
        if filled:
            logging.warning(
                f"Heart rejection budget exhausted; filling {remaining} points "
                f"from the parametric curve."
            )
            draws = rng.uniform(remaining * 2).reshape(remaining, 2)
            blend = np.sqrt(draws[:, 1])
        else:
            draws = rng.uniform(remaining).reshape(remaining, 1)
            blend = np.ones(remaining)
        hx, hy = heart_curve(draws[:, 0] * TAU)
        points[done:, 0] = hx * blend
        points[done:, 1] = hy * blend

    noise = rng.uniform(count * 3).reshape(count, 3)
    out = np.empty((count, 3), dtype=np.float64)
    out[:, 0] = points[:, 0] * scale + (noise[:, 0] - 0.5) * jitter
    out[:, 1] = (points[:, 1] + y_offset) * scale + (noise[:, 1] - 0.5) * jitter
    out[:, 2] = (noise[:, 2] - 0.5) * jitter
    return out.reshape(-1).astype(np.float32)
