# resample.py
"""
Normalizes a variable-length point list to exactly `count` points.

Raster generators produce however many foreground samples the content has;
the particle buffers need exactly one target point per particle.
"""
import numpy as np
from rng import SeededRng

# --- Data Contracts ---
#
# resample_to_count(points, count: int, seed: int = 1, jitter: float = 0.02) -> np.ndarray:
#   - Inputs:
#     - points: sequence of 3-vectors, or an (M, 3) array.
#     - count: number of output points, >= 0.
#   - Outputs: flat float32 array of length 3 * count.
#   - Invariants:
#     - M == 0: all zeros.
#     - M >= count: out[i] == points[floor(i * M / count)], no randomness.
#     - M < count: out[i] == points[i % M] + per-axis offset in
#       [-jitter / 2, +jitter / 2).


def resample_to_count(points, count: int, seed: int = 1, jitter: float = 0.02) -> np.ndarray:
    out = np.zeros(count * 3, dtype=np.float32)
    src = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    available = src.shape[0]

    if available == 0 or count == 0:
        return out

    if available >= count:
        # Stride subsampling
        step = available / count
        idx = np.floor(np.arange(count) * step).astype(np.int64)
        out[:] = src[idx].reshape(-1)
        return out

    # Cyclic replication, jittered so copies of a point do not stack.
    idx = np.arange(count) % available
    offsets = (SeededRng(seed).uniform(count * 3) - 0.5) * jitter
    out[:] = (src[idx].reshape(-1) + offsets)
    return out
