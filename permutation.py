# permutation.py
"""
Particle index to target-sample index mappings.

A seeded shuffle decouples particle order from the raster order of the
target samples, so a morph diffuses across the whole shape instead of
sweeping through it line by line.
"""
import logging
import numpy as np
from numba import jit
from rng import SeededRng

# --- Data Contracts ---
#
# create_permutation(count: int, seed: int) -> np.ndarray:
#   - Outputs: int64 array of length count.
#   - Invariants: a bijection over [0, count); identical for equal
#     (count, seed).
#
# carry_over_permutation(old: np.ndarray, new_count: int) -> np.ndarray:
#   - Outputs: int64 array of length new_count.
#   - Invariants: a bijection over [0, new_count) whatever the contents of
#     old (out-of-range or duplicate entries are replaced).


@jit(nopython=True)
def _shuffle_numba(perm, draws):
    """Fisher-Yates from the last index down to 1, consuming one draw per swap."""
    k = 0
    for i in range(perm.shape[0] - 1, 0, -1):
        j = int(draws[k] * (i + 1))
        k += 1
        tmp = perm[i]
        perm[i] = perm[j]
        perm[j] = tmp


def create_permutation(count: int, seed: int) -> np.ndarray:
    """Returns a seeded random permutation of [0, count)."""
    perm = np.arange(count, dtype=np.int64)
    if count > 1:
        draws = SeededRng(seed).uniform(count - 1)
        _shuffle_numba(perm, draws)
    return perm


def carry_over_permutation(old: np.ndarray, new_count: int) -> np.ndarray:
    """
    Builds a permutation of [0, new_count) that keeps as much of `old` as fits.

    Entries of `old` for the overlapping particles are kept when they are in
    range and not already taken. Every other slot receives the lowest unused
    target index, and identity only if none is left.
    """
    new_perm = np.full(new_count, -1, dtype=np.int64)
    used = np.zeros(new_count, dtype=bool)
    overlap = min(len(old), new_count)

    kept = 0
    for i in range(overlap):
        value = int(old[i])
        if 0 <= value < new_count and not used[value]:
            new_perm[i] = value
            used[value] = True
            kept += 1

    free = np.flatnonzero(~used)
    cursor = 0
    for i in range(new_count):
        if new_perm[i] >= 0:
            continue
        if cursor < len(free):
            new_perm[i] = free[cursor]
            cursor += 1
        else:
            new_perm[i] = i

    logging.debug(
        f"Permutation carried over: kept {kept}/{overlap} mappings, "
        f"filled {new_count - kept} slots."
    )
    return new_perm
