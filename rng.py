# rng.py
"""
Deterministic uniform random numbers from a 32-bit integer seed.

The generator is a mulberry32 variant: the state advances by a fixed odd
constant on every draw and is then scrambled by two xor-shift/multiply
rounds. The state is a plain integer, so the core step is a pure function
and two generators built from the same seed are bit-for-bit identical.
"""
import numpy as np
from numba import jit

# --- Data Contracts ---
#
# rng_new(seed: int) -> int
#   - Outputs: initial state, the seed reduced to 32 bits.
#
# rng_next(state: int) -> Tuple[float, int]
#   - Outputs: a float in [0, 1) and the next state.
#   - Invariants: pure; equal states always yield equal outputs.
#
# class SeededRng:
#   - __call__() -> float: next value, advancing the internal state.
#   - uniform(n: int) -> np.ndarray: the next n values as float64, in the
#     same order as n consecutive calls.

MASK32 = 0xFFFFFFFF
INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296.0


@jit(nopython=True)
def _imul32(a, b):
    """32-bit wrapping multiply, split in 16-bit halves so no intermediate overflows int64."""
    low = a * (b & 0xFFFF)
    high = ((a * (b >> 16)) & 0xFFFF) << 16
    return (low + high) & MASK32


@jit(nopython=True)
def _mulberry_step(state):
    state = (state + INCREMENT) & MASK32
    t = state
    t = _imul32(t ^ (t >> 15), t | 1)
    t ^= (t + _imul32(t ^ (t >> 7), t | 61)) & MASK32
    value = ((t ^ (t >> 14)) & MASK32) / TWO_POW_32
    return value, state


@jit(nopython=True)
def _fill_uniform(state, out):
    for i in range(out.shape[0]):
        value, state = _mulberry_step(state)
        out[i] = value
    return state


def rng_new(seed: int) -> int:
    """Creates a generator state from an integer seed."""
    return int(seed) & MASK32


def rng_next(state: int):
    """Returns (value in [0, 1), next state)."""
    value, new_state = _mulberry_step(state)
    return float(value), int(new_state)


class SeededRng:
    """
    Stateful convenience wrapper around rng_next.

    Calling the instance draws one value; uniform(n) draws a block through
    the compiled loop, which is what the target generators use.
    """
    def __init__(self, seed: int):
        self.state = rng_new(seed)

    def __call__(self) -> float:
        value, self.state = rng_next(self.state)
        return value

    def uniform(self, n: int) -> np.ndarray:
        out = np.empty(max(int(n), 0), dtype=np.float64)
        self.state = int(_fill_uniform(self.state, out))
        return out
