# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleSystem class, which owns the flat
float32 buffers of one particle-count generation: positions, velocities
and colors, the home/from_home/to_home attractor buffers, and the
particle-to-target permutation. A count change builds a new
ParticleSystem through resized(); buffers are never resized in place.
"""
import logging
import numpy as np
from rng import SeededRng
from permutation import create_permutation, carry_over_permutation
from constants import BASE_COLOR, PERMUTATION_SEED, SPAWN_SEED, SPAWN_JITTER

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, count: int, target: np.ndarray, perm: Optional[np.ndarray] = None):
#     - Inputs:
#       - count: number of particles, >= 0.
#       - target: canonical target buffer of length 3 * count.
#       - perm: permutation of [0, count); a seeded one when omitted.
#     - Side Effects: allocates every buffer. Particle i starts at
#       target[perm[i]] plus spawn jitter, with home on the target itself
#       and the base color.
#     - Invariants:
#       - positions, velocities, colors, home, from_home, to_home are
#         float32 arrays of shape (3 * count,).
#       - perm is an int64 bijection over [0, count).
#
#   - resized(self, new_count: int, target: np.ndarray) -> ParticleSystem:
#     - Inputs: target, the active canonical target at new_count.
#     - Outputs: a new ParticleSystem. Overlapping particles keep their
#       position, velocity and color bit-for-bit and rest (home, from_home
#       and to_home all equal their position). New particles spawn on the
#       target through the carried-over permutation.


def permute_target(target: np.ndarray, perm: np.ndarray) -> np.ndarray:
    """Reorders a canonical target so that point i is the target of particle i."""
    return target.reshape(-1, 3)[perm].reshape(-1)


def spawn_jitter(count: int, amount: float = SPAWN_JITTER) -> np.ndarray:
    """Small deterministic offsets so freshly spawned particles do not start at rest on their home."""
    return ((SeededRng(SPAWN_SEED + count).uniform(count * 3) - 0.5) * amount).astype(np.float32)


class ParticleSystem:
    """
    A container for all particles, managing their state via NumPy arrays.
    """
    def __init__(self, count: int, target: np.ndarray, perm=None):
        if count < 0:
            raise ValueError(f"Particle count must be non-negative, got {count}.")
        if len(target) != count * 3:
            raise ValueError(
                f"Target holds {len(target) // 3} points but {count} particles were requested."
            )

        self.particle_count = count
        self.perm = create_permutation(count, PERMUTATION_SEED + count) if perm is None else np.asarray(perm, dtype=np.int64)

        homes = permute_target(target, self.perm).astype(np.float32)
        self.home = homes.copy()
        self.from_home = homes.copy()
        self.to_home = homes.copy()
        self.positions = homes + spawn_jitter(count)
        self.velocities = np.zeros(count * 3, dtype=np.float32)
        self.colors = np.tile(np.asarray(BASE_COLOR, dtype=np.float32), count)

        logging.info(f"ParticleSystem initialized with {count} particles.")
        logging.debug(
            f"Particle data arrays created. "
            f"Positions shape: {self.positions.shape}, "
            f"Permutation shape: {self.perm.shape}"
        )

    def resized(self, new_count: int, target: np.ndarray) -> "ParticleSystem":
        """Carries the overlapping particles into a new generation of size new_count."""
        perm = carry_over_permutation(self.perm, new_count)
        resized = ParticleSystem(new_count, target, perm)

        keep = min(self.particle_count, new_count) * 3
        resized.positions[:keep] = self.positions[:keep]
        resized.velocities[:keep] = self.velocities[:keep]
        resized.colors[:keep] = self.colors[:keep]
        # Rest carried particles where they are instead of resuming an old morph.
        resized.home[:keep] = self.positions[:keep]
        resized.from_home[:keep] = self.positions[:keep]
        resized.to_home[:keep] = self.positions[:keep]

        logging.info(
            f"Particle count changed {self.particle_count} -> {new_count}; "
            f"carried over {keep // 3} particles."
        )
        return resized

    def snapshot(self):
        """Copies of (positions, colors) for a renderer that outlives the frame."""
        return self.positions.copy(), self.colors.copy()
