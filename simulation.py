# simulation.py
"""
Handles the core simulation logic and physics calculations.

This module defines the Simulation class, which owns one ParticleSystem,
resolves and caches the target of the active mode, drives morphs between
targets and advances the particles by one frame. Particles never interact
with each other: each one is pulled by a spring toward its home, pushed
or pulled by the pointer and optionally stirred by an ambient swirl.
"""
import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Hashable, Optional
from numba import jit

from particle import ParticleSystem, permute_target
from morph import MorphController
from target_cache import TargetCache
from shapes import generate_cloud_target, generate_circle_target, generate_heart_target
from raster import generate_text_target, generate_image_target
from content import ImageReady, ImageFailed, ImageResult
from constants import (
    MODES, MODE_CLOUD, MODE_TEXT, MODE_CIRCLE, MODE_HEART, MODE_IMAGE,
    DEFAULT_TEXT, BASE_COLOR, FAST_COLOR, SPEED_COLOR_SCALE,
    MAX_FRAME_DT, DAMPING_REFERENCE_HZ, POINTER_EPSILON, ATTRACT_DURATION,
    SWIRL_SPATIAL_FREQUENCY, SWIRL_TIME_FREQUENCY, SWIRL_STRENGTH,
    MORPH_DURATION, CIRCLE_RADIUS, HEART_SCALE, TEXT_FONT_SIZE, TEXT_STRIDE,
    TEXT_THRESHOLD, IMAGE_STRIDE, IMAGE_ALPHA_THRESHOLD, WORLD_SCALE
)

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, params: Dict[str, Any], now: float = 0.0):
#     - Inputs:
#       - params: the "simulation_parameters" section of config.json.
#         - "particle_count": int
#         - "mode": str, one of MODES
#         - "text": str
#         - "spring", "damping", "mouse_radius", "mouse_force": float
#         - "swirl": bool
#         - "morph_duration": float
#       - now: clock reading in seconds.
#     - Side Effects: builds the cloud-initialized ParticleSystem and adopts
#       the configured mode.
#
#   - step(self, frame_dt: float, now: float, pointer: PointerState) -> None:
#     - Side Effects: eases home, then integrates every particle once.
#     - Invariants: particle count and buffer identity do not change.
#
#   - set_mode / set_text / set_particle_count / on_image_result:
#     - Side Effects: adopt a new target, starting a morph from the
#       current home positions.


@dataclass
class SimParams:
    spring: float = 6.0
    damping: float = 0.92
    mouse_radius: float = 1.6
    mouse_force: float = 24.0

    @classmethod
    def from_dict(cls, params: Dict[str, Any]) -> "SimParams":
        return cls(
            spring=float(params.get('spring', cls.spring)),
            damping=float(params.get('damping', cls.damping)),
            mouse_radius=float(params.get('mouse_radius', cls.mouse_radius)),
            mouse_force=float(params.get('mouse_force', cls.mouse_force)),
        )


@dataclass
class PointerState:
    x: float = 0.0
    y: float = 0.0
    valid: bool = False


@jit(nopython=True)
def _integrate_numba(
    positions, velocities, colors, home, dt, spring, damping,
    radius, mouse_force, mx, my, has_pointer, attract,
    swirl, elapsed, base_color, fast_color
):
    """
    Numba-jitted semi-implicit Euler step over all particles.

    Every particle only reads its own slots, so the loop carries no
    cross-particle dependency.
    """
    count = positions.shape[0] // 3
    radius_sq = radius * radius
    direction = -1.0 if attract else 1.0

    for i in range(count):
        j = i * 3
        px = positions[j]
        py = positions[j + 1]
        pz = positions[j + 2]

        ax = (home[j] - px) * spring
        ay = (home[j + 1] - py) * spring
        az = (home[j + 2] - pz) * spring

        if has_pointer:
            dx = px - mx
            dy = py - my
            d2 = dx * dx + dy * dy
            if d2 < radius_sq:
                # Quadratic falloff: soft at the edge, strong near the pointer.
                d = np.sqrt(d2) + POINTER_EPSILON
                falloff = 1.0 - d / radius
                weight = falloff * falloff
                scale = mouse_force * weight * direction / d
                ax += dx * scale
                ay += dy * scale

        if swirl:
            az += np.sin((px + py) * SWIRL_SPATIAL_FREQUENCY + elapsed * SWIRL_TIME_FREQUENCY) * SWIRL_STRENGTH

        vx = (velocities[j] + ax * dt) * damping
        vy = (velocities[j + 1] + ay * dt) * damping
        vz = (velocities[j + 2] + az * dt) * damping

        velocities[j] = vx
        velocities[j + 1] = vy
        velocities[j + 2] = vz

        positions[j] = px + vx * dt
        positions[j + 1] = py + vy * dt
        positions[j + 2] = pz + vz * dt

        t = min(np.sqrt(vx * vx + vy * vy + vz * vz) * SPEED_COLOR_SCALE, 1.0)
        colors[j] = base_color[0] + (fast_color[0] - base_color[0]) * t
        colors[j + 1] = base_color[1] + (fast_color[1] - base_color[1]) * t
        colors[j + 2] = base_color[2] + (fast_color[2] - base_color[2]) * t


class Simulation:
    """
    Owns the particle state for one simulation instance and advances it
    once per frame.
    """
    def __init__(self, params: Dict[str, Any], now: float = 0.0):
        """
        Initializes the simulation environment.

        Args:
            params (Dict[str, Any]): Simulation parameters from config.
            now (float): Clock reading in seconds.
        """
        count = int(params.get('particle_count', 12000))
        mode = params.get('mode', MODE_CLOUD)

        # Validate config on initialization.
        if count < 0:
            msg = f"Configuration error: particle_count must be non-negative, got {count}."
            logging.critical(msg)
            raise ValueError(msg)
        if mode not in MODES:
            msg = f"Configuration error: unknown mode '{mode}'. Expected one of {MODES}."
            logging.critical(msg)
            raise ValueError(msg)

        self.sim = SimParams.from_dict(params)
        self.swirl_enabled = bool(params.get('swirl', False))
        self.text = params.get('text', DEFAULT_TEXT)
        self.mode = mode
        self.attract_until = float('-inf')
        self.start_time = float(now)

        self.image = None
        self.image_status = 'idle'

        self.morph = MorphController(float(params.get('morph_duration', MORPH_DURATION)), now)
        self._count = count
        self.cache = TargetCache(self._build_target)
        self._base_color = np.asarray(BASE_COLOR, dtype=np.float32)
        self._fast_color = np.asarray(FAST_COLOR, dtype=np.float32)

        cloud = self.cache.get_or_create((MODE_CLOUD,))
        self.particles = ParticleSystem(count, cloud)
        self.set_mode(mode, now)

        logging.info(f"Simulation initialized in '{self.mode}' mode with {count} particles.")

    @property
    def particle_count(self) -> int:
        return self.particles.particle_count

    @property
    def positions(self) -> np.ndarray:
        return self.particles.positions

    @property
    def colors(self) -> np.ndarray:
        return self.particles.colors

    @property
    def image_available(self) -> bool:
        """Image mode is selectable unless loading has failed."""
        return self.image_status != 'failed'

    # --- Targets ---

    def target_key(self, mode: Optional[str] = None) -> Hashable:
        mode = self.mode if mode is None else mode
        if mode == MODE_TEXT:
            return (MODE_TEXT, self.text)
        return (mode,)

    def _build_target(self, key: Hashable) -> Optional[np.ndarray]:
        mode = key[0]
        count = self._count
        if mode == MODE_CLOUD:
            return generate_cloud_target(count)
        if mode == MODE_TEXT:
            return generate_text_target(
                key[1], count, font_size=TEXT_FONT_SIZE, threshold=TEXT_THRESHOLD,
                stride=TEXT_STRIDE, world_scale=WORLD_SCALE,
            )
        if mode == MODE_CIRCLE:
            return generate_circle_target(count, radius=CIRCLE_RADIUS, filled=True)
        if mode == MODE_HEART:
            return generate_heart_target(count, scale=HEART_SCALE, filled=True)
        if mode == MODE_IMAGE:
            return generate_image_target(
                self.image, count, stride=IMAGE_STRIDE,
                alpha_threshold=IMAGE_ALPHA_THRESHOLD, world_scale=WORLD_SCALE,
            )
        raise ValueError(f"Unknown target mode '{mode}'.")

    def resolve_target(self) -> np.ndarray:
        """Canonical target of the active mode; image mode without an image yields the cloud."""
        target = self.cache.get_or_create(self.target_key())
        if target is None:
            logging.info(f"No target available for '{self.mode}' yet; using the cloud target.")
            target = self.cache.get_or_create((MODE_CLOUD,))
        return target

    def adopt_target(self, now: float) -> None:
        """Starts a morph from the current home positions toward the active target."""
        target = self.resolve_target()
        p = self.particles
        self.morph.adopt(p.home, p.from_home, p.to_home, permute_target(target, p.perm), now)

    # --- External inputs ---

    def set_mode(self, mode: str, now: float) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown mode '{mode}'. Expected one of {MODES}.")
        self.mode = mode
        if mode == MODE_IMAGE and self.image_status == 'idle':
            self.image_status = 'loading'
        logging.info(f"Mode set to '{mode}'.")
        self.adopt_target(now)

    def set_text(self, text: str, now: float) -> None:
        if text == self.text:
            return
        self.text = text
        if self.mode == MODE_TEXT:
            self.adopt_target(now)

    def set_particle_count(self, count: int, now: float) -> None:
        """Replaces the particle generation, carrying over the overlapping particles."""
        if count < 0:
            raise ValueError(f"Particle count must be non-negative, got {count}.")
        if count == self.particles.particle_count:
            return
        # Targets are generated for the new count from here on.
        self._count = count
        self.cache.clear()
        self.particles = self.particles.resized(count, self.resolve_target())
        self.adopt_target(now)

    def on_image_result(self, result: ImageResult, now: float) -> None:
        """Reacts to the one-shot outcome of the image load."""
        if isinstance(result, ImageReady):
            self.image = result.image
            self.image_status = 'ready'
            self.cache.invalidate(self.target_key(MODE_IMAGE))
            logging.info("Image ready for image mode.")
        elif isinstance(result, ImageFailed):
            self.image_status = 'failed'
            logging.warning(f"Image load failed ({result.reason}); image mode shows the cloud.")
        else:
            raise TypeError(f"Unexpected image result {result!r}.")

        if self.mode == MODE_IMAGE:
            self.adopt_target(now)

    def trigger_attract(self, now: float) -> None:
        """Makes the pointer force attract for the next ATTRACT_DURATION seconds."""
        self.attract_until = now + ATTRACT_DURATION

    def toggle_swirl(self) -> bool:
        self.swirl_enabled = not self.swirl_enabled
        logging.info(f"Swirl {'enabled' if self.swirl_enabled else 'disabled'}.")
        return self.swirl_enabled

    # --- Frame ---

    def step(self, frame_dt: float, now: float, pointer: PointerState) -> None:
        """
        Executes one frame of the simulation.
        """
        p = self.particles
        dt = min(frame_dt, MAX_FRAME_DT)

        # 1. Ease home toward the active target (runs every frame)
        self.morph.update(p.home, p.from_home, p.to_home, now)

        # 2. Integrate springs, pointer and swirl (using Numba)
        damping = self.sim.damping ** (dt * DAMPING_REFERENCE_HZ)
        _integrate_numba(
            p.positions, p.velocities, p.colors, p.home,
            dt, self.sim.spring, damping,
            self.sim.mouse_radius, self.sim.mouse_force,
            pointer.x, pointer.y, pointer.valid, self.attract_until > now,
            self.swirl_enabled, now - self.start_time,
            self._base_color, self._fast_color,
        )
