"""
Conftest: shared setup for the particle morph tests.

1. Puts the repository root on sys.path so the flat modules import.
2. Selects SDL's dummy drivers so pygame rasterization runs headless.
3. Shared fixtures: simulation parameters and a synthetic silhouette.
"""

import os
import sys

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pygame
import pytest


@pytest.fixture
def sim_params():
    """Small particle count so each test builds its targets quickly."""
    return {
        "particle_count": 2000,
        "mode": "cloud",
        "text": "HI",
        "spring": 6.0,
        "damping": 0.92,
        "mouse_radius": 1.6,
        "mouse_force": 24.0,
        "swirl": False,
        "morph_duration": 0.8,
    }


@pytest.fixture
def silhouette():
    """A 200x100 transparent surface with an opaque disk in the middle."""
    pygame.init()
    surface = pygame.Surface((200, 100), pygame.SRCALPHA)
    surface.fill((0, 0, 0, 0))
    pygame.draw.circle(surface, (255, 255, 255, 255), (100, 50), 40)
    return surface
