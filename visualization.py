# visualization.py
"""
Handles the visualization of the particle morph using Pygame.

The Visualizer is the reference host for the simulation core: it reads
the position and color buffers once per frame, turns the mouse into a
pointer on the z = 0 world plane and maps keys and clicks onto the
simulation's external inputs.
"""
import logging
import math
import pygame
import numpy as np
from constants import (
    MODES, MODE_IMAGE, MAX_TEXT_LENGTH, MIN_PARTICLES, MAX_PARTICLES, PARTICLE_STEP,
    MIN_POINTER_RADIUS, MAX_POINTER_RADIUS, POINTER_RADIUS_STEP
)
from simulation import PointerState
from typing import Tuple, Optional

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from simulation import Simulation


# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, vis_params: dict):
#     - Inputs: the "visualization" section of config.json.
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - pointer_state(self) -> PointerState:
#     - Outputs: the mouse projected onto the z = 0 plane; invalid while
#       the window has no mouse focus.
#
#   - draw(self, simulation: "Simulation", now: float, fps: float) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: handles Pygame events (which may change the
#       simulation's mode, text, count, pointer radius, swirl and
#       attraction), renders particles and the HUD.

BACKGROUND_COLOR = (5, 7, 12)
MOTION_BLUR_ALPHA = 90
HUD_BACKGROUND = (20, 24, 32, 170)
TEXT_COLOR = (220, 228, 240)
HINT_COLOR = (140, 150, 165)

CAMERA_DISTANCE = 14.0
CAMERA_FOV_DEG = 50.0


def focal_length(height: int) -> float:
    """Pixels per world unit at unit depth for the vertical field of view."""
    return (height / 2.0) / math.tan(math.radians(CAMERA_FOV_DEG) / 2.0)


def world_to_screen(positions: np.ndarray, width: int, height: int):
    """
    Projects flat xyz positions into pixel coordinates.

    Returns (xs, ys, visible) where visible masks points in front of the
    camera and inside the window.
    """
    pts = positions.reshape(-1, 3)
    depth = CAMERA_DISTANCE - pts[:, 2]
    in_front = depth > 0.1
    scale = focal_length(height) / np.where(in_front, depth, 1.0)
    xs = (width / 2.0 + pts[:, 0] * scale).astype(np.int64)
    ys = (height / 2.0 - pts[:, 1] * scale).astype(np.int64)
    visible = in_front & (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    return xs, ys, visible


def screen_to_world(sx: float, sy: float, width: int, height: int) -> Tuple[float, float]:
    """Intersects the camera ray through a pixel with the z = 0 plane."""
    f = focal_length(height)
    return (sx - width / 2.0) * CAMERA_DISTANCE / f, (height / 2.0 - sy) * CAMERA_DISTANCE / f


class Visualizer:
    """
    Renders the particle buffers and forwards user input to the simulation.
    """
    def __init__(self, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params if vis_params is not None else {}
        pygame.init()
        pygame.font.init()

        if vis_params.get('fullscreen', False):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width, height = vis_params.get('width', 1280), vis_params.get('height', 720)
            self.screen = pygame.display.set_mode((width, height))

        self.width = width
        self.height = height
        pygame.display.set_caption("Particle Morph")

        # Fading the previous frame instead of clearing it leaves short trails.
        self.sim_surface = pygame.Surface((width, height))
        self.sim_surface.fill(BACKGROUND_COLOR)
        self.blur_surface = pygame.Surface((width, height), pygame.SRCALPHA)
        self.blur_surface.fill((*BACKGROUND_COLOR, MOTION_BLUR_ALPHA))

        try:
            self.font_main = pygame.font.SysFont("Segoe UI", 15)
            self.font_small = pygame.font.SysFont("Segoe UI", 13)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_main = pygame.font.SysFont(None, 20)
            self.font_small = pygame.font.SysFont(None, 17)

        self.editing_text = False
        self.text_buffer = ""

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def pointer_state(self) -> PointerState:
        if not pygame.mouse.get_focused():
            return PointerState(valid=False)
        sx, sy = pygame.mouse.get_pos()
        x, y = screen_to_world(sx, sy, self.width, self.height)
        return PointerState(x, y, True)

    def _handle_text_key(self, event, simulation: "Simulation", now: float):
        if event.key in (pygame.K_RETURN, pygame.K_TAB, pygame.K_ESCAPE):
            self.editing_text = False
            logging.info(f"Text editing finished: '{simulation.text}'.")
            return
        if event.key == pygame.K_BACKSPACE:
            self.text_buffer = self.text_buffer[:-1]
        elif event.unicode and event.unicode.isprintable():
            self.text_buffer = (self.text_buffer + event.unicode.upper())[:MAX_TEXT_LENGTH]
        else:
            return
        simulation.set_text(self.text_buffer, now)

    def _handle_key(self, event, simulation: "Simulation", now: float) -> bool:
        key = event.unicode
        if event.key == pygame.K_ESCAPE:
            logging.info("ESC key pressed. Shutting down visualizer.")
            return False

        if key and '1' <= key <= '5':
            mode = MODES[int(key) - 1]
            if mode == MODE_IMAGE and not simulation.image_available:
                logging.info("Image mode unavailable: no image could be loaded.")
                return True
            simulation.set_mode(mode, now)
        elif key in ('+', '='):
            count = min(simulation.particle_count + PARTICLE_STEP, MAX_PARTICLES)
            simulation.set_particle_count(max(count, MIN_PARTICLES), now)
        elif key in ('-', '_'):
            count = max(simulation.particle_count - PARTICLE_STEP, MIN_PARTICLES)
            simulation.set_particle_count(min(count, MAX_PARTICLES), now)
        elif key in ('[', ']'):
            delta = POINTER_RADIUS_STEP if key == ']' else -POINTER_RADIUS_STEP
            radius = simulation.sim.mouse_radius + delta
            simulation.sim.mouse_radius = float(np.clip(radius, MIN_POINTER_RADIUS, MAX_POINTER_RADIUS))
        elif key in ('s', 'S'):
            simulation.toggle_swirl()
        elif event.key == pygame.K_TAB:
            self.editing_text = True
            self.text_buffer = simulation.text
            logging.info("Text editing started.")
        return True

    def _draw_particles(self, simulation: "Simulation"):
        xs, ys, visible = world_to_screen(simulation.positions, self.width, self.height)
        colors = (simulation.colors.reshape(-1, 3)[visible] * 255).clip(0, 255).astype(np.uint8)
        pixels = pygame.surfarray.pixels3d(self.sim_surface)
        pixels[xs[visible], ys[visible]] = colors
        # Release the surface lock before blitting.
        del pixels

    def _draw_hud(self, simulation: "Simulation", fps: float):
        text_label = f"{simulation.text}_" if self.editing_text else simulation.text
        lines = [
            (f"FPS {fps:5.1f}   Mode {simulation.mode}", self.font_main, TEXT_COLOR),
            (f"Particles {simulation.particle_count}", self.font_main, TEXT_COLOR),
            (f"Text {text_label}", self.font_main, TEXT_COLOR),
            (f"Spring {simulation.sim.spring:.2f}   Damping {simulation.sim.damping:.3f}", self.font_small, TEXT_COLOR),
            (f"Radius {simulation.sim.mouse_radius:.2f}   Force {simulation.sim.mouse_force:.1f}", self.font_small, TEXT_COLOR),
            (f"Swirl {'On' if simulation.swirl_enabled else 'Off'}", self.font_small, TEXT_COLOR),
            ("1-5 modes  +/- count  [ ] radius  S swirl  Tab text  click attract", self.font_small, HINT_COLOR),
        ]
        if not simulation.image_available:
            lines.append(("Image not found. Image mode falls back to cloud.", self.font_small, HINT_COLOR))

        surfaces = [font.render(line, True, color) for line, font, color in lines]
        panel_w = max(s.get_width() for s in surfaces) + 20
        panel_h = sum(s.get_height() + 2 for s in surfaces) + 16
        panel = pygame.Surface((panel_w, panel_h), pygame.SRCALPHA)
        pygame.draw.rect(panel, HUD_BACKGROUND, panel.get_rect(), border_radius=6)
        y = 8
        for surf in surfaces:
            panel.blit(surf, (10, y))
            y += surf.get_height() + 2
        self.screen.blit(panel, (12, 12))

    def draw(self, simulation: "Simulation", now: float, fps: float) -> bool:
        """
        Draws all particles and UI, and handles events.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if self.editing_text:
                    self._handle_text_key(event, simulation, now)
                elif not self._handle_key(event, simulation, now):
                    return False

            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                simulation.trigger_attract(now)

        self.sim_surface.blit(self.blur_surface, (0, 0))
        self._draw_particles(simulation)
        self.screen.blit(self.sim_surface, (0, 0))
        self._draw_hud(simulation, fps)

        pygame.display.flip()
        return True

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
