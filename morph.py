# morph.py
"""
Eased transitions between home-position buffers.

A morph is fully described by its start time and duration; progress is
derived from the clock on every frame. While a morph runs, home is the
cubic ease-out interpolation of from_home toward to_home.
"""
import logging
import numpy as np
from constants import MORPH_DURATION

# --- Data Contracts ---
#
# class MorphController:
#   - __init__(self, duration: float = 0.8, start: float = 0.0)
#     - Raises ValueError for a non-positive duration.
#   - progress(now) -> float: clamp((now - start) / duration, 0, 1).
#   - ease(now) -> float: 1 - (1 - progress)^3, non-decreasing in now.
#   - is_morphing(now) -> bool: progress < 1.
#   - adopt(home, from_home, to_home, target, now) -> None:
#     - Side Effects: from_home <- home (the in-progress value),
#       to_home <- target, start <- now.
#   - update(home, from_home, to_home, now) -> None:
#     - Side Effects: home <- from_home + (to_home - from_home) * ease;
#       home <- to_home once the morph has finished.


def ease_out_cubic(progress: float) -> float:
    return 1.0 - (1.0 - progress) ** 3


class MorphController:
    def __init__(self, duration: float = MORPH_DURATION, start: float = 0.0):
        if duration <= 0:
            raise ValueError(f"Morph duration must be positive, got {duration}.")
        self.duration = float(duration)
        self.start = float(start)

    def progress(self, now: float) -> float:
        return min(max((now - self.start) / self.duration, 0.0), 1.0)

    def ease(self, now: float) -> float:
        return ease_out_cubic(self.progress(now))

    def is_morphing(self, now: float) -> bool:
        return self.progress(now) < 1.0

    def adopt(self, home: np.ndarray, from_home: np.ndarray, to_home: np.ndarray, target: np.ndarray, now: float) -> None:
        """Starts a morph from wherever home currently is toward `target`."""
        from_home[:] = home
        to_home[:] = target
        self.start = float(now)
        logging.debug(f"Morph started at t={now:.3f}s for {self.duration:.2f}s.")

    def update(self, home: np.ndarray, from_home: np.ndarray, to_home: np.ndarray, now: float) -> None:
        if not self.is_morphing(now):
            # Idle: home rests exactly on the target.
            home[:] = to_home
            return
        eased = self.ease(now)
        home[:] = from_home + (to_home - from_home) * np.float32(eased)
