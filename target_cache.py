# target_cache.py
"""
Memoized target buffers, one per (mode, mode-specific parameters) key.

The cache belongs to one Simulation and to one particle count; the owner
clears it when the count changes.
"""
import logging
import numpy as np
from typing import Callable, Dict, Hashable, Optional

# --- Data Contracts ---
#
# class TargetCache:
#   - __init__(self, factory: Callable[[Hashable], Optional[np.ndarray]])
#   - get_or_create(self, key) -> Optional[np.ndarray]:
#     - Runs factory(key) synchronously on the first request for a key.
#     - A None result is returned but not stored, so the next request
#       retries (used while an image is not yet decoded).
#     - Invariants: stored buffers are read-only and never replaced
#       except through invalidate() or clear().
#   - invalidate(self, key) -> bool: drops one entry, True if present.
#   - clear(self) -> None: drops every entry.


class TargetCache:
    def __init__(self, factory: Callable[[Hashable], Optional[np.ndarray]]):
        self._factory = factory
        self._entries: Dict[Hashable, np.ndarray] = {}

    def get_or_create(self, key: Hashable) -> Optional[np.ndarray]:
        entry = self._entries.get(key)
        if entry is not None:
            return entry

        entry = self._factory(key)
        if entry is None:
            logging.debug(f"Target factory produced nothing for {key}; not cached.")
            return None

        entry.setflags(write=False)
        self._entries[key] = entry
        logging.info(f"Target generated and cached for {key} ({len(entry) // 3} points).")
        return entry

    def invalidate(self, key: Hashable) -> bool:
        removed = self._entries.pop(key, None) is not None
        if removed:
            logging.info(f"Target cache entry {key} invalidated.")
        return removed

    def clear(self) -> None:
        self._entries.clear()
        logging.debug("Target cache cleared.")

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
