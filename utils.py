# utils.py
"""
Utility functions for the simulation framework.

This module provides helpers, such as logging setup, configuration
loading and a frame-rate meter, that are used across different parts of
the application but do not belong to a specific domain like physics or
rendering.
"""
import logging
import logging.handlers
import json
import os
import numpy as np
from typing import Dict, Any, Optional

# --- Data Contracts ---
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: A dictionary containing a "logging" key with "level",
#       "format", and "log_file" sub-keys.
#   - Side Effects: Configures the root Python logger with a console
#     handler and a rotating file handler.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Raises FileNotFoundError / json.JSONDecodeError after logging them.
#
# class FpsMeter:
#   - tick(self, dt: float) -> Optional[float]:
#     - Outputs: the mean of the last `window` frame rates every
#       `report_every` ticks, None otherwise.

def setup_logging(config: Dict[str, Any]) -> None:
    """
    Configures the logging system from a configuration dictionary.

    Sets up logging to both the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_format = log_config.get('format', '%(asctime)s - %(levelname)s - %(message)s')
    log_file_path = log_config.get('log_file', 'logs/particle_morph.log')

    # Ensure the log directory exists
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    # Clear existing handlers to avoid duplication
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Rotates when the log reaches 1MB, keeps 5 backup logs.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024*1024, backupCount=5
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    logging.info("Logging system initialized.")
    logging.debug(f"Log level set to {log_level}.")
    logging.debug(f"Log file path: {log_file_path}")

def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logging.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise


class FpsMeter:
    """Rolling average of instantaneous frame rates."""
    def __init__(self, window: int = 30, report_every: int = 5):
        self.samples = np.zeros(window, dtype=np.float32)
        self.index = 0
        self.filled = 0
        self.ticks = 0
        self.report_every = report_every

    def tick(self, dt: float) -> Optional[float]:
        self.samples[self.index] = 1.0 / max(dt, 1e-4)
        self.index = (self.index + 1) % len(self.samples)
        self.filled = min(self.filled + 1, len(self.samples))
        self.ticks += 1
        if self.ticks % self.report_every != 0:
            return None
        return float(self.samples[:self.filled].mean())
