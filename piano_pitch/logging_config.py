"""Centralized logging configuration for Piano Pitch.

This module provides a consistent way to configure logging across the application.
"""

import logging
import sys
from typing import Optional

# Log levels for different modules
MODULE_LOG_LEVELS = {
    # Core modules
    "piano_pitch": logging.INFO,
    "piano_pitch.core": logging.INFO,
    # Pipeline components
    "piano_pitch.audio": logging.INFO,  # Set to DEBUG for per-frame estimator output
    "piano_pitch.detection": logging.INFO,
    "piano_pitch.note_utils": logging.INFO,
    "piano_pitch.ui": logging.WARNING,  # Display redraws are noisy
    "piano_pitch.cli": logging.INFO,
    # Libraries/third-party
    "aubio": logging.ERROR,
    # Root logger
    "": logging.ERROR,
}

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Shared console handler
_console_handler: Optional[logging.Handler] = None


def setup_logging(level: Optional[str] = None) -> None:
    """Set up logging configuration for the application.

    Args:
        level: If provided, override all 'piano_pitch' log levels with this level (e.g., "DEBUG").
    """
    global _console_handler

    # Create a single, shared console handler if it doesn't exist. Logs go to
    # stderr; stdout carries the command output and the keyboard display.
    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stderr)
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    log_levels = MODULE_LOG_LEVELS.copy()
    if level:
        numeric_level = logging.getLevelName(level.upper())
        if isinstance(numeric_level, int):
            for module_name in log_levels:
                if module_name.startswith("piano_pitch"):
                    log_levels[module_name] = numeric_level
        else:
            logging.getLogger(__name__).error(f"Invalid log level: {level}")

    # Only the package root and the root logger get the handler; child
    # loggers propagate up to it.
    for module_name, module_level in log_levels.items():
        logger = logging.getLogger(module_name)
        logger.setLevel(module_level)
        if module_name in ("piano_pitch", "aubio", ""):
            for handler in logger.handlers[:]:
                logger.removeHandler(handler)
            logger.addHandler(_console_handler)
            logger.propagate = False

    logging.getLogger("piano_pitch").info("Logging configuration complete")
