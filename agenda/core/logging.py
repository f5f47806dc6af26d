"""Centralized logging configuration for the application."""

from __future__ import annotations

import logging
import sys
from typing import Union


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure logging for the application.

    This should be called once at application startup. All subsequent calls
    to logging.getLogger() will use this configuration.

    Args:
        level: Logging level, as a number or a level name such as "DEBUG"
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any existing configuration
    )
    # Quiet per-request httpx logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
