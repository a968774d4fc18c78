"""Logging helpers shared by the proxy and the CLI.

Keeps the root logger setup in one place and provides small utilities for
structured DEBUG traces (``extra_context``) and elapsed-time measurement.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger.

    The level comes from ``level`` when given, otherwise from the
    GOMODGATE_LOG_LEVEL environment variable, defaulting to INFO.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True if DEBUG records would be emitted by logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records.

    None values are dropped so handlers only see populated fields.
    """
    return {k: v for k, v in kwargs.items() if v is not None}


class Timer:
    """Context manager measuring wall-clock time with a monotonic clock."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.monotonic()
        self._end = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._end = time.monotonic()

    def elapsed(self) -> float:
        """Seconds elapsed since entry, or total duration after exit."""
        end = self._end if self._end is not None else time.monotonic()
        return end - self._start

    def duration_ms(self) -> int:
        return int(self.elapsed() * 1000)
