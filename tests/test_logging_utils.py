"""Tests for logging helpers."""

import logging

from common.logging_utils import Timer, configure_logging, extra_context, is_debug_enabled


def test_extra_context_drops_none():
    assert extra_context(event="x", target=None, attempt=1) == {"event": "x", "attempt": 1}


def test_timer_measures_non_negative_duration():
    with Timer() as t:
        pass
    assert t.elapsed() >= 0
    assert t.duration_ms() >= 0


def test_configure_logging_reads_env(monkeypatch):
    root = logging.getLogger()
    previous = root.level
    monkeypatch.setenv("GOMODGATE_LOG_LEVEL", "warning")
    try:
        configure_logging()
        assert root.level == logging.WARNING
        configure_logging("debug")
        assert root.level == logging.DEBUG
        assert is_debug_enabled(logging.getLogger("proxy.test"))
    finally:
        root.setLevel(previous)
