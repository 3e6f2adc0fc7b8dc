from __future__ import annotations

import logging

from rich.logging import RichHandler

from gator.logs import resolve_level, setup_logging


def test_resolve_level_precedence(monkeypatch):
    monkeypatch.delenv("GATOR_LOG_LEVEL", raising=False)
    assert resolve_level(None) == "INFO"
    assert resolve_level(None, "warning") == "WARNING"
    monkeypatch.setenv("GATOR_LOG_LEVEL", "error")
    assert resolve_level(None, "warning") == "ERROR"
    assert resolve_level("debug", "warning") == "DEBUG"


def test_setup_logging_installs_rich_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("DEBUG")
        assert any(isinstance(handler, RichHandler) for handler in root.handlers)
        assert root.level == logging.DEBUG
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
