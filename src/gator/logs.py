from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV_VAR = "GATOR_LOG_LEVEL"
NOISY_LOGGERS = ("urllib3", "requests", "sqlalchemy.engine")


def resolve_level(explicit: str | None, configured: str | None = None) -> str:
    for candidate in (explicit, os.environ.get(LOG_LEVEL_ENV_VAR), configured):
        if candidate:
            return candidate.upper()
    return "INFO"


def setup_logging(level: str = "INFO", *, suppress_noisy: bool = True) -> None:
    """Send log records to stderr through rich, replacing any earlier handlers."""
    handler = RichHandler(
        console=Console(stderr=True, no_color=True),
        show_path=False,
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if suppress_noisy:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
