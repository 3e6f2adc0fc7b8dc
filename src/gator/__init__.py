"""gator: a personal RSS aggregator CLI."""

__version__ = "0.1.0"

__all__ = [
    "cli",
    "commands",
    "config",
    "dates",
    "errors",
    "feeds",
    "handlers",
    "ingest",
    "logs",
    "models",
    "render",
    "scraper",
    "store",
]
