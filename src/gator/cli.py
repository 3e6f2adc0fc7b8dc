from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from .commands import Command, State
from .config import load_preferences
from .errors import GatorError
from .handlers import build_commands
from .logs import resolve_level, setup_logging
from .render import set_color
from .store import FeedStore

app = typer.Typer(help="gator: a personal RSS aggregator", add_completion=False)
COMMANDS = build_commands()


@app.command(context_settings={"ignore_unknown_options": True})
def main(
    command: str = typer.Argument(..., help="One of: " + ", ".join(COMMANDS.names())),
    args: list[str] | None = typer.Argument(None, help="Positional arguments for the command", show_default=False),
    config_path: Path | None = typer.Option(None, "--config", help="Preferences file (default ~/.gatorconfig.json)"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    color: bool = typer.Option(False, "--color/--no-color", help="Enable ANSI colors in output"),
) -> None:
    set_color(color)
    try:
        loaded = load_preferences(config_path)
    except GatorError as exc:
        _fail(exc)
    setup_logging(resolve_level(log_level, loaded.prefs.settings.log_level))

    try:
        store = FeedStore.from_url(loaded.prefs.db_url)
    except GatorError as exc:
        _fail(exc)

    state = State(prefs=loaded.prefs, prefs_path=loaded.path, store=store)
    try:
        COMMANDS.run(state, Command(name=command, args=tuple(args or ())))
    except GatorError as exc:
        _fail(exc)
    finally:
        store.close()


def _fail(exc: GatorError) -> NoReturn:
    typer.echo(str(exc), err=True)
    raise typer.Exit(code=1)
