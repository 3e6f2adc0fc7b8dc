from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from .config import Preferences, save_preferences
from .errors import NoCurrentUserError, NotFoundError, UnknownCommandError, UnknownUserError, UsageError
from .models import User
from .store import FeedStore

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class Command:
    name: str
    args: tuple[str, ...] = ()


@dataclass(slots=True)
class State:
    """Everything a handler may touch during one CLI invocation."""

    prefs: Preferences
    prefs_path: Path
    store: FeedStore

    def set_user(self, name: str) -> None:
        prefs = self.prefs.with_user(name)
        save_preferences(prefs, self.prefs_path)
        self.prefs = prefs


Handler = Callable[[State, Command], Any]
UserHandler = Callable[[State, Command, User], Any]


@dataclass(slots=True)
class Commands:
    handlers: dict[str, Handler] = field(default_factory=dict)

    def register(self, name: str, handler: Handler) -> None:
        self.handlers[name] = handler

    def run(self, state: State, command: Command) -> Any:
        handler = self.handlers.get(command.name)
        if handler is None:
            raise UnknownCommandError(command.name)
        log.debug("Running command %s with %d args", command.name, len(command.args))
        return handler(state, command)

    def names(self) -> list[str]:
        return sorted(self.handlers)


def logged_in(handler: UserHandler) -> Handler:
    """Resolve the current user on every call and pass it to ``handler``."""

    @functools.wraps(handler)
    def wrapper(state: State, command: Command) -> Any:
        name = state.prefs.current_user_name
        if not name:
            raise NoCurrentUserError()
        try:
            user = state.store.get_user(name)
        except NotFoundError as exc:
            raise UnknownUserError(name) from exc
        return handler(state, command, user)

    return wrapper


def require_args(command: Command, *, exactly: int | None = None, at_most: int | None = None, usage: str) -> None:
    count = len(command.args)
    if exactly is not None and count != exactly:
        raise UsageError(f"usage: {command.name} {usage}".rstrip())
    if at_most is not None and count > at_most:
        raise UsageError(f"usage: {command.name} {usage}".rstrip())
