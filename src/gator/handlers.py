from __future__ import annotations

import logging
from datetime import timedelta

from .commands import Command, Commands, State, logged_in, require_args
from .config import format_duration, parse_duration
from .errors import ConstraintViolation, NotFoundError, UnknownUserError, UsageError
from .models import Feed, Post, User
from .render import print_feed_created, print_feeds, print_following, print_message, print_posts, print_users
from .scraper import Aggregator
from .store import FollowSummary

log = logging.getLogger(__name__)

DEFAULT_BROWSE_LIMIT = 2


def handler_register(state: State, command: Command) -> User:
    require_args(command, exactly=1, usage="<name>")
    name = command.args[0]
    try:
        user = state.store.create_user(name)
    except ConstraintViolation as exc:
        raise ConstraintViolation(f"user {name} already exists") from exc
    state.set_user(name)
    print_message(f"user {name} created")
    log.info("Created user %s (id=%s)", user.name, user.id)
    return user


def handler_login(state: State, command: Command) -> User:
    require_args(command, exactly=1, usage="<name>")
    name = command.args[0]
    try:
        user = state.store.get_user(name)
    except NotFoundError as exc:
        raise UnknownUserError(name) from exc
    state.set_user(name)
    print_message(f"current user set to {name}")
    return user


def handler_reset(state: State, command: Command) -> None:
    require_args(command, exactly=0, usage="")
    state.store.reset()
    print_message("database reset successful")


def handler_users(state: State, command: Command) -> list[User]:
    require_args(command, exactly=0, usage="")
    users = state.store.get_users()
    print_users(users, state.prefs.current_user_name)
    return users


def handler_agg(state: State, command: Command) -> Aggregator:
    require_args(command, exactly=1, usage="<interval> (e.g. 10s, 1m, 1h)")
    try:
        interval = parse_duration(command.args[0])
    except ValueError as exc:
        raise UsageError(f"agg: {exc}") from exc
    if interval <= timedelta(0):
        raise UsageError("agg: interval must be positive")

    aggregator = Aggregator(state.store, state.prefs.settings, interval)
    print_message(f"Collecting feeds every {format_duration(interval)}")
    try:
        aggregator.run()
    except KeyboardInterrupt:
        print_message("Stopping aggregation...")
    return aggregator


def handler_add_feed(state: State, command: Command, user: User) -> Feed:
    require_args(command, exactly=2, usage="<name> <url>")
    name, url = command.args
    try:
        feed, _ = state.store.create_feed_with_follow(name, url, user.id)
    except ConstraintViolation as exc:
        raise ConstraintViolation(f"feed url already exists: {url}") from exc
    print_feed_created(feed)
    return feed


def handler_feeds(state: State, command: Command) -> None:
    require_args(command, exactly=0, usage="")
    print_feeds(state.store.get_feeds())


def handler_follow(state: State, command: Command, user: User) -> FollowSummary:
    require_args(command, exactly=1, usage="<url>")
    feed = state.store.get_feed_by_url(command.args[0])
    try:
        follow = state.store.create_feed_follow(user.id, feed.id)
    except ConstraintViolation as exc:
        raise ConstraintViolation(f"{user.name} already follows {feed.name}") from exc
    print_message(f"{follow.user_name} now follows {follow.feed_name}")
    return follow


def handler_following(state: State, command: Command, user: User) -> list[FollowSummary]:
    require_args(command, exactly=0, usage="")
    follows = state.store.get_feed_follows_for_user(user.id)
    print_following(follows)
    return follows


def handler_unfollow(state: State, command: Command, user: User) -> None:
    require_args(command, exactly=1, usage="<url>")
    feed = state.store.get_feed_by_url(command.args[0])
    if not state.store.delete_feed_follow(user.id, feed.id):
        raise NotFoundError(f"{user.name} does not follow {feed.name}")
    print_message(f"{user.name} unfollowed {feed.name}")


def handler_browse(state: State, command: Command, user: User) -> list[Post]:
    require_args(command, at_most=1, usage="[limit]")
    limit = DEFAULT_BROWSE_LIMIT
    if command.args:
        limit = _positive_int(command.args[0])
    posts = state.store.get_posts_for_user(user.id, limit)
    print_posts(posts)
    return posts


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        raise UsageError("browse limit must be a positive integer")
    return value


def build_commands() -> Commands:
    commands = Commands()
    commands.register("register", handler_register)
    commands.register("login", handler_login)
    commands.register("reset", handler_reset)
    commands.register("users", handler_users)
    commands.register("agg", handler_agg)
    commands.register("addfeed", logged_in(handler_add_feed))
    commands.register("feeds", handler_feeds)
    commands.register("follow", logged_in(handler_follow))
    commands.register("following", logged_in(handler_following))
    commands.register("unfollow", logged_in(handler_unfollow))
    commands.register("browse", logged_in(handler_browse))
    return commands
