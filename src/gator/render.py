from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from .models import Feed, Post, User
from .store import FeedSummary, FollowSummary

console = Console(no_color=True, highlight=False, soft_wrap=True)
SEPARATOR = "-" * 49


def set_color(enabled: bool) -> None:
    global console
    console = Console(no_color=not enabled, highlight=False, soft_wrap=True)


def format_timestamp(dt: datetime | None) -> str:
    if not dt:
        return "(no timestamp)"
    # SQLite hands timestamps back without tzinfo; they were written as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    utc_dt = dt.astimezone(timezone.utc)
    return utc_dt.strftime("%Y-%m-%d %H:%M UTC")


def print_users(users: Sequence[User], current: str) -> None:
    for user in users:
        suffix = " [dim](current)[/dim]" if user.name == current else ""
        console.print(f"* {escape(user.name)}{suffix}")


def print_feed_created(feed: Feed) -> None:
    console.print("[bold green]feed created:[/bold green]")
    console.print(f"  id: {feed.id}")
    console.print(f"  created_at: {format_timestamp(feed.created_at)}")
    console.print(f"  updated_at: {format_timestamp(feed.updated_at)}")
    console.print(f"  name: {escape(feed.name)}")
    console.print(f"  url: {escape(feed.url)}")
    console.print(f"  user_id: {feed.user_id}")


def print_feeds(feeds: Sequence[FeedSummary]) -> None:
    if not feeds:
        console.print("No feeds registered.")
        return
    for summary in feeds:
        console.print(f"* [cyan]{escape(summary.feed.name)}[/cyan]")
        console.print(f"  {escape(summary.feed.url)}")
        console.print(f"  added by: {escape(summary.user_name)}")


def print_following(follows: Sequence[FollowSummary]) -> None:
    if not follows:
        console.print("Not following any feeds.")
        return
    for follow in follows:
        console.print(f"* {escape(follow.feed_name)}")


def print_posts(posts: Sequence[Post]) -> None:
    if not posts:
        console.print("No posts yet.")
        return
    for post in posts:
        console.print(SEPARATOR)
        console.print(f"[bold]{escape(post.title)}[/bold]")
        console.print(escape(post.url))
        if post.published_at:
            console.print(f"Published: {format_timestamp(post.published_at)}")
        if post.description:
            console.print()
            console.print(escape(post.description))
    console.print(SEPARATOR)


def print_message(message: str) -> None:
    console.print(escape(message))
