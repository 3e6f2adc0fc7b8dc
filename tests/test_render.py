from __future__ import annotations

from datetime import datetime, timezone

import gator.render as render
from gator.models import Post


def test_format_timestamp_with_value():
    dt = datetime(2024, 1, 1, 15, 30, tzinfo=timezone.utc)
    assert render.format_timestamp(dt) == "2024-01-01 15:30 UTC"


def test_format_timestamp_naive_is_utc():
    assert render.format_timestamp(datetime(2024, 1, 1, 15, 30)) == "2024-01-01 15:30 UTC"


def test_format_timestamp_none():
    assert render.format_timestamp(None) == "(no timestamp)"


def test_set_color_updates_console():
    render.set_color(True)
    assert render.console.no_color is False
    render.set_color(False)
    assert render.console.no_color is True


def test_print_posts_skips_missing_fields(capsys):
    render.set_color(False)
    posts = [
        Post(title="With [brackets]", url="https://e/1", description="Body text", published_at=datetime(2024, 1, 1)),
        Post(title="Bare", url="https://e/2", description=None, published_at=None),
    ]
    render.print_posts(posts)
    out = capsys.readouterr().out
    assert "With [brackets]" in out
    assert "Published: 2024-01-01 00:00 UTC" in out
    assert out.count("Published:") == 1
    assert "Body text" in out
    assert out.count(render.SEPARATOR) == 3


def test_print_posts_empty(capsys):
    render.print_posts([])
    assert "No posts yet." in capsys.readouterr().out
