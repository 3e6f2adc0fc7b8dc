from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from gator.commands import State
from gator.config import Preferences
from gator.models import RSSItem
from gator.store import FeedStore


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'gator.sqlite3'}"


@pytest.fixture
def store(db_url: str):
    feed_store = FeedStore.from_url(db_url)
    yield feed_store
    feed_store.close()


@pytest.fixture
def prefs_path(tmp_path: Path, db_url: str) -> Path:
    path = tmp_path / ".gatorconfig.json"
    path.write_text(json.dumps({"db_url": db_url, "current_user_name": ""}))
    return path


@pytest.fixture
def state(store: FeedStore, prefs_path: Path, db_url: str) -> State:
    return State(prefs=Preferences(db_url=db_url), prefs_path=prefs_path, store=store)


@pytest.fixture
def make_item() -> Callable[..., RSSItem]:
    def _factory(**overrides) -> RSSItem:
        data = {
            "title": overrides.get("title", "Sample Title"),
            "link": overrides.get("link", "https://example.com/a"),
            "description": overrides.get("description", "Sample summary"),
            "pub_date": overrides.get("pub_date", "Mon, 02 Jan 2006 15:04:05 -0700"),
        }
        return RSSItem(**data)

    return _factory
