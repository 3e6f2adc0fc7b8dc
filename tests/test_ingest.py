from __future__ import annotations

from datetime import datetime, timezone

from gator.errors import StoreError
from gator.ingest import ingest_items


def _feed(store):
    user = store.create_user("alice")
    feed = store.create_feed("Example", "https://example.com/rss", user.id)
    store.create_feed_follow(user.id, feed.id)
    return user, feed


def test_ingest_maps_nullable_fields(store, make_item):
    user, feed = _feed(store)
    items = [
        make_item(title="Dated", link="https://example.com/1", description="Body"),
        make_item(title="Bare", link="https://example.com/2", description="", pub_date="sometime soon"),
    ]

    result = ingest_items(store, feed, items)

    assert (result.inserted, result.duplicates, result.failed) == (2, 0, 0)
    posts = {post.title: post for post in store.get_posts_for_user(user.id, limit=10)}
    assert posts["Dated"].description == "Body"
    assert posts["Dated"].published_at.replace(tzinfo=timezone.utc) == datetime(
        2006, 1, 2, 22, 4, 5, tzinfo=timezone.utc
    )
    assert posts["Bare"].description is None
    assert posts["Bare"].published_at is None


def test_ingest_same_url_twice_keeps_one_post(store, make_item):
    user, feed = _feed(store)
    item = make_item(link="https://example.com/only")

    first = ingest_items(store, feed, [item])
    second = ingest_items(store, feed, [item])

    assert first.inserted == 1
    assert (second.inserted, second.duplicates) == (0, 1)
    assert len(store.get_posts_for_user(user.id, limit=10)) == 1


def test_ingest_skips_failing_item_and_continues(store, make_item, monkeypatch, caplog):
    user, feed = _feed(store)
    original = store.create_post

    def flaky_create_post(**kwargs):
        if kwargs["url"].endswith("/bad"):
            raise StoreError("disk I/O error")
        return original(**kwargs)

    monkeypatch.setattr(store, "create_post", flaky_create_post)
    items = [
        make_item(link="https://example.com/1"),
        make_item(link="https://example.com/bad"),
        make_item(link="https://example.com/3"),
    ]

    with caplog.at_level("WARNING"):
        result = ingest_items(store, feed, items)

    assert (result.inserted, result.duplicates, result.failed) == (2, 0, 1)
    assert result.seen == 3
    assert "https://example.com/bad" in caplog.text
    assert len(store.get_posts_for_user(user.id, limit=10)) == 2
