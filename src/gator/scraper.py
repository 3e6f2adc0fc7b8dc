from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from .config import Settings
from .errors import GatorError, NoFeedsError
from .feeds import fetch_feed
from .ingest import IngestResult, ingest_items
from .models import Feed, RSSFeed
from .store import FeedStore

log = logging.getLogger(__name__)

FetchFunc = Callable[[str, Settings], RSSFeed]


class AggregatorState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


def select_next_feed(store: FeedStore, now: datetime | None = None) -> Feed:
    """Claim the least recently fetched feed.

    The feed is stamped as fetched before any network work happens, whether or
    not the fetch later succeeds.
    """
    feed = store.claim_next_feed(now)
    if feed is None:
        raise NoFeedsError()
    return feed


def scrape_once(store: FeedStore, settings: Settings, *, fetch: FetchFunc = fetch_feed) -> IngestResult:
    feed = select_next_feed(store)
    log.info("Fetching feed: %s (%s)", feed.name, feed.url)
    document = fetch(feed.url, settings)
    result = ingest_items(store, feed, document.items)
    log.info(
        "Feed %s: %s new, %s already stored, %s failed",
        feed.name,
        result.inserted,
        result.duplicates,
        result.failed,
    )
    return result


class Aggregator:
    """Fetches one feed per tick, forever unless ``max_cycles`` is given."""

    def __init__(
        self,
        store: FeedStore,
        settings: Settings,
        interval: timedelta,
        *,
        fetch: FetchFunc = fetch_feed,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval.total_seconds() <= 0:
            raise ValueError("Interval must be positive.")
        self.store = store
        self.settings = settings
        self.interval = interval
        self.state = AggregatorState.IDLE
        self.cycles = 0
        self._fetch = fetch
        self._sleep = sleep

    def tick(self) -> IngestResult | None:
        self.state = AggregatorState.FETCHING
        try:
            return scrape_once(self.store, self.settings, fetch=self._fetch)
        except GatorError as exc:
            log.error("Error scraping feeds: %s", exc)
            return None
        finally:
            self.state = AggregatorState.IDLE
            self.cycles += 1

    def run(self, max_cycles: int | None = None) -> None:
        while True:
            self.tick()
            if max_cycles is not None and self.cycles >= max_cycles:
                return
            self._sleep(self.interval.total_seconds())
