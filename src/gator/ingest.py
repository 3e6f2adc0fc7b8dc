from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from .dates import parse_pub_date
from .errors import ConstraintViolation, StoreError
from .models import Feed, RSSItem
from .store import FeedStore

log = logging.getLogger(__name__)


@dataclass(slots=True)
class IngestResult:
    inserted: int = 0
    duplicates: int = 0
    failed: int = 0

    @property
    def seen(self) -> int:
        return self.inserted + self.duplicates + self.failed


def ingest_items(store: FeedStore, feed: Feed, items: Iterable[RSSItem]) -> IngestResult:
    """Store every item as a post of ``feed``; already-known URLs are skipped quietly."""
    result = IngestResult()
    for item in items:
        try:
            store.create_post(
                title=item.title,
                url=item.link,
                feed_id=feed.id,
                description=item.description or None,
                published_at=parse_pub_date(item.pub_date),
            )
        except ConstraintViolation:
            result.duplicates += 1
            continue
        except StoreError as exc:
            log.warning("Error creating post (url=%s): %s", item.link, exc)
            result.failed += 1
            continue
        result.inserted += 1
    return result
