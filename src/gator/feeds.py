from __future__ import annotations

import logging
import xml.sax
from html import unescape
from typing import Any

import feedparser
import requests

from .config import Settings
from .errors import FeedDecodeError, FeedFetchError
from .models import RSSFeed, RSSItem

log = logging.getLogger(__name__)


def fetch_feed(
    url: str,
    settings: Settings,
    *,
    session: requests.Session | None = None,
) -> RSSFeed:
    """GET ``url`` once and decode the body as an RSS document."""
    sess = session or requests.Session()
    created_session = session is None
    try:
        response = sess.get(
            url,
            headers={"User-Agent": settings.user_agent},
            timeout=settings.timeout_s,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FeedFetchError(f"Unable to fetch {url}: {exc}") from exc
    finally:
        if created_session:
            sess.close()

    if not response.content.strip():
        raise FeedDecodeError(f"Malformed feed at {url}: empty response body")
    parsed = feedparser.parse(response.content)
    if parsed.bozo and isinstance(parsed.bozo_exception, xml.sax.SAXException):
        raise FeedDecodeError(f"Malformed feed at {url}: {parsed.bozo_exception}")
    if parsed.bozo and parsed.bozo_exception:
        log.debug("Feed parser warning for %s: %s", url, parsed.bozo_exception)

    channel = parsed.feed
    return RSSFeed(
        title=_text(channel, "title"),
        link=_text(channel, "link"),
        description=_text(channel, "subtitle"),
        items=tuple(_entry_to_item(entry) for entry in parsed.entries),
    )


def _entry_to_item(entry: Any) -> RSSItem:
    return RSSItem(
        title=_text(entry, "title"),
        link=_text(entry, "link"),
        description=_text(entry, "summary"),
        pub_date=_text(entry, "published"),
    )


def _text(node: Any, key: str) -> str:
    # feedparser decodes one level of entities; feeds often carry two
    value = node.get(key) or ""
    return unescape(value).strip()
