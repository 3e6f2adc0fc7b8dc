from __future__ import annotations

import pytest
import requests

from gator.config import Settings
from gator.errors import FeedDecodeError, FeedFetchError
from gator.feeds import fetch_feed

SAMPLE_FEED = """<?xml version='1.0' encoding='UTF-8'?>
<rss version='2.0'>
  <channel>
    <title>Example &amp;amp; Friends</title>
    <link>https://example.com/</link>
    <description>All the news</description>
    <item>
      <title>Story &amp;amp; One</title>
      <link>https://example.com/one</link>
      <description>Summary 1</description>
      <pubDate>Mon, 02 Jan 2006 15:04:05 -0700</pubDate>
    </item>
    <item>
      <title>Story Two</title>
      <link>https://example.com/two</link>
    </item>
  </channel>
</rss>
"""


class DummyResponse:
    def __init__(self, content: str, status_error: Exception | None = None):
        self.content = content.encode()
        self.status_error = status_error

    def raise_for_status(self) -> None:
        if self.status_error:
            raise self.status_error


class DummySession:
    def __init__(self, response: DummyResponse):
        self.response = response
        self.calls: list[tuple[str, dict]] = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.response

    def close(self):
        self.closed = True


class ErrorSession(DummySession):
    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        raise requests.ConnectTimeout("timed out")


def test_fetch_feed_parses_channel_and_items():
    session = DummySession(DummyResponse(SAMPLE_FEED))
    document = fetch_feed("https://example.com/rss", Settings(), session=session)

    assert document.title == "Example & Friends"
    assert document.link == "https://example.com/"
    assert document.description == "All the news"
    assert [item.link for item in document.items] == ["https://example.com/one", "https://example.com/two"]
    first, second = document.items
    assert first.title == "Story & One"
    assert first.description == "Summary 1"
    assert first.pub_date == "Mon, 02 Jan 2006 15:04:05 -0700"
    assert second.description == ""
    assert second.pub_date == ""


def test_fetch_feed_sends_user_agent_and_timeout():
    session = DummySession(DummyResponse(SAMPLE_FEED))
    fetch_feed("https://example.com/rss", Settings(user_agent="gator-test", timeout_s=3), session=session)

    url, kwargs = session.calls[0]
    assert url == "https://example.com/rss"
    assert kwargs["headers"] == {"User-Agent": "gator-test"}
    assert kwargs["timeout"] == 3
    assert not session.closed


def test_fetch_feed_does_not_retry_network_errors():
    session = ErrorSession(DummyResponse(SAMPLE_FEED))
    with pytest.raises(FeedFetchError, match="timed out"):
        fetch_feed("https://example.com/rss", Settings(), session=session)
    assert len(session.calls) == 1


def test_fetch_feed_http_status_is_fetch_error():
    response = DummyResponse("", status_error=requests.HTTPError("404 Client Error"))
    with pytest.raises(FeedFetchError, match="404"):
        fetch_feed("https://example.com/rss", Settings(), session=DummySession(response))


def test_fetch_feed_rejects_malformed_xml():
    broken = "<rss><channel><title>Broken</title><item><title>x</item></channel>"
    with pytest.raises(FeedDecodeError):
        fetch_feed("https://example.com/rss", Settings(), session=DummySession(DummyResponse(broken)))


def test_fetch_feed_creates_and_closes_its_own_session(monkeypatch):
    created: list[DummySession] = []

    def factory():
        session = DummySession(DummyResponse(SAMPLE_FEED))
        created.append(session)
        return session

    monkeypatch.setattr(requests, "Session", factory)
    document = fetch_feed("https://example.com/rss", Settings())
    assert len(document.items) == 2
    assert created[0].closed


@pytest.mark.parametrize("body", ["", "   \n"])
def test_fetch_feed_rejects_empty_body(body):
    with pytest.raises(FeedDecodeError, match="empty response body"):
        fetch_feed("https://example.com/rss", Settings(), session=DummySession(DummyResponse(body)))
