from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return f"<User(name={self.name})>"


class Feed(Base):
    __tablename__ = "feeds"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(500), nullable=False)
    url = Column(String(2000), unique=True, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)
    # NULL until the scheduler claims the feed for the first time
    last_fetched_at = Column(DateTime(timezone=True), nullable=True, index=True)

    def __repr__(self):
        return f"<Feed(name={self.name}, url={self.url[:50]})>"


class FeedFollow(Base):
    __tablename__ = "feed_follows"
    __table_args__ = (UniqueConstraint("user_id", "feed_id", name="uq_feed_follows_user_feed"),)

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    feed_id = Column(String(36), ForeignKey("feeds.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return f"<FeedFollow(user={self.user_id[:8]}, feed={self.feed_id[:8]})>"


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    url = Column(String(2000), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)
    feed_id = Column(String(36), ForeignKey("feeds.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return f"<Post(url={self.url[:50]})>"


@dataclass(slots=True, frozen=True)
class RSSItem:
    """One <item> of a channel, text already HTML-unescaped."""

    title: str
    link: str
    description: str = ""
    pub_date: str = ""


@dataclass(slots=True, frozen=True)
class RSSFeed:
    title: str
    link: str
    description: str = ""
    items: tuple[RSSItem, ...] = field(default_factory=tuple)
