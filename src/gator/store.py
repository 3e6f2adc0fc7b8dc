"""SQLAlchemy-backed persistence for users, feeds, follows and posts.

Every public method runs in its own short session. Integrity failures surface
as :class:`~gator.errors.ConstraintViolation` so callers can tell a duplicate
name/URL/follow apart from any other storage failure.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, delete, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import ConstraintViolation, NotFoundError, StoreError
from .models import Base, Feed, FeedFollow, Post, User, new_id, utc_now

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FeedSummary:
    feed: Feed
    user_name: str


@dataclass(slots=True, frozen=True)
class FollowSummary:
    id: str
    user_id: str
    feed_id: str
    user_name: str
    feed_name: str
    created_at: datetime


def create_store_engine(db_url: str) -> Engine:
    if db_url.startswith("postgres://"):
        db_url = "postgresql://" + db_url[len("postgres://") :]
    try:
        engine = create_engine(db_url)
    except (SQLAlchemyError, ImportError, ValueError) as exc:
        raise StoreError(f"Invalid database url: {exc}") from exc
    if engine.dialect.name == "sqlite":
        database = engine.url.database
        if database and database != ":memory:":
            Path(database).expanduser().parent.mkdir(parents=True, exist_ok=True)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class FeedStore:
    def __init__(self, engine: Engine):
        self.engine = engine
        self._Session = sessionmaker(bind=engine, expire_on_commit=False)
        try:
            Base.metadata.create_all(engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to open database: {exc}") from exc
        log.debug("Feed store ready on %s", engine.url.render_as_string(hide_password=True))

    @classmethod
    def from_url(cls, db_url: str) -> "FeedStore":
        return cls(create_store_engine(db_url))

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._Session()
        try:
            yield session
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            raise ConstraintViolation(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            session.rollback()
            raise StoreError(str(exc)) from exc
        finally:
            session.close()

    # ---- Users ----

    def create_user(self, name: str) -> User:
        now = utc_now()
        user = User(id=new_id(), name=name, created_at=now, updated_at=now)
        with self._session() as session:
            session.add(user)
        return user

    def get_user(self, name: str) -> User:
        with self._session() as session:
            user = session.scalars(select(User).where(User.name == name)).first()
        if user is None:
            raise NotFoundError(f"user {name} does not exist")
        return user

    def get_users(self) -> list[User]:
        with self._session() as session:
            return list(session.scalars(select(User).order_by(User.created_at, User.name)))

    def reset(self) -> None:
        """Remove every row; dependents go first so it works without FK cascades."""
        with self._session() as session:
            for model in (Post, FeedFollow, Feed, User):
                session.execute(delete(model))

    # ---- Feeds ----

    def create_feed(self, name: str, url: str, user_id: str) -> Feed:
        now = utc_now()
        feed = Feed(id=new_id(), name=name, url=url, user_id=user_id, created_at=now, updated_at=now)
        with self._session() as session:
            session.add(feed)
        return feed

    def create_feed_with_follow(self, name: str, url: str, user_id: str) -> tuple[Feed, FollowSummary]:
        """Insert a feed and its creator's follow in one transaction."""
        now = utc_now()
        feed = Feed(id=new_id(), name=name, url=url, user_id=user_id, created_at=now, updated_at=now)
        follow = FeedFollow(id=new_id(), user_id=user_id, feed_id=feed.id, created_at=now, updated_at=now)
        with self._session() as session:
            session.add(feed)
            session.flush()
            session.add(follow)
            session.flush()
            summary = self._follow_summary(session, follow)
        return feed, summary

    def get_feeds(self) -> list[FeedSummary]:
        stmt = select(Feed, User.name).join(User, User.id == Feed.user_id).order_by(Feed.created_at, Feed.id)
        with self._session() as session:
            return [FeedSummary(feed=feed, user_name=user_name) for feed, user_name in session.execute(stmt)]

    def get_feed_by_url(self, url: str) -> Feed:
        with self._session() as session:
            feed = session.scalars(select(Feed).where(Feed.url == url)).first()
        if feed is None:
            raise NotFoundError(f"no feed with url {url}")
        return feed

    def get_next_feed_to_fetch(self) -> Feed | None:
        with self._session() as session:
            return session.scalars(self._next_feed_stmt()).first()

    def mark_feed_fetched(self, feed_id: str, fetched_at: datetime | None = None) -> None:
        with self._session() as session:
            feed = session.get(Feed, feed_id)
            if feed is None:
                raise NotFoundError(f"no feed with id {feed_id}")
            feed.last_fetched_at = fetched_at or utc_now()
            feed.updated_at = feed.last_fetched_at

    def claim_next_feed(self, now: datetime | None = None) -> Feed | None:
        """Select the least recently fetched feed and stamp it in the same transaction."""
        with self._session() as session:
            feed = session.scalars(self._next_feed_stmt().with_for_update(skip_locked=True)).first()
            if feed is None:
                return None
            feed.last_fetched_at = now or utc_now()
            feed.updated_at = feed.last_fetched_at
            return feed

    @staticmethod
    def _next_feed_stmt():
        return (
            select(Feed)
            .order_by(Feed.last_fetched_at.asc().nulls_first(), Feed.created_at, Feed.id)
            .limit(1)
        )

    # ---- Follows ----

    def create_feed_follow(self, user_id: str, feed_id: str) -> FollowSummary:
        now = utc_now()
        follow = FeedFollow(id=new_id(), user_id=user_id, feed_id=feed_id, created_at=now, updated_at=now)
        with self._session() as session:
            session.add(follow)
            session.flush()
            return self._follow_summary(session, follow)

    @staticmethod
    def _follow_summary(session: Session, follow: FeedFollow) -> FollowSummary:
        user_name, feed_name = session.execute(
            select(User.name, Feed.name)
            .select_from(FeedFollow)
            .join(User, User.id == FeedFollow.user_id)
            .join(Feed, Feed.id == FeedFollow.feed_id)
            .where(FeedFollow.id == follow.id)
        ).one()
        return FollowSummary(
            id=follow.id,
            user_id=follow.user_id,
            feed_id=follow.feed_id,
            user_name=user_name,
            feed_name=feed_name,
            created_at=follow.created_at,
        )

    def get_feed_follows_for_user(self, user_id: str) -> list[FollowSummary]:
        stmt = (
            select(FeedFollow, User.name, Feed.name)
            .join(User, User.id == FeedFollow.user_id)
            .join(Feed, Feed.id == FeedFollow.feed_id)
            .where(FeedFollow.user_id == user_id)
            .order_by(FeedFollow.created_at, FeedFollow.id)
        )
        with self._session() as session:
            return [
                FollowSummary(
                    id=follow.id,
                    user_id=follow.user_id,
                    feed_id=follow.feed_id,
                    user_name=user_name,
                    feed_name=feed_name,
                    created_at=follow.created_at,
                )
                for follow, user_name, feed_name in session.execute(stmt)
            ]

    def delete_feed_follow(self, user_id: str, feed_id: str) -> int:
        stmt = delete(FeedFollow).where(FeedFollow.user_id == user_id, FeedFollow.feed_id == feed_id)
        with self._session() as session:
            return int(session.execute(stmt).rowcount)

    # ---- Posts ----

    def create_post(
        self,
        *,
        title: str,
        url: str,
        feed_id: str,
        description: str | None = None,
        published_at: datetime | None = None,
    ) -> Post:
        now = utc_now()
        post = Post(
            id=new_id(),
            title=title,
            url=url,
            description=description,
            published_at=published_at,
            feed_id=feed_id,
            created_at=now,
            updated_at=now,
        )
        with self._session() as session:
            session.add(post)
        return post

    def get_posts_for_user(self, user_id: str, limit: int) -> list[Post]:
        stmt = (
            select(Post)
            .join(FeedFollow, FeedFollow.feed_id == Post.feed_id)
            .where(FeedFollow.user_id == user_id)
            .order_by(Post.published_at.desc().nulls_last(), Post.created_at.desc())
            .limit(limit)
        )
        with self._session() as session:
            return list(session.scalars(stmt))
