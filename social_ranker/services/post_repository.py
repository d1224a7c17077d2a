"""Repository for scored posts and run metadata.

All methods operate on a caller-supplied SQLAlchemy ``Session`` so that
transaction boundaries remain under the caller's control.

Timestamps are stored as naive UTC (SQLite has no timezone support) and are
returned timezone-aware.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime, timedelta

from sqlalchemy import func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from social_ranker.core.logging import EVENT_POSTS_UPSERTED, log_event
from social_ranker.models.scoring import RankedPost
from social_ranker.models.social_post import (
    LAST_FETCH_TIMESTAMP_KEY,
    AppMetadata,
    SocialPost,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000

VALID_PERIODS = (
    "overall",
    "last_7_days",
    "last_28_days",
    "last_90_days",
    "this_month",
    "last_month",
    "this_week",
    "last_week",
)


class DatabaseLockedError(Exception):
    """Raised when the database is locked by another process (retryable)."""


def _handle_operational_error(exc: OperationalError, operation: str) -> None:
    """Check for database-locked errors and raise a categorized exception."""
    msg = str(exc).lower()
    if "locked" in msg or "busy" in msg:
        logger.warning(
            "db_write_failed: operation=%s reason=database_locked (retryable)",
            operation,
        )
        raise DatabaseLockedError(
            f"Database is locked during '{operation}'. "
            f"Another process may be writing. Please retry."
        ) from exc
    raise exc


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------


def _to_storage(value: datetime) -> datetime:
    """Convert to naive UTC; naive input is assumed to already be UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def _from_storage(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=UTC)


def parse_publish_time(value: str | None) -> datetime | None:
    """Parse an ISO-8601 publish time into naive UTC for storage."""
    if not value:
        return None
    return _to_storage(datetime.fromisoformat(value))


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def upsert_scored_posts(
    db: Session,
    posts: Iterable[RankedPost],
    *,
    fetched_at: datetime,
) -> int:
    """Insert or update one row per ranked post, keyed by ``post_id``.

    Returns the number of rows written.
    """
    fetched = _to_storage(fetched_at)
    count = 0
    for ranked in posts:
        post = ranked.post
        row = db.get(SocialPost, post.post_id)
        if row is None:
            row = SocialPost(post_id=post.post_id)
            db.add(row)
        row.platform = post.platform
        row.publish_time = parse_publish_time(post.publish_time)
        row.permalink = post.permalink
        row.caption = post.caption
        row.image_url = post.image_url
        row.views = post.views
        row.reach = post.reach
        row.interactions = post.interactions
        row.link_clicks = post.link_clicks
        row.composite_score = ranked.composite_score
        row.rank_within_batch = ranked.rank_within_batch
        row.last_fetched_at = fetched
        count += 1
    try:
        db.flush()
    except OperationalError as exc:
        _handle_operational_error(exc, "upsert_scored_posts")
    log_event(logger, "info", EVENT_POSTS_UPSERTED, count=count)
    return count


def set_last_fetch_timestamp(db: Session, timestamp: datetime) -> None:
    """Record *timestamp* as the time of the last analysis run."""
    stored = _to_storage(timestamp)
    row = db.get(AppMetadata, LAST_FETCH_TIMESTAMP_KEY)
    if row is None:
        row = AppMetadata(key=LAST_FETCH_TIMESTAMP_KEY, updated_at=stored)
        db.add(row)
    row.value_timestamp = stored
    row.updated_at = stored
    try:
        db.flush()
    except OperationalError as exc:
        _handle_operational_error(exc, "set_last_fetch_timestamp")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def get_last_fetch_timestamp(db: Session) -> datetime | None:
    """Return the last analysis-run timestamp, or ``None`` if never run."""
    row = db.get(AppMetadata, LAST_FETCH_TIMESTAMP_KEY)
    if row is None:
        return None
    return _from_storage(row.value_timestamp)


def _to_raw_post(row: SocialPost) -> dict[str, object]:
    publish_time = _from_storage(row.publish_time)
    return {
        "post_id": row.post_id,
        "platform": row.platform,
        "publish_time": publish_time.isoformat() if publish_time else None,
        "permalink": row.permalink,
        "caption": row.caption,
        "image_url": row.image_url,
        "views": row.views,
        "reach": row.reach,
        "interactions": row.interactions,
        "link_clicks": row.link_clicks,
    }


def iter_historical_posts(
    db: Session,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[list[dict[str, object]]]:
    """Yield every stored post as raw-post mappings, *chunk_size* at a time."""
    offset = 0
    while True:
        rows: list[SocialPost] = (
            db.query(SocialPost)
            .order_by(SocialPost.post_id)
            .offset(offset)
            .limit(chunk_size)
            .all()
        )
        if not rows:
            return
        logger.debug(
            "historical_chunk_loaded: offset=%d rows=%d", offset, len(rows),
        )
        yield [_to_raw_post(row) for row in rows]
        if len(rows) < chunk_size:
            return
        offset += chunk_size


def load_historical_posts(
    db: Session,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> list[dict[str, object]]:
    """Return all stored posts as raw-post mappings for scoring context."""
    posts: list[dict[str, object]] = []
    for chunk in iter_historical_posts(db, chunk_size=chunk_size):
        posts.extend(chunk)
    logger.info("historical_posts_loaded: total=%d", len(posts))
    return posts


def resolve_period(
    period: str | None,
    now: datetime,
) -> tuple[datetime | None, datetime | None]:
    """Translate a named period into an inclusive ``(start, end)`` range.

    ``None`` and ``"overall"`` are unbounded. Weeks start on Sunday.

    Raises:
        ValueError: If *period* is not one of :data:`VALID_PERIODS`.
    """
    if period is None or period == "overall":
        return None, None

    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month_start = midnight.replace(day=1)
    week_start = midnight - timedelta(days=(now.weekday() + 1) % 7)
    just_before = timedelta(microseconds=1)

    if period == "last_7_days":
        return now - timedelta(days=7), now
    if period == "last_28_days":
        return now - timedelta(days=28), now
    if period == "last_90_days":
        return now - timedelta(days=90), now
    if period == "this_month":
        return month_start, now
    if period == "last_month":
        end = month_start - just_before
        return end.replace(day=1, hour=0, minute=0, second=0, microsecond=0), end
    if period == "this_week":
        return week_start, now
    if period == "last_week":
        return week_start - timedelta(days=7), week_start - just_before
    raise ValueError(
        f"Unknown period '{period}'. Expected one of: {', '.join(VALID_PERIODS)}"
    )


def list_posts(
    db: Session,
    *,
    platform: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    post_id: str | None = None,
    limit: int | None = None,
) -> list[SocialPost]:
    """List scored posts, best first.

    Args:
        platform: Case-insensitive exact platform match.
        start: Inclusive lower bound on ``publish_time``.
        end: Inclusive upper bound on ``publish_time``.
        post_id: Exact post lookup; other filters are ignored when set.
        limit: Maximum rows to return.
    """
    query = db.query(SocialPost)

    if post_id is not None:
        return list(query.filter(SocialPost.post_id == post_id).all())

    if platform is not None:
        query = query.filter(func.lower(SocialPost.platform) == platform.lower())
    if start is not None:
        query = query.filter(SocialPost.publish_time >= _to_storage(start))
    if end is not None:
        query = query.filter(SocialPost.publish_time <= _to_storage(end))

    query = query.filter(SocialPost.composite_score.isnot(None)).order_by(
        SocialPost.composite_score.desc(),
        SocialPost.publish_time.desc(),
        SocialPost.post_id.asc(),
    )
    if limit is not None:
        query = query.limit(limit)
    return list(query.all())
