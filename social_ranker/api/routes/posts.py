"""GET /api/v1/posts — stored posts ranked by composite score."""

import logging
from datetime import UTC, date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from social_ranker.core.errors import normalize_db_error
from social_ranker.db.session import get_db
from social_ranker.models.api import PostListItem
from social_ranker.services.post_repository import list_posts, resolve_period

logger = logging.getLogger(__name__)

router = APIRouter()

OVERALL_RANKING_LIMIT = 10


@router.get("/api/v1/posts", response_model=list[PostListItem])
def get_posts(
    platform: str | None = None,
    period: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    post_id: str | None = None,
    ranking: str | None = None,
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> list[PostListItem]:
    """Return scored posts, best first, with a display ``rank``.

    ``rank`` is the position within the returned subset only. An explicit
    ``start_date``/``end_date`` pair overrides ``period``.
    """
    if limit is None and ranking == "overall":
        limit = OVERALL_RANKING_LIMIT

    if start_date is not None and end_date is not None:
        start = datetime.combine(start_date, time.min, tzinfo=UTC)
        end = datetime.combine(end_date, time.max, tzinfo=UTC)
    else:
        if period is None and ranking == "overall":
            period = "overall"
        try:
            start, end = resolve_period(period, datetime.now(UTC))
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

    try:
        rows = list_posts(
            db,
            platform=None if platform in (None, "all") else platform,
            start=start,
            end=end,
            post_id=post_id,
            limit=limit,
        )
    except SQLAlchemyError as exc:
        error = normalize_db_error(exc, operation="list_posts", write=False)
        raise HTTPException(status_code=error.http_status, detail=error.user_message)
    logger.info("posts_listed: count=%d platform=%s", len(rows), platform or "all")
    return [
        PostListItem(
            post_id=row.post_id,
            platform=row.platform,
            permalink=row.permalink,
            publish_time=row.publish_time.replace(tzinfo=UTC) if row.publish_time else None,
            composite_score=row.composite_score,
            rank_within_batch=row.rank_within_batch,
            views=row.views,
            reach=row.reach,
            interactions=row.interactions,
            link_clicks=row.link_clicks,
            rank=index,
        )
        for index, row in enumerate(rows, start=1)
    ]
