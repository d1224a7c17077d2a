"""One analysis run: score a freshly fetched batch and persist the result.

The caller owns the session and commits on success. Fetching posts from
the social platforms happens before this module is reached; new posts are
handed in already shaped as raw-post mappings.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from social_ranker.core.logging import (
    EVENT_ANALYSIS_RUN_COMPLETED,
    EVENT_ANALYSIS_RUN_STARTED,
    log_event,
)
from social_ranker.models.scoring import RankedPost
from social_ranker.services.pipeline import score_and_rank
from social_ranker.services.post_repository import (
    DEFAULT_CHUNK_SIZE,
    get_last_fetch_timestamp,
    load_historical_posts,
    set_last_fetch_timestamp,
    upsert_scored_posts,
)
from social_ranker.services.scoring import (
    ENGAGEMENT_WEIGHTS,
    MetricWeights,
    ScoringStrategy,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    message: str
    strategy: ScoringStrategy
    processed: list[RankedPost]
    previous_fetch: datetime | None
    fetched_at: datetime


def run_analysis(
    db: Session,
    new_posts: Sequence[Mapping[str, object]],
    *,
    now: datetime,
    weights: MetricWeights = ENGAGEMENT_WEIGHTS,
    strategy: ScoringStrategy = ScoringStrategy.min_max,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> AnalysisResult:
    """Score *new_posts* against the stored corpus and upsert the result.

    The last-fetch timestamp is advanced to *now* even when there is nothing
    to score.

    Raises:
        InvalidPostError: If a new or stored post is structurally invalid.
        DatabaseLockedError: If SQLite reports the database as locked.
    """
    started = time.monotonic()
    previous_fetch = get_last_fetch_timestamp(db)
    log_event(
        logger, "info", EVENT_ANALYSIS_RUN_STARTED,
        new_posts=len(new_posts),
        previous_fetch=previous_fetch.isoformat() if previous_fetch else "never",
        strategy=strategy.value,
    )

    if not new_posts:
        set_last_fetch_timestamp(db, now)
        log_event(
            logger, "info", EVENT_ANALYSIS_RUN_COMPLETED,
            processed=0,
            duration_ms=round((time.monotonic() - started) * 1000),
        )
        return AnalysisResult(
            message="No new posts found to process. Last fetch time updated.",
            strategy=strategy,
            processed=[],
            previous_fetch=previous_fetch,
            fetched_at=now,
        )

    historical = load_historical_posts(db, chunk_size=chunk_size)
    ranked = score_and_rank(new_posts, historical, weights, strategy)
    upsert_scored_posts(db, ranked, fetched_at=now)
    set_last_fetch_timestamp(db, now)

    log_event(
        logger, "info", EVENT_ANALYSIS_RUN_COMPLETED,
        processed=len(ranked),
        historical=len(historical),
        duration_ms=round((time.monotonic() - started) * 1000),
    )
    return AnalysisResult(
        message=f"Analysis complete. Processed and saved {len(ranked)} posts.",
        strategy=strategy,
        processed=ranked,
        previous_fetch=previous_fetch,
        fetched_at=now,
    )
