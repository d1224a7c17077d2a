"""Batch orchestration: clean → baseline → score → rank.

Pure and synchronous: no I/O besides a single summary log line, and no
state shared between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from social_ranker.core.logging import EVENT_SCORING_BATCH_COMPLETED, log_event
from social_ranker.models.scoring import RankedPost
from social_ranker.services.baseline import compute_baseline, merge_posts
from social_ranker.services.metric_cleaning import clean_post
from social_ranker.services.ranking import rank_posts
from social_ranker.services.scoring import (
    ENGAGEMENT_WEIGHTS,
    MetricWeights,
    ScoringStrategy,
    score_min_max,
    score_percentile,
)

logger = logging.getLogger(__name__)


def score_and_rank(
    new_posts: Iterable[Mapping[str, object]],
    historical_posts: Iterable[Mapping[str, object]],
    weights: MetricWeights = ENGAGEMENT_WEIGHTS,
    strategy: ScoringStrategy = ScoringStrategy.min_max,
) -> list[RankedPost]:
    """Score and rank a batch of raw posts.

    Under ``min_max`` only *new_posts* are scored and returned; historical
    posts widen the normalization baseline. Under ``percentile`` the whole
    merged corpus is scored and returned.

    Raises:
        InvalidPostError: If any raw post lacks ``post_id`` or ``platform``.
    """
    cleaned_new = [clean_post(raw) for raw in new_posts]
    cleaned_historical = [clean_post(raw) for raw in historical_posts]
    context = merge_posts(cleaned_new, cleaned_historical)

    if strategy is ScoringStrategy.percentile:
        scored = score_percentile(context, weights)
    else:
        baseline = compute_baseline(context)
        new_ids = {post.post_id for post in cleaned_new}
        scored = [
            score_min_max(post, baseline, weights)
            for post in context
            if post.post_id in new_ids
        ]

    ranked = rank_posts(scored)
    log_event(
        logger, "info", EVENT_SCORING_BATCH_COMPLETED,
        strategy=strategy.value,
        new=len(cleaned_new),
        historical=len(cleaned_historical),
        context=len(context),
        scored=len(ranked),
    )
    return ranked
