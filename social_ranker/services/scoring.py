"""Deterministic composite scoring for social posts.

Two mutually exclusive strategies are available. The deployment picks one via
``Settings.scoring_strategy``; they differ in *which* posts are emitted, so
mixing them across runs changes the meaning of ``rank_within_batch``.

Min-max (default)
-----------------
For each metric *m* with cleaned value *v*, baseline range [lo, hi] and
weight *w*:

    normalized(v) = (clamp(v, lo, hi) - lo) / (hi - lo)    (0 when hi == lo)
    score = 100 * sum(w * normalized(v) for all m)

Only the new batch is scored; historical posts only widen the baseline.

Percentile
----------
Posts are partitioned by platform. Within a partition of *n* posts sorted by
raw weighted sum (descending), the post at 1-based position *p* gets:

    score = (n - p) / (n - 1) * 100                         (100 when n == 1)

Every post in the merged corpus is scored.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from enum import StrEnum

from social_ranker.models.scoring import (
    METRIC_KEYS,
    CleanedPost,
    MetricBaseline,
    ScoredPost,
)
from social_ranker.services.baseline import normalize_value


class ScoringStrategy(StrEnum):
    min_max = "min_max"
    percentile = "percentile"


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MetricWeights:
    """Per-metric weights in [0, 1]. They need not sum to 1."""

    views: float = 0.0
    reach: float = 0.0
    interactions: float = 0.0
    link_clicks: float = 0.0

    def __post_init__(self) -> None:
        for f in fields(self):
            weight = getattr(self, f.name)
            if not 0.0 <= weight <= 1.0:
                raise ValueError(
                    f"Weight for '{f.name}' must be within [0, 1], got {weight}"
                )

    @classmethod
    def from_mapping(cls, weights: Mapping[str, float]) -> MetricWeights:
        """Build weights from a partial mapping; absent metrics weigh 0."""
        unknown = set(weights) - set(METRIC_KEYS)
        if unknown:
            raise ValueError(f"Unknown metric weight(s): {sorted(unknown)}")
        return cls(**{key: float(value) for key, value in weights.items()})

    def weight(self, key: str) -> float:
        return getattr(self, key)


ENGAGEMENT_WEIGHTS = MetricWeights(
    views=0.15,
    reach=0.25,
    interactions=0.5,
    link_clicks=0.1,
)


# ---------------------------------------------------------------------------
# Min-max strategy
# ---------------------------------------------------------------------------

def score_min_max(
    post: CleanedPost,
    baseline: MetricBaseline,
    weights: MetricWeights,
) -> ScoredPost:
    """Score one post against a baseline that includes it.

    A metric with zero weight, or absent from the baseline, keeps a
    normalized value of ``0.0`` and contributes nothing.
    """
    weighted_sum = 0.0
    normalized: dict[str, float] = {}

    for key in METRIC_KEYS:
        metric_range = baseline.get(key)
        weight = weights.weight(key)
        value = 0.0
        if metric_range is not None and weight > 0:
            value = normalize_value(post.metric(key), metric_range.min, metric_range.max)
            weighted_sum += value * weight
        normalized[key] = value

    return ScoredPost(
        post=post,
        normalized=normalized,
        performance=weighted_sum,
        composite_score=weighted_sum * 100,
    )


# ---------------------------------------------------------------------------
# Percentile strategy
# ---------------------------------------------------------------------------

def raw_performance(post: CleanedPost, weights: MetricWeights) -> float:
    """Weighted sum of the cleaned, un-normalized metrics."""
    total = 0.0
    for key in METRIC_KEYS:
        total += post.metric(key) * weights.weight(key)
    return total


def percentile_for_position(position: int, total: int) -> float:
    """Percentile of the 1-based *position* in a partition of *total* posts."""
    if total <= 1:
        return 100.0
    return (total - position) / (total - 1) * 100


def score_percentile(
    posts: Sequence[CleanedPost],
    weights: MetricWeights,
) -> list[ScoredPost]:
    """Score every post by its percentile within its platform partition.

    Output is grouped by platform (first-appearance order), best first.
    """
    partitions: dict[str, list[CleanedPost]] = {}
    for post in posts:
        partitions.setdefault(post.platform, []).append(post)

    zeroed = {key: 0.0 for key in METRIC_KEYS}
    scored: list[ScoredPost] = []
    for members in partitions.values():
        performances = [(raw_performance(post, weights), post) for post in members]
        performances.sort(key=lambda item: item[0], reverse=True)
        total = len(performances)
        for position, (performance, post) in enumerate(performances, start=1):
            scored.append(
                ScoredPost(
                    post=post,
                    normalized=dict(zeroed),
                    performance=performance,
                    composite_score=percentile_for_position(position, total),
                )
            )
    return scored
