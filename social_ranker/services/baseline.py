"""Normalization context: merging new and historical posts, min/max baselines."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from social_ranker.models.scoring import (
    METRIC_KEYS,
    CleanedPost,
    MetricBaseline,
    MetricRange,
)


def merge_posts(
    new_posts: Iterable[CleanedPost],
    historical_posts: Iterable[CleanedPost],
) -> list[CleanedPost]:
    """Merge two batches into one context, deduplicated by ``post_id``.

    A freshly fetched record supersedes the stored one for the same id.
    New posts come first in input order, followed by historical-only posts.
    """
    merged: dict[str, CleanedPost] = {}
    for post in new_posts:
        merged[post.post_id] = post
    for post in historical_posts:
        merged.setdefault(post.post_id, post)
    return list(merged.values())


def compute_baseline(posts: Sequence[CleanedPost]) -> MetricBaseline:
    """Compute per-metric ``{min, max}`` across *posts*.

    Returns an empty baseline when *posts* is empty.
    """
    if not posts:
        return MetricBaseline(ranges={})

    ranges: dict[str, MetricRange] = {}
    for key in METRIC_KEYS:
        values = [post.metric(key) for post in posts]
        ranges[key] = MetricRange(min=min(values), max=max(values))
    return MetricBaseline(ranges=ranges)


def normalize_value(value: float, minimum: float, maximum: float) -> float:
    """Min-max normalize *value* into [0.0, 1.0].

    Returns ``0.0`` when the range has no variance. A range wider than the
    largest float is scaled by half first so the result stays finite.
    """
    if maximum == minimum:
        return 0.0
    clamped = max(minimum, min(value, maximum))
    span = maximum - minimum
    if math.isfinite(span):
        return (clamped - minimum) / span
    return (clamped / 2 - minimum / 2) / (maximum / 2 - minimum / 2)
