"""Immutable records produced at each stage of the scoring pipeline.

Stage builders live in ``social_ranker.services``; every record here is fully
populated when constructed so later stages never see partial data::

    raw mapping ──clean_post──▶ CleanedPost
    CleanedPost ──score_*─────▶ ScoredPost
    ScoredPost  ──rank_posts──▶ RankedPost
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

METRIC_KEYS: tuple[str, ...] = ("views", "reach", "interactions", "link_clicks")


class InvalidPostError(ValueError):
    """Raised when a raw post is missing a structurally required field."""

    def __init__(self, field: str, post_id: object = None) -> None:
        self.field = field
        self.post_id = post_id
        detail = f"Post is missing required field '{field}'"
        if post_id:
            detail += f" (post_id={post_id})"
        super().__init__(detail)


@dataclass(frozen=True)
class CleanedPost:
    """A post whose four metrics are guaranteed finite floats."""

    post_id: str
    platform: str
    publish_time: str | None
    permalink: str | None
    caption: str | None
    image_url: str | None
    views: float
    reach: float
    interactions: float
    link_clicks: float

    def metric(self, key: str) -> float:
        return getattr(self, key)

    def metrics(self) -> dict[str, float]:
        return {key: self.metric(key) for key in METRIC_KEYS}


@dataclass(frozen=True)
class MetricRange:
    min: float
    max: float


@dataclass(frozen=True)
class MetricBaseline:
    """Observed ``{min, max}`` per metric across a normalization context.

    An empty ``ranges`` mapping means the context held no posts.
    """

    ranges: Mapping[str, MetricRange]

    def get(self, key: str) -> MetricRange | None:
        return self.ranges.get(key)


@dataclass(frozen=True)
class ScoredPost:
    """A cleaned post plus its composite score.

    Attributes:
        post: The cleaned input record.
        normalized: Normalized value in [0.0, 1.0] for every metric key.
            Always ``0.0`` under the percentile strategy, which ranks raw
            values instead of normalizing them.
        performance: Unscaled weighted sum the score was derived from.
        composite_score: Final score in [0, 100].
    """

    post: CleanedPost
    normalized: Mapping[str, float]
    performance: float
    composite_score: float

    @property
    def post_id(self) -> str:
        return self.post.post_id


@dataclass(frozen=True)
class RankedPost:
    scored: ScoredPost
    rank_within_batch: int

    @property
    def post(self) -> CleanedPost:
        return self.scored.post

    @property
    def post_id(self) -> str:
        return self.scored.post.post_id

    @property
    def composite_score(self) -> float:
        return self.scored.composite_score

    def to_record(self) -> dict[str, object]:
        """Flatten into the field set the caller persists and returns."""
        post = self.scored.post
        record: dict[str, object] = {
            "post_id": post.post_id,
            "platform": post.platform,
            "publish_time": post.publish_time,
            "permalink": post.permalink,
            "caption": post.caption,
            "image_url": post.image_url,
        }
        record.update(post.metrics())
        for key in METRIC_KEYS:
            record[f"{key}_norm"] = self.scored.normalized[key]
        record["composite_score"] = self.scored.composite_score
        record["rank_within_batch"] = self.rank_within_batch
        return record
