"""Pydantic request/response models for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from social_ranker.models.scoring import RankedPost


class RawPostIn(BaseModel):
    """A post as delivered by the platform fetch layer.

    Metrics are accepted as any JSON value and left raw; cleaning is the
    scoring pipeline's job.
    """

    post_id: str = Field(..., min_length=1, max_length=255)
    platform: str = Field(..., min_length=1, max_length=50)
    publish_time: datetime
    permalink: str | None = Field(default=None, max_length=2_048)
    caption: str | None = None
    image_url: str | None = Field(default=None, max_length=2_048)
    views: Any = None
    reach: Any = None
    interactions: Any = None
    link_clicks: Any = None

    @field_validator("post_id", "platform", mode="before")
    @classmethod
    def strip_identity(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return v.strip()
        return v

    def to_raw(self) -> dict[str, object]:
        return self.model_dump(mode="json")


class AnalysisRunRequest(BaseModel):
    posts: list[RawPostIn] = Field(default_factory=list)


class ScoredPostOut(BaseModel):
    post_id: str
    platform: str
    publish_time: str | None
    permalink: str | None
    views: float
    reach: float
    interactions: float
    link_clicks: float
    views_norm: float
    reach_norm: float
    interactions_norm: float
    link_clicks_norm: float
    composite_score: float
    rank_within_batch: int

    @classmethod
    def from_ranked(cls, ranked: RankedPost) -> "ScoredPostOut":
        return cls.model_validate(ranked.to_record())


class AnalysisRunResponse(BaseModel):
    message: str
    strategy: str
    processed_posts: list[ScoredPostOut]


class PostListItem(BaseModel):
    post_id: str
    platform: str
    permalink: str | None
    publish_time: datetime | None
    composite_score: float | None
    rank_within_batch: int | None
    views: float | None
    reach: float | None
    interactions: float | None
    link_clicks: float | None
    rank: int


class LastUpdatedResponse(BaseModel):
    last_updated: datetime | None
