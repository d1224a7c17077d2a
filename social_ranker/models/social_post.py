"""SQLAlchemy ORM models for persisted posts and run metadata."""

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from social_ranker.db.base import Base

LAST_FETCH_TIMESTAMP_KEY = "last_fetch_timestamp"


class SocialPost(Base):
    """One scored post, keyed by its platform post id."""

    __tablename__ = "social_posts"
    __table_args__ = (
        Index("ix_social_posts_platform", "platform"),
        Index("ix_social_posts_publish_time", "publish_time"),
        Index("ix_social_posts_composite_score", "composite_score"),
    )

    post_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    publish_time: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True,
    )
    permalink: Mapped[str | None] = mapped_column(
        String(2048), nullable=True,
    )
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(
        String(2048), nullable=True,
    )
    views: Mapped[float | None] = mapped_column(Float, nullable=True)
    reach: Mapped[float | None] = mapped_column(Float, nullable=True)
    interactions: Mapped[float | None] = mapped_column(Float, nullable=True)
    link_clicks: Mapped[float | None] = mapped_column(Float, nullable=True)
    composite_score: Mapped[float | None] = mapped_column(
        Float, nullable=True,
    )
    rank_within_batch: Mapped[int | None] = mapped_column(
        Integer, nullable=True,
    )
    last_fetched_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True,
    )


class AppMetadata(Base):
    """Key/timestamp pairs managed by the analysis run."""

    __tablename__ = "app_metadata"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value_timestamp: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True,
    )
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
