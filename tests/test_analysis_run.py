"""Tests for a full analysis run against an in-memory store."""

import logging
from datetime import UTC, datetime, timedelta

import pytest
from social_ranker.db.base import Base
from social_ranker.models.scoring import InvalidPostError
from social_ranker.models.social_post import SocialPost
from social_ranker.services.analysis_run import run_analysis
from social_ranker.services.post_repository import get_last_fetch_timestamp
from social_ranker.services.scoring import MetricWeights, ScoringStrategy
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

_T1 = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)
_T2 = _T1 + timedelta(days=1)

_WEIGHTS = MetricWeights(interactions=1.0)


@pytest.fixture()
def db() -> Session:  # type: ignore[misc]
    """Yield an in-memory SQLite session with the schema created."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    try:
        yield session
    finally:
        session.close()


def _raw(post_id: str, interactions: object, platform: str = "Facebook") -> dict:
    return {
        "post_id": post_id,
        "platform": platform,
        "publish_time": "2025-05-30T08:00:00+00:00",
        "interactions": interactions,
    }


class TestNoNewPosts:
    def test_updates_timestamp_only(self, db: Session) -> None:
        result = run_analysis(db, [], now=_T1)
        db.commit()
        assert result.processed == []
        assert "No new posts" in result.message
        assert get_last_fetch_timestamp(db) == _T1
        assert db.query(SocialPost).count() == 0

    def test_reports_previous_fetch(self, db: Session) -> None:
        run_analysis(db, [], now=_T1)
        result = run_analysis(db, [], now=_T2)
        assert result.previous_fetch == _T1
        assert result.fetched_at == _T2


class TestMinMaxRun:
    def test_persists_scored_new_posts(self, db: Session) -> None:
        result = run_analysis(
            db, [_raw("a", 10), _raw("b", "1,000")], now=_T1, weights=_WEIGHTS,
        )
        db.commit()
        assert [p.post_id for p in result.processed] == ["b", "a"]
        assert db.get(SocialPost, "b").composite_score == 100.0
        assert db.get(SocialPost, "a").rank_within_batch == 2
        assert get_last_fetch_timestamp(db) == _T1
        assert result.strategy is ScoringStrategy.min_max

    def test_second_run_scores_against_stored_history(self, db: Session) -> None:
        run_analysis(db, [_raw("a", 0), _raw("b", 100)], now=_T1, weights=_WEIGHTS)
        db.commit()
        result = run_analysis(db, [_raw("c", 50)], now=_T2, weights=_WEIGHTS)
        db.commit()
        [c] = result.processed
        assert c.composite_score == 50.0
        assert c.rank_within_batch == 1
        # Earlier rows keep their own batch scores.
        assert db.get(SocialPost, "b").composite_score == 100.0

    def test_refetched_post_overwrites_stored_metrics(self, db: Session) -> None:
        run_analysis(db, [_raw("a", 5), _raw("b", 10)], now=_T1, weights=_WEIGHTS)
        db.commit()
        run_analysis(db, [_raw("a", 40)], now=_T2, weights=_WEIGHTS)
        db.commit()
        row = db.get(SocialPost, "a")
        assert row.interactions == 40.0
        assert row.composite_score == 100.0
        assert row.last_fetched_at == _T2.replace(tzinfo=None)

    def test_small_chunk_size_loads_full_history(self, db: Session) -> None:
        run_analysis(
            db, [_raw(f"h{i}", i * 10) for i in range(5)], now=_T1, weights=_WEIGHTS,
        )
        db.commit()
        result = run_analysis(
            db, [_raw("new", 20)], now=_T2, weights=_WEIGHTS, chunk_size=2,
        )
        assert result.processed[0].composite_score == 50.0


class TestPercentileRun:
    def test_whole_corpus_rescored_and_persisted(self, db: Session) -> None:
        run_analysis(db, [_raw("a", 10)], now=_T1, weights=_WEIGHTS)
        db.commit()
        result = run_analysis(
            db,
            [_raw("b", 20)],
            now=_T2,
            weights=_WEIGHTS,
            strategy=ScoringStrategy.percentile,
        )
        db.commit()
        assert {p.post_id for p in result.processed} == {"a", "b"}
        assert db.get(SocialPost, "b").composite_score == 100.0
        assert db.get(SocialPost, "a").composite_score == 0.0
        assert db.get(SocialPost, "a").rank_within_batch == 2


class TestFailures:
    def test_invalid_post_raises_before_writing(self, db: Session) -> None:
        with pytest.raises(InvalidPostError):
            run_analysis(db, [{"post_id": "x"}], now=_T1)
        db.rollback()
        assert db.query(SocialPost).count() == 0
        assert get_last_fetch_timestamp(db) is None


class TestRunLogging:
    def test_start_and_completion_events(
        self, db: Session, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO):
            run_analysis(db, [_raw("a", 1)], now=_T1)
        assert "analysis_run_started" in caplog.text
        assert "analysis_run_completed" in caplog.text
        assert "posts_upserted" in caplog.text
