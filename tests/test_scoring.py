"""Tests for the min-max and percentile scoring strategies."""

import pytest
from social_ranker.models.scoring import METRIC_KEYS, CleanedPost
from social_ranker.services.baseline import compute_baseline
from social_ranker.services.scoring import (
    ENGAGEMENT_WEIGHTS,
    MetricWeights,
    ScoringStrategy,
    percentile_for_position,
    raw_performance,
    score_min_max,
    score_percentile,
)


def _post(post_id: str, *, platform: str = "Facebook", **metrics: float) -> CleanedPost:
    values = {"views": 0.0, "reach": 0.0, "interactions": 0.0, "link_clicks": 0.0}
    values.update(metrics)
    return CleanedPost(
        post_id=post_id,
        platform=platform,
        publish_time=None,
        permalink=None,
        caption=None,
        image_url=None,
        **values,
    )


_LOW = _post("low", views=100, reach=1000, interactions=10, link_clicks=0)
_MID = _post("mid", views=200, reach=2000, interactions=30, link_clicks=10)
_HIGH = _post("high", views=300, reach=3000, interactions=50, link_clicks=20)


# ---------------------------------------------------------------------------
# MetricWeights
# ---------------------------------------------------------------------------


class TestMetricWeights:
    def test_engagement_weights_values(self) -> None:
        assert ENGAGEMENT_WEIGHTS == MetricWeights(
            views=0.15, reach=0.25, interactions=0.5, link_clicks=0.1,
        )

    def test_engagement_weights_sum_to_one(self) -> None:
        total = sum(ENGAGEMENT_WEIGHTS.weight(k) for k in METRIC_KEYS)
        assert total == pytest.approx(1.0)

    def test_weights_are_immutable(self) -> None:
        with pytest.raises(AttributeError):
            ENGAGEMENT_WEIGHTS.views = 0.9  # type: ignore[misc]

    def test_absent_weight_is_zero(self) -> None:
        weights = MetricWeights.from_mapping({"reach": 0.4})
        assert weights.weight("reach") == 0.4
        assert weights.weight("views") == 0.0

    def test_unknown_metric_rejected(self) -> None:
        with pytest.raises(ValueError, match="shares"):
            MetricWeights.from_mapping({"shares": 0.3})

    @pytest.mark.parametrize("bad", [-0.1, 1.5, float("nan")])
    def test_out_of_range_weight_rejected(self, bad: float) -> None:
        with pytest.raises(ValueError, match="views"):
            MetricWeights(views=bad)

    def test_weights_need_not_sum_to_one(self) -> None:
        weights = MetricWeights(views=1.0, reach=1.0, interactions=1.0, link_clicks=1.0)
        assert weights.weight("link_clicks") == 1.0


# ---------------------------------------------------------------------------
# Min-max strategy
# ---------------------------------------------------------------------------


class TestScoreMinMax:
    def test_best_post_scores_sum_of_weights(self) -> None:
        baseline = compute_baseline([_LOW, _MID, _HIGH])
        scored = score_min_max(_HIGH, baseline, ENGAGEMENT_WEIGHTS)
        assert scored.composite_score == pytest.approx(100.0)
        assert all(v == 1.0 for v in scored.normalized.values())

    def test_worst_post_scores_zero(self) -> None:
        baseline = compute_baseline([_LOW, _MID, _HIGH])
        scored = score_min_max(_LOW, baseline, ENGAGEMENT_WEIGHTS)
        assert scored.composite_score == 0.0

    def test_midpoint_post(self) -> None:
        baseline = compute_baseline([_LOW, _MID, _HIGH])
        scored = score_min_max(_MID, baseline, ENGAGEMENT_WEIGHTS)
        assert scored.normalized == {
            "views": 0.5, "reach": 0.5, "interactions": 0.5, "link_clicks": 0.5,
        }
        assert scored.composite_score == pytest.approx(50.0)

    def test_performance_is_unscaled_sum(self) -> None:
        baseline = compute_baseline([_LOW, _MID, _HIGH])
        scored = score_min_max(_MID, baseline, ENGAGEMENT_WEIGHTS)
        assert scored.composite_score == scored.performance * 100

    def test_zero_weight_metric_keeps_zero_normalized(self) -> None:
        baseline = compute_baseline([_LOW, _HIGH])
        scored = score_min_max(_HIGH, baseline, MetricWeights(interactions=1.0))
        assert scored.normalized["views"] == 0.0
        assert scored.normalized["reach"] == 0.0
        assert scored.normalized["interactions"] == 1.0
        assert scored.composite_score == 100.0

    def test_empty_baseline_scores_zero_with_all_keys(self) -> None:
        scored = score_min_max(_HIGH, compute_baseline([]), ENGAGEMENT_WEIGHTS)
        assert scored.composite_score == 0.0
        assert set(scored.normalized) == set(METRIC_KEYS)

    def test_single_post_baseline_scores_zero(self) -> None:
        post = _post("solo", views=5500, reach=4000, interactions=150, link_clicks=50)
        scored = score_min_max(post, compute_baseline([post]), ENGAGEMENT_WEIGHTS)
        assert all(v == 0.0 for v in scored.normalized.values())
        assert scored.composite_score == 0.0


# ---------------------------------------------------------------------------
# Percentile strategy
# ---------------------------------------------------------------------------


class TestPercentileForPosition:
    def test_single_post_partition_is_100(self) -> None:
        assert percentile_for_position(1, 1) == 100.0

    def test_two_posts(self) -> None:
        assert percentile_for_position(1, 2) == 100.0
        assert percentile_for_position(2, 2) == 0.0

    def test_three_posts(self) -> None:
        assert [percentile_for_position(p, 3) for p in (1, 2, 3)] == [100.0, 50.0, 0.0]


class TestScorePercentile:
    def test_raw_performance_is_weighted_sum(self) -> None:
        post = _post("p", views=100, reach=200, interactions=10, link_clicks=4)
        weights = MetricWeights(views=0.5, reach=0.25, interactions=1.0, link_clicks=0.5)
        assert raw_performance(post, weights) == 50 + 50 + 10 + 2

    def test_two_post_partition(self) -> None:
        weights = MetricWeights(interactions=1.0)
        scored = score_percentile(
            [_post("b", interactions=50), _post("a", interactions=100)], weights,
        )
        by_id = {s.post_id: s for s in scored}
        assert by_id["a"].performance == 100
        assert by_id["a"].composite_score == 100.0
        assert by_id["b"].performance == 50
        assert by_id["b"].composite_score == 0.0

    def test_partitions_by_platform(self) -> None:
        weights = MetricWeights(reach=1.0)
        scored = score_percentile(
            [
                _post("fb1", reach=10),
                _post("ig1", platform="Instagram", reach=1),
                _post("fb2", reach=20),
            ],
            weights,
        )
        by_id = {s.post_id: s.composite_score for s in scored}
        assert by_id == {"fb2": 100.0, "fb1": 0.0, "ig1": 100.0}

    def test_output_grouped_by_first_seen_platform(self) -> None:
        weights = MetricWeights(reach=1.0)
        scored = score_percentile(
            [
                _post("ig1", platform="Instagram", reach=1),
                _post("fb1", reach=10),
                _post("ig2", platform="Instagram", reach=5),
            ],
            weights,
        )
        assert [s.post_id for s in scored] == ["ig2", "ig1", "fb1"]

    def test_equal_performance_keeps_input_order(self) -> None:
        scored = score_percentile(
            [_post("first", reach=5), _post("second", reach=5)],
            MetricWeights(reach=1.0),
        )
        assert [(s.post_id, s.composite_score) for s in scored] == [
            ("first", 100.0), ("second", 0.0),
        ]

    def test_normalized_values_are_zero(self) -> None:
        scored = score_percentile([_HIGH], ENGAGEMENT_WEIGHTS)
        assert scored[0].normalized == {key: 0.0 for key in METRIC_KEYS}

    def test_empty_input(self) -> None:
        assert score_percentile([], ENGAGEMENT_WEIGHTS) == []


class TestStrategyEnum:
    def test_values(self) -> None:
        assert ScoringStrategy("min_max") is ScoringStrategy.min_max
        assert ScoringStrategy("percentile") is ScoringStrategy.percentile
