"""Tie-aware ranking of scored posts."""

from __future__ import annotations

from collections.abc import Iterable

from social_ranker.models.scoring import RankedPost, ScoredPost


def rank_posts(posts: Iterable[ScoredPost]) -> list[RankedPost]:
    """Sort by ``composite_score`` descending and assign ranks.

    Rank is the 1-based position in sort order, held constant through a run
    of exactly equal scores: ``[50, 50, 30]`` ranks as ``[1, 1, 3]``.
    The sort is stable, so equal scores keep their input order.
    """
    ordered = sorted(posts, key=lambda p: p.composite_score, reverse=True)

    ranked: list[RankedPost] = []
    rank = 0
    last_score: float | None = None
    for position, post in enumerate(ordered, start=1):
        if last_score is None or post.composite_score != last_score:
            rank = position
            last_score = post.composite_score
        ranked.append(RankedPost(scored=post, rank_within_batch=rank))
    return ranked
