"""Coerce raw engagement metrics into finite numbers.

Raw metrics come from platform APIs and from the historical store and may be
``None``, numbers, or strings with thousands separators (``"10,000"``).
Garbage never aborts a batch: anything unparsable becomes ``0.0``.
"""

from __future__ import annotations

import math
import numbers
import re
from collections.abc import Mapping
from decimal import Decimal

from social_ranker.models.scoring import METRIC_KEYS, CleanedPost, InvalidPostError

_NUMBER_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def _parse_metric_string(value: str) -> float:
    text = value.replace(",", "").strip()
    if not _NUMBER_PATTERN.fullmatch(text):
        return 0.0
    number = float(text)
    return number if math.isfinite(number) else 0.0


def clean_metric_value(value: object) -> float:
    """Return *value* as a finite float, or ``0.0`` if it cannot be read.

    Numbers pass through unchanged (sign is not clamped). The function is
    idempotent: ``clean_metric_value(clean_metric_value(v))`` equals
    ``clean_metric_value(v)``.
    """
    match value:
        case None:
            return 0.0
        case bool():
            return 0.0
        case Decimal():
            number = float(value) if value.is_finite() else 0.0
            return number if math.isfinite(number) else 0.0
        case numbers.Real():
            number = float(value)
            return number if math.isfinite(number) else 0.0
        case str():
            return _parse_metric_string(value)
        case _:
            return 0.0


def _optional_text(raw: Mapping[str, object], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    return str(value)


def clean_post(raw: Mapping[str, object]) -> CleanedPost:
    """Build a :class:`CleanedPost` from a raw post mapping.

    Raises:
        InvalidPostError: If ``post_id`` or ``platform`` is missing or blank.
    """
    post_id = raw.get("post_id")
    if not isinstance(post_id, str) or not post_id.strip():
        raise InvalidPostError("post_id")
    platform = raw.get("platform")
    if not isinstance(platform, str) or not platform.strip():
        raise InvalidPostError("platform", post_id)

    metrics = {key: clean_metric_value(raw.get(key)) for key in METRIC_KEYS}
    return CleanedPost(
        post_id=post_id,
        platform=platform,
        publish_time=_optional_text(raw, "publish_time"),
        permalink=_optional_text(raw, "permalink"),
        caption=_optional_text(raw, "caption"),
        image_url=_optional_text(raw, "image_url"),
        **metrics,
    )
