"""Client-facing error normalization.

Routes translate failures through these helpers so every error response
carries a plain ``detail`` message, never a traceback or SQL fragment.
The underlying exception is logged here with its operation name.
"""

import logging
from dataclasses import dataclass

from social_ranker.core.logging import (
    EVENT_DB_READ_FAILED,
    EVENT_DB_WRITE_FAILED,
    log_event,
)
from social_ranker.models.scoring import InvalidPostError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedError:
    """What a route needs to answer a failed request."""

    user_message: str
    error_category: str
    retryable: bool
    http_status: int = 500

    def to_response(self) -> dict[str, object]:
        return {"detail": self.user_message, "retryable": self.retryable}


# (substrings in the lowercased driver message, error to return)
_DB_ERROR_RULES: tuple[tuple[tuple[str, ...], NormalizedError], ...] = (
    (
        ("locked", "busy"),
        NormalizedError(
            user_message="The database is temporarily busy. Please try again in a moment.",
            error_category="db",
            retryable=True,
            http_status=503,
        ),
    ),
    (
        ("readonly", "read-only", "permission"),
        NormalizedError(
            user_message=(
                "The database cannot be written. "
                "Check APP_DB_PATH points to a writable location."
            ),
            error_category="db",
            retryable=False,
        ),
    ),
)

_DB_ERROR_FALLBACK = NormalizedError(
    user_message="A database error occurred. Please try again.",
    error_category="db",
    retryable=True,
)


def classify_db_error(exc: Exception) -> NormalizedError:
    """Map a database exception onto a client-facing error without logging."""
    text = str(exc).lower()
    for needles, error in _DB_ERROR_RULES:
        if any(needle in text for needle in needles):
            return error
    return _DB_ERROR_FALLBACK


def normalize_db_error(
    exc: Exception,
    *,
    operation: str,
    correlation_id: str | None = None,
    write: bool = True,
) -> NormalizedError:
    """Classify and log a failed repository call.

    ``write=False`` logs ``db_read_failed`` instead of ``db_write_failed``.
    """
    error = classify_db_error(exc)
    log_event(
        logger, "error", EVENT_DB_WRITE_FAILED if write else EVENT_DB_READ_FAILED,
        operation=operation,
        error_category=error.error_category,
        retryable=error.retryable,
        correlation_id=correlation_id or "N/A",
        detail=f"{type(exc).__name__}: {exc}",
    )
    return error


def normalize_validation_error(messages: list[str]) -> NormalizedError:
    """Fold one or more validation messages into a single 422."""
    return NormalizedError(
        user_message=f"Validation failed: {'; '.join(messages)}",
        error_category="validation",
        retryable=False,
        http_status=422,
    )


def normalize_invalid_post(exc: InvalidPostError) -> NormalizedError:
    """A post that cannot be scored at all. Resubmitting it unchanged won't help."""
    subject = f"post '{exc.post_id}'" if exc.post_id else "a post without an id"
    return normalize_validation_error(
        [f"{subject} is missing required field '{exc.field}'"],
    )


def normalize_unknown_error(
    exc: Exception,
    *,
    operation: str,
    correlation_id: str | None = None,
) -> NormalizedError:
    log_event(
        logger, "exception", "unknown_error",
        operation=operation,
        error_category="unknown",
        correlation_id=correlation_id or "N/A",
        detail=f"{type(exc).__name__}: {exc}",
    )
    return NormalizedError(
        user_message="An unexpected error occurred. Please try again.",
        error_category="unknown",
        retryable=False,
    )
