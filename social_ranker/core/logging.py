"""Structured logging baseline and event taxonomy.

Event taxonomy (minimum set)::

    app_start                — application process starting
    config_loaded            — settings resolved successfully
    db_initialized           — engine created, DB path resolved
    db_migration_started     — alembic upgrade beginning
    db_migration_succeeded   — alembic upgrade completed
    db_migration_failed      — alembic upgrade error (with traceback)
    db_write_failed          — repository write error
    db_read_failed           — repository read error
    scoring_batch_completed  — score_and_rank finished a batch
    analysis_run_started     — analysis run accepted new posts
    analysis_run_completed   — scored posts persisted, timestamp updated
    analysis_run_failed      — analysis run aborted
    posts_upserted           — scored posts written to social_posts

Rules:
    - Log post ids and counts, never captions or raw metric payloads.

Usage::

    from social_ranker.core.logging import log_event
    log_event(logger, "info", "posts_upserted", count=12)
"""

import logging
import sys

# Canonical event names for grep-ability and observability.
EVENT_APP_START = "app_start"
EVENT_CONFIG_LOADED = "config_loaded"
EVENT_DB_INITIALIZED = "db_initialized"
EVENT_DB_MIGRATION_STARTED = "db_migration_started"
EVENT_DB_MIGRATION_SUCCEEDED = "db_migration_succeeded"
EVENT_DB_MIGRATION_FAILED = "db_migration_failed"
EVENT_DB_WRITE_FAILED = "db_write_failed"
EVENT_DB_READ_FAILED = "db_read_failed"
EVENT_SCORING_BATCH_COMPLETED = "scoring_batch_completed"
EVENT_ANALYSIS_RUN_STARTED = "analysis_run_started"
EVENT_ANALYSIS_RUN_COMPLETED = "analysis_run_completed"
EVENT_ANALYSIS_RUN_FAILED = "analysis_run_failed"
EVENT_POSTS_UPSERTED = "posts_upserted"


_HANDLER_ATTR = "_social_ranker"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logger with a simple structured format.

    Safe to call multiple times. Only adds the handler once and
    restores it if Alembic's ``fileConfig()`` removes it.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in root.handlers:
        if getattr(h, _HANDLER_ATTR, False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def log_event(
    logger: logging.Logger,
    level: str,
    event_name: str,
    **kwargs: object,
) -> None:
    """Emit a structured log line with consistent ``event_name: key=value`` format.

    Parameters
    ----------
    logger:
        The logger instance (provides the component via ``logger.name``).
    level:
        Log level name: ``"debug"``, ``"info"``, ``"warning"``, ``"error"``,
        or ``"exception"``.
    event_name:
        Canonical event name (e.g. ``"posts_upserted"``).
    **kwargs:
        Arbitrary key-value pairs appended as ``key=value``.
    """
    parts = " ".join(f"{k}={v}" for k, v in kwargs.items())
    message = f"{event_name}: {parts}" if parts else event_name
    log_fn = getattr(logger, level, logger.info)
    log_fn(message)
