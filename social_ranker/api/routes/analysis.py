"""POST /api/v1/analysis/run — score a new batch and persist the ranking."""

import logging
import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from social_ranker.core.errors import normalize_db_error, normalize_invalid_post
from social_ranker.core.logging import EVENT_ANALYSIS_RUN_FAILED, log_event
from social_ranker.core.settings import settings
from social_ranker.db.session import get_db
from social_ranker.models.api import (
    AnalysisRunRequest,
    AnalysisRunResponse,
    ScoredPostOut,
)
from social_ranker.models.scoring import InvalidPostError
from social_ranker.services.analysis_run import run_analysis

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/v1/analysis/run", response_model=AnalysisRunResponse)
def run(body: AnalysisRunRequest, db: Session = Depends(get_db)) -> AnalysisRunResponse:
    """Score the submitted posts against everything stored and upsert them."""
    correlation_id = str(uuid.uuid4())

    try:
        result = run_analysis(
            db,
            [post.to_raw() for post in body.posts],
            now=datetime.now(UTC),
            strategy=settings.scoring_strategy,
            chunk_size=settings.historical_chunk_size,
        )
        db.commit()
    except InvalidPostError as exc:
        db.rollback()
        log_event(
            logger, "warning", EVENT_ANALYSIS_RUN_FAILED,
            reason="invalid_post", field=exc.field, correlation_id=correlation_id,
        )
        error = normalize_invalid_post(exc)
        raise HTTPException(status_code=error.http_status, detail=error.user_message)
    except Exception as exc:
        db.rollback()
        error = normalize_db_error(
            exc, operation="run_analysis", correlation_id=correlation_id,
        )
        raise HTTPException(status_code=error.http_status, detail=error.user_message)

    return AnalysisRunResponse(
        message=result.message,
        strategy=result.strategy.value,
        processed_posts=[ScoredPostOut.from_ranked(p) for p in result.processed],
    )
