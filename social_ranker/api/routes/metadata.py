"""GET /api/v1/metadata/last-updated — when the last analysis run happened."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from social_ranker.db.session import get_db
from social_ranker.models.api import LastUpdatedResponse
from social_ranker.services.post_repository import get_last_fetch_timestamp

router = APIRouter()


@router.get("/api/v1/metadata/last-updated", response_model=LastUpdatedResponse)
def last_updated(db: Session = Depends(get_db)) -> LastUpdatedResponse:
    """Return the last fetch timestamp, ``null`` if no run has completed."""
    return LastUpdatedResponse(last_updated=get_last_fetch_timestamp(db))
