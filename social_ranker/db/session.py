"""Database session factory."""

from collections.abc import Generator

from sqlalchemy.orm import Session, sessionmaker

from social_ranker.db.engine import engine

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session; routes own commit/rollback."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
