"""SQLAlchemy declarative base for the social_posts and app_metadata tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models; ``Base.metadata`` is Alembic's target."""
