"""Database engine configuration."""

from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from examsim.core.config import settings


def create_db_engine(url: str | None = None) -> Engine:
    """Create SQLAlchemy engine."""
    url = url or settings.DATABASE_URL
    kwargs: dict[str, Any] = {"echo": False}  # Set to True for SQL query logging
    if url.startswith("sqlite"):
        # Request handlers may run in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    return create_engine(url, **kwargs)


# Global engine instance
engine = create_db_engine()
