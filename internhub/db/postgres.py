"""
Primary store connection - SQLAlchemy engine and sessions.

PostgreSQL in production; any SQLAlchemy URL works through
DATABASE_URL (the tests run against in-memory SQLite).
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
import logging

from internhub.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # One shared connection so every thread sees the same in-memory db
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(
    settings.relational_url,
    echo=settings.sql_echo,
    **_engine_options(settings.relational_url)
)

# Session factory
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.
    Usage:
        with get_db_session() as db:
            db.execute(select(User))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_relational_schema() -> None:
    """Create all tables from the ORM metadata (no-op for existing tables)."""
    from internhub.models import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Relational schema ready")


def test_postgres_connection() -> bool:
    """
    Test if the primary store is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("Primary store connection failed: %s", e)
        return False
