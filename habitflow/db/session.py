"""
Database session management utilities.
"""

from typing import Generator

from sqlalchemy.orm import Session

from habitflow.db.base import SessionLocal, Base, engine


def get_db() -> Generator[Session, None, None]:
    """
    Yield a database session scoped to one request.

    Uncommitted work is rolled back when the request fails, so a failed
    action leaves the last committed state in place.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create all tables that do not exist yet."""
    import habitflow.models  # noqa: F401  registers the mappers on Base

    Base.metadata.create_all(bind=engine)
