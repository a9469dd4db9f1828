import functools
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from habitflow.core.config import settings
from habitflow.core.exceptions import TransientStoreException

# Set up module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


def _rollback(db: Optional[Session]) -> None:
    if db is not None:
        db.rollback()


def retry_on_transient(retries: Optional[int] = None, error_message: str = "Read failed"):
    """
    Decorator for read paths: retry after a database ``OperationalError``.

    The decorated callable is a method whose instance exposes ``db``; the
    session is rolled back before every new attempt. Once the retries are used
    up a ``TransientStoreException`` is raised.

    Args:
        retries: extra attempts, defaults to settings.STORE_READ_RETRIES
        error_message: message reported to the caller
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs) -> T:
            attempts = 1 + (settings.STORE_READ_RETRIES if retries is None else retries)
            db = getattr(self, "db", None)

            for attempt in range(1, attempts + 1):
                try:
                    return func(self, *args, **kwargs)
                except OperationalError as e:
                    _rollback(db)
                    logger.warning(
                        f"Transient store error in {func.__qualname__} "
                        f"(attempt {attempt}/{attempts}): {e.orig}"
                    )
                    if attempt == attempts:
                        raise TransientStoreException(error_message) from e

        return wrapper

    return decorator


@contextmanager
def translate_store_errors(
    db: Session, error_message: str = "Write failed, reload and try again"
) -> Iterator[None]:
    """
    Context manager for write paths: roll back and report, never retry.

    Usage:
        with translate_store_errors(self.db, "Purchase failed"):
            ...
            self.db.commit()
    """
    try:
        yield
    except OperationalError as e:
        db.rollback()
        logger.error(f"Transient store error during write: {e.orig}")
        raise TransientStoreException(error_message) from e
