from typing import Any, Callable, Dict, Type, TypeVar, cast

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from habitflow.db.session import get_db
from habitflow.utils.cache import TTLCache

# Type variable for service classes
T = TypeVar("T")

# Global registry of service factories
_service_registry: Dict[Type[Any], Callable[..., Any]] = {}


def register_service(service_class: Type[T], factory: Callable[..., T]) -> None:
    """
    Register a service factory function.

    Args:
        service_class: The class of the service
        factory: Function taking ``(db, cache)`` that creates the service
    """
    _service_registry[service_class] = factory


def get_cache(request: Request) -> TTLCache:
    """The cache built with the application."""
    return request.app.state.cache


def get_service(service_class: Type[T]) -> Callable[..., T]:
    """
    Get a dependency provider for a service.

    The service is built once per request from the request's database session
    and the application cache. Unregistered services get a default factory
    that passes both to the constructor.

    Args:
        service_class: The class of the service to provide

    Returns:
        A FastAPI dependency that provides the service
    """
    if service_class not in _service_registry:
        register_service(service_class, lambda db, cache: service_class(db, cache))

    def _get_service(
        request: Request,
        db: Session = Depends(get_db),
        cache: TTLCache = Depends(get_cache),
    ) -> T:
        # Check if service is already in request state
        service_key = f"service:{service_class.__name__}"
        if hasattr(request.state, service_key):
            return cast(T, getattr(request.state, service_key))

        factory = _service_registry[service_class]
        service = factory(db, cache)

        # Cache in request state
        setattr(request.state, service_key, service)

        return service

    return _get_service
