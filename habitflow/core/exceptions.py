# habitflow/core/exceptions.py
from typing import Dict, Any, Optional
from fastapi import status


class BusinessException(Exception):
    """Base exception for business rule violations."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "business_error"

    def __init__(
        self, message: str, code: str = None, details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


# Identity
class NotAuthenticatedException(BusinessException):
    """No valid user identity accompanies the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "not_authenticated"


class AuthorizationException(BusinessException):
    """The caller is known but may not perform the action."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "authorization_error"


# Resources
class ResourceNotFoundException(BusinessException):
    """Referenced habit/item/achievement is absent or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "resource_not_found"


class DuplicateResourceException(BusinessException):
    """Exception raised when attempting to create a duplicate resource."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "resource_already_exists"


class ValidationException(BusinessException):
    """Input failed a business validation rule (empty title, short message, ...)."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "validation_error"


# Points economy
class InsufficientFundsException(BusinessException):
    """Point balance is lower than the price being charged."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    error_code = "insufficient_funds"


class AlreadyOwnedException(BusinessException):
    """A permanent shop item is already held by the user."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "already_owned"


# Data store
class TransientStoreException(BusinessException):
    """Network or database failure; the caller may retry after re-reading state."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "transient_store_error"


