# habitflow/api/deps.py
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from habitflow.core import security
from habitflow.core.exceptions import AuthorizationException, NotAuthenticatedException
from habitflow.models.user import User
from habitflow.services.achievement_service import AchievementService
from habitflow.services.community_service import CommunityService
from habitflow.services.contact_service import ContactService
from habitflow.services.habit_service import HabitService
from habitflow.services.progression_service import ProgressionService
from habitflow.services.shop_service import ShopService
from habitflow.services.user_service import UserService
from habitflow.utils.dependencies import get_service

# Bearer tokens issued by the identity provider; a missing header is reported
# as not_authenticated by get_current_user rather than by FastAPI
bearer_scheme = HTTPBearer(auto_error=False)


# Service dependencies - defined as functions that will be called at runtime
# These will only be evaluated after services have been registered
def get_habit_service():
    return get_service(HabitService)


def get_progression_service():
    return get_service(ProgressionService)


def get_achievement_service():
    return get_service(AchievementService)


def get_shop_service():
    return get_service(ShopService)


def get_community_service():
    return get_service(CommunityService)


def get_contact_service():
    return get_service(ContactService)


def get_user_service():
    return get_service(UserService)


# Authentication dependencies
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    user_service: UserService = Depends(get_user_service()),
) -> User:
    """
    Get the profile of the caller, creating it on the first request.

    Args:
        credentials: Bearer token from the Authorization header
        user_service: Injected user service

    Returns:
        Authenticated user object

    Raises:
        NotAuthenticatedException: If the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        raise NotAuthenticatedException("Not authenticated")

    claims = security.decode_identity_token(credentials.credentials)
    return user_service.get_or_create_from_claims(claims)


async def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Get the current authenticated and active user.

    Raises:
        AuthorizationException: If the user is inactive
    """
    if not current_user.is_active:
        raise AuthorizationException("Inactive user")
    return current_user
