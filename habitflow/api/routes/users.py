# habitflow/api/routes/users.py
from typing import Any
import logging

from fastapi import APIRouter, Depends

from habitflow import models, schemas
from habitflow.api import deps
from habitflow.core.logging import log_context
from habitflow.services.user_service import UserService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=schemas.User)
def read_user_me(
    current_user: models.User = Depends(deps.get_current_active_user),
) -> Any:
    """
    Get current user.
    """
    with log_context(user_id=current_user.id, action="get_current_user"):
        logger.info(f"User {current_user.id} retrieving their profile")
        return current_user


@router.put("/me", response_model=schemas.User)
def update_user_me(
    *,
    user_in: schemas.UserUpdate,
    current_user: models.User = Depends(deps.get_current_active_user),
    user_service: UserService = Depends(deps.get_user_service()),
) -> Any:
    """
    Update own profile.
    """
    with log_context(user_id=current_user.id, action="update_user"):
        logger.info(f"User {current_user.id} updating their profile")
        return user_service.update_me(current_user.id, user_in)


@router.get("/me/preferences", response_model=schemas.Preferences)
def read_preferences(
    current_user: models.User = Depends(deps.get_current_active_user),
    user_service: UserService = Depends(deps.get_user_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="get_preferences"):
        return {"values": user_service.get_preferences(current_user.id)}


@router.put("/me/preferences", response_model=schemas.Preferences)
def update_preferences(
    *,
    preferences_in: schemas.Preferences,
    current_user: models.User = Depends(deps.get_current_active_user),
    user_service: UserService = Depends(deps.get_user_service()),
) -> Any:
    """
    Merge preferences; a null value removes the key.
    """
    with log_context(user_id=current_user.id, action="update_preferences"):
        logger.info(f"User {current_user.id} updating preferences")
        return {
            "values": user_service.update_preferences(
                current_user.id, preferences_in.values
            )
        }


@router.get("/me/export", response_model=schemas.UserExport)
def export_user_data(
    current_user: models.User = Depends(deps.get_current_active_user),
    user_service: UserService = Depends(deps.get_user_service()),
) -> Any:
    """
    Export habits, entries and preferences as JSON.
    """
    with log_context(user_id=current_user.id, action="export_data"):
        logger.info(f"User {current_user.id} exporting their data")
        return user_service.export_data(current_user.id)


@router.post("/me/import", response_model=schemas.ImportResult)
def import_user_data(
    *,
    payload: schemas.UserImport,
    current_user: models.User = Depends(deps.get_current_active_user),
    user_service: UserService = Depends(deps.get_user_service()),
) -> Any:
    """
    Import a previous export into the account.
    """
    with log_context(
        user_id=current_user.id, action="import_data", habits=len(payload.habits)
    ):
        logger.info(f"User {current_user.id} importing {len(payload.habits)} habits")
        return user_service.import_data(current_user.id, payload)
