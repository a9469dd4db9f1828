# habitflow/api/routes/achievements.py
from typing import Any, List
import logging

from fastapi import APIRouter, Depends

from habitflow import models, schemas
from habitflow.api import deps
from habitflow.core.logging import log_context
from habitflow.services.achievement_service import AchievementService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[schemas.UserAchievement])
def read_user_achievements(
    current_user: models.User = Depends(deps.get_current_active_user),
    achievement_service: AchievementService = Depends(deps.get_achievement_service()),
) -> Any:
    """
    Retrieve the achievements the user has unlocked.
    """
    with log_context(user_id=current_user.id, action="list_user_achievements"):
        return achievement_service.get_user_achievements(current_user.id)


@router.get("/available", response_model=List[schemas.AchievementStatus])
def read_available_achievements(
    current_user: models.User = Depends(deps.get_current_active_user),
    achievement_service: AchievementService = Depends(deps.get_achievement_service()),
) -> Any:
    """
    Retrieve the full catalog with the user's progress.
    """
    with log_context(user_id=current_user.id, action="list_achievements"):
        return achievement_service.get_catalog(current_user.id)


@router.post("/check", response_model=schemas.AchievementCheckResult)
def check_achievements(
    current_user: models.User = Depends(deps.get_current_active_user),
    achievement_service: AchievementService = Depends(deps.get_achievement_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="check_achievements"):
        unlocked = achievement_service.check_and_unlock(current_user.id)
        logger.info(f"User {current_user.id} unlocked {len(unlocked)} achievements")
        return {
            "unlocked": unlocked,
            "points_awarded": sum(achievement.points_reward for achievement in unlocked),
        }
