# habitflow/api/routes/levels.py
from typing import Any
import logging

from fastapi import APIRouter, Depends, Query

from habitflow import models, schemas
from habitflow.api import deps
from habitflow.core.logging import log_context
from habitflow.services.progression_service import ProgressionService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=schemas.LevelView)
def read_my_level(
    current_user: models.User = Depends(deps.get_current_active_user),
    progression_service: ProgressionService = Depends(deps.get_progression_service()),
) -> Any:
    """
    Points balance, experience and progress to the next level.
    """
    with log_context(user_id=current_user.id, action="get_level"):
        return progression_service.get_level_view(current_user.id)


@router.get("/leaderboard", response_model=schemas.Leaderboard)
def read_leaderboard(
    limit: int = Query(10, ge=1, le=100),
    current_user: models.User = Depends(deps.get_current_active_user),
    progression_service: ProgressionService = Depends(deps.get_progression_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="leaderboard", limit=limit):
        return {"entries": progression_service.get_leaderboard(limit)}
