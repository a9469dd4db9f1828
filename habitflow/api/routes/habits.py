# habitflow/api/routes/habits.py
from typing import Any, List, Optional
import logging

from fastapi import APIRouter, Depends, Query, status

from habitflow import models, schemas
from habitflow.api import deps
from habitflow.core.constants import HabitStatus
from habitflow.core.logging import log_context
from habitflow.services.habit_service import HabitService

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[schemas.Habit])
def read_habits(
    habit_status: HabitStatus = Query(HabitStatus.ALL, alias="status"),
    search: Optional[str] = Query(None, max_length=50),
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    """
    Retrieve habits, optionally filtered by status and title.
    """
    with log_context(
        user_id=current_user.id,
        action="list_habits",
        status=habit_status.value,
        search=search,
    ):
        logger.info(f"User {current_user.id} retrieving habits")
        return habit_service.list_habits(current_user.id, habit_status, search)


@router.post("/", response_model=schemas.Habit, status_code=status.HTTP_201_CREATED)
def create_habit(
    *,
    habit_in: schemas.HabitCreate,
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    """
    Create new habit.
    """
    with log_context(
        user_id=current_user.id, action="create_habit", habit_title=habit_in.title
    ):
        logger.info(f"User {current_user.id} creating habit: {habit_in.title}")
        return habit_service.create_habit(current_user.id, habit_in)


@router.get("/today", response_model=List[schemas.HabitToday])
def read_today(
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    """
    Active habits with today's check-in state.
    """
    with log_context(user_id=current_user.id, action="today_habits"):
        return habit_service.get_today(current_user.id)


@router.get("/summary", response_model=schemas.HabitSummary)
def read_summary(
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="habit_summary"):
        return habit_service.get_summary(current_user.id)


@router.get("/{habit_id}", response_model=schemas.Habit)
def read_habit(
    *,
    habit_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    """
    Get habit by ID.
    """
    with log_context(user_id=current_user.id, action="get_habit", habit_id=habit_id):
        logger.info(f"User {current_user.id} retrieving habit {habit_id}")
        return habit_service.get_habit(current_user.id, habit_id)


@router.put("/{habit_id}", response_model=schemas.Habit)
def update_habit(
    *,
    habit_id: int,
    habit_in: schemas.HabitUpdate,
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    """
    Update a habit.
    """
    with log_context(user_id=current_user.id, action="update_habit", habit_id=habit_id):
        logger.info(f"User {current_user.id} updating habit {habit_id}")
        return habit_service.update_habit(current_user.id, habit_id, habit_in)


@router.post("/{habit_id}/archive", response_model=schemas.Habit)
def archive_habit(
    *,
    habit_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="archive_habit", habit_id=habit_id):
        logger.info(f"User {current_user.id} archiving habit {habit_id}")
        return habit_service.archive_habit(current_user.id, habit_id)


@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_habit(
    *,
    habit_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> None:
    """
    Delete a habit and all of its entries.
    """
    with log_context(user_id=current_user.id, action="delete_habit", habit_id=habit_id):
        logger.info(f"User {current_user.id} deleting habit {habit_id}")
        habit_service.delete_habit(current_user.id, habit_id)


@router.get("/{habit_id}/stats", response_model=schemas.HabitStats)
def read_habit_stats(
    *,
    habit_id: int,
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    with log_context(user_id=current_user.id, action="habit_stats", habit_id=habit_id):
        return habit_service.get_stats(current_user.id, habit_id)


@router.post("/{habit_id}/entries", response_model=schemas.HabitToggleResult)
def toggle_entry(
    *,
    habit_id: int,
    toggle_in: schemas.HabitEntryToggle,
    current_user: models.User = Depends(deps.get_current_active_user),
    habit_service: HabitService = Depends(deps.get_habit_service()),
) -> Any:
    """
    Check a habit in or out for a day (today by default).
    """
    with log_context(
        user_id=current_user.id,
        action="toggle_entry",
        habit_id=habit_id,
        entry_date=toggle_in.entry_date,
    ):
        logger.info(f"User {current_user.id} toggling habit {habit_id}")
        return habit_service.toggle_entry(current_user.id, habit_id, toggle_in)
