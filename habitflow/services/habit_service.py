# habitflow/services/habit_service.py
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from habitflow import models, schemas
from habitflow.core.constants import HabitStatus
from habitflow.core.exceptions import ResourceNotFoundException, ValidationException
from habitflow.repositories.habit_repository import HabitRepository
from habitflow.services.gamification_service import (
    HabitStats,
    HabitSummary,
    build_habit_stats,
    compute_streak,
    filter_habits,
    summarize_habits,
)
from habitflow.services.progression_service import ProgressionService
from habitflow.utils.cache import CacheKeys, TTLCache, invalidate_user_cache
from habitflow.utils.retry import retry_on_transient, translate_store_errors

logger = logging.getLogger(__name__)


class HabitService:
    """Service for habit and entry operations."""

    def __init__(self, db: Session, cache: Optional[TTLCache] = None):
        self.db = db
        self.cache = cache
        self.repository = HabitRepository(db)
        self.progression_service = ProgressionService(db, cache)

    @retry_on_transient()
    def list_habits(
        self,
        user_id: int,
        status: HabitStatus = HabitStatus.ALL,
        search: Optional[str] = None,
    ) -> List[models.Habit]:
        return filter_habits(self.repository.list_for_owner(user_id), status, search)

    @retry_on_transient()
    def get_habit(self, user_id: int, habit_id: int) -> models.Habit:
        """Get a habit of the user; other users' habits are reported as missing."""
        habit = self.repository.get_for_owner(habit_id, user_id)
        if not habit:
            raise ResourceNotFoundException(
                "Habit not found", details={"habit_id": habit_id}
            )
        return habit

    def create_habit(self, user_id: int, habit_in: schemas.HabitCreate) -> models.Habit:
        with translate_store_errors(self.db, "Could not create habit"):
            habit = self.repository.add(
                models.Habit(**habit_in.model_dump(), owner_id=user_id)
            )
            # commits the habit together with the creation reward
            self.progression_service.award_habit_creation(user_id)
            self.db.refresh(habit)
        logger.info(f"Created habit {habit.id} for user {user_id}")
        return habit

    def update_habit(
        self, user_id: int, habit_id: int, habit_in: schemas.HabitUpdate
    ) -> models.Habit:
        habit = self.get_habit(user_id, habit_id)
        with translate_store_errors(self.db, "Could not update habit"):
            habit = self.repository.update(habit, habit_in)
        self._invalidate(user_id)
        return habit

    def archive_habit(self, user_id: int, habit_id: int) -> models.Habit:
        habit = self.get_habit(user_id, habit_id)
        with translate_store_errors(self.db, "Could not archive habit"):
            habit = self.repository.update(habit, {"is_active": False})
        self._invalidate(user_id)
        return habit

    def delete_habit(self, user_id: int, habit_id: int) -> None:
        habit = self.get_habit(user_id, habit_id)
        with translate_store_errors(self.db, "Could not delete habit"):
            self.db.delete(habit)
            self.db.flush()
            self.progression_service.refresh_streaks(user_id)
            self.db.commit()
        self._invalidate(user_id)
        logger.info(f"Deleted habit {habit_id} of user {user_id}")

    def toggle_entry(
        self,
        user_id: int,
        habit_id: int,
        toggle: schemas.HabitEntryToggle,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Set or flip the entry of one habit for one day.

        The entry is looked up by ``(habit, date)`` and updated in place; a new
        row is only inserted when none exists. The first completion of an
        entry earns points, later toggles of the same day never do.
        """
        today = today or date.today()
        entry_date = toggle.entry_date or today
        if entry_date > today:
            raise ValidationException(
                "Cannot record a habit for a future date",
                details={"entry_date": entry_date.isoformat()},
            )

        habit = self.get_habit(user_id, habit_id)

        with translate_store_errors(self.db, "Could not save entry, reload and try again"):
            entry = self._upsert_entry(habit, entry_date, toggle)

            points_awarded = 0
            unlocked: List[models.Achievement] = []
            if entry.completed and not entry.rewarded:
                entry.rewarded = True
                self.db.flush()
                points_awarded, unlocked = self.progression_service.award_completion(
                    user_id, entry_date, today
                )
            else:
                self.progression_service.refresh_streaks(user_id, today)
                self.db.commit()

        self.db.refresh(entry)
        self._invalidate(user_id)

        return {
            "entry": entry,
            "points_awarded": points_awarded,
            "current_streak": compute_streak(habit.entries, today),
            "unlocked_achievements": [achievement.name for achievement in unlocked],
        }

    def _upsert_entry(
        self, habit: models.Habit, entry_date: date, toggle: schemas.HabitEntryToggle
    ) -> models.HabitEntry:
        entry = self.repository.get_entry(habit.id, entry_date)

        if entry is None:
            entry = models.HabitEntry(
                entry_date=entry_date,
                completed=True if toggle.completed is None else toggle.completed,
                notes=toggle.notes,
            )
            habit.entries.append(entry)
            try:
                self.db.flush()
                return entry
            except IntegrityError:
                # A concurrent request inserted the same day first
                self.db.rollback()
                logger.info(f"Entry for habit {habit.id} on {entry_date} already exists")
                self.db.refresh(habit)
                entry = self.repository.get_entry(habit.id, entry_date)

        entry.completed = (
            not entry.completed if toggle.completed is None else toggle.completed
        )
        if toggle.notes is not None:
            entry.notes = toggle.notes
        self.db.add(entry)
        self.db.flush()
        return entry

    @retry_on_transient()
    def get_today(self, user_id: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
        """Active habits with their entry for today."""
        today = today or date.today()
        result = []
        for habit in filter_habits(
            self.repository.list_for_owner(user_id), HabitStatus.ACTIVE, today=today
        ):
            today_entry = next(
                (entry for entry in habit.entries if entry.entry_date == today), None
            )
            result.append(
                {
                    **schemas.Habit.model_validate(habit).model_dump(),
                    "completed_today": bool(today_entry and today_entry.completed),
                    "today_entry": today_entry,
                    "current_streak": compute_streak(habit.entries, today),
                }
            )
        return result

    def get_stats(
        self, user_id: int, habit_id: int, today: Optional[date] = None
    ) -> HabitStats:
        return build_habit_stats(self.get_habit(user_id, habit_id), today)

    def get_streak(self, user_id: int, habit_id: int, today: Optional[date] = None) -> int:
        return compute_streak(self.get_habit(user_id, habit_id).entries, today)

    @retry_on_transient()
    def get_summary(self, user_id: int, today: Optional[date] = None) -> HabitSummary:
        """Dashboard totals, cached per user and day."""
        today = today or date.today()

        def build() -> HabitSummary:
            return summarize_habits(self.repository.list_for_owner(user_id), today)

        if self.cache is None:
            return build()
        return self.cache.get_or_set(CacheKeys.habit_summary(user_id, today), build)

    def _invalidate(self, user_id: int) -> None:
        if self.cache is not None:
            invalidate_user_cache(self.cache, user_id)
