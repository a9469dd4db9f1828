# habitflow/services/progression_service.py
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from habitflow import models
from habitflow.core.config import settings
from habitflow.repositories.habit_repository import HabitRepository
from habitflow.repositories.shop_repository import ShopRepository
from habitflow.repositories.user_level_repository import UserLevelRepository
from habitflow.services.achievement_service import AchievementService
from habitflow.services.gamification_service import (
    active_points_multiplier,
    compute_level,
    compute_longest_streak,
    compute_streak,
)
from habitflow.utils.cache import CacheKeys, TTLCache, invalidate_user_cache
from habitflow.utils.retry import retry_on_transient

logger = logging.getLogger(__name__)


class ProgressionService:
    """Points, experience, streak counters and the achievements they unlock."""

    def __init__(self, db: Session, cache: Optional[TTLCache] = None):
        self.db = db
        self.cache = cache
        self.repository = UserLevelRepository(db)
        self.habit_repository = HabitRepository(db)
        self.shop_repository = ShopRepository(db)
        self.achievement_service = AchievementService(db, cache)

    def get_or_create_level(self, user_id: int) -> models.UserLevel:
        level = self.repository.get_by_user(user_id)
        if not level:
            level = self.repository.save(models.UserLevel(user_id=user_id))
            logger.info(f"Created level record for user {user_id}")
        return level

    def points_multiplier(self, user_id: int) -> float:
        return active_points_multiplier(
            self.shop_repository.user_purchases(user_id, active_only=True)
        )

    def current_streak(self, user_id: int, today: Optional[date] = None) -> int:
        """Best running streak over the user's habits as of ``today``."""
        return max(
            (
                compute_streak(habit.entries, today)
                for habit in self.habit_repository.list_for_owner(user_id)
            ),
            default=0,
        )

    @retry_on_transient()
    def get_level_view(self, user_id: int, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Stored counters plus the derived level.

        The current streak is recomputed on read because the stored value is
        only refreshed when an entry changes and lags behind after a missed day.
        """
        level = self.get_or_create_level(user_id)
        progress = compute_level(level.experience)
        return {
            "user_id": user_id,
            "points": level.points,
            "experience": level.experience,
            "total_habits_created": level.total_habits_created,
            "total_habits_completed": level.total_habits_completed,
            "current_streak": self.current_streak(user_id, today),
            "longest_streak": level.longest_streak,
            "last_activity_date": level.last_activity_date,
            "progress": {
                "level": progress.level,
                "points_into_level": progress.points_into_level,
                "points_required_for_next_level": progress.points_required_for_next_level,
                "progress_percentage": progress.progress_percentage,
            },
            "points_multiplier": self.points_multiplier(user_id),
        }

    def refresh_streaks(self, user_id: int, today: Optional[date] = None) -> models.UserLevel:
        """Recompute streak counters from the user's habits (staged, not committed)."""
        level = self.get_or_create_level(user_id)
        habits = self.habit_repository.list_for_owner(user_id)

        level.current_streak = max(
            (compute_streak(habit.entries, today) for habit in habits), default=0
        )
        level.longest_streak = max(
            [level.longest_streak or 0, level.current_streak]
            + [compute_longest_streak(habit.entries) for habit in habits]
        )
        self.db.add(level)
        return level

    def award_completion(
        self, user_id: int, entry_date: date, today: Optional[date] = None
    ) -> Tuple[int, List[models.Achievement]]:
        """
        Credit one completed entry.

        Points are multiplied by the best active boost; experience is not.
        Commits together with whatever the caller staged in the session.
        """
        points = int(round(settings.POINTS_PER_COMPLETION * self.points_multiplier(user_id)))

        level = self.refresh_streaks(user_id, today)
        level.points += points
        level.experience += settings.EXPERIENCE_PER_COMPLETION
        level.total_habits_completed += 1
        if not level.last_activity_date or entry_date > level.last_activity_date:
            level.last_activity_date = entry_date
        self.repository.save(level)

        logger.info(f"User {user_id} earned {points} points for a completion")
        self._invalidate(user_id)
        return points, self.achievement_service.check_and_unlock(user_id)

    def award_habit_creation(self, user_id: int) -> List[models.Achievement]:
        level = self.get_or_create_level(user_id)
        level.points += settings.HABIT_CREATION_POINTS
        level.experience += settings.HABIT_CREATION_POINTS
        level.total_habits_created += 1
        self.repository.save(level)

        self._invalidate(user_id)
        return self.achievement_service.check_and_unlock(user_id)

    @retry_on_transient()
    def get_leaderboard(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Users ranked by experience; cached for ``CACHE_TTL_SECONDS``."""

        def build() -> List[Dict[str, Any]]:
            return [
                {
                    "rank": rank,
                    "user_id": user.id,
                    "display_name": user.display_name,
                    "level": compute_level(level.experience).level,
                    "experience": level.experience,
                    "longest_streak": level.longest_streak,
                }
                for rank, (level, user) in enumerate(
                    self.repository.top_by_experience(limit), start=1
                )
            ]

        if self.cache is None:
            return build()
        return self.cache.get_or_set(CacheKeys.leaderboard(limit), build)

    def _invalidate(self, user_id: int) -> None:
        if self.cache is not None:
            invalidate_user_cache(self.cache, user_id)
