# habitflow/services/achievement_service.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from habitflow import models
from habitflow.core.constants import RequirementType
from habitflow.repositories.achievement_repository import AchievementRepository
from habitflow.repositories.user_level_repository import UserLevelRepository
from habitflow.services.gamification_service import compute_level
from habitflow.utils.cache import TTLCache, invalidate_user_cache
from habitflow.utils.retry import retry_on_transient, translate_store_errors

logger = logging.getLogger(__name__)


def requirement_progress(level: models.UserLevel, requirement_type: RequirementType) -> int:
    """Current value of the counter an achievement requirement is measured on."""
    if requirement_type == RequirementType.STREAK:
        return max(level.current_streak or 0, level.longest_streak or 0)
    if requirement_type == RequirementType.HABITS_CREATED:
        return level.total_habits_created or 0
    if requirement_type == RequirementType.COMPLETIONS:
        return level.total_habits_completed or 0
    if requirement_type == RequirementType.LEVEL:
        return compute_level(level.experience or 0).level
    return 0


class AchievementService:
    def __init__(self, db: Session, cache: Optional[TTLCache] = None):
        self.db = db
        self.cache = cache
        self.repository = AchievementRepository(db)
        self.level_repository = UserLevelRepository(db)

    @retry_on_transient()
    def get_catalog(self, user_id: int) -> List[Dict[str, Any]]:
        """Every achievement with the user's unlock state and progress."""
        level = self.level_repository.get_by_user(user_id)
        unlocked = self.repository.unlocked_ids(user_id)

        catalog = []
        for achievement in self.repository.get_all():
            progress = (
                requirement_progress(level, achievement.requirement_type) if level else 0
            )
            catalog.append(
                {
                    **{
                        column: getattr(achievement, column)
                        for column in (
                            "id",
                            "name",
                            "description",
                            "icon",
                            "points_reward",
                            "requirement_type",
                            "requirement_value",
                            "rarity",
                        )
                    },
                    "unlocked": achievement.id in unlocked,
                    "progress": min(progress, achievement.requirement_value),
                }
            )
        return catalog

    @retry_on_transient()
    def get_user_achievements(self, user_id: int) -> List[models.UserAchievement]:
        return self.repository.get_user_achievements(user_id)

    def check_and_unlock(self, user_id: int) -> List[models.Achievement]:
        """
        Unlock every achievement whose requirement the user now meets.

        Rewards are credited to both points and experience. Because a reward
        can raise the level, checking repeats until nothing new unlocks.
        Calling it again with unchanged counters unlocks nothing.
        """
        level = self.level_repository.get_by_user(user_id)
        if not level:
            return []

        newly_unlocked: List[models.Achievement] = []
        catalog = self.repository.get_all()

        with translate_store_errors(self.db, "Could not record achievements"):
            while True:
                unlocked = self.repository.unlocked_ids(user_id) | {
                    achievement.id for achievement in newly_unlocked
                }
                batch = [
                    achievement
                    for achievement in catalog
                    if achievement.id not in unlocked
                    and requirement_progress(level, achievement.requirement_type)
                    >= achievement.requirement_value
                ]
                if not batch:
                    break

                for achievement in batch:
                    self.db.add(
                        models.UserAchievement(
                            user_id=user_id,
                            achievement_id=achievement.id,
                            earned_at=datetime.utcnow(),
                        )
                    )
                    level.points += achievement.points_reward
                    level.experience += achievement.points_reward
                    logger.info(
                        f"User {user_id} unlocked achievement '{achievement.name}' "
                        f"(+{achievement.points_reward} points)"
                    )
                newly_unlocked.extend(batch)
                self.db.add(level)
                self.db.flush()

            if newly_unlocked:
                self.db.commit()
                if self.cache is not None:
                    invalidate_user_cache(self.cache, user_id)

        return newly_unlocked
