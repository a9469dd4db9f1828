# habitflow/repositories/achievement_repository.py
from typing import List, Optional, Set
from sqlalchemy.orm import Session, joinedload

from habitflow import models
from habitflow.repositories.base_repository import BaseRepository


class AchievementRepository(BaseRepository[models.Achievement]):
    """Repository for the achievement catalog and unlock records."""

    def __init__(self, db: Session):
        super().__init__(models.Achievement, db)

    def get_all(self) -> List[models.Achievement]:
        return (
            self.db.query(models.Achievement)
            .order_by(models.Achievement.requirement_type, models.Achievement.requirement_value)
            .all()
        )

    def get_user_achievements(self, user_id: int) -> List[models.UserAchievement]:
        """Get all achievements unlocked by a user."""
        return (
            self.db.query(models.UserAchievement)
            .options(joinedload(models.UserAchievement.achievement))
            .filter(models.UserAchievement.user_id == user_id)
            .order_by(models.UserAchievement.earned_at.desc())
            .all()
        )

    def get_user_achievement(
        self, user_id: int, achievement_id: int
    ) -> Optional[models.UserAchievement]:
        """Get specific user achievement."""
        return (
            self.db.query(models.UserAchievement)
            .filter(
                models.UserAchievement.user_id == user_id,
                models.UserAchievement.achievement_id == achievement_id,
            )
            .first()
        )

    def unlocked_ids(self, user_id: int) -> Set[int]:
        rows = (
            self.db.query(models.UserAchievement.achievement_id)
            .filter(models.UserAchievement.user_id == user_id)
            .all()
        )
        return {row.achievement_id for row in rows}
