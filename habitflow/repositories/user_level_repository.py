# habitflow/repositories/user_level_repository.py
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from habitflow import models
from habitflow.repositories.base_repository import BaseRepository


class UserLevelRepository(BaseRepository[models.UserLevel]):
    def __init__(self, db: Session):
        super().__init__(models.UserLevel, db)

    def get_by_user(self, user_id: int) -> Optional[models.UserLevel]:
        return (
            self.db.query(models.UserLevel)
            .filter(models.UserLevel.user_id == user_id)
            .first()
        )

    def get_for_update(self, user_id: int) -> Optional[models.UserLevel]:
        """Row-lock the user's level for a balance change (no-op on SQLite)."""
        return (
            self.db.query(models.UserLevel)
            .filter(models.UserLevel.user_id == user_id)
            .with_for_update()
            .first()
        )

    def top_by_experience(self, limit: int) -> List[Tuple[models.UserLevel, models.User]]:
        return (
            self.db.query(models.UserLevel, models.User)
            .join(models.User, models.User.id == models.UserLevel.user_id)
            .filter(models.User.is_active.is_(True))
            .order_by(models.UserLevel.experience.desc(), models.UserLevel.user_id)
            .limit(limit)
            .all()
        )
