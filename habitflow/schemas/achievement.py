# habitflow/schemas/achievement.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from habitflow.core.constants import Rarity, RequirementType


# Shared properties
class AchievementBase(BaseModel):
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    points_reward: int = 50
    requirement_type: RequirementType
    requirement_value: int
    rarity: Rarity = Rarity.COMMON


class AchievementInDBBase(AchievementBase):
    id: int

    class Config:
        from_attributes = True


# Additional properties to return via API
class Achievement(AchievementInDBBase):
    pass


class AchievementStatus(Achievement):
    """Catalog entry annotated with the caller's progress."""

    unlocked: bool
    progress: int


class UserAchievement(BaseModel):
    id: int
    user_id: int
    earned_at: datetime
    achievement: Achievement

    class Config:
        from_attributes = True


class AchievementCheckResult(BaseModel):
    unlocked: List[Achievement] = []
    points_awarded: int = 0
