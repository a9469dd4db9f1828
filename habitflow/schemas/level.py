# habitflow/schemas/level.py
from datetime import date
from typing import List, Optional
from pydantic import BaseModel


class LevelProgress(BaseModel):
    level: int
    points_into_level: int
    points_required_for_next_level: int
    progress_percentage: int

    class Config:
        from_attributes = True


class UserLevel(BaseModel):
    user_id: int
    points: int
    experience: int
    total_habits_created: int
    total_habits_completed: int
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date] = None

    class Config:
        from_attributes = True


class LevelView(UserLevel):
    progress: LevelProgress
    points_multiplier: float = 1.0


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    display_name: str
    level: int
    experience: int
    longest_streak: int


class Leaderboard(BaseModel):
    entries: List[LeaderboardEntry] = []
