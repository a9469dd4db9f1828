# habitflow/schemas/habit.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from habitflow.core.config import settings
from habitflow.core.constants import (
    DEFAULT_HABIT_COLOR,
    DEFAULT_HABIT_ICON,
    HabitFrequency,
)

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None:
        value = value.strip()
        if not value:
            raise ValueError("Title cannot be empty")
    return value


# Shared properties
class HabitBase(BaseModel):
    title: str = Field(..., max_length=settings.HABIT_TITLE_MAX_LENGTH)
    description: Optional[str] = Field(
        None, max_length=settings.HABIT_DESCRIPTION_MAX_LENGTH
    )
    category: Optional[str] = None
    frequency: HabitFrequency = HabitFrequency.DAILY
    target_count: int = Field(1, ge=1)
    color: str = Field(DEFAULT_HABIT_COLOR, pattern=COLOR_PATTERN)
    icon: str = DEFAULT_HABIT_ICON


# Properties to receive on habit creation
class HabitCreate(HabitBase):
    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        return _not_blank(value)


# Properties to receive on habit update
class HabitUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=settings.HABIT_TITLE_MAX_LENGTH)
    description: Optional[str] = Field(
        None, max_length=settings.HABIT_DESCRIPTION_MAX_LENGTH
    )
    category: Optional[str] = None
    frequency: Optional[HabitFrequency] = None
    target_count: Optional[int] = Field(None, ge=1)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)
    icon: Optional[str] = None
    is_active: Optional[bool] = None

    # Omitted fields keep their value; these columns cannot be cleared
    @field_validator(
        "title", "frequency", "target_count", "color", "icon", "is_active", mode="before"
    )
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: Optional[str]) -> Optional[str]:
        return _not_blank(value)


class HabitInDBBase(HabitBase):
    id: int
    owner_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Additional properties to return via API
class Habit(HabitInDBBase):
    pass


# Entry toggle for one calendar day
class HabitEntryToggle(BaseModel):
    entry_date: Optional[date] = None  # defaults to today
    completed: Optional[bool] = None  # None flips the current state
    notes: Optional[str] = Field(None, max_length=500)


class HabitEntry(BaseModel):
    id: int
    habit_id: int
    entry_date: date
    completed: bool
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class HabitToggleResult(BaseModel):
    entry: HabitEntry
    points_awarded: int = 0
    current_streak: int
    unlocked_achievements: List[str] = []


class HabitToday(Habit):
    completed_today: bool
    today_entry: Optional[HabitEntry] = None
    current_streak: int


class HabitStats(BaseModel):
    habit_id: int
    current_streak: int
    best_streak: int
    total_completions: int
    completion_rate: int
    completed_today: bool
    period_completions: int
    period_target: int

    class Config:
        from_attributes = True


class HabitSummary(BaseModel):
    total_habits: int
    active_habits: int
    completed_today: int
    success_rate: int
    best_current_streak: int

    class Config:
        from_attributes = True


class EntryImport(BaseModel):
    entry_date: date
    completed: bool = True
    notes: Optional[str] = None


class HabitImport(HabitCreate):
    is_active: bool = True
    entries: List[EntryImport] = []
