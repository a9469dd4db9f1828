# habitflow/schemas/user.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, EmailStr, Field

from habitflow.core.constants import HabitFrequency
from habitflow.schemas.habit import HabitImport


# Shared properties
class UserBase(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


# Properties to receive via API on update
class UserUpdate(UserBase):
    email: Optional[EmailStr] = None


class UserInDBBase(UserBase):
    id: int
    external_id: str
    is_active: bool = True
    created_at: datetime

    class Config:
        from_attributes = True


# Additional properties to return via API
class User(UserInDBBase):
    display_name: str


class Preferences(BaseModel):
    """Free-form client preferences (theme, reminders, week start, ...)."""

    values: Dict[str, Any] = Field(default_factory=dict)


class EntryExport(BaseModel):
    entry_date: date
    completed: bool
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class HabitExport(BaseModel):
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    frequency: HabitFrequency
    target_count: int
    color: str
    icon: str
    is_active: bool
    entries: List[EntryExport] = []

    class Config:
        from_attributes = True


class UserExport(BaseModel):
    exported_at: datetime
    habits: List[HabitExport] = []
    preferences: Dict[str, Any] = Field(default_factory=dict)
    last_sync: Optional[str] = None


class UserImport(BaseModel):
    habits: List[HabitImport] = []
    preferences: Dict[str, Any] = Field(default_factory=dict)


class ImportResult(BaseModel):
    habits_created: int
    entries_imported: int
