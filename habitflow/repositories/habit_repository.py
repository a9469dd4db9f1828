# habitflow/repositories/habit_repository.py
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload

from habitflow import models
from habitflow.repositories.base_repository import BaseRepository


class HabitRepository(BaseRepository[models.Habit]):
    """Habits and their entries, always scoped to an owner."""

    def __init__(self, db: Session):
        super().__init__(models.Habit, db)

    def list_for_owner(self, owner_id: int) -> List[models.Habit]:
        return (
            self.db.query(models.Habit)
            .options(selectinload(models.Habit.entries))
            .filter(models.Habit.owner_id == owner_id)
            .order_by(models.Habit.created_at.desc(), models.Habit.id.desc())
            .all()
        )

    def get_for_owner(self, habit_id: int, owner_id: int) -> Optional[models.Habit]:
        return (
            self.db.query(models.Habit)
            .options(selectinload(models.Habit.entries))
            .filter(models.Habit.id == habit_id, models.Habit.owner_id == owner_id)
            .first()
        )

    def get_entry(self, habit_id: int, entry_date: date) -> Optional[models.HabitEntry]:
        return (
            self.db.query(models.HabitEntry)
            .filter(
                models.HabitEntry.habit_id == habit_id,
                models.HabitEntry.entry_date == entry_date,
            )
            .first()
        )
