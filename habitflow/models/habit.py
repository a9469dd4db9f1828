from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from habitflow.db.base import Base
from habitflow.core.constants import (
    DEFAULT_HABIT_COLOR,
    DEFAULT_HABIT_ICON,
    HabitFrequency,
)


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    frequency = Column(Enum(HabitFrequency), default=HabitFrequency.DAILY)
    target_count = Column(Integer, default=1)
    color = Column(String, default=DEFAULT_HABIT_COLOR)
    icon = Column(String, default=DEFAULT_HABIT_ICON)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="habits")
    entries = relationship(
        "HabitEntry",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="HabitEntry.entry_date",
    )


class HabitEntry(Base):
    __tablename__ = "habit_entries"
    # one entry per habit and calendar day
    __table_args__ = (
        UniqueConstraint("habit_id", "entry_date", name="uq_habit_entries_habit_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    habit_id = Column(
        Integer, ForeignKey("habits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    entry_date = Column(Date, nullable=False, index=True)
    completed = Column(Boolean, default=False, nullable=False)
    notes = Column(String, nullable=True)
    rewarded = Column(Boolean, default=False, nullable=False)  # points already granted
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    habit = relationship("Habit", back_populates="entries")
