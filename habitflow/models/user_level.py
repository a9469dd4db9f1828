from datetime import datetime
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from habitflow.db.base import Base


class UserLevel(Base):
    """
    Points and progression counters for one user.

    ``points`` is the spendable balance; ``experience`` only ever grows and is
    what the level number is computed from. The level itself is not stored.
    """

    __tablename__ = "user_levels"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    points = Column(Integer, default=0, nullable=False)
    experience = Column(Integer, default=0, nullable=False)
    total_habits_created = Column(Integer, default=0, nullable=False)
    total_habits_completed = Column(Integer, default=0, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_activity_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="user_level")
