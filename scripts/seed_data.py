# scripts/seed_data.py
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add the parent directory to sys.path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from habitflow.db.base import SessionLocal
from habitflow.db.session import init_db
from habitflow import models
from habitflow.core.constants import (
    EffectType,
    EventType,
    Rarity,
    RequirementType,
    RoomType,
    ShopCategory,
)

ACHIEVEMENTS = [
    {
        "name": "First Step",
        "description": "Create your first habit",
        "icon": "🌱",
        "points_reward": 10,
        "requirement_type": RequirementType.HABITS_CREATED,
        "requirement_value": 1,
        "rarity": Rarity.COMMON,
    },
    {
        "name": "Habit Builder",
        "description": "Create 5 habits",
        "icon": "🧱",
        "points_reward": 50,
        "requirement_type": RequirementType.HABITS_CREATED,
        "requirement_value": 5,
        "rarity": Rarity.RARE,
    },
    {
        "name": "Getting Started",
        "description": "Complete a habit 10 times",
        "icon": "✔️",
        "points_reward": 25,
        "requirement_type": RequirementType.COMPLETIONS,
        "requirement_value": 10,
        "rarity": Rarity.COMMON,
    },
    {
        "name": "Centurion",
        "description": "Complete habits 100 times",
        "icon": "💯",
        "points_reward": 200,
        "requirement_type": RequirementType.COMPLETIONS,
        "requirement_value": 100,
        "rarity": Rarity.EPIC,
    },
    {
        "name": "On Fire",
        "description": "Keep a 7 day streak",
        "icon": "🔥",
        "points_reward": 70,
        "requirement_type": RequirementType.STREAK,
        "requirement_value": 7,
        "rarity": Rarity.RARE,
    },
    {
        "name": "Unstoppable",
        "description": "Keep a 30 day streak",
        "icon": "⚡",
        "points_reward": 300,
        "requirement_type": RequirementType.STREAK,
        "requirement_value": 30,
        "rarity": Rarity.LEGENDARY,
    },
    {
        "name": "Level Up",
        "description": "Reach level 5",
        "icon": "⭐",
        "points_reward": 100,
        "requirement_type": RequirementType.LEVEL,
        "requirement_value": 5,
        "rarity": Rarity.EPIC,
    },
]

SHOP_ITEMS = [
    {
        "name": "Ocean Theme",
        "description": "Blue color theme for the dashboard",
        "category": ShopCategory.CUSTOMIZATION,
        "price_points": 150,
        "icon": "🌊",
        "rarity": Rarity.COMMON,
    },
    {
        "name": "Custom Habit Icons",
        "description": "Unlock the extended icon set",
        "category": ShopCategory.FEATURE,
        "price_points": 300,
        "icon": "🎨",
        "rarity": Rarity.RARE,
    },
    {
        "name": "Double Points (7 days)",
        "description": "Earn twice the points for every completion",
        "category": ShopCategory.BOOST,
        "price_points": 250,
        "icon": "🚀",
        "rarity": Rarity.EPIC,
        "effect_type": EffectType.POINTS_MULTIPLIER,
        "effect_value": 2.0,
        "duration_days": 7,
    },
    {
        "name": "Coffee Break",
        "description": "Treat yourself, you earned it",
        "category": ShopCategory.REWARD,
        "price_points": 100,
        "icon": "☕",
        "rarity": Rarity.COMMON,
        "duration_days": 1,
    },
]


def _upsert(db: Session, model, rows):
    for row in rows:
        obj = db.query(model).filter_by(name=row["name"]).first()
        if not obj:
            obj = model(**row)
        else:
            for key, value in row.items():
                setattr(obj, key, value)
        db.add(obj)
    db.commit()


def seed_achievements(db: Session):
    """Seed the achievement catalog."""
    _upsert(db, models.Achievement, ACHIEVEMENTS)


def seed_shop_items(db: Session):
    """Seed the shop catalog."""
    _upsert(db, models.ShopItem, SHOP_ITEMS)


def seed_community(db: Session):
    """A public lobby and one upcoming online event with its own room."""
    if not db.query(models.ChatRoom).filter_by(name="Lobby").first():
        db.add(
            models.ChatRoom(
                name="Lobby",
                description="Say hi to other habit builders",
                room_type=RoomType.PUBLIC,
            )
        )

    if not db.query(models.CommunityEvent).filter_by(title="Morning Routine Workshop").first():
        start = (datetime.utcnow() + timedelta(days=7)).replace(
            hour=8, minute=0, second=0, microsecond=0
        )
        event = models.CommunityEvent(
            title="Morning Routine Workshop",
            description="Design a morning routine you can keep",
            event_type=EventType.WORKSHOP,
            start_time=start,
            end_time=start + timedelta(hours=1),
            max_participants=50,
            is_online=True,
            meeting_url="https://meet.example.com/morning-routine",
        )
        db.add(event)
        db.flush()
        db.add(
            models.ChatRoom(
                name="Morning Routine Workshop",
                room_type=RoomType.EVENT,
                event_id=event.id,
            )
        )
    db.commit()


def main():
    """Main function to seed data."""
    init_db()
    db = SessionLocal()
    try:
        seed_achievements(db)
        seed_shop_items(db)
        seed_community(db)
        print("Database seeded successfully!")
    finally:
        db.close()


if __name__ == "__main__":
    main()
