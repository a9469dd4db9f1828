# habitflow/core/constants.py
import enum


class HabitFrequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class HabitStatus(str, enum.Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"  # completed today
    ARCHIVED = "archived"


class Rarity(str, enum.Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class RequirementType(str, enum.Enum):
    STREAK = "streak"
    HABITS_CREATED = "habits_created"
    COMPLETIONS = "completions"
    LEVEL = "level"


class ShopCategory(str, enum.Enum):
    FEATURE = "feature"
    REWARD = "reward"
    CUSTOMIZATION = "customization"
    BOOST = "boost"


class EventType(str, enum.Enum):
    WEBINAR = "webinar"
    WORKSHOP = "workshop"
    CHALLENGE = "challenge"
    MEETUP = "meetup"
    QNA = "qna"


class RoomType(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    EVENT = "event"


class MessageType(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"
    SYSTEM = "system"


class ContactCategory(str, enum.Enum):
    GENERAL = "general"
    SUPPORT = "support"
    FEEDBACK = "feedback"
    BUG = "bug"
    FEATURE = "feature"


# Shop item effects
class EffectType:
    POINTS_MULTIPLIER = "points_multiplier"


# Defaults applied to new habits
DEFAULT_HABIT_COLOR = "#3B82F6"
DEFAULT_HABIT_ICON = "✅"

# Preference keys kept in the per-user key-value store
LAST_SYNC_KEY = "last_sync"
PREFERENCES_KEY = "preferences"
