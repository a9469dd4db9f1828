# habitflow/models/__init__.py
from habitflow.models.user import User, UserSetting
from habitflow.models.habit import Habit, HabitEntry
from habitflow.models.user_level import UserLevel
from habitflow.models.achievement import Achievement, UserAchievement
from habitflow.models.shop import ShopItem, UserPurchase
from habitflow.models.community import (
    CommunityEvent,
    EventParticipant,
    ChatRoom,
    RoomMember,
    ChatMessage,
)
from habitflow.models.contact import ContactMessage
