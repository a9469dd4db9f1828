# habitflow/schemas/__init__.py
from habitflow.schemas.habit import (
    Habit,
    HabitCreate,
    HabitUpdate,
    HabitEntry,
    HabitEntryToggle,
    HabitToggleResult,
    HabitToday,
    HabitStats,
    HabitSummary,
)
from habitflow.schemas.user import (
    User,
    UserUpdate,
    Preferences,
    UserExport,
    UserImport,
    ImportResult,
)
from habitflow.schemas.level import LevelProgress, LevelView, Leaderboard, LeaderboardEntry
from habitflow.schemas.achievement import (
    Achievement,
    AchievementStatus,
    UserAchievement,
    AchievementCheckResult,
)
from habitflow.schemas.shop import (
    ShopItem,
    UserPurchase,
    PurchaseResult,
    Cart,
    CartLine,
    CartTotal,
    CheckoutResult,
    Balance,
)
from habitflow.schemas.community import (
    Event,
    EventCreate,
    MeetingDetails,
    ChatRoom,
    ChatRoomCreate,
    ChatMessage,
    ChatMessageCreate,
)
from habitflow.schemas.contact import ContactMessage, ContactMessageCreate
