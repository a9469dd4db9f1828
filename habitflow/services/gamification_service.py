"""
Streak, completion-rate, level and purchase rules.

Everything here is a pure function over small in-memory lists so it can be
called from any service or route without touching the database.
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from habitflow.core.config import settings
from habitflow.core.constants import EffectType, HabitFrequency, HabitStatus
from habitflow.core.exceptions import (
    AlreadyOwnedException,
    InsufficientFundsException,
    ValidationException,
)


@dataclass(frozen=True)
class LevelProgress:
    level: int
    points_into_level: int
    points_required_for_next_level: int

    @property
    def progress_percentage(self) -> int:
        return self.points_into_level * 100 // self.points_required_for_next_level


@dataclass(frozen=True)
class PurchaseOutcome:
    new_balance: int
    price: int
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class CheckoutOutcome:
    new_balance: int
    total: int
    # (item, expires_at) for every unit bought
    purchases: List[Tuple[Any, Optional[datetime]]] = field(default_factory=list)


@dataclass(frozen=True)
class HabitStats:
    habit_id: int
    current_streak: int
    best_streak: int
    total_completions: int
    completion_rate: int
    completed_today: bool
    period_completions: int
    period_target: int


@dataclass(frozen=True)
class HabitSummary:
    total_habits: int
    active_habits: int
    completed_today: int
    success_rate: int
    best_current_streak: int


def _field(record: Any, *names: str) -> Any:
    for name in names:
        if isinstance(record, dict):
            if name in record:
                return record[name]
        elif hasattr(record, name):
            return getattr(record, name)
    return None


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise ValidationException(f"Unsupported entry date: {value!r}")


def _completed_dates(entries: Iterable[Any]) -> List[date]:
    """Dates of completed entries, newest first."""
    return sorted(
        (
            _as_date(_field(entry, "date", "entry_date"))
            for entry in entries
            if _field(entry, "completed")
        ),
        reverse=True,
    )


def compute_streak(entries: Iterable[Any], today: Optional[date] = None) -> int:
    """
    Count consecutive completed days ending today (or yesterday).

    Walks completed entries newest first with a cursor starting at ``today``.
    A one-day step extends the streak, as does a same-day match while the
    streak is still empty; a larger gap ends it. Same-day duplicates and
    future-dated entries are skipped.

    Args:
        entries: records exposing ``date``/``entry_date`` and ``completed``,
            as objects or dicts
        today: evaluation date, defaults to the current date
    """
    cursor = today or date.today()
    streak = 0

    for entry_date in _completed_dates(entries):
        diff_days = (cursor - entry_date).days

        if diff_days == 1 or (streak == 0 and diff_days == 0):
            streak += 1
            cursor = entry_date
        elif diff_days > 1:
            break

    return streak


def compute_longest_streak(entries: Iterable[Any]) -> int:
    """Longest run of consecutive completed days anywhere in the history."""
    days = sorted(set(_completed_dates(entries)))
    longest = 0
    run = 0
    previous: Optional[date] = None

    for day in days:
        run = run + 1 if previous and (day - previous).days == 1 else 1
        longest = max(longest, run)
        previous = day

    return longest


def compute_completion_rate(entries: Sequence[Any]) -> int:
    """
    Percentage of completed entries, rounded half up, 0 for an empty list.
    """
    total = len(entries)
    if total == 0:
        return 0
    completed = sum(1 for entry in entries if _field(entry, "completed"))
    # integer form of floor(completed / total * 100 + 0.5)
    return (completed * 200 + total) // (2 * total)


def compute_level(points: int, base: Optional[int] = None) -> LevelProgress:
    """
    Level for a cumulative point total on the inverse-square curve.

    ``level = floor(sqrt(points / base)) + 1``; level ``n`` starts at
    ``base * (n - 1) ** 2`` points.

    >>> compute_level(250)
    LevelProgress(level=2, points_into_level=150, points_required_for_next_level=300)
    """
    base = base or settings.LEVEL_BASE_POINTS
    if points < 0:
        raise ValidationException("Point total cannot be negative")

    # isqrt on the floored quotient equals floor(sqrt(points / base))
    level = math.isqrt(points // base) + 1
    level_start = base * (level - 1) ** 2
    next_level_start = base * level**2

    return LevelProgress(
        level=level,
        points_into_level=points - level_start,
        points_required_for_next_level=next_level_start - level_start,
    )


def points_for_level(level: int, base: Optional[int] = None) -> int:
    """Cumulative points at which ``level`` starts."""
    base = base or settings.LEVEL_BASE_POINTS
    return base * (max(level, 1) - 1) ** 2


def _is_active_purchase(purchase: Any, now: datetime) -> bool:
    if not purchase.is_active:
        return False
    return purchase.expires_at is None or purchase.expires_at > now


def _owns_permanently(item: Any, owned: Iterable[Any], now: datetime) -> bool:
    return any(
        purchase.shop_item_id == item.id and _is_active_purchase(purchase, now)
        for purchase in owned
    )


def _expiry_for(item: Any, now: datetime) -> Optional[datetime]:
    if item.duration_days:
        return now + timedelta(days=item.duration_days)
    return None


def attempt_purchase(
    balance: int,
    item: Any,
    owned: Iterable[Any] = (),
    now: Optional[datetime] = None,
) -> PurchaseOutcome:
    """
    Decide a single purchase without applying it.

    Raises:
        AlreadyOwnedException: permanent item with an active purchase in ``owned``
        InsufficientFundsException: ``balance`` is below the item price
    """
    now = now or datetime.utcnow()

    if not item.duration_days and _owns_permanently(item, owned, now):
        raise AlreadyOwnedException(
            f"'{item.name}' is already owned", details={"item_id": item.id}
        )

    if balance < item.price_points:
        raise InsufficientFundsException(
            "Insufficient points",
            details={"balance": balance, "price": item.price_points},
        )

    return PurchaseOutcome(
        new_balance=balance - item.price_points,
        price=item.price_points,
        expires_at=_expiry_for(item, now),
    )


def price_cart(
    balance: int,
    lines: Sequence[Tuple[Any, int]],
    owned: Iterable[Any] = (),
    now: Optional[datetime] = None,
) -> CheckoutOutcome:
    """
    Decide a whole cart at once; either every line is affordable or nothing is bought.
    """
    now = now or datetime.utcnow()
    owned = list(owned)
    total = 0
    purchases: List[Tuple[Any, Optional[datetime]]] = []

    for item, quantity in lines:
        if quantity < 1:
            raise ValidationException(
                "Quantity must be at least 1", details={"item_id": item.id}
            )
        if not item.duration_days:
            if quantity > 1 or _owns_permanently(item, owned, now):
                raise AlreadyOwnedException(
                    f"'{item.name}' can only be owned once", details={"item_id": item.id}
                )
        total += item.price_points * quantity
        purchases.extend((item, _expiry_for(item, now)) for _ in range(quantity))

    if balance < total:
        raise InsufficientFundsException(
            "Not enough points to buy everything in cart",
            details={"balance": balance, "total": total},
        )

    return CheckoutOutcome(new_balance=balance - total, total=total, purchases=purchases)


def active_points_multiplier(purchases: Iterable[Any], now: Optional[datetime] = None) -> float:
    """Largest active points multiplier among purchased boosts (1.0 if none)."""
    now = now or datetime.utcnow()
    multipliers = [
        purchase.shop_item.effect_value
        for purchase in purchases
        if _is_active_purchase(purchase, now)
        and purchase.shop_item.effect_type == EffectType.POINTS_MULTIPLIER
        and purchase.shop_item.effect_value
    ]
    return max(multipliers, default=1.0)


def _in_current_period(entry_date: date, frequency: HabitFrequency, today: date) -> bool:
    if frequency == HabitFrequency.WEEKLY:
        return entry_date.isocalendar()[:2] == today.isocalendar()[:2]
    if frequency == HabitFrequency.MONTHLY:
        return (entry_date.year, entry_date.month) == (today.year, today.month)
    return entry_date == today


def is_completed_on(habit: Any, day: date) -> bool:
    return any(
        entry.completed and _as_date(entry.entry_date) == day for entry in habit.entries
    )


def build_habit_stats(habit: Any, today: Optional[date] = None) -> HabitStats:
    """Derived display values for one habit."""
    today = today or date.today()
    entries = list(habit.entries)
    frequency = habit.frequency or HabitFrequency.DAILY

    return HabitStats(
        habit_id=habit.id,
        current_streak=compute_streak(entries, today),
        best_streak=compute_longest_streak(entries),
        total_completions=sum(1 for entry in entries if entry.completed),
        completion_rate=compute_completion_rate(entries),
        completed_today=is_completed_on(habit, today),
        period_completions=sum(
            1
            for entry in entries
            if entry.completed
            and _in_current_period(_as_date(entry.entry_date), frequency, today)
        ),
        period_target=habit.target_count or 1,
    )


def summarize_habits(habits: Sequence[Any], today: Optional[date] = None) -> HabitSummary:
    """Totals shown on the dashboard."""
    today = today or date.today()
    all_entries = [entry for habit in habits for entry in habit.entries]

    return HabitSummary(
        total_habits=len(habits),
        active_habits=sum(1 for habit in habits if habit.is_active),
        completed_today=sum(1 for habit in habits if is_completed_on(habit, today)),
        success_rate=compute_completion_rate(all_entries),
        best_current_streak=max(
            (compute_streak(habit.entries, today) for habit in habits), default=0
        ),
    )


def filter_habits(
    habits: Sequence[Any],
    status: HabitStatus = HabitStatus.ALL,
    search: Optional[str] = None,
    today: Optional[date] = None,
) -> List[Any]:
    today = today or date.today()
    needle = search.strip().lower() if search else ""

    def matches(habit: Any) -> bool:
        if needle and needle not in habit.title.lower():
            return False
        if status == HabitStatus.ACTIVE:
            return habit.is_active
        if status == HabitStatus.ARCHIVED:
            return not habit.is_active
        if status == HabitStatus.COMPLETED:
            return is_completed_on(habit, today)
        return True

    return [habit for habit in habits if matches(habit)]
