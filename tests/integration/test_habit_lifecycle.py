"""
Integration tests for the habit lifecycle.
Tests a user's journey from creating habits through earning points,
unlocking achievements and spending points in the shop.
"""
from datetime import date, datetime, timedelta

import pytest
from fastapi import status

from habitflow import schemas
from habitflow.services.habit_service import HabitService
from habitflow.services.progression_service import ProgressionService
from habitflow.services.shop_service import ShopService
from habitflow.utils.cache import TTLCache


@pytest.fixture
def cache():
    return TTLCache(max_size=100, default_ttl=60)


def test_week_of_habits(authorized_client, achievements, shop_items):
    """A week of check-ins unlocks the streak achievement and pays for a theme."""
    habit = authorized_client.post("/api/v1/habits/", json={"title": "Meditate"}).json()
    url = f"/api/v1/habits/{habit['id']}/entries"
    today = date.today()

    unlocked = []
    for days_ago in range(6, -1, -1):
        day = (today - timedelta(days=days_ago)).isoformat()
        response = authorized_client.post(url, json={"entry_date": day})
        assert response.status_code == status.HTTP_200_OK
        unlocked.extend(response.json()["unlocked_achievements"])

    assert unlocked == ["Getting Started", "On Fire"]

    level = authorized_client.get("/api/v1/levels/me").json()
    # 5 creation + 10 First Step + 7 * 10 completions + 20 + 70 rewards
    assert level["points"] == 175
    assert level["current_streak"] == 7
    assert level["longest_streak"] == 7
    assert level["total_habits_completed"] == 7

    stats = authorized_client.get(f"/api/v1/habits/{habit['id']}/stats").json()
    assert stats["current_streak"] == 7
    assert stats["completion_rate"] == 100

    purchase = authorized_client.post(f"/api/v1/shop/items/{shop_items['theme'].id}/purchase")
    assert purchase.status_code == status.HTTP_200_OK
    assert purchase.json()["new_balance"] == 25

    earned = authorized_client.get("/api/v1/achievements/").json()
    assert {item["achievement"]["name"] for item in earned} == {
        "First Step",
        "Getting Started",
        "On Fire",
    }


def test_missed_day_resets_current_streak(db, create_test_user, cache):
    service = HabitService(db, cache)
    habit = service.create_habit(create_test_user.id, schemas.HabitCreate(title="Floss"))
    today = date(2025, 3, 10)

    for day in (date(2025, 3, 6), date(2025, 3, 7), date(2025, 3, 9), date(2025, 3, 10)):
        service.toggle_entry(
            create_test_user.id,
            habit.id,
            schemas.HabitEntryToggle(entry_date=day),
            today=today,
        )

    stats = service.get_stats(create_test_user.id, habit.id, today=today)
    assert stats.current_streak == 2
    assert stats.best_streak == 2
    assert service.get_streak(create_test_user.id, habit.id, today=date(2025, 3, 11)) == 2
    assert service.get_streak(create_test_user.id, habit.id, today=date(2025, 3, 12)) == 0


def test_summary_is_cached_until_a_write(db, create_test_user, cache):
    service = HabitService(db, cache)
    habit = service.create_habit(create_test_user.id, schemas.HabitCreate(title="Floss"))
    today = date.today()

    assert service.get_summary(create_test_user.id, today).completed_today == 0
    assert cache.size() > 0

    service.toggle_entry(create_test_user.id, habit.id, schemas.HabitEntryToggle())
    assert service.get_summary(create_test_user.id, today).completed_today == 1


def test_expired_boosts_are_deactivated(db, create_test_user, shop_items, make_purchase, cache):
    now = datetime.utcnow()
    expired = make_purchase(
        create_test_user, shop_items["boost"], expires_at=now - timedelta(hours=1)
    )
    running = make_purchase(
        create_test_user, shop_items["boost"], expires_at=now + timedelta(days=3)
    )
    permanent = make_purchase(create_test_user, shop_items["theme"])
    cache.set("shop:catalog", ["stale"])

    service = ShopService(db, cache)
    assert service.expire_purchases(now) == 1
    assert service.expire_purchases(now) == 0

    db.refresh(expired)
    db.refresh(running)
    db.refresh(permanent)
    assert expired.is_active is False
    assert running.is_active is True
    assert permanent.is_active is True
    assert cache.size() == 0


def test_level_view_streak_lapses_after_missed_day(db, create_test_user, cache):
    habit_service = HabitService(db, cache)
    habit = habit_service.create_habit(create_test_user.id, schemas.HabitCreate(title="Floss"))
    today = date(2025, 3, 10)

    for day in (date(2025, 3, 9), date(2025, 3, 10)):
        habit_service.toggle_entry(
            create_test_user.id,
            habit.id,
            schemas.HabitEntryToggle(entry_date=day),
            today=today,
        )

    progression = ProgressionService(db, cache)
    assert progression.get_level_view(create_test_user.id, today=today)["current_streak"] == 2
    assert progression.get_level_view(create_test_user.id, today=date(2025, 3, 11))["current_streak"] == 2

    lapsed = progression.get_level_view(create_test_user.id, today=date(2025, 3, 13))
    assert lapsed["current_streak"] == 0
    assert lapsed["longest_streak"] == 2
