from datetime import date, timedelta

import pytest
from fastapi import status

from habitflow import models

HABITS_URL = "/api/v1/habits/"


class TestHabitsAPI:
    """
    Test cases for the Habits API endpoints
    """

    @pytest.fixture
    def habit(self, authorized_client):
        response = authorized_client.post(
            HABITS_URL,
            json={"title": "Morning run", "category": "fitness", "color": "#10B981"},
        )
        assert response.status_code == status.HTTP_201_CREATED
        return response.json()

    def _toggle(self, client, habit_id, **body):
        return client.post(f"{HABITS_URL}{habit_id}/entries", json=body)

    def _balance(self, client):
        return client.get("/api/v1/shop/balance").json()["points"]

    # === CREATE HABIT TESTS ===
    def test_create_habit_success(self, authorized_client, create_test_user):
        response = authorized_client.post(
            HABITS_URL,
            json={"title": "  Read 20 pages ", "description": "Before bed"},
        )
        assert response.status_code == status.HTTP_201_CREATED

        data = response.json()
        assert data["title"] == "Read 20 pages"
        assert data["owner_id"] == create_test_user.id
        assert data["frequency"] == "daily"
        assert data["target_count"] == 1
        assert data["color"] == "#3B82F6"
        assert data["is_active"] is True

    def test_create_habit_awards_points(self, authorized_client, habit):
        assert self._balance(authorized_client) == 5

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "   "},
            {"title": "x" * 51},
            {"title": "Run", "color": "blue"},
            {"title": "Run", "target_count": 0},
            {"title": "Run", "frequency": "hourly"},
        ],
    )
    def test_create_habit_invalid(self, authorized_client, payload):
        response = authorized_client.post(HABITS_URL, json=payload)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "validation_error"

    # === READ HABIT TESTS ===
    def test_list_habits_filters(self, authorized_client, habit):
        authorized_client.post(HABITS_URL, json={"title": "Evening run"})
        archived = authorized_client.post(HABITS_URL, json={"title": "Meditate"}).json()
        authorized_client.post(f"{HABITS_URL}{archived['id']}/archive")
        self._toggle(authorized_client, habit["id"])

        def titles(**params):
            response = authorized_client.get(HABITS_URL, params=params)
            assert response.status_code == status.HTTP_200_OK
            return sorted(item["title"] for item in response.json())

        assert titles() == ["Evening run", "Meditate", "Morning run"]
        assert titles(status="active") == ["Evening run", "Morning run"]
        assert titles(status="archived") == ["Meditate"]
        assert titles(status="completed") == ["Morning run"]
        assert titles(search="RUN") == ["Evening run", "Morning run"]
        assert titles(status="archived", search="run") == []

    def test_read_habit(self, authorized_client, habit):
        response = authorized_client.get(f"{HABITS_URL}{habit['id']}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "Morning run"

    def test_read_other_users_habit_not_found(self, authorized_client, db, other_user):
        foreign = models.Habit(title="Not yours", owner_id=other_user.id)
        db.add(foreign)
        db.commit()

        response = authorized_client.get(f"{HABITS_URL}{foreign.id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "resource_not_found"

        response = self._toggle(authorized_client, foreign.id)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    # === UPDATE / ARCHIVE / DELETE TESTS ===
    def test_update_habit(self, authorized_client, habit):
        response = authorized_client.put(
            f"{HABITS_URL}{habit['id']}",
            json={"title": "Long run", "frequency": "weekly", "target_count": 3},
        )
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["title"] == "Long run"
        assert data["frequency"] == "weekly"
        assert data["target_count"] == 3
        assert data["category"] == "fitness"

    def test_update_habit_blank_title(self, authorized_client, habit):
        response = authorized_client.put(f"{HABITS_URL}{habit['id']}", json={"title": " "})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.parametrize(
        "field", ["title", "target_count", "frequency", "is_active", "color", "icon"]
    )
    def test_update_habit_null_rejected(self, authorized_client, habit, field):
        response = authorized_client.put(f"{HABITS_URL}{habit['id']}", json={field: None})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"] == "validation_error"

        listed = authorized_client.get(HABITS_URL)
        assert listed.status_code == status.HTTP_200_OK
        assert listed.json()[0]["title"] == "Morning run"
        assert listed.json()[0]["target_count"] == 1

    def test_update_habit_clears_description(self, authorized_client, habit):
        authorized_client.put(f"{HABITS_URL}{habit['id']}", json={"description": "5km"})
        response = authorized_client.put(f"{HABITS_URL}{habit['id']}", json={"description": None})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["description"] is None

    def test_archive_habit(self, authorized_client, habit):
        response = authorized_client.post(f"{HABITS_URL}{habit['id']}/archive")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is False

    def test_delete_habit(self, authorized_client, db, habit):
        self._toggle(authorized_client, habit["id"])

        response = authorized_client.delete(f"{HABITS_URL}{habit['id']}")
        assert response.status_code == status.HTTP_204_NO_CONTENT

        assert authorized_client.get(f"{HABITS_URL}{habit['id']}").status_code == 404
        assert db.query(models.HabitEntry).count() == 0

    # === ENTRY TESTS ===
    def test_toggle_creates_single_entry_per_day(self, authorized_client, db, habit):
        first = self._toggle(authorized_client, habit["id"])
        assert first.status_code == status.HTTP_200_OK
        assert first.json()["entry"]["completed"] is True
        assert first.json()["current_streak"] == 1

        second = self._toggle(authorized_client, habit["id"])
        assert second.json()["entry"]["completed"] is False
        assert second.json()["entry"]["id"] == first.json()["entry"]["id"]
        assert second.json()["current_streak"] == 0

        third = self._toggle(authorized_client, habit["id"], completed=True, notes="5km")
        assert third.json()["entry"]["completed"] is True
        assert third.json()["entry"]["notes"] == "5km"

        assert db.query(models.HabitEntry).count() == 1

    def test_completion_points_awarded_once(self, authorized_client, habit):
        first = self._toggle(authorized_client, habit["id"])
        assert first.json()["points_awarded"] == 10

        self._toggle(authorized_client, habit["id"])
        again = self._toggle(authorized_client, habit["id"])
        assert again.json()["entry"]["completed"] is True
        assert again.json()["points_awarded"] == 0

        # 5 for creating the habit, 10 for the first completion
        assert self._balance(authorized_client) == 15

    def test_toggle_past_day_builds_streak(self, authorized_client, habit):
        today = date.today()
        for days_ago in (2, 1, 0):
            response = self._toggle(
                authorized_client,
                habit["id"],
                entry_date=(today - timedelta(days=days_ago)).isoformat(),
            )
            assert response.status_code == status.HTTP_200_OK

        assert response.json()["current_streak"] == 3

    def test_toggle_future_date_rejected(self, authorized_client, habit):
        tomorrow = date.today() + timedelta(days=1)
        response = self._toggle(authorized_client, habit["id"], entry_date=tomorrow.isoformat())

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["details"] == {"entry_date": tomorrow.isoformat()}

    # === DERIVED VIEWS ===
    def test_habit_stats(self, authorized_client, habit):
        today = date.today()
        self._toggle(authorized_client, habit["id"], entry_date=(today - timedelta(days=1)).isoformat())
        self._toggle(authorized_client, habit["id"], entry_date=(today - timedelta(days=3)).isoformat())
        self._toggle(
            authorized_client,
            habit["id"],
            entry_date=(today - timedelta(days=2)).isoformat(),
            completed=False,
        )

        response = authorized_client.get(f"{HABITS_URL}{habit['id']}/stats")
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["current_streak"] == 1
        assert data["best_streak"] == 1
        assert data["total_completions"] == 2
        assert data["completion_rate"] == 67
        assert data["completed_today"] is False
        assert data["period_target"] == 1

    def test_today_view(self, authorized_client, habit):
        other = authorized_client.post(HABITS_URL, json={"title": "Stretch"}).json()
        archived = authorized_client.post(HABITS_URL, json={"title": "Old"}).json()
        authorized_client.post(f"{HABITS_URL}{archived['id']}/archive")
        self._toggle(authorized_client, habit["id"])

        response = authorized_client.get(f"{HABITS_URL}today")
        assert response.status_code == status.HTTP_200_OK

        by_id = {item["id"]: item for item in response.json()}
        assert set(by_id) == {habit["id"], other["id"]}
        assert by_id[habit["id"]]["completed_today"] is True
        assert by_id[habit["id"]]["today_entry"]["completed"] is True
        assert by_id[other["id"]]["completed_today"] is False
        assert by_id[other["id"]]["today_entry"] is None

    def test_summary_reflects_new_completions(self, authorized_client, habit):
        authorized_client.post(HABITS_URL, json={"title": "Stretch"})

        summary = authorized_client.get(f"{HABITS_URL}summary").json()
        assert summary == {
            "total_habits": 2,
            "active_habits": 2,
            "completed_today": 0,
            "success_rate": 0,
            "best_current_streak": 0,
        }

        self._toggle(authorized_client, habit["id"])

        summary = authorized_client.get(f"{HABITS_URL}summary").json()
        assert summary["completed_today"] == 1
        assert summary["success_rate"] == 100
        assert summary["best_current_streak"] == 1
