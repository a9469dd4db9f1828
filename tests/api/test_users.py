from datetime import date, timedelta

from fastapi import status

from habitflow import models

USERS_URL = "/api/v1/users/me"


class TestUsersAPI:
    def test_read_me(self, authorized_client, create_test_user):
        response = authorized_client.get(USERS_URL)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == create_test_user.id
        assert response.json()["display_name"] == "Test User"

    def test_update_me(self, authorized_client):
        response = authorized_client.put(USERS_URL, json={"first_name": "Tess"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["display_name"] == "Tess User"

    def test_update_me_invalid_email(self, authorized_client):
        response = authorized_client.put(USERS_URL, json={"email": "nope"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_preferences_merge_and_remove(self, authorized_client):
        url = f"{USERS_URL}/preferences"
        assert authorized_client.get(url).json() == {"values": {}}

        authorized_client.put(url, json={"values": {"theme": "dark", "week_start": "monday"}})
        response = authorized_client.put(url, json={"values": {"theme": None, "reminder": "08:00"}})

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"values": {"week_start": "monday", "reminder": "08:00"}}
        assert authorized_client.get(url).json() == response.json()

    def test_export(self, authorized_client):
        habit = authorized_client.post("/api/v1/habits/", json={"title": "Journal"}).json()
        authorized_client.post(f"/api/v1/habits/{habit['id']}/entries", json={"notes": "1 page"})
        authorized_client.put(f"{USERS_URL}/preferences", json={"values": {"theme": "dark"}})

        response = authorized_client.get(f"{USERS_URL}/export")
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["preferences"] == {"theme": "dark"}
        assert data["last_sync"] is None
        assert data["habits"][0]["title"] == "Journal"
        assert data["habits"][0]["entries"] == [
            {"entry_date": date.today().isoformat(), "completed": True, "notes": "1 page"}
        ]

    def test_import_earns_no_rewards(self, authorized_client, db):
        day = date.today() - timedelta(days=1)
        payload = {
            "habits": [
                {
                    "title": "Imported",
                    "frequency": "weekly",
                    "entries": [
                        {"entry_date": day.isoformat()},
                        {"entry_date": day.isoformat(), "completed": False},
                    ],
                },
                {"title": "Archived", "is_active": False},
            ],
            "preferences": {"theme": "light"},
        }

        response = authorized_client.post(f"{USERS_URL}/import", json=payload)
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"habits_created": 2, "entries_imported": 1}

        assert authorized_client.get("/api/v1/shop/balance").json()["points"] == 0
        assert db.query(models.HabitEntry).filter(models.HabitEntry.rewarded.is_(True)).count() == 1

        export = authorized_client.get(f"{USERS_URL}/export").json()
        assert export["preferences"] == {"theme": "light"}
        assert export["last_sync"] is not None

        # toggling an imported completion off and on again earns nothing
        habit_id = next(
            habit.id for habit in db.query(models.Habit).filter(models.Habit.title == "Imported")
        )
        url = f"/api/v1/habits/{habit_id}/entries"
        authorized_client.post(url, json={"entry_date": day.isoformat()})
        again = authorized_client.post(url, json={"entry_date": day.isoformat()})
        assert again.json()["points_awarded"] == 0

    def test_import_rejects_blank_title(self, authorized_client):
        response = authorized_client.post(
            f"{USERS_URL}/import", json={"habits": [{"title": " "}]}
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_import_updates_level_counters(self, authorized_client):
        today = date.today()
        payload = {
            "habits": [
                {
                    "title": "Imported",
                    "entries": [
                        {"entry_date": (today - timedelta(days=days_ago)).isoformat()}
                        for days_ago in (2, 1, 0)
                    ],
                }
            ]
        }

        response = authorized_client.post(f"{USERS_URL}/import", json=payload)
        assert response.status_code == status.HTTP_200_OK

        level = authorized_client.get("/api/v1/levels/me").json()
        assert level["total_habits_created"] == 1
        assert level["current_streak"] == 3
        assert level["longest_streak"] == 3
        assert level["total_habits_completed"] == 0
        assert level["points"] == 0

        summary = authorized_client.get("/api/v1/habits/summary").json()
        assert summary["best_current_streak"] == level["current_streak"]
