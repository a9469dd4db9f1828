from datetime import date, timedelta

from fastapi import status

ACHIEVEMENTS_URL = "/api/v1/achievements"


class TestAchievementsAPI:
    def _level(self, client):
        return client.get("/api/v1/levels/me").json()

    def test_first_habit_unlocks_achievement(self, authorized_client, achievements):
        authorized_client.post("/api/v1/habits/", json={"title": "Drink water"})

        response = authorized_client.get(f"{ACHIEVEMENTS_URL}/")
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert [item["achievement"]["name"] for item in data] == ["First Step"]

        # 5 for the habit plus the 10 point reward, credited to experience too
        level = self._level(authorized_client)
        assert level["points"] == 15
        assert level["experience"] == 15

    def test_completion_unlocks_are_reported(self, authorized_client, achievements):
        habit = authorized_client.post("/api/v1/habits/", json={"title": "Drink water"}).json()
        url = f"/api/v1/habits/{habit['id']}/entries"
        yesterday = (date.today() - timedelta(days=1)).isoformat()

        first = authorized_client.post(url, json={"entry_date": yesterday}).json()
        second = authorized_client.post(url, json={}).json()

        assert first["unlocked_achievements"] == []
        assert second["unlocked_achievements"] == ["Getting Started"]
        assert second["current_streak"] == 2
        assert self._level(authorized_client)["points"] == 15 + 10 + 10 + 20

    def test_check_is_idempotent(self, authorized_client, db, create_test_user, achievements):
        create_test_user.user_level.total_habits_completed = 5
        db.add(create_test_user.user_level)
        db.commit()

        first = authorized_client.post(f"{ACHIEVEMENTS_URL}/check")
        assert first.status_code == status.HTTP_200_OK
        assert [item["name"] for item in first.json()["unlocked"]] == ["Getting Started"]
        assert first.json()["points_awarded"] == 20

        second = authorized_client.post(f"{ACHIEVEMENTS_URL}/check")
        assert second.json() == {"unlocked": [], "points_awarded": 0}
        assert self._level(authorized_client)["points"] == 20

    def test_available_catalog_shows_progress(
        self, authorized_client, db, create_test_user, achievements
    ):
        create_test_user.user_level.current_streak = 3
        create_test_user.user_level.longest_streak = 3
        db.add(create_test_user.user_level)
        db.commit()

        response = authorized_client.get(f"{ACHIEVEMENTS_URL}/available")
        assert response.status_code == status.HTTP_200_OK

        by_name = {item["name"]: item for item in response.json()}
        assert set(by_name) == {"First Step", "Getting Started", "On Fire"}
        assert by_name["On Fire"]["progress"] == 3
        assert by_name["On Fire"]["unlocked"] is False
        assert by_name["On Fire"]["rarity"] == "rare"
        assert by_name["First Step"]["progress"] == 0
