"""
Unit tests for the key-value stores.
"""
import json
import pytest

from habitflow.core.exceptions import ValidationException
from habitflow.models.user import UserSetting
from habitflow.utils.storage import DatabaseKeyValueStore, InMemoryKeyValueStore


class TestInMemoryKeyValueStore:
    def test_basic_operations(self):
        store = InMemoryKeyValueStore({"theme": "dark"})
        store.set("week_start", "monday")

        assert store.get("theme") == "dark"
        assert store.get("missing", 1) == 1
        assert sorted(store.keys()) == ["theme", "week_start"]
        assert store.delete("theme") is True
        assert store.delete("theme") is False

        store.clear()
        assert store.keys() == []

    def test_export_import_round_trip(self):
        source = InMemoryKeyValueStore({"preferences": {"theme": "dark"}, "last_sync": "x"})
        target = InMemoryKeyValueStore()

        assert target.import_json(source.export_json()) == 2
        assert target.get("preferences") == {"theme": "dark"}

    @pytest.mark.parametrize("payload", ["not json", "[1, 2]"])
    def test_import_rejects_bad_payload(self, payload):
        with pytest.raises(ValidationException):
            InMemoryKeyValueStore().import_json(payload)


class TestDatabaseKeyValueStore:
    def test_values_persist_per_user(self, db, create_test_user, other_user):
        store = DatabaseKeyValueStore(db, create_test_user.id)
        store.set("preferences", {"theme": "dark", "reminders": [8, 20]})
        store.set("preferences", {"theme": "light"})

        assert store.get("preferences") == {"theme": "light"}
        assert db.query(UserSetting).count() == 1
        assert DatabaseKeyValueStore(db, other_user.id).get("preferences") is None

    def test_keys_delete_and_export(self, db, create_test_user):
        store = DatabaseKeyValueStore(db, create_test_user.id)
        store.set("b", 2)
        store.set("a", 1)

        assert store.keys() == ["a", "b"]
        assert json.loads(store.export_json()) == {"a": 1, "b": 2}
        assert store.delete("a") is True
        assert store.keys() == ["b"]

        store.clear()
        assert store.keys() == []
