# habitflow/services/user_service.py
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
import logging

from habitflow import models, schemas
from habitflow.core.constants import LAST_SYNC_KEY, PREFERENCES_KEY
from habitflow.core.exceptions import ResourceNotFoundException
from habitflow.core.security import IdentityClaims
from habitflow.repositories.habit_repository import HabitRepository
from habitflow.repositories.user_repository import UserRepository
from habitflow.services.progression_service import ProgressionService
from habitflow.utils.cache import TTLCache, invalidate_user_cache
from habitflow.utils.retry import retry_on_transient, translate_store_errors
from habitflow.utils.storage import DatabaseKeyValueStore, KeyValueStore

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        db: Session,
        cache: Optional[TTLCache] = None,
        store_factory: Optional[Callable[[Session, int], KeyValueStore]] = None,
    ):
        self.db = db
        self.cache = cache
        self.repository = UserRepository(db)
        self.habit_repository = HabitRepository(db)
        self.progression_service = ProgressionService(db, cache)
        self.store_factory = store_factory or DatabaseKeyValueStore

    def get_or_create_from_claims(self, claims: IdentityClaims) -> models.User:
        """Profile for a verified identity, created on first sight."""
        user = self.repository.get_by_external_id(claims.sub)
        if user:
            return user

        try:
            user = self.repository.create_from_claims(claims)
            logger.info(f"Created profile {user.id} for identity {claims.sub}")
            return user
        except IntegrityError:
            # Two first requests of the same identity raced
            self.db.rollback()
            return self.repository.get_by_external_id(claims.sub)

    def update_me(self, user_id: int, update_data: schemas.UserUpdate) -> models.User:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise ResourceNotFoundException(f"User with ID {user_id} not found")
        with translate_store_errors(self.db, "Could not update profile"):
            user = self.repository.update_me(user, update_data)
        if self.cache is not None:
            invalidate_user_cache(self.cache, user_id)
        return user

    def store(self, user_id: int) -> KeyValueStore:
        return self.store_factory(self.db, user_id)

    @retry_on_transient()
    def get_preferences(self, user_id: int) -> Dict[str, Any]:
        return self.store(user_id).get(PREFERENCES_KEY, {}) or {}

    def update_preferences(self, user_id: int, values: Dict[str, Any]) -> Dict[str, Any]:
        """Merge ``values`` into the stored preferences; ``None`` removes a key."""
        store = self.store(user_id)
        preferences = dict(store.get(PREFERENCES_KEY, {}) or {})
        for key, value in values.items():
            if value is None:
                preferences.pop(key, None)
            else:
                preferences[key] = value

        with translate_store_errors(self.db, "Could not save preferences"):
            store.set(PREFERENCES_KEY, preferences)
        return preferences

    @retry_on_transient()
    def export_data(self, user_id: int) -> Dict[str, Any]:
        store = self.store(user_id)
        return {
            "exported_at": datetime.utcnow(),
            "habits": self.habit_repository.list_for_owner(user_id),
            "preferences": store.get(PREFERENCES_KEY, {}) or {},
            "last_sync": store.get(LAST_SYNC_KEY),
        }

    def import_data(self, user_id: int, payload: schemas.UserImport) -> Dict[str, int]:
        """
        Add the habits and entries of an export to the user's account.

        Imported habits never earn creation or completion rewards, but the
        habit count and streak counters take them into account. Preferences
        are merged over the current ones.
        """
        habits_created = 0
        entries_imported = 0

        with translate_store_errors(self.db, "Import failed, nothing was changed"):
            for habit_in in payload.habits:
                habit = models.Habit(
                    **habit_in.model_dump(exclude={"entries"}), owner_id=user_id
                )
                seen = set()
                for entry_in in habit_in.entries:
                    if entry_in.entry_date in seen:
                        continue
                    seen.add(entry_in.entry_date)
                    habit.entries.append(
                        models.HabitEntry(**entry_in.model_dump(), rewarded=True)
                    )
                    entries_imported += 1
                self.habit_repository.add(habit)
                habits_created += 1
            self.db.flush()

            level = self.progression_service.get_or_create_level(user_id)
            level.total_habits_created += habits_created
            self.progression_service.refresh_streaks(user_id)
            self.db.commit()

        if payload.preferences:
            self.update_preferences(user_id, payload.preferences)
        self.store(user_id).set(LAST_SYNC_KEY, datetime.utcnow().isoformat())

        if self.cache is not None:
            invalidate_user_cache(self.cache, user_id)
        logger.info(
            f"Imported {habits_created} habits and {entries_imported} entries "
            f"for user {user_id}"
        )
        return {"habits_created": habits_created, "entries_imported": entries_imported}
