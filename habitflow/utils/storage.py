"""
Key-value persistence for per-user client state.

``KeyValueStore`` is the interface; ``InMemoryKeyValueStore`` backs tests and
scripts and ``DatabaseKeyValueStore`` keeps values in the ``user_settings``
table of the caller's session.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from habitflow.core.exceptions import ValidationException
from habitflow.models.user import UserSetting

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass

    def clear(self) -> None:
        for key in self.keys():
            self.delete(key)

    def export_json(self) -> str:
        """Serialize every key into one JSON object."""
        return json.dumps({key: self.get(key) for key in self.keys()}, default=str)

    def import_json(self, payload: str) -> int:
        """
        Load a JSON object produced by ``export_json``.

        Returns the number of keys written.

        Raises:
            ValidationException: payload is not a JSON object
        """
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise ValidationException(f"Invalid JSON payload: {e}")
        if not isinstance(data, dict):
            raise ValidationException("JSON payload must be an object")

        for key, value in data.items():
            self.set(key, value)
        return len(data)


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> List[str]:
        return list(self._data)

    def clear(self) -> None:
        self._data.clear()


class DatabaseKeyValueStore(KeyValueStore):
    """Values of one user, stored as JSON rows in ``user_settings``."""

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _row(self, key: str) -> Optional[UserSetting]:
        return (
            self.db.query(UserSetting)
            .filter(UserSetting.user_id == self.user_id, UserSetting.key == key)
            .first()
        )

    def get(self, key: str, default: Any = None) -> Any:
        row = self._row(key)
        return default if row is None else row.value

    def set(self, key: str, value: Any) -> None:
        row = self._row(key)
        if row is None:
            row = UserSetting(user_id=self.user_id, key=key)
        row.value = value
        self.db.add(row)
        self.db.commit()
        logger.debug(f"Stored setting {key} for user {self.user_id}")

    def delete(self, key: str) -> bool:
        deleted = (
            self.db.query(UserSetting)
            .filter(UserSetting.user_id == self.user_id, UserSetting.key == key)
            .delete()
        )
        self.db.commit()
        return deleted > 0

    def keys(self) -> List[str]:
        rows = (
            self.db.query(UserSetting.key)
            .filter(UserSetting.user_id == self.user_id)
            .order_by(UserSetting.key)
            .all()
        )
        return [row.key for row in rows]
