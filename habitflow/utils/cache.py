"""
In-process TTL cache.

One ``TTLCache`` is built with the application and handed to the services
that cache derived views (habit summaries, the shop catalog, leaderboards).
"""
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from habitflow.core.config import settings

logger = logging.getLogger(__name__)

_MISSING = object()


class TTLCache:
    """
    Key/value cache whose entries expire after a time-to-live.

    Expired entries are dropped when they are read; when the cache is full the
    oldest inserted entry is evicted.
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        default_ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_size = max_size or settings.CACHE_MAX_SIZE
        self.default_ttl = (
            default_ttl if default_ttl is not None else settings.CACHE_TTL_SECONDS
        )
        self._clock = clock
        self._data: "OrderedDict[Hashable, Tuple[Any, float]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + (self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._data.pop(key, None)
            while len(self._data) >= self.max_size:
                evicted, _ = self._data.popitem(last=False)
                logger.debug(f"Cache full, evicted {evicted!r}")
            self._data[key] = (value, expires_at)

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def has(self, key: Hashable) -> bool:
        with self._lock:
            return self._lookup(key, count=False) is not _MISSING

    def delete(self, key: Hashable) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        with self._lock:
            doomed = [
                key for key in self._data if isinstance(key, str) and key.startswith(prefix)
            ]
            for key in doomed:
                del self._data[key]
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            self._hits = 0
            self._misses = 0

    def size(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._data)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            self._purge_expired()
            return {
                "size": len(self._data),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
            }

    def get_or_set(
        self, key: Hashable, factory: Callable[[], Any], ttl: Optional[float] = None
    ) -> Any:
        """Return the cached value, computing and storing it on a miss."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = factory()
            self.set(key, value, ttl)
        return value

    # Caller holds the lock
    def _lookup(self, key: Hashable, count: bool = True) -> Any:
        entry = self._data.get(key)
        if entry is not None and entry[1] <= self._clock():
            del self._data[key]
            entry = None
        if count:
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1
        return _MISSING if entry is None else entry[0]

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [k for k, (_, expires_at) in self._data.items() if expires_at <= now]:
            del self._data[key]


class CacheKeys:
    """Builders for the keys used across services."""

    SHOP_CATALOG = "shop:catalog"

    @staticmethod
    def user_prefix(user_id: int) -> str:
        return f"user:{user_id}:"

    @staticmethod
    def habit_summary(user_id: int, day: Any) -> str:
        return f"user:{user_id}:summary:{day}"

    @staticmethod
    def leaderboard(limit: int) -> str:
        return f"leaderboard:{limit}"


def invalidate_user_cache(cache: TTLCache, user_id: int) -> None:
    """Drop every derived view of ``user_id`` along with the leaderboards."""
    cache.delete_prefix(CacheKeys.user_prefix(user_id))
    cache.delete_prefix("leaderboard:")
