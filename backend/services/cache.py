"""In-memory TTL cache for upstream weather responses. No Redis needed.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
data may be fetched twice (once per worker).

Entries are evicted lazily: a stale entry is dropped the next time a lookup
touches its key. ``purge_expired`` sweeps the whole store for keys that are
never looked up again.
"""

import logging
import threading
import time
from typing import Callable, Generic, TypeVar

from errors import AlreadyCachedError, InvalidPayloadError
from models import CacheKey, WeatherResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_MS = 600_000  # 10 minutes


def now_ms() -> int:
    """Wall-clock epoch time in milliseconds."""
    return time.time_ns() // 1_000_000


class ExpiringEntry(Generic[T]):
    """A value paired with an absolute expiry time fixed at creation."""

    __slots__ = ("value", "expires_at", "_clock")

    def __init__(self, value: T, ttl_ms: int, clock: Callable[[], int] = now_ms):
        self.value = value
        self.expires_at = clock() + ttl_ms
        self._clock = clock

    def has_expired(self) -> bool:
        return self._clock() >= self.expires_at


class ResponseCache:
    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] = now_ms):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._store: dict[CacheKey, ExpiringEntry[WeatherResponse]] = {}
        self._lock = threading.Lock()

    def cache_response(self, key: CacheKey, response: WeatherResponse) -> None:
        """Insert a response under ``key``. Never overwrites a live entry.

        Raises:
            InvalidPayloadError: response carries no current/hourly data.
            AlreadyCachedError: a live entry already exists for ``key``.
        """
        if not response.is_cacheable():
            raise InvalidPayloadError()

        with self._lock:
            if self._check_and_clear(key):
                logger.debug("Tried to cache already cached response for %s", key)
                raise AlreadyCachedError(key)

            logger.debug("Caching weather response for %s", key)
            self._store[key] = ExpiringEntry(response, self.ttl_ms, clock=self._clock)

    def get_cache_for(self, key: CacheKey) -> WeatherResponse | None:
        """Return the live cached response for ``key``.

        A stale entry is evicted as a side effect and None is returned.
        """
        with self._lock:
            if not self._check_and_clear(key):
                return None
            return self._store[key].value

    def has_valid_cache_for(self, key: CacheKey) -> bool:
        """Read-only liveness check. Does not evict."""
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and not entry.has_expired()

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            stale = [key for key, entry in self._store.items() if entry.has_expired()]
            for key in stale:
                del self._store[key]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def _check_and_clear(self, key: CacheKey) -> bool:
        # Caller holds the lock.
        entry = self._store.get(key)
        if entry is None:
            return False
        if entry.has_expired():
            del self._store[key]
            return False
        return True
