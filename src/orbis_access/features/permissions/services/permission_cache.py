"""
Permission Cache for orbis-access

Per-principal cache of parsed permission sets with a time-to-live. Entries
are derived data: they expire after the TTL or when explicitly invalidated.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from ..entities import GrantSet

logger = logging.getLogger(__name__)

DEFAULT_PERMISSION_TTL = 300.0  # 5 minutes

Clock = Callable[[], float]
PermissionLoader = Callable[[str], Awaitable[GrantSet]]


@dataclass(frozen=True)
class CacheEntry:
    """Cached permission set with its expiry instant."""
    grants: GrantSet
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class PermissionCache:
    """
    In-process permission cache.

    The entry map is guarded by a lock and may be shared across tasks and
    threads. Loads run outside the lock; a load that started before an
    invalidation of the same principal, or of every principal, is returned to
    its caller but not stored.
    """

    def __init__(self, ttl: float = DEFAULT_PERMISSION_TTL, clock: Clock = time.monotonic):
        """
        Initialize permission cache.

        Args:
            ttl: Seconds a loaded permission set stays valid
            clock: Monotonic clock in seconds, injectable for tests
        """
        if ttl <= 0:
            raise ValueError(f"Permission cache TTL must be positive, got: {ttl}")

        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._generation = 0
        self._cleared_at = 0
        self._invalidated_at: Dict[str, int] = {}
        self._loads_in_flight = 0
        self._hits = 0
        self._misses = 0
        self._closed = False

        logger.debug(f"Initialized PermissionCache with ttl={ttl}s")

    async def get(self, user_id: str, loader: PermissionLoader) -> GrantSet:
        """
        Return the cached set for a principal, loading it on a miss.

        Args:
            user_id: Principal identifier
            loader: Coroutine function reading the set from the store

        Returns:
            The principal's effective permission set

        Raises:
            Whatever the loader raises; failed loads are never cached
        """
        cached = self.peek(user_id)
        if cached is not None:
            return cached

        with self._lock:
            self._misses += 1
            self._loads_in_flight += 1
            generation = self._generation

        try:
            grants = await loader(user_id)
        except BaseException:
            with self._lock:
                self._finish_load()
            raise

        with self._lock:
            stale = self._invalidated_since(user_id, generation)
            self._finish_load()
            if not stale and not self._closed:
                self._entries[user_id] = CacheEntry(grants, self._clock() + self.ttl)
                logger.debug(f"Cached {len(grants)} permissions for user {user_id}")
            else:
                logger.debug(f"Cache invalidated during load for user {user_id}, result not stored")
        return grants

    def _finish_load(self) -> None:
        self._loads_in_flight -= 1
        if not self._loads_in_flight:
            self._invalidated_at.clear()

    def _invalidated_since(self, user_id: str, generation: int) -> bool:
        return self._cleared_at > generation or self._invalidated_at.get(user_id, 0) > generation

    def peek(self, user_id: str) -> Optional[GrantSet]:
        """Return a live entry without loading, dropping it if expired."""
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[user_id]
                return None
            self._hits += 1
            logger.debug(f"Cache hit for user {user_id} permissions")
            return entry.grants

    def put(self, user_id: str, grants: GrantSet) -> None:
        """Store a set directly, e.g. when warming the cache."""
        with self._lock:
            self._entries[user_id] = CacheEntry(grants, self._clock() + self.ttl)

    def invalidate(self, user_id: str) -> bool:
        """Remove one principal's entry. Returns True if one existed."""
        with self._lock:
            self._generation += 1
            if self._loads_in_flight:
                self._invalidated_at[user_id] = self._generation
            removed = self._entries.pop(user_id, None) is not None
        logger.info(f"Invalidated permission cache for user {user_id}")
        return removed

    def invalidate_all(self) -> int:
        """Clear every entry. Returns the number removed."""
        with self._lock:
            self._generation += 1
            self._cleared_at = self._generation
            self._invalidated_at.clear()
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared all permission cache entries ({count})")
        return count

    def close(self) -> None:
        """Tear down the cache; later loads are served but not stored."""
        with self._lock:
            self._closed = True
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Cache statistics for diagnostics."""
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "ttl": self.ttl,
            }
