import time
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from match_analytics.infrastructure.cache.redis_client import RedisClient

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    expires_at: float


class CacheService:
    """
    TTL cache owned by whichever component composes it.

    Entries live in memory; when a connected Redis client is injected it is
    used as a secondary layer shared across processes. Expired entries are
    dropped lazily on read and in bulk by `cleanup_expired()`, which the
    application runs on a timer.

    TTL presets (in seconds):
    - PREDICTIONS: 30 minutes
    - STATISTICS: 1 hour
    """

    TTL_PREDICTIONS = 1800
    TTL_STATISTICS = 3600
    DEFAULT_TTL = 3600

    def __init__(
        self,
        redis_client: Optional[RedisClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache service."""
        self._memory_cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._clock = clock
        self.redis = redis_client
        self._hits = 0
        self._misses = 0

    @property
    def _redis_available(self) -> bool:
        return self.redis is not None and self.redis.is_connected

    def get(self, key: str) -> Optional[Any]:
        """Get a value from cache (memory first, then Redis)."""
        now = self._clock()
        with self._lock:
            entry = self._memory_cache.get(key)
            if entry is not None:
                if now <= entry.expires_at:
                    self._hits += 1
                    return entry.value
                del self._memory_cache[key]

        if self._redis_available:
            value = self.redis.get(key)
            if value is not None:
                with self._lock:
                    self._hits += 1
                return value

        with self._lock:
            self._misses += 1
        return None

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Set a value in memory and, when available, in Redis."""
        ttl = self.DEFAULT_TTL if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError(f"TTL must be positive, got {ttl}")

        now = self._clock()
        with self._lock:
            self._memory_cache[key] = CacheEntry(value=value, created_at=now, expires_at=now + ttl)

        if self._redis_available:
            self.redis.set(key, value, int(ttl))

    def has(self, key: str) -> bool:
        """Check for a live entry in memory."""
        now = self._clock()
        with self._lock:
            entry = self._memory_cache.get(key)
            if entry is None:
                return False
            if now > entry.expires_at:
                del self._memory_cache[key]
                return False
            return True

    def invalidate(self, key: str) -> bool:
        """Evict a specific cache entry."""
        redis_ok = False
        if self._redis_available:
            redis_ok = self.redis.delete(key)

        with self._lock:
            in_mem = key in self._memory_cache
            if in_mem:
                del self._memory_cache[key]
            return redis_ok or in_mem

    def clear(self) -> None:
        """Clear all in-memory entries."""
        with self._lock:
            self._memory_cache.clear()
            logger.info("Cache cleared")

    def cleanup_expired(self) -> int:
        """Drop every expired in-memory entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, entry in self._memory_cache.items() if now > entry.expires_at]
            for key in expired:
                del self._memory_cache[key]

        if expired:
            logger.debug(f"Cache sweep removed {len(expired)} expired entries")
        return len(expired)

    def keys(self) -> list[str]:
        self.cleanup_expired()
        with self._lock:
            return list(self._memory_cache.keys())

    def size(self) -> int:
        self.cleanup_expired()
        with self._lock:
            return len(self._memory_cache)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        self.cleanup_expired()
        with self._lock:
            created = [entry.created_at for entry in self._memory_cache.values()]
            return {
                "total_items": len(self._memory_cache),
                "hits": self._hits,
                "misses": self._misses,
                "oldest_item_age": (self._clock() - min(created)) if created else None,
                "newest_item_age": (self._clock() - max(created)) if created else None,
                "redis_connected": self._redis_available,
            }

    # --- Key helpers ---

    @staticmethod
    def prediction_key(home_team: str, away_team: str, league: Optional[str] = None) -> str:
        return f"prediction:{home_team.strip().lower()}:{away_team.strip().lower()}:{(league or 'default').strip().lower()}"

    @staticmethod
    def statistics_key(team_name: str) -> str:
        return f"statistics:{team_name.strip().lower()}"
