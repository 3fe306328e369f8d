"""
Response caching for browse and metadata endpoints.

Implements an in-memory TTL cache of serialized response bodies keyed by
request path, so repeated listings skip filesystem and tag decoding work.

- Lazy expiration on lookup, optional sweep via cleanup_expired()
- Thread-safe per-key replace
- No single-flight: concurrent misses may both compute, last write wins
"""

import time
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300


@dataclass(frozen=True)
class CacheEntry:
    """A cached response body and its absolute expiry time."""
    key: str
    body: bytes
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now <= self.expires_at


class ResponseCache:
    """
    In-memory cache for serialized response bodies.

    Attributes:
        default_ttl: Default cache TTL in seconds
        entries: Dictionary of cache entries by key
        lock: Thread lock for safe concurrent access
    """

    def __init__(
        self,
        default_ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            default_ttl: Default cache TTL in seconds (default: 300s)
            clock: Monotonic time source, replaceable in tests
        """
        self.default_ttl = default_ttl
        self.clock = clock
        self.entries: Dict[str, CacheEntry] = {}
        self.lock = Lock()
        self.hits = 0
        self.misses = 0

        logger.info(f"Response cache initialized with TTL={default_ttl}s")

    def get(self, key: str) -> Optional[bytes]:
        """
        Return the cached body for ``key`` if it has not expired.

        Expired entries are dropped on the way.
        """
        with self.lock:
            entry = self.entries.get(key)
            if entry is not None and entry.is_live(self.clock()):
                self.hits += 1
                logger.debug(f"Cache HIT for {key} (hits={self.hits}, misses={self.misses})")
                return entry.body

            if entry is not None:
                del self.entries[key]
            self.misses += 1
            logger.debug(f"Cache MISS for {key} (hits={self.hits}, misses={self.misses})")
            return None

    def set(self, key: str, body: bytes, ttl: Optional[int] = None) -> None:
        """Store ``body`` under ``key``, replacing any existing entry."""
        ttl = self.default_ttl if ttl is None else ttl
        with self.lock:
            self.entries[key] = CacheEntry(key=key, body=body, expires_at=self.clock() + ttl)

    async def get_or_compute(
        self,
        key: str,
        producer: Callable[[], Awaitable[bytes]],
        ttl: Optional[int] = None,
    ) -> bytes:
        """
        Return a live cached body or produce, store and return a new one.

        Args:
            key: Cache key (method and request path with query string)
            producer: Coroutine function computing the response body
            ttl: TTL override in seconds

        Returns:
            bytes: Response body

        Raises:
            Whatever ``producer`` raises; failures are never cached
        """
        body = self.get(key)
        if body is not None:
            return body

        body = await producer()
        self.set(key, body, ttl)
        return body

    def clear(self) -> int:
        """Drop every entry. Returns the number of entries removed."""
        with self.lock:
            count = len(self.entries)
            self.entries.clear()
            logger.info(f"Cache cleared ({count} entries removed)")
            return count

    def cleanup_expired(self) -> int:
        """Remove expired entries. Returns the number of entries removed."""
        with self.lock:
            now = self.clock()
            expired_keys = [key for key, entry in self.entries.items() if not entry.is_live(now)]

            for key in expired_keys:
                del self.entries[key]

            if expired_keys:
                logger.info(f"Cleaned up {len(expired_keys)} expired cache entries")
            return len(expired_keys)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            dict: Cache statistics including hits, misses, and hit rate
        """
        with self.lock:
            total_requests = self.hits + self.misses
            hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                "size": len(self.entries),
                "hits": self.hits,
                "misses": self.misses,
                "total_requests": total_requests,
                "hit_rate_percent": round(hit_rate, 2),
                "ttl_seconds": self.default_ttl
            }
