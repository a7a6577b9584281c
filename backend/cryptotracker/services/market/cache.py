"""
In-process response cache for upstream market data.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional
from cachetools import TTLCache

logger = logging.getLogger(__name__)


class ResponseCache:
    """Bounded key/value cache with one TTL for every entry.

    Entries expire passively: an expired entry is dropped when it is read
    or when the cache needs room. Once ``max_entries`` is reached the least
    recently used entry is evicted. Safe to share between the worker threads
    that serve sync route handlers.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_entries: int = 1024,
        timer: Callable[[], float] = time.monotonic,
        name: str = "market"
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.name = name
        self._entries: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl_seconds, timer=timer)
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None on a miss or expired entry."""
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self._misses += 1
            else:
                self._hits += 1
        logger.debug(f"[{self.name} cache] {'hit' if value is not None else 'miss'}: {key}")
        return value

    def set(self, key: str, value: Any):
        """Store a value; the TTL restarts from now."""
        if value is None:
            raise ValueError("cannot cache None")
        with self._lock:
            # Reinsert so an overwrite gets a fresh expiry
            self._entries.pop(key, None)
            self._entries[key] = value

    def clear(self):
        with self._lock:
            self._entries.clear()
        logger.info(f"[{self.name} cache] cleared")

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            self._entries.expire()
            return {
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
            }

    def __len__(self) -> int:
        with self._lock:
            # Drop expired entries so the count reflects live ones
            self._entries.expire()
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries
