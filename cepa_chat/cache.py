"""
Time-windowed in-memory cache with an injectable clock.

Used to memoise list endpoints of the chatbot API. The clock is a plain
callable returning seconds, so staleness can be driven from tests.
"""

from __future__ import annotations

import time
from threading import Lock
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from cepa_chat.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 600


class TTLCache(Generic[T]):
    """Thread-safe key/value cache whose entries expire after ``ttl_seconds``."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[T, float]] = {}
        self._lock = Lock()

        # Stats
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: Hashable) -> Optional[T]:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                logger.debug("[CACHE] Miss for %r", key)
                return None

            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                self.evictions += 1
                self.misses += 1
                logger.debug("[CACHE] Entry for %r expired; evicted", key)
                return None

            self.hits += 1
            logger.debug("[CACHE] Hit for %r", key)
            return value

    def set(self, key: Hashable, value: T) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())

    def get_or_load(self, key: Hashable, loader: Callable[[], T]) -> T:
        """Return the cached value or call ``loader`` and cache its result."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            if self._entries.pop(key, None) is not None:
                logger.debug("[CACHE] Invalidated %r", key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("[CACHE] Cleared")

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            size = len(self._entries)
        total = self.hits + self.misses
        return {
            "size": size,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": (self.hits / total) if total else 0.0,
            "ttl_seconds": self.ttl_seconds,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
