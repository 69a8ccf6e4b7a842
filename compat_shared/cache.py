"""In-process TTL store for pending Discord interaction sessions.

Uses cachetools.TTLCache for zero-infrastructure expiry. A session is written
once when /report is accepted and read at most once when the modal comes
back; reading removes it, and anything older than the TTL is simply gone.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# Sentinel object to distinguish "not in cache" from cached None values
_MISSING = object()

V = TypeVar("V")


class SessionCache(Generic[V]):
    """Write-once, read-once store with per-entry expiry."""

    def __init__(
        self,
        maxsize: int = 1024,
        ttl: float = 600.0,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)
        # Background tasks and request handlers may touch the cache concurrently
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def put(self, key: str, value: V) -> None:
        with self._lock:
            self._cache[key] = value
        logger.debug(f"Session stored: {key} (ttl={self._ttl:.0f}s)")

    def pop(self, key: str) -> V | None:
        """Return and remove the session, or None if absent or expired."""
        with self._lock:
            value = self._cache.pop(key, _MISSING)
        if value is _MISSING:
            logger.debug(f"Session missing or expired: {key}")
            return None
        return value  # type: ignore[return-value]

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._cache)
