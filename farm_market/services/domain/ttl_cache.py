"""
Time-bounded in-memory cache with an injectable clock.
"""
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar
import threading
import time

V = TypeVar("V")


class TTLCache(Generic[V]):
    """
    Key/value cache whose entries expire ``ttl_seconds`` after they were
    last written.

    The clock is injected so expiry can be driven deterministically; it
    defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, V]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Optional[V] = None) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return default
            return value

    def set(self, key: Hashable, value: V) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def age(self, key: Hashable) -> Optional[float]:
        """Seconds since the entry was written, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        elapsed = self._clock() - entry[0]
        return elapsed if elapsed < self.ttl_seconds else None

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, (t, _) in self._entries.items() if now - t >= self.ttl_seconds]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __contains__(self, key: Any) -> bool:
        with self._lock:
            entry = self._entries.get(key)
        return entry is not None and self._clock() - entry[0] < self.ttl_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
