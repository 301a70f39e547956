"""
Time-boxed in-process cache shared by the data collectors.
"""
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    """
    Key/value cache whose entries expire ttl_ms after being set.

    The clock is injectable (seconds, monotonic) so tests can control time.
    """

    def __init__(self, ttl_ms: int = 20_000, clock: Callable[[], float] = time.monotonic):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def _expired(self, stored_at: float, now: float) -> bool:
        return (now - stored_at) * 1000 >= self.ttl_ms

    def _prune(self, now: float) -> None:
        stale = [key for key, (stored_at, _) in self._entries.items() if self._expired(stored_at, now)]
        for key in stale:
            del self._entries[key]

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._expired(stored_at, self._clock()):
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store value and drop every entry that has already expired."""
        now = self._clock()
        self._prune(now)
        self._entries[key] = (now, value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
