# caching/ttl_cache.py
import time
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

from ..models import CacheEntry

K = TypeVar('K', bound=Hashable)
V = TypeVar('V')


class TTLCache(Generic[K, V]):
    """
    Keyed in-memory store whose entries go stale after a fixed time-to-live.

    Expiry is lazy: a stale entry is ignored by readers but stays in place
    until a later ``set`` overwrites it or ``clear`` drops everything.
    A ``ttl`` of ``None`` disables expiry altogether.
    """

    def __init__(self, ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[K, CacheEntry[K, V]] = {}

    def _is_fresh(self, entry: CacheEntry[K, V]) -> bool:
        if self.ttl is None:
            return True
        return self._clock() - entry.stored_at < self.ttl

    def get(self, key: K) -> Optional[V]:
        """Return the stored value, or None if absent or expired"""
        entry = self._entries.get(key)
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.value

    def get_stale(self, key: K) -> Optional[V]:
        """Return the stored value regardless of its age"""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def set(self, key: K, value: V) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def delete(self, key: K) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._is_fresh(entry)

    def __len__(self) -> int:
        return sum(1 for entry in self._entries.values() if self._is_fresh(entry))
