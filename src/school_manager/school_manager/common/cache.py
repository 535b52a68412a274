from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable, Iterable, Optional


class TtlCache:
    """Small read-through cache with a fixed staleness window.

    Entries carry tags so callers can drop every view touching a student or an
    academic year without knowing the exact keys. A ttl of 0 disables caching.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic):
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any, frozenset]] = {}
        self._lock = threading.Lock()

    def get_or_load(
        self,
        key: Hashable,
        loader: Callable[[], Any],
        *,
        tags: Optional[Callable[[Any], Iterable[Hashable]]] = None,
    ) -> Any:
        if self._ttl <= 0:
            return loader()

        now = self._clock()
        with self._lock:
            hit = self._entries.get(key)
            if hit and hit[0] > now:
                return hit[1]

        value = loader()
        entry_tags = frozenset(tags(value)) if tags else frozenset()
        with self._lock:
            self._drop_expired(now)
            self._entries[key] = (now + self._ttl, value, entry_tags)
        return value

    def _drop_expired(self, now: float) -> None:
        # Caller holds the lock.
        expired = [k for k, (expires_at, _, _) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]

    def invalidate(self, tag: Optional[Hashable] = None) -> int:
        """Drop entries carrying ``tag`` (or everything when tag is None)."""

        with self._lock:
            if tag is None:
                dropped = len(self._entries)
                self._entries.clear()
                return dropped
            stale = [k for k, (_, _, tags) in self._entries.items() if tag in tags]
            for k in stale:
                del self._entries[k]
            return len(stale)

    def __len__(self) -> int:
        return len(self._entries)
