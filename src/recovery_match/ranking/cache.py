"""Time-expiring cache of ranking results, keyed by subject user + filters."""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Optional

from ..config import CacheConfig, RankingFilters

logger = logging.getLogger("recovery_match")


class MatchCache:
    """In-process cache with per-entry expiry.

    Entries older than ``expiry_minutes`` are treated as missing and dropped
    on access. When full, the oldest entry is evicted. ``clock`` returns
    seconds and defaults to ``time.monotonic``; tests pass a fake.
    """

    def __init__(
        self,
        expiry_minutes: float = 15.0,
        max_entries: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.expiry_seconds = expiry_minutes * 60
        self.max_entries = max_entries
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.expired = 0

    @classmethod
    def from_config(cls, cfg: CacheConfig, clock: Callable[[], float] = time.monotonic) -> "MatchCache":
        return cls(expiry_minutes=cfg.expiry_minutes, max_entries=cfg.max_entries, clock=clock)

    @staticmethod
    def key(user_id: str, filters: RankingFilters) -> tuple[str, str]:
        return user_id, filters.model_dump_json()

    def get(self, user_id: str, filters: RankingFilters) -> Optional[Any]:
        key = self.key(user_id, filters)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self.expiry_seconds:
                del self._entries[key]
                self.expired += 1
                self.misses += 1
                return None
            self.hits += 1
            return value

    def put(self, user_id: str, filters: RankingFilters, value: Any) -> None:
        key = self.key(user_id, filters)
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            self._entries[key] = (self._clock(), value)

    def invalidate_user(self, user_id: str) -> int:
        """Drop every entry for ``user_id``; returns how many were dropped."""
        with self._lock:
            stale = [k for k in self._entries if k[0] == user_id]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached rankings for {user_id}")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
                "expired": self.expired,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
