# src/concierge/empi/cache.py
"""
Short-lived memoization of EMPI lookups.

One PatientCache instance is shared by all callers; it synchronizes
internally. Expired entries are dropped lazily when read, and in bulk by
purge(), which set() also runs at most once per TTL so that entries nobody
asks for again do not accumulate. Only found patients are stored, so a miss
always reaches the EMPI.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .models import Patient


def cache_key(authority: str, value: str) -> str:
    """Key under which a lookup is memoized."""
    return f"{authority}/{value}"


class PatientCache:
    """
    Thread-safe TTL cache of patients keyed by "authority/value".

    Parameters
    ----------
    ttl_seconds : float
        Lifetime of each entry. Zero or negative disables the cache.
    clock : callable, default time.monotonic
        Source of the current time in seconds.
    """

    def __init__(
        self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Patient]] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + ttl_seconds

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Optional[Patient]:
        """Return the live entry for key, or None."""
        if not self.enabled:
            return None
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires, patient = entry
            if now >= expires:
                del self._entries[key]
                return None
            return patient

    def set(self, key: str, patient: Optional[Patient]) -> None:
        """Store a found patient; None is ignored."""
        if not self.enabled or patient is None:
            return
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            self._entries[key] = (now + self.ttl_seconds, patient)

    def purge(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            return self._sweep(now)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _sweep(self, now: float) -> int:
        # caller holds the lock
        stale = [k for k, (expires, _) in self._entries.items() if now >= expires]
        for k in stale:
            del self._entries[k]
        self._next_sweep = now + self.ttl_seconds
        return len(stale)
