"""In-memory sliding-window rate limiting for the auth endpoints."""

from __future__ import annotations

import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple


class SlidingWindowRateLimiter:
    """Per-key request log; suitable for a single-process deployment."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    def hit(self, key: str, limit: int, window_seconds: int) -> Tuple[bool, int]:
        """Record an attempt.

        Returns ``(allowed, retry_after_seconds)``; rejected attempts are not
        recorded.
        """
        now = self._clock()
        cutoff = now - window_seconds

        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now

            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()

            if len(hits) >= limit:
                if not hits:
                    del self._hits[key]
                    return False, max(1, window_seconds)
                return False, max(1, math.ceil(hits[0] - cutoff))

            hits.append(now)
            return True, 0

    def _sweep(self, cutoff: float) -> None:
        """Forget keys with no attempts inside the window. Caller holds the lock."""
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


rate_limiter = SlidingWindowRateLimiter()
