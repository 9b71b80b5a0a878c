from __future__ import annotations

import math
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from ..core.constants import DEFAULT_RATE_LIMIT, DEFAULT_RATE_WINDOW_SECONDS
from ..core.exceptions import RateLimitedError


class SlidingWindowRateLimiter:
    """In-process limiter for the request-code route: N hits per key per window.

    Defense in depth only; correctness never depends on it. State is per
    process, so several workers each enforce their own window.
    """

    def __init__(
        self,
        limit: int = DEFAULT_RATE_LIMIT,
        window_seconds: int = DEFAULT_RATE_WINDOW_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._limit = int(limit)
        self._window = float(window_seconds)
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def hit(self, key: str) -> None:
        """Count one request for `key`; raises RateLimitedError when over the limit."""
        if self._limit <= 0:
            return
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._window:
                self._sweep(now)
            hits = self._hits.setdefault(key, deque())
            self._prune(hits, now)
            if len(hits) >= self._limit:
                retry_after = max(int(math.ceil(self._window - (now - hits[0]))), 1)
                raise RateLimitedError(
                    "Too many code requests. Please try again later.",
                    retry_after=retry_after,
                )
            hits.append(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self._window:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        # drop keys whose every hit has aged out; runs at most once per window
        for key in list(self._hits):
            hits = self._hits[key]
            self._prune(hits, now)
            if not hits:
                del self._hits[key]
        self._last_sweep = now

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
