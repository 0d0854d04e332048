from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from threading import Lock

from scan2eat.core.config import RATE_LIMIT_MAX, RATE_LIMIT_WINDOW_SECONDS


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int


class RateLimiterService(ABC):
    @abstractmethod
    def check(self, *, client_id: str) -> RateLimitDecision:
        """Decides whether one more request from the client fits the window."""


class InMemoryRateLimiterService(RateLimiterService):
    """Sliding-window limit per client address, kept in process memory."""

    def __init__(self, *, limit: int = RATE_LIMIT_MAX, window_seconds: int = RATE_LIMIT_WINDOW_SECONDS) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._store: dict[str, deque[float]] = {}
        self._lock = Lock()
        self._last_sweep = time.monotonic()

    def check(self, *, client_id: str) -> RateLimitDecision:
        now = time.monotonic()

        with self._lock:
            cutoff = now - self.window_seconds
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now

            bucket = self._store.setdefault(client_id, deque())
            while bucket and bucket[0] <= cutoff:
                bucket.popleft()

            if len(bucket) >= self.limit:
                retry_after = max(1, int(self.window_seconds - (now - bucket[0])))
                return RateLimitDecision(
                    allowed=False,
                    limit=self.limit,
                    remaining=0,
                    retry_after_seconds=retry_after,
                )

            bucket.append(now)
            return RateLimitDecision(
                allowed=True,
                limit=self.limit,
                remaining=max(0, self.limit - len(bucket)),
                retry_after_seconds=0,
            )

    def _sweep(self, cutoff: float) -> None:
        # clients whose newest hit left the window hold no state
        stale = [client_id for client_id, bucket in self._store.items() if not bucket or bucket[-1] <= cutoff]
        for client_id in stale:
            del self._store[client_id]
