"""In-process fixed-window rate limiters keyed by client address."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter


class RateLimitExceededError(Exception):
    """Raised when a key has used up its points for the current window."""

    def __init__(self, *, limiter: str, key: str, retry_after_seconds: int) -> None:
        super().__init__(f"{limiter} rate limit exceeded for {key}")
        self.limiter = limiter
        self.key = key
        self.retry_after_seconds = retry_after_seconds


@dataclass(frozen=True, slots=True)
class RateLimitPolicy:
    """`points` requests per `duration_seconds` window."""

    points: int
    duration_seconds: int


class RateLimiter:
    """Fixed-window counter per key.

    Counters live in process memory, so state is lost on restart and is not
    shared between worker processes.
    """

    def __init__(self, name: str, policy: RateLimitPolicy, storage: MemoryStorage | None = None) -> None:
        self.name = name
        self.policy = policy
        self._item = RateLimitItemPerSecond(policy.points, policy.duration_seconds)
        self._strategy = FixedWindowRateLimiter(storage or MemoryStorage())

    def consume(self, key: str) -> int:
        """Consume one point for key and return the points left in the window.

        Rejected attempts still count, so a client hammering the endpoint does
        not get a fresh window early.
        """
        if self._strategy.hit(self._item, self.name, key):
            return self._strategy.get_window_stats(self._item, self.name, key).remaining
        stats = self._strategy.get_window_stats(self._item, self.name, key)
        retry_after = max(1, math.ceil(stats.reset_time - time.time()))
        raise RateLimitExceededError(limiter=self.name, key=key, retry_after_seconds=retry_after)


@dataclass(slots=True)
class RateLimiters:
    """The three limiter configurations used by HTTP routes."""

    api: RateLimiter
    auth: RateLimiter
    create: RateLimiter


def build_rate_limiters(
    *,
    api: RateLimitPolicy,
    auth: RateLimitPolicy,
    create: RateLimitPolicy,
) -> RateLimiters:
    storage = MemoryStorage()
    return RateLimiters(
        api=RateLimiter("api", api, storage),
        auth=RateLimiter("auth", auth, storage),
        create=RateLimiter("create", create, storage),
    )
