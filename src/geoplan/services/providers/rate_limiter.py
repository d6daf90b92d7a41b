"""Minimum-spacing rate limiter shared by all outbound provider calls."""

from __future__ import annotations

import functools
import logging
import threading
import time
from typing import Callable

from ...config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """Blocks callers so that successive calls are at least ``min_interval_ms`` apart.

    The clock and sleep functions are injectable so tests can drive time
    deterministically. Callers on different threads are serialized.
    """

    def __init__(
        self,
        min_interval_ms: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval_ms = min_interval_ms if min_interval_ms is not None else settings.rate_limit_interval_ms
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self.last_call_at: float | None = None

    def acquire(self) -> None:
        with self._lock:
            if self.last_call_at is not None:
                elapsed_ms = (self._clock() - self.last_call_at) * 1000
                if elapsed_ms < self.min_interval_ms:
                    wait_seconds = (self.min_interval_ms - elapsed_ms) / 1000
                    logger.debug(f"Rate limit: waiting {wait_seconds:.3f}s before next provider call")
                    self._sleep(wait_seconds)
            self.last_call_at = self._clock()


@functools.lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Process-wide limiter used when a component is not given its own."""

    return RateLimiter()
