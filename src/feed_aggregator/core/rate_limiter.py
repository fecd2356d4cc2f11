"""Per-adapter request throttle."""

import asyncio
import time


class RateLimiter:
    """Enforce a minimum interval between requests.

    The interval is derived from a requests-per-minute budget. The lock is
    held across the wait and the timestamp update, so concurrent callers on
    the same limiter go through one at a time in call order.
    """

    def __init__(self, requests_per_minute: float) -> None:
        self.requests_per_minute = requests_per_minute
        self.min_interval = 60.0 / requests_per_minute if requests_per_minute > 0 else 0.0
        self._last_request: float | None = None
        self._lock = asyncio.Lock()

    async def acquire(self) -> float:
        """Wait until the next request is allowed.

        Returns:
            Seconds spent waiting
        """
        async with self._lock:
            waited = 0.0
            if self._last_request is not None and self.min_interval > 0:
                elapsed = time.monotonic() - self._last_request
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    await asyncio.sleep(waited)
            self._last_request = time.monotonic()
            return waited
