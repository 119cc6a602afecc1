"""Per-origin request spacing. A rate of 0 disables it."""
import asyncio
import logging
import time
from collections import defaultdict
from typing import Dict
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class RateLimiter:
    """Keeps at least 1/rate seconds between request starts to the same origin."""

    def __init__(self, rate_per_second: float):
        self.min_interval = 1.0 / rate_per_second if rate_per_second > 0 else 0.0
        self._next_slot: Dict[str, float] = defaultdict(float)
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def enabled(self) -> bool:
        return self.min_interval > 0

    @staticmethod
    def origin(url: str) -> str:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"

    async def acquire(self, url: str) -> float:
        """Wait for the origin's next slot. Returns the seconds waited."""
        if not self.enabled:
            return 0.0

        origin = self.origin(url)
        async with self._locks[origin]:
            wait_time = self._next_slot[origin] - time.monotonic()
            if wait_time > 0:
                logger.debug(f"Rate limit: waiting {wait_time:.2f}s for {origin}")
                await asyncio.sleep(wait_time)
            self._next_slot[origin] = time.monotonic() + self.min_interval
            return max(wait_time, 0.0)
