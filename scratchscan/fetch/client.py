"""HTTP client with timeouts, rate limiting and retries for the index page."""
import logging
from typing import Optional
import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from scratchscan.config import config
from scratchscan.fetch.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class FetchClient:
    """Shared async HTTP client for one snapshot run."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Configure connection pool
        limits = httpx.Limits(
            max_connections=max(config.BATCH_SIZE * 2, 10),
            max_keepalive_connections=config.BATCH_SIZE,
        )
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self.client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            limits=limits,
            headers={"User-Agent": config.USER_AGENT},
            transport=transport,
        )
        self.rate_limiter = RateLimiter(config.RATE_PER_DOMAIN)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get(self, url: str) -> httpx.Response:
        """Single GET with the per-request timeout. No retries."""
        await self.rate_limiter.acquire(url)
        try:
            return await self.client.get(url, timeout=self.timeout)
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            logger.warning(f"Network error for {url}: {e}")
            raise

    @retry(
        stop=stop_after_attempt(config.MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    async def fetch(self, url: str) -> httpx.Response:
        """GET retried on timeouts and network errors (used for the index page)."""
        return await self.get(url)
