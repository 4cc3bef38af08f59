"""Base class for page fetchers."""

import asyncio
import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from academy_scraper.config import FetcherConfig
from academy_scraper.errors import HttpStatusError, RateLimitedError, TransportError

logger = logging.getLogger(__name__)


class FetchResult(BaseModel):
    """Result of fetching a page."""

    url: str
    final_url: str  # After redirects
    html: str
    status_code: int
    error: str | None = None
    attempts: int = 1

    @property
    def success(self) -> bool:
        return self.status_code >= 200 and self.status_code < 400 and not self.error

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class BaseFetcher(ABC):
    """Abstract base class for page fetchers."""

    def __init__(self, config: FetcherConfig):
        self.config = config

    @abstractmethod
    async def fetch(self, url: str, credential: str) -> FetchResult:
        """Fetch a page with the cookie header attached."""
        pass

    async def fetch_with_retry(self, url: str, credential: str) -> FetchResult:
        """Fetch, retrying exactly once after a fixed wait on HTTP 429."""
        result = await self.fetch(url, credential)
        if not result.rate_limited:
            return result

        logger.debug(
            "429 from %s, retrying in %.1fs", url, self.config.rate_limit_backoff_seconds
        )
        if self.config.rate_limit_backoff_seconds > 0:
            await asyncio.sleep(self.config.rate_limit_backoff_seconds)
        result = await self.fetch(url, credential)
        result.attempts = 2
        return result

    async def fetch_html(self, url: str, credential: str) -> str:
        """Return the page HTML or raise a :class:`FetchError` subclass."""
        result = await self.fetch_with_retry(url, credential)
        if result.success:
            return result.html
        if result.rate_limited:
            raise RateLimitedError(url)
        if result.status_code == 0:
            raise TransportError(url, result.error or "no response")
        raise HttpStatusError(url, result.status_code)

    @abstractmethod
    async def __aenter__(self):
        """Async context manager entry."""
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        pass
