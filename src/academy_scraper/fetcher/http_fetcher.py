"""Simple HTTP fetcher for server-rendered pages."""

import httpx

from academy_scraper.config import FetcherConfig
from academy_scraper.fetcher.base import BaseFetcher, FetchResult


class HttpFetcher(BaseFetcher):
    """HTTP fetcher without JavaScript rendering."""

    def __init__(
        self,
        config: FetcherConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(config)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self):
        """Initialize HTTP client."""
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": self.config.accept,
            },
            follow_redirects=True,
            timeout=self.config.timeout_ms / 1000,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str, credential: str) -> FetchResult:
        """Fetch a page via HTTP."""
        if not self._client:
            raise RuntimeError("Fetcher not initialized. Use 'async with' context manager.")

        try:
            response = await self._client.get(url, headers={"Cookie": credential})

            return FetchResult(
                url=url,
                final_url=str(response.url),
                html=response.text,
                status_code=response.status_code,
            )

        except httpx.HTTPError as e:
            return FetchResult(
                url=url,
                final_url=url,
                html="",
                status_code=0,
                error=str(e) or type(e).__name__,
            )
