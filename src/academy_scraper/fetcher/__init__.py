"""Page fetching with optional JavaScript rendering."""

from academy_scraper.fetcher.base import BaseFetcher, FetchResult
from academy_scraper.fetcher.http_fetcher import HttpFetcher
from academy_scraper.fetcher.playwright_fetcher import PlaywrightFetcher

__all__ = [
    "BaseFetcher",
    "FetchResult",
    "PlaywrightFetcher",
    "HttpFetcher",
]
