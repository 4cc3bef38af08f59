"""Course page expansion into module-section URLs."""

import logging
from collections.abc import AsyncIterator

from bs4 import BeautifulSoup

from academy_scraper.config import DiscoveryConfig
from academy_scraper.discovery.base import BaseDiscoverer, DiscoveredURL
from academy_scraper.fetcher.base import BaseFetcher
from academy_scraper.utils.url_utils import make_absolute, normalize_url

logger = logging.getLogger(__name__)


class CourseDiscoverer(BaseDiscoverer):
    """Discover section URLs by reading the links on a course page."""

    def __init__(
        self,
        course_url: str,
        config: DiscoveryConfig,
        fetcher: BaseFetcher,
        credential: str,
    ):
        super().__init__(config)
        self.course_url = course_url
        self.fetcher = fetcher
        self.credential = credential

    async def discover(self) -> AsyncIterator[DiscoveredURL]:
        """Fetch the course page and yield its section links in page order.

        Raises the fetcher's :class:`FetchError` when the course page
        cannot be retrieved.
        """
        html = await self.fetcher.fetch_html(self.course_url, self.credential)
        soup = BeautifulSoup(html, "lxml")

        seen: set[str] = set()
        for a in soup.select(self.config.section_link_selector):
            href = a.get("href")
            if not href or isinstance(href, list):
                continue
            url = make_absolute(self.course_url, href)
            normalized = normalize_url(url)
            if normalized in seen:
                continue
            seen.add(normalized)
            yield DiscoveredURL(url=url, title=a.get_text(strip=True) or None)

        logger.debug("Course %s expanded into %d sections", self.course_url, len(seen))
