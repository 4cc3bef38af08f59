"""Main content extraction from course pages."""

import logging
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel

from academy_scraper.config import ExtractorConfig
from academy_scraper.errors import ExtractionError

logger = logging.getLogger(__name__)


class ExtractedContent(BaseModel):
    """Content region of a page, before sanitizing."""

    html: str
    title: str
    selector: str | None = None  # Content selector that matched


class ContentExtractor:
    """Locate the instructional content region of a page."""

    def __init__(self, config: ExtractorConfig):
        self.config = config

    def extract(self, html: str, url: str) -> ExtractedContent:
        """Extract the title and content region HTML.

        Raises:
            ExtractionError: the page is empty or no content selector matches.
        """
        if not html or len(html.strip()) == 0:
            raise ExtractionError("Empty page", {"url": url})

        soup = BeautifulSoup(html, "lxml")
        title = self._extract_title(soup, url)

        main: Tag | None = None
        matched: str | None = None
        for selector in self.config.content_selectors:
            main = soup.select_one(selector)
            if main:
                matched = selector
                break

        if not main:
            raise ExtractionError("No content found on page", {"url": url})

        for selector in self.config.cleanup_selectors:
            for elem in main.select(selector):
                elem.decompose()

        self._drop_title_heading(main, title)

        logger.debug("Content region for %s matched %r", url, matched)
        return ExtractedContent(html=main.decode_contents(), title=title, selector=matched)

    @staticmethod
    def _extract_title(soup: BeautifulSoup, url: str) -> str:
        """First <h1> text, else the last URL path segment, else 'untitled'."""
        h1 = soup.find("h1")
        if h1:
            title = h1.get_text(" ", strip=True)
            if title:
                return title
        segment = unquote(urlparse(url).path.rstrip("/").rsplit("/", 1)[-1])
        return segment or "untitled"

    @staticmethod
    def _drop_title_heading(main: Tag, title: str) -> None:
        """Remove the region's first H1 when it repeats the page title.

        The renderer emits the title itself, so keeping it would print it twice.
        """
        h1 = main.find("h1")
        if h1 and h1.get_text(" ", strip=True) == title:
            h1.decompose()
