"""Page processing shared by the orchestrator and the offline converter."""

import logging

from academy_scraper.errors import ExtractionError
from academy_scraper.extractor import ContentExtractor, has_content, sanitize
from academy_scraper.segmenter import Document, segment

logger = logging.getLogger(__name__)


def build_document(raw_html: str, url: str, extractor: ContentExtractor) -> Document:
    """Extract, sanitize and segment one fetched page.

    Raises:
        ExtractionError: no content region, or the region has no content
            left after sanitizing.
    """
    content = extractor.extract(raw_html, url)
    clean = sanitize(content.html)
    if not has_content(clean):
        raise ExtractionError("Content region is empty after sanitizing", {"url": url})

    sections = segment(clean)
    logger.debug(
        "Segmented %s into %d sections (%s)",
        url,
        len(sections),
        ", ".join(s.kind.value for s in sections),
    )
    return Document(title=content.title, url=url, body_html=clean, sections=sections)
