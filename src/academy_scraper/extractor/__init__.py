"""Content extraction and sanitizing."""

from academy_scraper.extractor.main_content import ContentExtractor, ExtractedContent
from academy_scraper.extractor.sanitizer import has_content, sanitize

__all__ = [
    "ContentExtractor",
    "ExtractedContent",
    "sanitize",
    "has_content",
]
