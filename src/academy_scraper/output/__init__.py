"""Output writers for rendered documents."""

from academy_scraper.output.writer import DocumentWriter, sanitize_filename

__all__ = [
    "DocumentWriter",
    "sanitize_filename",
]
