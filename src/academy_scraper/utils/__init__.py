"""Utility functions and classes."""

from academy_scraper.utils.cookies import load_cookie_file, parse_cookie_string
from academy_scraper.utils.rate_limiter import RateLimiter
from academy_scraper.utils.url_utils import is_allowed_host, is_course_url, normalize_url
from academy_scraper.utils.validation import validate_run

__all__ = [
    "RateLimiter",
    "normalize_url",
    "is_allowed_host",
    "is_course_url",
    "parse_cookie_string",
    "load_cookie_file",
    "validate_run",
]
