"""Up-front validation of run input.

Everything here runs before the first request; any failure raises
:class:`~academy_scraper.errors.ValidationError` and the run never starts.
"""

import re
from pathlib import Path
from urllib.parse import urlparse

from academy_scraper.config import RunConfig
from academy_scraper.errors import ValidationError
from academy_scraper.utils.cookies import parse_cookie_string
from academy_scraper.utils.url_utils import is_allowed_host

_COOKIE_RE = re.compile(
    r"^[A-Za-z0-9_-]+=[A-Za-z0-9_\-.%]+(?:; [A-Za-z0-9_-]+=[A-Za-z0-9_\-.%]+)*$"
)


def validate_cookie(cookie: str, required_name: str) -> None:
    if not cookie or not cookie.strip():
        raise ValidationError("credential", "Cookies are required")
    if not _COOKIE_RE.match(cookie.strip()):
        raise ValidationError("credential", "Invalid cookie format")
    if required_name not in parse_cookie_string(cookie):
        raise ValidationError(
            "credential", f"Session cookie '{required_name}' is required"
        )


def validate_urls(urls: list[str], allowed_host: str) -> None:
    if not urls:
        raise ValidationError("urls", "At least one URL is required")
    for url in urls:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise ValidationError("urls", f"Invalid URL format: {url}")
        if not is_allowed_host(url, allowed_host):
            raise ValidationError(
                "urls", f"Invalid URL: {url}. Only {allowed_host} URLs are allowed."
            )


def validate_output_dir(output_dir: Path | str) -> None:
    raw = str(output_dir)
    if not raw.strip():
        raise ValidationError("output_dir", "Output directory is required")
    # Check both separators so Windows-style input is caught on POSIX too
    segments = re.split(r"[\\/]", raw)
    if ".." in segments:
        raise ValidationError("output_dir", "Invalid output directory path")


def validate_run(urls: list[str], config: RunConfig) -> None:
    """Validate cookie, URLs and output directory, in that order."""
    validate_cookie(config.credential, config.session_cookie_name)
    validate_urls(urls, config.allowed_host)
    validate_output_dir(config.output_dir)
