"""URL manipulation utilities."""

import re
from urllib.parse import urljoin, urlparse, urlunparse


def normalize_url(url: str) -> str:
    """Normalize a URL by removing fragments and trailing slashes."""
    parsed = urlparse(url.strip())
    # Remove fragment
    normalized = parsed._replace(fragment="")
    # Remove trailing slash from path (except for root)
    path = normalized.path.rstrip("/") if normalized.path != "/" else "/"
    normalized = normalized._replace(path=path)
    return urlunparse(normalized)


def is_allowed_host(url: str, allowed_host: str) -> bool:
    """Check that a URL is http(s) and points at the allowed host."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return False
    return (parsed.hostname or "").lower() == allowed_host.lower()


def is_course_url(url: str, pattern: str) -> bool:
    """Check if a URL is a course overview page (expands into sections)."""
    return re.search(pattern, urlparse(url).path) is not None


def make_absolute(base_url: str, href: str) -> str:
    """Convert a potentially relative URL to absolute, without fragment."""
    absolute = urljoin(base_url, href)
    return urlparse(absolute)._replace(fragment="").geturl()


def registrable_domain(host: str) -> str:
    """Last two labels of a host name (academy.hackthebox.com -> hackthebox.com)."""
    parts = host.lower().strip(".").split(".")
    return ".".join(parts[-2:])
