"""
Exception taxonomy for the scraper.

Severity:
  - ValidationError  → FAIL FAST: raised before any network activity, run never starts.
  - FetchError       → PER ITEM: reported as an error event, loop continues.
  - ExtractionError  → PER ITEM: page had no usable content region.
  - RenderError      → PER ITEM: intermediate document was malformed.
  - CircuitOpenError → FATAL: too many consecutive per-item failures, run halts.
"""

from typing import Optional


class ScraperError(Exception):
    """Base exception for all scraper errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ScraperError):
    """Raised when run input (cookie, URLs, output directory) is invalid."""

    def __init__(self, field: str, message: str):
        super().__init__(message, {"field": field})
        self.field = field


# --- PER ITEM: converted to progress events by the orchestrator ---

class FetchError(ScraperError):
    """Base class for failures while retrieving a page."""

    def __init__(self, url: str, message: str, details: Optional[dict] = None):
        super().__init__(message, {"url": url, **(details or {})})
        self.url = url


class RateLimitedError(FetchError):
    """The server kept answering 429 after the single retry."""

    def __init__(self, url: str):
        super().__init__(url, f"Rate limited (HTTP 429) fetching {url}", {"status_code": 429})


class HttpStatusError(FetchError):
    """The server answered with a non-success status."""

    def __init__(self, url: str, status_code: int):
        super().__init__(url, f"HTTP {status_code} fetching {url}", {"status_code": status_code})
        self.status_code = status_code


class TransportError(FetchError):
    """The request never produced a response (DNS, connect, timeout...)."""

    def __init__(self, url: str, cause: str):
        super().__init__(url, f"Request to {url} failed: {cause}", {"cause": cause})
        self.cause = cause


class ExtractionError(ScraperError):
    """No matching content region, or the region was empty."""


class RenderError(ScraperError):
    """A document could not be rendered."""


# --- FATAL ---

class CircuitOpenError(ScraperError):
    """Consecutive failures reached the configured threshold."""

    def __init__(self, consecutive_failures: int):
        super().__init__(
            f"Too many consecutive errors ({consecutive_failures}), stopping run",
            {"consecutive_failures": consecutive_failures},
        )
        self.consecutive_failures = consecutive_failures
