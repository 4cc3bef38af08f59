"""Shared fixtures for academy-scraper tests."""

from pathlib import Path

import pytest

from academy_scraper.config import FetcherConfig, RateLimitConfig, RunConfig
from academy_scraper.fetcher.base import BaseFetcher, FetchResult

BASE = "https://academy.hackthebox.com"
SESSION_COOKIE = "htb_academy_session=abc123; XSRF-TOKEN=eyJpdiI6%3D"

SAMPLE_PAGE = """<!DOCTYPE html>
<html>
<head><title>HTB Academy</title><script>var tracking = 1;</script></head>
<body>
<nav><a href="/dashboard">Dashboard</a></nav>
<div class="training-module">
  <h1>Intro to Nmap</h1>
  <h2>Scanning</h2>
  <p>Nmap is a network scanner.</p>
  <div class="alert alert-info">Run scans only against hosts you own.</div>
  <pre><code class="language-bash">nmap -sV 10.10.10.10</code></pre>
  <table>
    <tr><th>Flag</th><th>Meaning</th></tr>
    <tr><td>-sV</td><td>Version detection</td></tr>
  </table>
  <div id="questionsDiv">Question 1: what port?</div>
</div>
<footer>Copyright</footer>
</body>
</html>
"""


def page(title: str, body: str = "<p>Some content.</p>") -> str:
    """A minimal course section page."""
    return (
        "<html><body>"
        f'<div class="training-module"><h1>{title}</h1>{body}</div>'
        "</body></html>"
    )


class FakeFetcher(BaseFetcher):
    """Serves canned pages; integers stand for an HTTP status with no body."""

    def __init__(self, pages: dict[str, str | int] | None = None):
        super().__init__(FetcherConfig(rate_limit_backoff_seconds=0))
        self.pages = pages or {}
        self.requested: list[str] = []
        self.credentials: list[str] = []
        self.entered = False
        self.exited = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited = True

    async def fetch(self, url: str, credential: str) -> FetchResult:
        self.requested.append(url)
        self.credentials.append(credential)
        content = self.pages.get(url, 404)
        if isinstance(content, int):
            return FetchResult(url=url, final_url=url, html="", status_code=content)
        return FetchResult(url=url, final_url=url, html=content, status_code=200)


@pytest.fixture
def sample_page() -> str:
    return SAMPLE_PAGE


@pytest.fixture
def run_config(tmp_path: Path) -> RunConfig:
    return RunConfig(
        credential=SESSION_COOKIE,
        output_dir=tmp_path / "out",
        rate_limit=RateLimitConfig(delay_seconds=0, pause_poll_seconds=0.01),
    )
