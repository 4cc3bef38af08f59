"""Tests for the HTTP fetcher and its error mapping."""

import httpx
import pytest

from academy_scraper.config import FetcherConfig
from academy_scraper.errors import HttpStatusError, RateLimitedError, TransportError
from academy_scraper.fetcher import HttpFetcher, PlaywrightFetcher
from academy_scraper.orchestrator import Orchestrator

URL = "https://academy.hackthebox.com/module/19/section/99"
COOKIE = "htb_academy_session=abc123"


def make_fetcher(handler) -> HttpFetcher:
    config = FetcherConfig(rate_limit_backoff_seconds=0)
    return HttpFetcher(config, transport=httpx.MockTransport(handler))


class TestHttpFetcher:
    @pytest.mark.asyncio
    async def test_sends_cookie_and_browser_headers(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="<html>ok</html>")

        async with make_fetcher(handler) as fetcher:
            html = await fetcher.fetch_html(URL, COOKIE)

        assert html == "<html>ok</html>"
        assert seen[0].headers["cookie"] == COOKIE
        assert "Mozilla" in seen[0].headers["user-agent"]
        assert seen[0].headers["accept"].startswith("text/html")

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(302, headers={"location": URL})
            return httpx.Response(200, text="moved")

        async with make_fetcher(handler) as fetcher:
            result = await fetcher.fetch("https://academy.hackthebox.com/old", COOKIE)

        assert result.success
        assert result.final_url == URL

    @pytest.mark.asyncio
    async def test_retries_once_on_429(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls == 1:
                return httpx.Response(429)
            return httpx.Response(200, text="finally")

        async with make_fetcher(handler) as fetcher:
            result = await fetcher.fetch_with_retry(URL, COOKIE)

        assert calls == 2
        assert result.success
        assert result.attempts == 2

    @pytest.mark.asyncio
    async def test_persistent_429_raises(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(429)

        async with make_fetcher(handler) as fetcher:
            with pytest.raises(RateLimitedError) as exc_info:
                await fetcher.fetch_html(URL, COOKIE)

        assert calls == 2
        assert exc_info.value.url == URL

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        async with make_fetcher(lambda request: httpx.Response(404)) as fetcher:
            with pytest.raises(HttpStatusError) as exc_info:
                await fetcher.fetch_html(URL, COOKIE)

        assert exc_info.value.status_code == 404
        assert "404" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_fetcher(handler) as fetcher:
            result = await fetcher.fetch(URL, COOKIE)
            assert result.status_code == 0
            assert "connection refused" in result.error

            with pytest.raises(TransportError):
                await fetcher.fetch_html(URL, COOKIE)

    @pytest.mark.asyncio
    async def test_requires_context_manager(self):
        fetcher = make_fetcher(lambda request: httpx.Response(200))
        with pytest.raises(RuntimeError):
            await fetcher.fetch(URL, COOKIE)


class TestFetcherSelection:
    @pytest.mark.parametrize("use_js,expected", [(False, HttpFetcher), (True, PlaywrightFetcher)])
    def test_orchestrator_picks_fetcher(self, run_config, use_js, expected):
        run_config.fetcher = FetcherConfig(use_js=use_js)
        assert isinstance(Orchestrator(run_config)._create_fetcher(), expected)

    @pytest.mark.asyncio
    async def test_browser_fetcher_requires_context_manager(self):
        with pytest.raises(RuntimeError):
            await PlaywrightFetcher(FetcherConfig(use_js=True)).fetch(URL, COOKIE)

    @pytest.mark.asyncio
    async def test_browser_page_returned_after_close_raises(self):
        fetcher = PlaywrightFetcher(FetcherConfig(use_js=True))
        with pytest.raises(RuntimeError, match="closed"):
            await fetcher._recycle(object())
