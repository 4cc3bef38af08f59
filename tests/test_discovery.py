"""Tests for course expansion and URL list discovery."""

import pytest

from academy_scraper.config import DiscoveryConfig
from academy_scraper.discovery import CourseDiscoverer, ManualDiscoverer
from academy_scraper.errors import HttpStatusError

from conftest import BASE, SESSION_COOKIE, FakeFetcher

COURSE = f"{BASE}/course/preview/intro-to-academy"

COURSE_PAGE = f"""
<html><body>
  <a href="/module/19">Module overview</a>
  <a href="/module/19/section/99">Scanning</a>
  <a href="{BASE}/module/19/section/100">Service detection</a>
  <a href="/module/19/section/99#questions">Scanning (questions)</a>
  <a href="/module/19/section/99/">Scanning again</a>
  <a href="https://forum.hackthebox.com/t/1">Forum</a>
</body></html>
"""


async def collect(discoverer):
    return [found async for found in discoverer.discover()]


class TestCourseDiscoverer:
    @pytest.mark.asyncio
    async def test_section_links_in_page_order(self):
        fetcher = FakeFetcher({COURSE: COURSE_PAGE})
        discoverer = CourseDiscoverer(COURSE, DiscoveryConfig(), fetcher, SESSION_COOKIE)

        found = await collect(discoverer)

        assert [d.url for d in found] == [
            f"{BASE}/module/19/section/99",
            f"{BASE}/module/19/section/100",
        ]
        assert found[0].title == "Scanning"
        assert fetcher.credentials == [SESSION_COOKIE]

    @pytest.mark.asyncio
    async def test_course_without_sections(self):
        fetcher = FakeFetcher({COURSE: "<html><body><p>Locked</p></body></html>"})
        discoverer = CourseDiscoverer(COURSE, DiscoveryConfig(), fetcher, SESSION_COOKIE)
        assert await collect(discoverer) == []

    @pytest.mark.asyncio
    async def test_fetch_failure_raises(self):
        fetcher = FakeFetcher({COURSE: 500})
        discoverer = CourseDiscoverer(COURSE, DiscoveryConfig(), fetcher, SESSION_COOKIE)
        with pytest.raises(HttpStatusError):
            await collect(discoverer)


class TestManualDiscoverer:
    @pytest.mark.asyncio
    async def test_reads_urls_skipping_comments(self, tmp_path):
        urls_file = tmp_path / "urls.txt"
        urls_file.write_text(
            f"# module 19\n{BASE}/module/19/section/99\n\n  {BASE}/module/19/section/100  \n"
        )
        found = await collect(ManualDiscoverer(urls_file))
        assert [d.url for d in found] == [
            f"{BASE}/module/19/section/99",
            f"{BASE}/module/19/section/100",
        ]

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            await collect(ManualDiscoverer(tmp_path / "nope.txt"))
