"""Tests for file naming, writing and request pacing."""

import pytest

from academy_scraper.config import OutputFormat
from academy_scraper.output import DocumentWriter, sanitize_filename
from academy_scraper.utils.rate_limiter import RateLimiter


class TestSanitizeFilename:
    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Intro to Nmap", "intro_to_nmap"),
            ('a<b>c:d"e/f\\g|h?i*j', "a_b_c_d_e_f_g_h_i_j"),
            ("../etc/passwd", "_etc_passwd"),
            (".hidden", "_hidden"),
            ("Tabs\tand   spaces", "tabs_and_spaces"),
            ("Already__Underscored", "already_underscored"),
            ("", "untitled"),
        ],
    )
    def test_sanitize(self, title, expected):
        assert sanitize_filename(title) == expected

    def test_length_cap(self):
        assert len(sanitize_filename("x" * 300)) == 200


class TestDocumentWriter:
    @pytest.mark.asyncio
    async def test_writes_each_format(self, tmp_path):
        writer = DocumentWriter(tmp_path / "notes")
        stem = writer.claim("Intro to Nmap")
        paths = await writer.write(
            stem,
            {OutputFormat.MARKDOWN: "# Intro\n", OutputFormat.TEXT: "Intro\n=====\n"},
        )

        assert [p.name for p in paths] == ["intro_to_nmap.md", "intro_to_nmap.txt"]
        assert (tmp_path / "notes" / "intro_to_nmap.md").read_text(encoding="utf-8") == "# Intro\n"
        assert (tmp_path / "notes" / "intro_to_nmap.txt").read_text(encoding="utf-8") == "Intro\n=====\n"

    def test_repeated_title_gets_suffix(self, tmp_path, caplog):
        writer = DocumentWriter(tmp_path)
        assert writer.claim("Page") == "page"
        assert writer.claim("page") == "page_2"
        assert writer.claim("Page") == "page_3"
        assert "already written" in caplog.text

    def test_suffix_respects_length_cap(self, tmp_path):
        writer = DocumentWriter(tmp_path)
        writer.claim("x" * 300)
        stem = writer.claim("x" * 300)
        assert len(stem) == 200
        assert stem.endswith("_2")

    @pytest.mark.asyncio
    async def test_new_writer_overwrites_earlier_files(self, tmp_path):
        first = DocumentWriter(tmp_path)
        await first.write(first.claim("Page"), {OutputFormat.HTML: "old"})
        second = DocumentWriter(tmp_path)
        await second.write(second.claim("Page"), {OutputFormat.HTML: "new"})
        assert (tmp_path / "page.html").read_text(encoding="utf-8") == "new"


class TestRateLimiter:
    def test_back_off_doubles_and_caps(self):
        limiter = RateLimiter(4.0)
        limiter.back_off()
        assert limiter.delay_seconds == 8.0
        assert limiter.is_throttled
        for _ in range(5):
            limiter.back_off()
        assert limiter.delay_seconds == 30.0
        assert limiter.backoff_count == 6
        assert limiter.peak_delay == 30.0

    def test_ease_off_returns_to_configured_delay(self):
        limiter = RateLimiter(1.0)
        limiter.back_off()
        limiter.back_off()
        limiter.ease_off()
        assert limiter.delay_seconds == 2.0
        limiter.ease_off()
        limiter.ease_off()
        assert limiter.delay_seconds == 1.0
        assert not limiter.is_throttled

    @pytest.mark.asyncio
    async def test_zero_delay_does_not_sleep(self, monkeypatch):
        slept = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        monkeypatch.setattr("academy_scraper.utils.rate_limiter.asyncio.sleep", fake_sleep)
        await RateLimiter(0).wait()
        await RateLimiter(1.5).wait()
        assert slept == [1.5]
