"""Tests for HTML sanitizing and content region extraction."""

import pytest

from academy_scraper.config import ExtractorConfig
from academy_scraper.errors import ExtractionError
from academy_scraper.extractor import ContentExtractor, has_content, sanitize


class TestSanitize:
    def test_empty_input(self):
        assert sanitize("") == ""
        assert sanitize("   \n") == ""

    def test_blocklisted_subtrees_removed(self):
        html = "<div><script>alert(1)</script><p>Hi</p><nav><p>Menu</p></nav></div>"
        assert sanitize(html) == "<p>Hi</p>"

    def test_blocklist_runs_before_unwrap(self):
        html = "<span><footer><p>Legal</p></footer><p>Body</p></span>"
        out = sanitize(html)
        assert "Legal" not in out
        assert "<p>Body</p>" in out

    def test_disallowed_tags_unwrapped(self):
        assert sanitize("<span>a <b>bold</b></span>") == "a <b>bold</b>"

    def test_hidden_elements_removed(self):
        html = (
            '<div hidden><p>secret</p></div>'
            '<p aria-hidden="true">icon</p>'
            '<p style="display: none">modal</p>'
            "<p>shown</p>"
        )
        assert sanitize(html) == "<p>shown</p>"

    def test_comments_removed(self):
        assert sanitize("<!-- tracking --><p>x</p>") == "<p>x</p>"

    def test_attributes_filtered(self):
        out = sanitize('<p onclick="steal()" style="color:red" class="lead">x</p>')
        assert out == '<p class="lead">x</p>'

    def test_javascript_href_dropped(self):
        assert sanitize('<a href="javascript:alert(1)">link</a>') == "<a>link</a>"

    def test_image_attributes_kept(self):
        out = sanitize('<img src="x.png" alt="A" width="10" onerror="x()">')
        assert 'src="x.png"' in out
        assert 'alt="A"' in out
        assert "width" not in out
        assert "onerror" not in out

    def test_empty_elements_removed(self):
        assert sanitize("<p><b></b></p><p>x</p>") == "<p>x</p>"

    def test_elements_with_images_kept(self):
        out = sanitize('<p><img src="a.png"></p>')
        assert out.startswith("<p><img")

    def test_empty_table_cells_kept(self):
        out = sanitize("<table><tr><td></td><td>x</td></tr></table>")
        assert out.count("<td>") == 2

    def test_callout_container_becomes_blockquote(self):
        out = sanitize('<div class="alert alert-warning"><p>Careful</p></div>')
        assert out == '<blockquote class="alert alert-warning"><p>Careful</p></blockquote>'

    def test_plain_div_unwrapped(self):
        out = sanitize('<div class="row"><p>a</p></div><div><p>b</p></div>')
        assert "div" not in out
        assert "<p>a</p>" in out and "<p>b</p>" in out

    def test_idempotent(self, sample_page):
        once = sanitize(sample_page)
        assert sanitize(once) == once

    def test_idempotent_with_callouts_and_tables(self):
        html = (
            '<section class="note"><h3>Heads up</h3><span>text</span></section>'
            "<table><tr><th>A</th><th></th></tr></table>"
        )
        once = sanitize(html)
        assert sanitize(once) == once

    def test_idempotent_with_whitespace_after_nested_callout(self):
        html = '<div class="note"><div><div class="note">ok</div> </div></div>'
        once = sanitize(html)
        assert sanitize(once) == once
        assert once == '<blockquote class="note"><blockquote class="note">ok</blockquote>\n</blockquote>'

    def test_code_block_container_becomes_pre(self):
        html = '<div class="code-block"><code class="language-python">import os\nprint(os.name)</code></div>'
        out = sanitize(html)
        assert out == (
            '<pre class="code-block"><code class="language-python">import os\nprint(os.name)</code></pre>'
        )
        assert sanitize(out) == out

    def test_code_container_wrapping_pre_unwrapped(self):
        html = '<div class="highlight-bash"><pre>ls -la</pre></div>'
        assert sanitize(html) == "<pre>ls -la</pre>"


class TestHasContent:
    def test_text(self):
        assert has_content("<p>x</p>")

    def test_image_only(self):
        assert has_content('<img src="a.png">')

    def test_empty(self):
        assert not has_content("")
        assert not has_content("<br/>")


class TestContentExtractor:
    @pytest.fixture
    def extractor(self):
        return ContentExtractor(ExtractorConfig())

    def test_extracts_title_and_region(self, extractor, sample_page):
        content = extractor.extract(sample_page, "https://academy.hackthebox.com/module/19/section/99")
        assert content.title == "Intro to Nmap"
        assert content.selector == "div.training-module"
        assert "Nmap is a network scanner." in content.html
        assert "Dashboard" not in content.html

    def test_cleanup_selectors_applied(self, extractor, sample_page):
        content = extractor.extract(sample_page, "https://academy.hackthebox.com/module/19/section/99")
        assert "Question 1" not in content.html

    def test_title_heading_not_repeated(self, extractor, sample_page):
        content = extractor.extract(sample_page, "https://academy.hackthebox.com/module/19/section/99")
        assert "<h1>" not in content.html

    def test_title_falls_back_to_url(self, extractor):
        html = '<div class="module-content"><p>Body</p></div>'
        content = extractor.extract(html, "https://academy.hackthebox.com/module/19/section/port-scanning")
        assert content.title == "port-scanning"

    def test_title_untitled(self, extractor):
        html = '<div class="module-content"><p>Body</p></div>'
        content = extractor.extract(html, "https://academy.hackthebox.com/")
        assert content.title == "untitled"

    def test_selector_order(self, extractor):
        html = "<article><p>article</p></article><div class='modal-body'><p>modal</p></div>"
        content = extractor.extract(html, "https://academy.hackthebox.com/x")
        assert content.selector == "div.modal-body"

    def test_no_region_raises(self, extractor):
        with pytest.raises(ExtractionError, match="No content found"):
            extractor.extract("<html><body><p>Login</p></body></html>", "https://academy.hackthebox.com/x")

    def test_empty_page_raises(self, extractor):
        with pytest.raises(ExtractionError):
            extractor.extract("  ", "https://academy.hackthebox.com/x")
