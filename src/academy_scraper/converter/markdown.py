"""HTML to Markdown conversion."""

import re
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup, Tag
from markdownify import ATX
from markdownify import MarkdownConverter as BaseMarkdownConverter

from academy_scraper.segmenter.language import detect_language

_BACKTICK_RUN_RE = re.compile(r"`+")


def fence_code(code: str, language: str | None = None) -> str:
    """Wrap code in a fence longer than any backtick run inside it."""
    longest = max((len(m) for m in _BACKTICK_RUN_RE.findall(code)), default=0)
    fence = "`" * max(3, longest + 1)
    code = code.strip("\n")
    return f"{fence}{language or ''}\n{code}\n{fence}"


def image_reference_name(src: str) -> str:
    """File name used for an embedded image reference.

    The last path segment of the source, with query and fragment dropped;
    ``.png`` is appended when the segment has no extension.
    """
    path = unquote(urlparse(src).path)
    name = path.rstrip("/").rsplit("/", 1)[-1] or "image"
    if "." not in name:
        name += ".png"
    return name


class MarkdownConverter(BaseMarkdownConverter):
    """Markdown converter for course content."""

    def __init__(self, embed_images: bool = True, pipe_tables: bool = True, **kwargs):
        super().__init__(
            heading_style=ATX,
            bullets="-",
            strong_em_symbol="*",
            **kwargs,
        )
        self.embed_images = embed_images
        self.pipe_tables = pipe_tables

    def convert_pre(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Fenced code block with language detection."""
        return "\n\n" + fence_code(el.get_text(), detect_language(el)) + "\n\n"

    def convert_code(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Handle inline code."""
        if el.find_parent("pre"):
            return text
        code_text = el.get_text()
        if not code_text:
            return ""
        if "`" in code_text:
            return f"`` {code_text} ``"
        return f"`{code_text}`"

    def convert_table(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Convert HTML tables to pipe tables, or keep them as HTML."""
        if not self.pipe_tables:
            return "\n\n" + str(el) + "\n\n"

        rows = [
            [self._cell_text(cell) for cell in tr.find_all(["th", "td"])]
            for tr in el.find_all("tr")
        ]
        rows = [row for row in rows if row]
        if not rows:
            return ""

        # The first row is the header; its width sizes the separator
        lines = ["| " + " | ".join(rows[0]) + " |"]
        lines.append("| " + " | ".join(["---"] * len(rows[0])) + " |")
        for row in rows[1:]:
            lines.append("| " + " | ".join(row) + " |")

        return "\n\n" + "\n".join(lines) + "\n\n"

    def _cell_text(self, cell: Tag) -> str:
        """Get clean text from a table cell, preserving list structure."""
        list_elem = cell.find(["ul", "ol"])
        if list_elem:
            items = list_elem.find_all("li")
            if items:
                item_texts = [
                    li.get_text(strip=True).replace("|", "\\|") for li in items
                ]
                return "<br>".join(f"- {t}" for t in item_texts if t)

        text = cell.get_text(separator=" ", strip=True)
        text = text.replace("\n", " ").replace("|", "\\|")
        return text

    def convert_img(self, el: Tag, text: str, parent_tags=None, **kwargs) -> str:
        """Convert images to wiki embeds or standard Markdown images."""
        src = el.get("src", "") or ""
        alt = el.get("alt", "") or ""

        if isinstance(src, list):
            src = src[0] if src else ""
        if isinstance(alt, list):
            alt = " ".join(alt)

        if not src:
            return ""

        if self.embed_images:
            return f"![[{image_reference_name(src)}]]"
        return f"![{alt}]({src})"


def html_to_markdown(html: str, embed_images: bool = True, pipe_tables: bool = True) -> str:
    """Convert sanitized HTML to Markdown."""
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    converter = MarkdownConverter(embed_images=embed_images, pipe_tables=pipe_tables)
    markdown = converter.convert_soup(soup)

    markdown = re.sub(r"\n{3,}", "\n\n", markdown)
    markdown = markdown.strip()

    return markdown
