"""Render segmented documents into output formats."""

import html
import logging
import re
from datetime import datetime

from bs4 import BeautifulSoup

from academy_scraper.config import OutputFormat, RenderConfig
from academy_scraper.converter.markdown import fence_code, html_to_markdown
from academy_scraper.errors import RenderError
from academy_scraper.segmenter.models import Document, Section, SectionKind

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(#{1,6})(\s)")
_FENCE_RE = re.compile(r"^\s*(`{3,}|~{3,})")

_YAML_INDICATORS = frozenset("-?:,[]{}#&*!|>'\"%@`")
_FLOW_SPECIAL = ",[]{}"

# Block elements separated by a blank line in plain text; rows and list
# items only get a line break.
_TEXT_BLOCKS = frozenset({
    "p", "h1", "h2", "h3", "h4", "h5", "h6",
    "blockquote", "pre", "table", "ul", "ol", "dl", "hr",
})
_TEXT_LINES = frozenset({"li", "tr", "dt", "dd", "caption"})

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<style>
body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; line-height: 1.6; max-width: 900px; margin: 0 auto; padding: 20px; color: #333; }}
pre {{ background-color: #f4f4f4; padding: 15px; border-radius: 5px; overflow-x: auto; }}
code {{ background-color: #f4f4f4; padding: 2px 5px; border-radius: 3px; font-family: "Courier New", monospace; }}
blockquote {{ border-left: 4px solid #9fef00; margin: 0; padding-left: 15px; color: #555; }}
table {{ border-collapse: collapse; }}
th, td {{ border: 1px solid #ddd; padding: 6px 10px; }}
</style>
</head>
<body>
<h1>{title}</h1>
{body}
</body>
</html>
"""


def shift_headings(markdown: str) -> str:
    """Move every ATX heading outside code fences down one level (max H6)."""
    lines = []
    fence: str | None = None
    for line in markdown.split("\n"):
        fence_match = _FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = marker
            elif marker[0] == fence[0] and len(marker) >= len(fence):
                fence = None
            lines.append(line)
            continue
        if fence is None:
            heading = _HEADING_RE.match(line)
            if heading and len(heading.group(1)) < 6:
                line = "#" + line
        lines.append(line)
    return "\n".join(lines)


def _yaml_scalar(value: str, in_list: bool = False) -> str:
    """Double-quote ``value`` when YAML would not read it back as a plain string."""
    special = _FLOW_SPECIAL if in_list else ""
    if (
        not value
        or value != value.strip()
        or value[0] in _YAML_INDICATORS
        or ": " in value
        or " #" in value
        or value.endswith(":")
        or any(c in value for c in special)
    ):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def format_front_matter(metadata: dict[str, str | list[str]]) -> str:
    """YAML front matter block; lists render inline as ``[a, b]``."""
    parts = ["---"]
    for key, value in metadata.items():
        if isinstance(value, list):
            rendered = "[" + ", ".join(_yaml_scalar(v, in_list=True) for v in value) + "]"
        else:
            rendered = _yaml_scalar(value)
        parts.append(f"{key}: {rendered}")
    parts.append("---")
    return "\n".join(parts)


def _collapse_blank_lines(text: str) -> str:
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def html_to_text(fragment: str) -> str:
    """Strip markup, keeping block boundaries as line breaks."""
    soup = BeautifulSoup(fragment, "html.parser")
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(True):
        if tag.name in _TEXT_BLOCKS:
            tag.insert_before("\n\n")
            tag.insert_after("\n\n")
        elif tag.name in _TEXT_LINES:
            tag.insert_after("\n")
        elif tag.name in ("td", "th"):
            tag.insert_after(" ")
    text = soup.get_text()
    text = "\n".join(line.strip() for line in text.split("\n"))
    return _collapse_blank_lines(text)


class Renderer:
    """Render a document into every format a ``RenderConfig`` asks for.

    Rendering is pure apart from the clock, which is only read when
    ``include_timestamp`` is set.  Each section gets its own converter, so
    renders with different options never share state.
    """

    def __init__(self, config: RenderConfig):
        self.config = config

    def render(self, document: Document) -> dict[OutputFormat, str]:
        """Render ``document`` into each configured format.

        Raises:
            RenderError: the document has no sections.
        """
        if not document.sections:
            raise RenderError("Document has no sections", {"url": document.url})

        outputs: dict[OutputFormat, str] = {}
        for fmt in self.config.formats:
            if fmt == OutputFormat.MARKDOWN:
                outputs[fmt] = self.render_markdown(document)
            elif fmt == OutputFormat.HTML:
                outputs[fmt] = self.render_html(document)
            elif fmt == OutputFormat.TEXT:
                outputs[fmt] = self.render_text(document)
        logger.debug("Rendered %r as %s", document.title, ", ".join(f.value for f in outputs))
        return outputs

    # --- markdown ---

    def render_markdown(self, document: Document) -> str:
        parts = []
        if self.config.include_metadata:
            parts.append(format_front_matter(self._metadata(document)))
            parts.append("")

        parts.append(f"# {document.title}")
        parts.append("")

        for section in document.sections:
            block = self._render_section(section)
            if block:
                parts.append(block)
                parts.append("")

        return _collapse_blank_lines("\n".join(parts)) + "\n"

    def _metadata(self, document: Document) -> dict[str, str | list[str]]:
        metadata: dict[str, str | list[str]] = {"title": document.title}
        if document.url:
            metadata["url"] = document.url
        metadata.update(self.config.metadata)
        if self.config.include_timestamp:
            metadata["created"] = datetime.now().isoformat(timespec="seconds")
        return metadata

    def _render_section(self, section: Section) -> str:
        if section.kind == SectionKind.CODE:
            code = BeautifulSoup(section.content, "html.parser").get_text()
            return fence_code(code, section.language)

        body = shift_headings(
            html_to_markdown(
                section.content,
                embed_images=self.config.embed_images,
                pipe_tables=self.config.pipe_tables,
            )
        )

        if section.kind.is_callout and self.config.callouts:
            return self._callout(section, body)

        if section.title:
            return f"## {section.title}\n\n{body}"
        return body

    def _callout(self, section: Section, body: str) -> str:
        token = self.config.callout_token(section.kind.value)
        title = section.title or section.kind.value.capitalize()
        lines = [f"> [!{token}] {title}"]
        for line in body.split("\n"):
            lines.append(f"> {line}" if line.strip() else ">")
        return "\n".join(lines)

    # --- html ---

    def render_html(self, document: Document) -> str:
        body = document.body_html or "\n".join(s.content for s in document.sections)
        return HTML_TEMPLATE.format(title=html.escape(document.title), body=body)

    # --- text ---

    def render_text(self, document: Document) -> str:
        body = document.body_html or "\n".join(s.content for s in document.sections)
        text = html_to_text(body)
        underline = "=" * len(document.title)
        return f"{document.title}\n{underline}\n\n{text}\n"


def render(document: Document, config: RenderConfig) -> dict[OutputFormat, str]:
    """Render ``document`` with ``config``."""
    return Renderer(config).render(document)
