"""Two-pass classification of sanitized HTML into typed sections.

Structural pass: the tree is walked in document order and every element is
tested against a prioritized rule table (callout marker classes, then
``<pre>`` and block-level ``<code>`` for code, then ``<table>``).  A matching
element becomes a section and is detached, so nothing inside it is looked
at again.

Remainder pass: whatever is left becomes a single ``text`` section placed
first in the result; it is re-kinded when its text opens with a keyword
such as ``Note:`` or ``Warning:``.
"""

import logging
import re

from bs4 import BeautifulSoup, NavigableString, Tag

from academy_scraper.extractor.sanitizer import has_content
from academy_scraper.segmenter.language import detect_language, language_from_classes
from academy_scraper.segmenter.models import Section, SectionKind
from academy_scraper.utils.markers import callout_kind

logger = logging.getLogger(__name__)

# Elements allowed to carry a callout marker; inline tags never become sections
_CALLOUT_TAGS = frozenset({"blockquote", "p", "ul", "ol", "dl"})

_LEXICAL_KEYWORDS: dict[str, SectionKind] = {
    "note": SectionKind.NOTE,
    "important": SectionKind.NOTE,
    "warning": SectionKind.WARNING,
    "caution": SectionKind.WARNING,
    "danger": SectionKind.WARNING,
    "example": SectionKind.EXAMPLE,
    "exercise": SectionKind.EXAMPLE,
    "summary": SectionKind.ABSTRACT,
    "abstract": SectionKind.ABSTRACT,
    "overview": SectionKind.ABSTRACT,
    "info": SectionKind.INFO,
    "tip": SectionKind.TIP,
    "hint": SectionKind.TIP,
}

_LEXICAL_RE = re.compile(
    r"^\s*(" + "|".join(_LEXICAL_KEYWORDS) + r")\s*:", re.IGNORECASE
)


def segment(clean_html: str) -> list[Section]:
    """Split sanitized HTML into an ordered list of sections.

    Non-empty input always yields at least one section; when neither pass
    finds anything the input is returned verbatim as a ``text`` section.
    """
    if not clean_html:
        return []

    soup = BeautifulSoup(clean_html, "html.parser")

    sections: list[Section] = []
    _structural_pass(soup, sections)

    remainder = str(soup).strip()
    if has_content(remainder):
        text = soup.get_text(" ", strip=True)
        sections.insert(0, Section(kind=lexical_kind(text), content=remainder))

    if not sections:
        logger.debug("No sections found, keeping input verbatim")
        return [Section(kind=SectionKind.TEXT, content=clean_html)]

    return sections


def lexical_kind(text: str) -> SectionKind:
    """Kind implied by a leading keyword (``Note:``, ``Warning:``...), else text."""
    match = _LEXICAL_RE.match(text)
    if not match:
        return SectionKind.TEXT
    return _LEXICAL_KEYWORDS[match.group(1).lower()]


def _match_rule(tag: Tag) -> SectionKind | None:
    if tag.name in _CALLOUT_TAGS:
        kind = callout_kind(tag)
        if kind:
            return SectionKind(kind)
    if tag.name == "pre" or (tag.name == "code" and _is_code_block(tag)):
        return SectionKind.CODE
    if tag.name == "table":
        return SectionKind.TABLE
    return None


def _is_code_block(tag: Tag) -> bool:
    """A ``<code>`` outside ``<pre>`` that holds a block of code, not an inline span.

    Multi-line code always counts; a language-classed one counts when
    nothing else shares its parent.
    """
    if "\n" in tag.get_text().strip():
        return True
    if not language_from_classes(tag) or tag.parent is None:
        return False
    return all(
        sibling is tag or (isinstance(sibling, NavigableString) and not sibling.strip())
        for sibling in tag.parent.contents
    )


def _structural_pass(node: Tag, sections: list[Section]) -> None:
    for child in list(node.children):
        if not isinstance(child, Tag):
            continue
        kind = _match_rule(child)
        if kind is None:
            _structural_pass(child, sections)
            continue
        section = _make_section(child, kind)
        child.extract()
        if section:
            sections.append(section)


def _make_section(tag: Tag, kind: SectionKind) -> Section | None:
    """Build a section from a matched element, or None if it is empty."""
    if kind in (SectionKind.CODE, SectionKind.TABLE):
        content = str(tag)
    else:
        content = tag.decode_contents().strip()

    if not has_content(content):
        return None

    title = tag.get("title") or tag.get("data-title")
    if isinstance(title, list):
        title = " ".join(title)

    return Section(
        kind=kind,
        content=content,
        language=detect_language(tag) if kind == SectionKind.CODE else None,
        title=title or None,
    )
