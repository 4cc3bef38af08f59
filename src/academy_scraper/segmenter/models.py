"""Typed sections and documents produced by the segmenter."""

from enum import Enum

from pydantic import BaseModel, Field


class SectionKind(str, Enum):
    """Semantic kind of a content section."""

    NOTE = "note"
    WARNING = "warning"
    EXAMPLE = "example"
    INFO = "info"
    ABSTRACT = "abstract"
    TIP = "tip"
    CODE = "code"
    TABLE = "table"
    TEXT = "text"

    @property
    def is_callout(self) -> bool:
        return self not in (SectionKind.CODE, SectionKind.TABLE, SectionKind.TEXT)


class Section(BaseModel):
    """A classified, self-contained fragment of a page."""

    kind: SectionKind
    content: str = Field(min_length=1)  # Sanitized HTML fragment
    language: str | None = None
    title: str | None = None


class Document(BaseModel):
    """A page reduced to its title and ordered sections."""

    title: str
    url: str = ""
    body_html: str = ""
    sections: list[Section] = Field(default_factory=list)
