"""Markdown conversion and multi-format rendering."""

from academy_scraper.converter.markdown import MarkdownConverter, html_to_markdown
from academy_scraper.converter.renderer import Renderer, render

__all__ = [
    "MarkdownConverter",
    "Renderer",
    "html_to_markdown",
    "render",
]
