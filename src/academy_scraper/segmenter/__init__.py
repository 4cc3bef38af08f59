"""Segmentation of sanitized HTML into typed sections."""

from academy_scraper.segmenter.classifier import segment
from academy_scraper.segmenter.language import detect_language
from academy_scraper.segmenter.models import Document, Section, SectionKind

__all__ = [
    "Document",
    "Section",
    "SectionKind",
    "segment",
    "detect_language",
]
