"""Data models used throughout the fetch and summarize pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ImageSource(str, Enum):
    """Where an image candidate was found, highest priority first."""

    META = "meta"
    ARTICLE = "article-region"
    GENERAL = "general"


@dataclass
class ImageCandidate:
    """Image reference discovered while parsing a document."""

    url: str
    source: ImageSource
    width: Optional[int] = None
    height: Optional[int] = None
    alt_text: str = ""
    css_class: str = ""


@dataclass
class ExtractedContent:
    """Readable content pulled out of one HTML document."""

    title: str
    plain_text: str
    article_html: str
    thumbnail_url: Optional[str] = None


@dataclass
class PdfContent:
    """Text and synthesized title of a PDF payload."""

    title: str
    plain_text: str


@dataclass
class FetchResult:
    """Output of a successful fetch; every field comes from the same tier."""

    title: str
    plain_text: str
    canonical_url: str
    article_html: str
    thumbnail_url: Optional[str] = None
    source: str = "html"


@dataclass
class SummaryResult:
    """Japanese summary artifacts produced by the LLM."""

    summary: str
    details: str
    translated_title: str
    tags: List[str] = field(default_factory=list)
    thumbnail_url: Optional[str] = None
