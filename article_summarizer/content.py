"""HTML extraction: readable plain text, article markup, title and thumbnail."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup
from readability import Document

from .cleaner import ContentCleaner
from .config import ExtractorConfig
from .models import ExtractedContent
from .thumbnail import select_thumbnail_from_soup

logger = logging.getLogger("article_summarizer.content")

UNTITLED = "Untitled"

NON_CONTENT_TAGS = ["script", "style", "noscript"]
CHROME_SELECTORS = (
    "script, style, noscript, nav, header, footer, aside, menu, "
    ".navigation, .nav, .menu, .sidebar, .ads, .advertisement"
)
BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "td", "th", "tr", "ul",
]


@dataclass
class _Page:
    """Parsed input shared by the plain-text strategies."""

    html: str
    soup: BeautifulSoup


TextStrategy = Callable[[_Page, ExtractorConfig, ContentCleaner], str]


def _parse(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def _break_blocks(soup: BeautifulSoup) -> BeautifulSoup:
    """Put block-level elements on their own lines so the cleaner sees paragraphs."""
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for block in soup.find_all(BLOCK_TAGS):
        block.insert_before("\n")
        block.insert_after("\n")
    return soup


def _text_of(node) -> str:
    return node.get_text() if node is not None else ""


def _long_enough(text: str, config: ExtractorConfig) -> bool:
    return len(text.strip()) > config.min_content_chars


def _from_readability(page: _Page, config: ExtractorConfig, cleaner: ContentCleaner) -> str:
    if not page.html.strip():
        return ""
    try:
        summary_html = Document(page.html).summary(html_partial=True)
    except Exception as exc:  # pylint: disable=broad-except
        logger.debug("readability failed: %s", exc)
        return ""
    if not _long_enough(summary_html, config):
        return ""
    text = _text_of(_break_blocks(_parse(summary_html)))
    cleaned = cleaner.clean(text)
    logger.debug("readability: %d chars, %d after cleaning", len(text), len(cleaned))
    return cleaned if _long_enough(cleaned, config) else ""


def _from_content_region(page: _Page, config: ExtractorConfig, cleaner: ContentCleaner) -> str:
    for selector in config.content_selectors:
        element = page.soup.select_one(selector)
        text = _text_of(element)
        if _long_enough(text, config):
            logger.debug("Selector %r yielded %d chars", selector, len(text))
            return text
    return ""


def _from_paragraphs(page: _Page, config: ExtractorConfig, cleaner: ContentCleaner) -> str:
    paragraphs = [p.get_text().strip() for p in page.soup.find_all("p")]
    paragraphs = [text for text in paragraphs if len(text) > config.min_paragraph_chars]
    if paragraphs:
        logger.debug("Collected %d paragraphs", len(paragraphs))
    return "\n\n".join(paragraphs)


def _from_body(page: _Page, config: ExtractorConfig, cleaner: ContentCleaner) -> str:
    return _text_of(page.soup.body or page.soup)


TEXT_STRATEGIES: Sequence[TextStrategy] = (
    _from_readability,
    _from_content_region,
    _from_paragraphs,
    _from_body,
)


def extract_title(soup: BeautifulSoup) -> str:
    """First non-empty of ``<title>``, first ``<h1>`` and ``og:title``."""
    candidates = []
    if soup.title is not None:
        candidates.append(soup.title.get_text())
    h1 = soup.find("h1")
    if h1 is not None:
        candidates.append(h1.get_text())
    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title is not None:
        candidates.append(og_title.get("content") or "")
    for candidate in candidates:
        if candidate.strip():
            return candidate.strip()
    return UNTITLED


def extract_article_html(
    html: str, config: ExtractorConfig, soup: Optional[BeautifulSoup] = None
) -> str:
    """Return the inner markup of the main content region with page chrome removed.

    ``soup`` is a parse of ``html`` the function may modify in place.
    """
    if soup is None:
        soup = _parse(html)
    for tag in soup.select(CHROME_SELECTORS):
        tag.decompose()
    for selector in config.article_selectors:
        element = soup.select_one(selector)
        if element is None:
            continue
        inner = element.decode_contents()
        if len(inner) > config.min_content_chars:
            return inner
    if soup.body is not None:
        inner = soup.body.decode_contents()
        if inner:
            return inner
    return html


class HtmlExtractor:
    """Turns raw HTML into readable text plus a reduced article fragment."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        strategies: Sequence[TextStrategy] = TEXT_STRATEGIES,
    ) -> None:
        self.config = config or ExtractorConfig()
        self.cleaner = ContentCleaner(self.config.cleaner)
        self.strategies = tuple(strategies)
        logging.getLogger("readability.readability").setLevel(logging.WARNING)

    def extract_text(self, html: str, soup: Optional[BeautifulSoup] = None) -> str:
        if soup is None:
            soup = _parse(html)
        for tag in soup(NON_CONTENT_TAGS):
            tag.decompose()
        page = _Page(html=html or "", soup=_break_blocks(soup))
        for strategy in self.strategies:
            text = strategy(page, self.config, self.cleaner)
            if text:
                logger.debug("Plain text from %s", strategy.__name__)
                return self.cleaner.clean(text).strip()
        return ""

    def extract(self, html: str, base_url: Optional[str] = None) -> ExtractedContent:
        """Extract title, cleaned plain text, article HTML and (with ``base_url``) a thumbnail."""
        html = html or ""
        try:
            soup_full = _parse(html)
            title = extract_title(soup_full)
            thumbnail_url = None
            if base_url:
                thumbnail_url = select_thumbnail_from_soup(
                    soup_full, base_url, self.config.content_selectors
                )
            article_html = extract_article_html(html, self.config, copy.copy(soup_full))
            plain_text = self.extract_text(html, soup_full)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Unexpected error while extracting HTML content")
            return ExtractedContent(title=UNTITLED, plain_text="", article_html=html)

        logger.debug("Extracted %d chars of text, title %r", len(plain_text), title)
        return ExtractedContent(
            title=title,
            plain_text=plain_text,
            article_html=article_html,
            thumbnail_url=thumbnail_url,
        )


def extract_content(html: str, base_url: Optional[str] = None) -> ExtractedContent:
    """Extract content with default settings."""
    return HtmlExtractor().extract(html, base_url)
