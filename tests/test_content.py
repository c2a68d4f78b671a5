"""Tests for HTML title, plain-text and article-HTML extraction."""
import pytest

from article_summarizer import content
from article_summarizer.config import ExtractorConfig
from article_summarizer.content import (
    TEXT_STRATEGIES,
    HtmlExtractor,
    extract_article_html,
    extract_content,
    extract_title,
)
from bs4 import BeautifulSoup

PARAGRAPHS = [
    "The city council approved a new plan to expand public transport across the region.",
    "Officials expect the first new bus lines to open early next year after a public consultation.",
    "Critics argued that the budget does not cover maintenance costs for the existing network.",
]

ARTICLE_HTML = f"""
<html>
<head>
  <title>Council Approves Transit Plan</title>
  <meta property="og:image" content="/images/bus.jpg">
  <script>window.tracking = "should never appear in the output text";</script>
  <style>.hidden {{ display: none; }}</style>
</head>
<body>
  <nav><a href="/">Home</a> <a href="/news">News</a> <a href="/about">About</a></nav>
  <header><p>Site header with the newspaper name and slogan</p></header>
  <article>
    <h1>Council Approves Transit Plan</h1>
    <p>{PARAGRAPHS[0]}</p>
    <p>{PARAGRAPHS[1]}</p>
    <p>{PARAGRAPHS[2]}</p>
  </article>
  <footer><p>Site footer with copyright and contact information</p></footer>
</body>
</html>
"""

SPA_HTML = f"""
<html><head><title>App</title></head>
<body>
  <div id="app">
    <div class="x1"><p>{PARAGRAPHS[0]}</p></div>
    <div class="x2"><p>short</p></div>
    <div class="x3"><p>{PARAGRAPHS[1]}</p></div>
  </div>
</body></html>
"""


class TestExtract:
    def test_article_page(self):
        result = extract_content(ARTICLE_HTML)
        assert result.title == "Council Approves Transit Plan"
        for paragraph in PARAGRAPHS:
            assert paragraph in result.plain_text
        assert "window.tracking" not in result.plain_text
        assert len(result.plain_text) > 100

    def test_article_html_strips_chrome(self):
        result = extract_content(ARTICLE_HTML)
        assert "<p>" in result.article_html
        assert PARAGRAPHS[0] in result.article_html
        assert "<nav" not in result.article_html
        assert "Site footer" not in result.article_html
        assert "Site header" not in result.article_html
        assert "<script" not in result.article_html

    def test_thumbnail_uses_full_document(self):
        result = extract_content(ARTICLE_HTML, "https://news.example.com/transit")
        assert result.thumbnail_url == "https://news.example.com/images/bus.jpg"

    def test_no_thumbnail_without_base_url(self):
        assert extract_content(ARTICLE_HTML).thumbnail_url is None

    def test_paragraph_fallback_for_spa(self):
        result = extract_content(SPA_HTML)
        assert PARAGRAPHS[0] in result.plain_text
        assert PARAGRAPHS[1] in result.plain_text
        assert "short" not in result.plain_text

    def test_paragraphs_joined_with_blank_line_without_readability(self):
        extractor = HtmlExtractor(strategies=TEXT_STRATEGIES[1:])
        result = extractor.extract(SPA_HTML)
        assert result.plain_text == f"{PARAGRAPHS[0]}\n\n{PARAGRAPHS[1]}"

    def test_region_text_used_when_readability_skipped(self):
        extractor = HtmlExtractor(strategies=TEXT_STRATEGIES[1:])
        result = extractor.extract(ARTICLE_HTML)
        assert result.plain_text.split("\n\n") == [
            "Council Approves Transit Plan",
            *PARAGRAPHS,
        ]

    def test_body_fallback(self):
        extractor = HtmlExtractor(strategies=TEXT_STRATEGIES[1:])
        html = "<html><body><div>Plain body text without any paragraph markup at all.</div></body></html>"
        result = extractor.extract(html)
        assert result.plain_text == "Plain body text without any paragraph markup at all."

    def test_document_parsed_once(self, monkeypatch):
        calls = []
        original_parse = content._parse

        def counting_parse(html):
            calls.append(html)
            return original_parse(html)

        monkeypatch.setattr(content, "_parse", counting_parse)
        extractor = HtmlExtractor(strategies=TEXT_STRATEGIES[1:])
        result = extractor.extract(ARTICLE_HTML, "https://news.example.com/transit")

        assert len(calls) == 1
        monkeypatch.setattr(content, "_parse", original_parse)
        assert result.article_html == extract_article_html(ARTICLE_HTML, extractor.config)
        assert result.plain_text == extractor.extract_text(ARTICLE_HTML)

    @pytest.mark.parametrize(
        "html",
        ["", "   ", "<<<>>>", "<html>", "not html at all", "<p>hi</p>", "\x00\x01binary"],
    )
    def test_never_raises(self, html):
        result = extract_content(html, "https://example.com/")
        assert result.title == "Untitled"
        assert isinstance(result.plain_text, str)
        assert isinstance(result.article_html, str)


class TestTitle:
    def test_title_tag(self):
        soup = BeautifulSoup("<title> Page Title </title><h1>Heading</h1>", "html.parser")
        assert extract_title(soup) == "Page Title"

    def test_falls_back_to_h1(self):
        soup = BeautifulSoup("<title>  </title><h1>Heading</h1>", "html.parser")
        assert extract_title(soup) == "Heading"

    def test_falls_back_to_og_title(self):
        html = '<meta property="og:title" content="Open Graph Title"><p>Body</p>'
        soup = BeautifulSoup(html, "html.parser")
        assert extract_title(soup) == "Open Graph Title"

    def test_untitled(self):
        assert extract_title(BeautifulSoup("<p>Body</p>", "html.parser")) == "Untitled"


class TestArticleHtml:
    def test_framework_selector(self):
        inner = "<p>" + "Styled components article body text. " * 5 + "</p>"
        html = f'<html><body><div class="sc-ArticleBodyWrapper-abc">{inner}</div></body></html>'
        assert extract_article_html(html, ExtractorConfig()) == inner

    def test_short_region_falls_back_to_body(self):
        html = "<html><body><article><p>Tiny</p></article><div>Other</div></body></html>"
        assert extract_article_html(html, ExtractorConfig()) == (
            "<article><p>Tiny</p></article><div>Other</div>"
        )

    def test_raw_input_without_body(self):
        assert extract_article_html("just some text", ExtractorConfig()) == "just some text"
