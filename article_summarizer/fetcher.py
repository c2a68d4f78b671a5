"""Two-tier content acquisition: plain HTTP first, headless Chromium as fallback."""

from __future__ import annotations

import asyncio
import html as html_lib
import logging
from typing import Awaitable, Callable, Iterable, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit

import requests
from playwright.async_api import (
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import FetchConfig, PdfRule
from .content import HtmlExtractor
from .exceptions import (
    ExtractionFailedError,
    HttpError,
    InvalidUrlError,
    PdfParseError,
    RenderTimeoutError,
)
from .models import ExtractedContent, FetchResult
from .pdf import PdfExtractor, is_pdf_payload

logger = logging.getLogger("article_summarizer.fetcher")

QUIET_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-logging",
    "--log-level=3",
    "--silent",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-features=TranslateUI",
    "--disable-ipc-flooding-protection",
    "--disable-breakpad",
    "--disable-client-side-phishing-detection",
    "--disable-sync",
    "--disable-default-apps",
    "--disable-extensions",
]

# Installed before any page script runs so the page cannot write to the console.
SILENCE_CONSOLE_SCRIPT = """
(() => {
  const noop = () => {};
  for (const name of Object.keys(window.console)) {
    try { window.console[name] = noop; } catch (e) {}
  }
})();
"""

ProgressSink = Callable[[str], None]
Renderer = Callable[[str, FetchConfig], Awaitable[str]]
SessionFactory = Callable[[], requests.Session]


def normalize_url(url: str) -> str:
    """Validate an http(s) URL and return its canonical form."""
    candidate = (url or "").strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        raise InvalidUrlError(url)
    try:
        parsed = urlsplit(candidate)
        port = parsed.port
    except ValueError as exc:
        raise InvalidUrlError(url) from exc
    scheme = parsed.scheme.lower()
    if scheme not in ("http", "https") or not parsed.hostname:
        raise InvalidUrlError(url)

    netloc = parsed.hostname
    if ":" in netloc:
        netloc = f"[{netloc}]"
    if port is not None:
        netloc = f"{netloc}:{port}"
    if parsed.username:
        userinfo = parsed.username
        if parsed.password:
            userinfo = f"{userinfo}:{parsed.password}"
        netloc = f"{userinfo}@{netloc}"
    return urlunsplit((scheme, netloc, parsed.path or "/", parsed.query, parsed.fragment))


def is_pdf_url(url: str, rules: Iterable[PdfRule]) -> bool:
    parsed = urlsplit(url)
    host = (parsed.hostname or "").lower()
    path = parsed.path.lower()
    return any(rule.matches(host, path) for rule in rules)


def wrap_pdf_text(title: str, text: str) -> str:
    """Minimal HTML document so PDF results carry the same fields as HTML ones."""
    return (
        f"<html><head><title>{html_lib.escape(title)}</title></head>"
        f"<body><pre>{html_lib.escape(text)}</pre></body></html>"
    )


def log_progress(message: str) -> None:
    logger.info(message)


def _decode(response: requests.Response) -> str:
    content_type = response.headers.get("Content-Type", "").lower()
    if response.encoding is None or (
        "charset" not in content_type and response.encoding.lower() == "iso-8859-1"
    ):
        response.encoding = response.apparent_encoding
    return response.text


async def render_page(url: str, config: FetchConfig) -> str:
    """Render ``url`` in a fresh headless Chromium and return the serialized DOM."""
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=True, args=QUIET_CHROMIUM_ARGS)
        try:
            context = await browser.new_context(
                user_agent=config.browser_user_agent,
                viewport={"width": config.viewport_width, "height": config.viewport_height},
            )
            await context.add_init_script(SILENCE_CONSOLE_SCRIPT)
            page = await context.new_page()
            page.set_default_navigation_timeout(config.navigation_timeout * 1000)
            try:
                await page.goto(url, wait_until="networkidle")
            except PlaywrightTimeoutError as exc:
                raise RenderTimeoutError(url, config.navigation_timeout) from exc
            try:
                await page.wait_for_selector(
                    config.wait_selector, timeout=config.selector_timeout * 1000
                )
            except PlaywrightTimeoutError:
                logger.debug("No content selector appeared on %s", url)
            await page.wait_for_timeout(config.settle_delay * 1000)
            return await page.content()
        finally:
            await browser.close()


class ContentFetcher:
    """Fetches a URL and returns readable content from a single fetch tier."""

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        *,
        extractor: Optional[HtmlExtractor] = None,
        pdf_extractor: Optional[PdfExtractor] = None,
        session_factory: SessionFactory = requests.Session,
        renderer: Renderer = render_page,
        progress: Optional[ProgressSink] = None,
        quiet: bool = False,
    ) -> None:
        self.config = config or FetchConfig()
        self.extractor = extractor or HtmlExtractor(self.config.extractor)
        self.pdf_extractor = pdf_extractor or PdfExtractor()
        self.session_factory = session_factory
        self.renderer = renderer
        self.progress = progress or log_progress
        self.quiet = quiet

    def _notify(self, message: str) -> None:
        if not self.quiet:
            self.progress(message)

    def _http_get(self, url: str) -> requests.Response:
        session = self.session_factory()
        try:
            response = session.get(
                url,
                headers={"User-Agent": self.config.fetch_user_agent},
                timeout=self.config.request_timeout,
            )
        finally:
            session.close()
        if not 200 <= response.status_code < 300:
            raise HttpError(url, response.status_code)
        return response

    def _is_sufficient(self, extracted: ExtractedContent) -> bool:
        return len(extracted.plain_text) > self.config.min_content_chars

    def _to_result(self, url: str, extracted: ExtractedContent) -> FetchResult:
        return FetchResult(
            title=extracted.title,
            plain_text=extracted.plain_text,
            canonical_url=url,
            article_html=extracted.article_html,
            thumbnail_url=extracted.thumbnail_url,
        )

    async def _pdf_result(self, url: str, data: bytes) -> FetchResult:
        content = await asyncio.to_thread(self.pdf_extractor.extract, data)
        logger.debug("PDF text: %d chars, title %r", len(content.plain_text), content.title)
        if len(content.plain_text) <= self.config.min_content_chars:
            raise ExtractionFailedError(
                url, f"PDF contains no extractable text ({len(content.plain_text)} chars)"
            )
        return FetchResult(
            title=content.title,
            plain_text=content.plain_text,
            canonical_url=url,
            article_html=wrap_pdf_text(content.title, content.plain_text),
            source="pdf",
        )

    async def fetch_pdf(self, url: str) -> FetchResult:
        self._notify("📄 PDFファイルを検出しました。PDF解析を開始します...")
        try:
            response = await asyncio.to_thread(self._http_get, url)
        except requests.RequestException as exc:
            raise ExtractionFailedError(url, f"PDF download failed: {exc}") from exc
        logger.debug("Downloaded %d bytes of PDF", len(response.content))
        return await self._pdf_result(url, response.content)

    async def _fetch_lightweight(self, url: str) -> Tuple[Optional[FetchResult], str]:
        """Tier 1. Returns a result, or ``None`` with the reason to escalate."""
        logger.debug("Trying plain HTTP fetch for %s", url)
        try:
            response = await asyncio.to_thread(self._http_get, url)
        except (requests.RequestException, HttpError) as exc:
            return None, f"fetchエラー: {exc}"

        content_type = response.headers.get("Content-Type", "").lower()
        if is_pdf_payload(response.content):
            self._notify("📄 PDFレスポンスを検出しました。PDF解析を開始します...")
            try:
                return await self._pdf_result(url, response.content), ""
            except PdfParseError as exc:
                return None, f"PDF解析エラー: {exc}"
        if "application/pdf" in content_type:
            logger.debug("Content-Type %r without a PDF body, treating as HTML", content_type)

        html = _decode(response)
        logger.debug("Fetched HTML length: %d", len(html))
        extracted = self.extractor.extract(html, url)
        logger.debug("Extracted %d chars, title %r", len(extracted.plain_text), extracted.title)
        if self._is_sufficient(extracted):
            return self._to_result(url, extracted), ""
        return None, f"コンテンツが不十分 ({len(extracted.plain_text)}文字)"

    async def _fetch_rendered(self, url: str, reason: str) -> FetchResult:
        """Tier 2: render with a headless browser and extract again."""
        self._notify(f"🔄 {reason} - CSR（ヘッドレスブラウザ）を実行中...")
        logger.debug("Escalating %s to headless browser: %s", url, reason)
        try:
            html = await self.renderer(url, self.config)
        except RenderTimeoutError as exc:
            raise ExtractionFailedError(url, str(exc)) from exc
        except PlaywrightError as exc:
            raise ExtractionFailedError(url, f"browser error: {exc}") from exc

        logger.debug("Rendered HTML length: %d", len(html))
        extracted = self.extractor.extract(html, url)
        logger.debug("Rendered extraction: %d chars, title %r", len(extracted.plain_text), extracted.title)
        if not self._is_sufficient(extracted):
            if len(extracted.plain_text) < 500:
                logger.debug("Content preview: %s", extracted.plain_text[:200])
            raise ExtractionFailedError(
                url, f"rendered page yielded only {len(extracted.plain_text)} chars"
            )
        return self._to_result(url, extracted)

    async def fetch(self, url: str) -> FetchResult:
        canonical = normalize_url(url)
        if is_pdf_url(canonical, self.config.pdf_rules):
            return await self.fetch_pdf(canonical)

        result, reason = await self._fetch_lightweight(canonical)
        if result is not None:
            return result
        return await self._fetch_rendered(canonical, reason)


async def fetch_content(
    url: str,
    quiet: bool = False,
    config: Optional[FetchConfig] = None,
) -> FetchResult:
    """Fetch ``url`` with default collaborators."""
    fetcher = ContentFetcher(config, quiet=quiet)
    return await fetcher.fetch(url)
