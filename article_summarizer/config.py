"""Configuration objects, tuned constants and the credential store."""

from __future__ import annotations

import getpass
import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from .exceptions import CredentialNotConfiguredError

logger = logging.getLogger("article_summarizer.config")

APP_NAME = "article-summarizer-jp"
API_KEY_ENV = "ANTHROPIC_API_KEY"

DEFAULT_MODEL_ID = "anthropic/claude-3-5-sonnet-20241022"
FETCH_USER_AGENT = "Mozilla/5.0 (compatible; ArticleSummarizer/1.0)"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MIN_CONTENT_CHARS = 100

# Ordered by preference; shared by text extraction, article HTML and thumbnails.
CONTENT_SELECTORS: Tuple[str, ...] = (
    "article",
    "main",
    '[role="main"]',
    ".main-content",
    ".content",
    "#content",
    ".post-content",
    ".entry-content",
    ".article-body",
    ".story-body",
)

# styled-components sites (WIRED.jp and similar)
FRAMEWORK_SELECTORS: Tuple[str, ...] = (
    ".body__inner-container",
    '[class*="BodyWrapper"]',
    '[class*="article__body"]',
    '[class*="ArticleBody"]',
)


@dataclass(frozen=True)
class PdfRule:
    """Classifies a URL as a PDF when host and path pattern both match.

    A rule without ``host`` applies to every host.
    """

    path_pattern: str
    host: Optional[str] = None

    def matches(self, host: str, path: str) -> bool:
        if self.host is not None and host != self.host:
            return False
        return re.search(self.path_pattern, path) is not None


DEFAULT_PDF_RULES: Tuple[PdfRule, ...] = (
    PdfRule(path_pattern=r"\.pdf$"),
    PdfRule(path_pattern=r"/pdf/", host="arxiv.org"),
)


@dataclass
class CleanerConfig:
    """Thresholds used by the line-based noise filter."""

    min_line_length: int = 10
    max_repeated_chars: int = 5
    long_line_threshold: int = 100


@dataclass
class ExtractorConfig:
    """Settings controlling HTML content extraction."""

    min_content_chars: int = MIN_CONTENT_CHARS
    min_paragraph_chars: int = 20
    content_selectors: Tuple[str, ...] = CONTENT_SELECTORS
    article_selectors: Tuple[str, ...] = CONTENT_SELECTORS + FRAMEWORK_SELECTORS
    cleaner: CleanerConfig = field(default_factory=CleanerConfig)


@dataclass
class FetchConfig:
    """Top-level settings that control the two-tier fetch."""

    min_content_chars: int = MIN_CONTENT_CHARS
    request_timeout: float = 30.0
    navigation_timeout: float = 30.0
    selector_timeout: float = 5.0
    settle_delay: float = 2.0
    fetch_user_agent: str = FETCH_USER_AGENT
    browser_user_agent: str = BROWSER_USER_AGENT
    viewport_width: int = 1920
    viewport_height: int = 1080
    wait_selector: str = "article, main, .content, #content, body"
    pdf_rules: Tuple[PdfRule, ...] = DEFAULT_PDF_RULES
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)


@dataclass
class SummarizerConfig:
    """Model selection and sampling settings for the LLM calls."""

    model_id: str = DEFAULT_MODEL_ID
    max_tokens: int = 8192
    summary_temperature: float = 0.3
    title_temperature: float = 0.2
    tags_temperature: float = 0.3
    details_temperature: float = 0.1
    request_timeout: float = 300.0


def default_config_path() -> Path:
    base = os.getenv("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / APP_NAME / "config.json"


class ConfigStore:
    """Persists the Anthropic API key in a small JSON file."""

    _KEY = "anthropicApiKey"

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = path or default_config_path()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", self.path, exc)
            return {}

    def _resolve_api_key(self) -> Optional[str]:
        override = os.getenv(API_KEY_ENV)
        if override:
            logger.debug("%s override detected", API_KEY_ENV)
            return override
        return self._load().get(self._KEY) or None

    def has_api_key(self) -> bool:
        return bool(self._resolve_api_key())

    def get_api_key(self) -> str:
        api_key = self._resolve_api_key()
        if not api_key:
            raise CredentialNotConfiguredError(
                "API key not configured. Run with --config first."
            )
        return api_key

    def set_api_key(self, api_key: str) -> None:
        data = self._load()
        data[self._KEY] = api_key
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError as exc:
            logger.debug("Could not restrict permissions on %s: %s", self.path, exc)

    def configure(self) -> None:
        """Prompt for the API key until a valid one is entered."""
        while True:
            api_key = getpass.getpass("Anthropic APIキーを入力してください: ").strip()
            error = validate_api_key(api_key)
            if error is None:
                break
            print(error)
        self.set_api_key(api_key)


def validate_api_key(api_key: str) -> Optional[str]:
    """Return an error message for an unacceptable key, else ``None``."""
    if not api_key or not api_key.strip():
        return "APIキーは必須です"
    if not api_key.startswith("sk-"):
        return 'APIキーは "sk-" で始まる必要があります'
    return None
