"""Exception hierarchy for fetching, extraction and summarization failures."""

from __future__ import annotations

from typing import Optional


class ArticleSummarizerError(Exception):
    """Base class for every error surfaced to the CLI."""


class InvalidUrlError(ArticleSummarizerError):
    """The input could not be parsed as an http(s) URL."""

    def __init__(self, url: str, reason: str = "Invalid URL provided") -> None:
        super().__init__(f"{reason}: {url!r}")
        self.url = url


class HttpError(ArticleSummarizerError):
    """A request completed with a non-2xx status code."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"HTTP error {status_code} for {url}")
        self.url = url
        self.status_code = status_code


class ExtractionFailedError(ArticleSummarizerError):
    """No fetch tier produced enough readable text."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Could not extract meaningful content from {url}: {reason}")
        self.url = url
        self.reason = reason


class PdfParseError(ArticleSummarizerError):
    """The PDF payload is malformed or not a PDF at all."""


class RenderTimeoutError(ArticleSummarizerError):
    """The headless browser did not finish loading within its bound."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout:.0f}s while rendering {url}")
        self.url = url
        self.timeout = timeout


class CredentialNotConfiguredError(ArticleSummarizerError):
    """The API key has not been configured yet."""


class SummarizationError(ArticleSummarizerError):
    """The LLM provider returned an error."""

    def __init__(self, message: str, model: Optional[str] = None) -> None:
        super().__init__(message)
        self.model = model
