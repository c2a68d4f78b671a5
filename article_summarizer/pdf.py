"""PDF text extraction powered by pypdfium2."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

import pypdfium2 as pdfium
from filetype import guess

from .exceptions import PdfParseError
from .models import PdfContent

logger = logging.getLogger("article_summarizer.pdf")

PDF_PLACEHOLDER_TITLE = "PDF Document"
TITLE_SEARCH_LINES = 10
MIN_TITLE_LENGTH = 10
MAX_TITLE_LENGTH = 200

_PAGE_NUMBER = re.compile(r"^\d+$")


def is_pdf_payload(data: bytes) -> bool:
    """Detect a PDF by its file signature."""
    kind = guess(data)
    return kind is not None and kind.mime == "application/pdf"


def derive_title(text: str) -> Optional[str]:
    """Return the first plausible title among the leading non-empty lines."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    for line in lines[:TITLE_SEARCH_LINES]:
        if not MIN_TITLE_LENGTH < len(line) < MAX_TITLE_LENGTH:
            continue
        if _PAGE_NUMBER.match(line) or "Page " in line or "©" in line:
            continue
        return line
    return None


def _page_runs(page) -> List[str]:
    textpage = page.get_textpage()
    try:
        raw = textpage.get_text_range()
    finally:
        textpage.close()
    return [run.strip() for run in re.split(r"[\r\n]+", raw) if run.strip()]


class PdfExtractor:
    """Reads the text layer of a PDF, one line per page."""

    def extract(self, data: bytes) -> PdfContent:
        if not data or not is_pdf_payload(data):
            raise PdfParseError("Payload is not a PDF document")
        try:
            document = pdfium.PdfDocument(data)
        except pdfium.PdfiumError as exc:
            raise PdfParseError(f"PDF parsing error: {exc}") from exc

        pages: List[str] = []
        try:
            for page_index, page in enumerate(document, start=1):
                try:
                    runs = _page_runs(page)
                except pdfium.PdfiumError as exc:
                    raise PdfParseError(
                        f"PDF text extraction error on page {page_index}: {exc}"
                    ) from exc
                finally:
                    page.close()
                pages.append(" ".join(runs))
                logger.debug("Read %d text runs from page %d", len(runs), page_index)
        finally:
            document.close()

        text = "\n".join(pages).strip()
        title = derive_title(text) or PDF_PLACEHOLDER_TITLE
        return PdfContent(title=title, plain_text=text)


def extract_pdf(data: bytes) -> PdfContent:
    return PdfExtractor().extract(data)
