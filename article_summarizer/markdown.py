"""Markdown rendering and file output for summary results."""

from __future__ import annotations

import datetime as dt
import logging
import re
from pathlib import Path
from typing import Optional

from .models import SummaryResult

logger = logging.getLogger("article_summarizer.markdown")

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')
MAX_TITLE_CHARS = 100


def sanitize_title(title: str) -> str:
    """Make a translated title safe to use as a file name."""
    cleaned = INVALID_FILENAME_CHARS.sub("", title)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    return cleaned[:MAX_TITLE_CHARS].strip() or "untitled"


def build_filename(title: str, today: dt.date, date_prefix: bool = False) -> str:
    clean_title = sanitize_title(title)
    if date_prefix:
        return f"{today.isoformat()}_{clean_title}.md"
    return f"📰 {clean_title}.md"


def strip_code_fence(markdown: str) -> str:
    """Remove a surrounding Markdown code fence if the model adds one."""
    text = markdown.strip()
    if not text.startswith("```"):
        return text

    lines = text.splitlines()
    closing_index = None
    for idx in range(len(lines) - 1, 0, -1):
        if lines[idx].strip().startswith("```"):
            closing_index = idx
            break

    if closing_index is None:
        return text
    return "\n".join(lines[1:closing_index]).strip()


def compose_markdown(
    result: SummaryResult,
    url: str,
    today: dt.date,
    simplify: bool = False,
) -> str:
    """Render the Markdown document for one summarized article."""
    tag_line = " ".join(f"#{tag}" for tag in result.tags)
    lines = [
        f"[{result.translated_title}]({url})",
        f"scrap at [[{today.isoformat()}]]",
        "",
        tag_line,
        "",
    ]
    if result.thumbnail_url:
        lines.extend([f"![]({result.thumbnail_url})", ""])
    lines.extend(["## 3行まとめ", result.summary.strip()])
    if not simplify:
        lines.extend(["", "## 全文和訳", strip_code_fence(result.details)])
    return "\n".join(lines) + "\n"


def save_markdown(
    result: SummaryResult,
    url: str,
    output_dir: Path,
    date_prefix: bool = False,
    simplify: bool = False,
    today: Optional[dt.date] = None,
) -> str:
    """Write the Markdown file and return its file name."""
    today = today or dt.date.today()
    filename = build_filename(result.translated_title, today, date_prefix)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / filename
    output_path.write_text(compose_markdown(result, url, today, simplify), encoding="utf-8")
    logger.debug("Saved Markdown to %s", output_path)
    return filename
