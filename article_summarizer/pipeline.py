"""High-level orchestration: fetch, summarize and save a batch of URLs."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .exceptions import ArticleSummarizerError
from .fetcher import ContentFetcher
from .markdown import save_markdown
from .summarizer import ClaudeSummarizer

logger = logging.getLogger("article_summarizer")

MAX_CONCURRENT = 5


@dataclass
class ProcessResult:
    """Outcome and timing for one processed URL."""

    url: str
    success: bool
    filename: Optional[str] = None
    error: Optional[str] = None
    total_seconds: float = 0.0


@dataclass
class BatchOptions:
    output_dir: Path
    date_prefix: bool = False
    simplify: bool = False
    max_concurrent: int = MAX_CONCURRENT


async def process_url(
    url: str,
    label: str,
    fetcher: ContentFetcher,
    summarizer: ClaudeSummarizer,
    options: BatchOptions,
) -> ProcessResult:
    start = time.perf_counter()
    logger.info("%s %s", label, url)
    try:
        logger.info("  📄 コンテンツを取得中...")
        fetched = await fetcher.fetch(url)

        logger.info("  🤖 記事を要約・翻訳中...")
        summary = await summarizer.summarize(
            fetched.title,
            fetched.plain_text,
            fetched.article_html,
            fetched.canonical_url,
            thumbnail_url=fetched.thumbnail_url,
            simplify=options.simplify,
        )

        logger.info("  💾 マークダウンファイルに保存中...")
        filename = save_markdown(
            summary,
            fetched.canonical_url,
            options.output_dir,
            date_prefix=options.date_prefix,
            simplify=options.simplify,
        )
    except ArticleSummarizerError as exc:
        logger.error("  ❌ エラー: %s", exc)
        return ProcessResult(url=url, success=False, error=str(exc),
                             total_seconds=time.perf_counter() - start)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Unexpected error processing %s", url)
        return ProcessResult(url=url, success=False, error=f"{type(exc).__name__}: {exc}",
                             total_seconds=time.perf_counter() - start)

    logger.info("  ✅ 完了: %s", filename)
    return ProcessResult(url=url, success=True, filename=filename,
                         total_seconds=time.perf_counter() - start)


async def run_batch(
    urls: Sequence[str],
    fetcher: ContentFetcher,
    summarizer: ClaudeSummarizer,
    options: BatchOptions,
) -> List[ProcessResult]:
    """Process ``urls`` with at most ``options.max_concurrent`` in flight."""
    semaphore = asyncio.Semaphore(max(1, options.max_concurrent))
    total = len(urls)

    async def _bounded(index: int, url: str) -> ProcessResult:
        async with semaphore:
            return await process_url(url, f"[{index}/{total}]", fetcher, summarizer, options)

    return list(
        await asyncio.gather(*(_bounded(idx, url) for idx, url in enumerate(urls, start=1)))
    )
