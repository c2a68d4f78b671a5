"""Command-line entry point for the Japanese article summarizer."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Sequence

from .config import ConfigStore, FetchConfig, SummarizerConfig
from .exceptions import InvalidUrlError
from .fetcher import ContentFetcher, normalize_url
from .pipeline import MAX_CONCURRENT, BatchOptions, ProcessResult, run_batch
from .summarizer import ClaudeSummarizer

logger = logging.getLogger("article_summarizer.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="article-summarizer-jp",
        description="日本語記事要約CLIツール: fetch web articles or PDFs and save Japanese summaries as Markdown.",
    )
    parser.add_argument(
        "urls",
        nargs="*",
        help="Summarize articles from the provided URLs (prompted when omitted)",
    )
    parser.add_argument("--config", action="store_true", help="Configure the API key")
    parser.add_argument(
        "-d",
        "--date-prefix",
        action="store_true",
        help="Add a date prefix to the file name (YYYY-MM-DD_title.md)",
    )
    parser.add_argument(
        "-s",
        "--simplify",
        action="store_true",
        help="Output only the 3-line summary without details",
    )
    parser.add_argument(
        "--output",
        default=Path.cwd(),
        type=Path,
        help="Directory where Markdown files should be written",
    )
    parser.add_argument(
        "--model",
        default=SummarizerConfig.model_id,
        help="LiteLLM model identifier to use",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=FetchConfig.navigation_timeout,
        help="Headless browser navigation timeout in seconds",
    )
    parser.add_argument(
        "--max-concurrent",
        type=int,
        default=MAX_CONCURRENT,
        help="Maximum number of URLs processed at the same time",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", action="store_true", help="Only report errors")
    verbosity.add_argument("--debug", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def prompt_for_url() -> str:
    while True:
        url = input("要約したい記事のURLを入力してください: ").strip()
        if not url:
            print("URLは必須です")
            continue
        try:
            normalize_url(url)
        except InvalidUrlError:
            print("有効なURLを入力してください")
            continue
        return url


def report(results: List[ProcessResult]) -> None:
    successful = [result for result in results if result.success]
    failed = [result for result in results if not result.success]

    logger.info("📊 処理結果:")
    logger.info("=" * 50)
    logger.info("✅ 成功: %d件", len(successful))
    for result in successful:
        logger.info("   📄 %s", result.filename)
    if failed:
        logger.error("❌ 失敗: %d件", len(failed))
        for result in failed:
            logger.error("   🔗 %s", result.url)
            logger.error("   💥 %s", result.error)
    logger.info("=" * 50)
    logger.info("🎯 合計: %d件中 %d件成功", len(results), len(successful))


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    level = logging.INFO
    if args.debug:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    store = ConfigStore()
    if args.config:
        store.configure()
        logger.info("✓ 設定が完了しました")
        return 0

    urls = list(args.urls) or [prompt_for_url()]

    if not store.has_api_key():
        logger.warning("APIキーが設定されていません。最初に設定を行ってください。")
        store.configure()

    def progress(message: str) -> None:
        logger.info("    %s", message)

    fetcher = ContentFetcher(
        FetchConfig(navigation_timeout=args.timeout),
        progress=progress,
        quiet=args.quiet,
    )
    summarizer = ClaudeSummarizer(
        SummarizerConfig(model_id=args.model),
        store=store,
        progress=None if args.quiet else progress,
    )
    options = BatchOptions(
        output_dir=Path(args.output).resolve(),
        date_prefix=args.date_prefix,
        simplify=args.simplify,
        max_concurrent=args.max_concurrent,
    )

    logger.info("📄 %d件の記事を処理開始します（最大%d件並行処理）...", len(urls), options.max_concurrent)
    overall_start = time.perf_counter()
    results = asyncio.run(run_batch(urls, fetcher, summarizer, options))
    total_elapsed = time.perf_counter() - overall_start

    report(results)
    for result in results:
        logger.debug("Timing for %s -> total: %.2fs", result.url, result.total_seconds)
    logger.debug("Finished in %.2fs", total_elapsed)

    return 0 if any(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
