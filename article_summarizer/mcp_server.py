"""MCP server exposing article fetch/summarize tools."""

from __future__ import annotations

import datetime as dt
import logging

from mcp.server.fastmcp import FastMCP

from .fetcher import ContentFetcher
from .markdown import compose_markdown
from .summarizer import ClaudeSummarizer

logger = logging.getLogger("article_summarizer.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="article-summarizer-jp")


@mcp.tool()
async def fetch_article(url: str) -> str:
    """Fetch a web article or PDF and return its title and cleaned text as Markdown."""

    fetcher = ContentFetcher(quiet=True)
    result = await fetcher.fetch(url)
    return f"# {result.title}\n\nSource: {result.canonical_url}\n\n{result.plain_text}\n"


@mcp.tool()
async def summarize_article(url: str, simplify: bool = False) -> str:
    """Fetch an article and return its Japanese summary Markdown without writing a file."""

    fetcher = ContentFetcher(quiet=True)
    fetched = await fetcher.fetch(url)
    summarizer = ClaudeSummarizer()
    summary = await summarizer.summarize(
        fetched.title,
        fetched.plain_text,
        fetched.article_html,
        fetched.canonical_url,
        thumbnail_url=fetched.thumbnail_url,
        simplify=simplify,
    )
    return compose_markdown(summary, fetched.canonical_url, dt.date.today(), simplify)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
