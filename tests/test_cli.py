from pathlib import Path

import pytest

from article_summarizer import cli
from article_summarizer.pipeline import ProcessResult


def test_parse_args_defaults():
    args = cli.parse_args(["https://example.com/a", "https://example.com/b"])
    assert args.urls == ["https://example.com/a", "https://example.com/b"]
    assert not args.date_prefix
    assert not args.simplify
    assert args.max_concurrent == 5
    assert args.model == "anthropic/claude-3-5-sonnet-20241022"


def test_quiet_and_debug_are_exclusive():
    with pytest.raises(SystemExit):
        cli.parse_args(["--quiet", "--debug", "https://example.com/"])


def test_main_exit_code_follows_results(monkeypatch, tmp_path):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    captured = {}

    async def fake_run_batch(urls, fetcher, summarizer, options):
        captured["urls"] = urls
        captured["options"] = options
        return [ProcessResult(url=url, success=False, error="boom") for url in urls]

    monkeypatch.setattr(cli, "run_batch", fake_run_batch)
    code = cli.main(["-s", "-d", "--output", str(tmp_path), "https://example.com/a"])

    assert code == 1
    assert captured["urls"] == ["https://example.com/a"]
    assert captured["options"].simplify
    assert captured["options"].date_prefix
    assert captured["options"].output_dir == Path(tmp_path).resolve()
