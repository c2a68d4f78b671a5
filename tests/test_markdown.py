"""Tests for Markdown rendering and file output."""
import datetime as dt

from article_summarizer.markdown import (
    build_filename,
    compose_markdown,
    sanitize_title,
    save_markdown,
    strip_code_fence,
)
from article_summarizer.models import SummaryResult

TODAY = dt.date(2025, 3, 14)
URL = "https://example.com/article"


def _result(**overrides):
    values = dict(
        summary="1. 一行目です。\n2. 二行目です。\n3. 三行目です。",
        details="## 背景\n詳細な説明です。",
        translated_title="鉄道ストライキが終結",
        tags=["鉄道", "労働"],
        thumbnail_url=None,
    )
    values.update(overrides)
    return SummaryResult(**values)


def test_sanitize_title():
    assert sanitize_title('What: "AI" / ML?  <Now>') == "What AI ML Now"
    assert sanitize_title("a" * 150) == "a" * 100
    assert sanitize_title("???") == "untitled"


def test_build_filename():
    assert build_filename("タイトル", TODAY) == "📰 タイトル.md"
    assert build_filename("タイトル", TODAY, date_prefix=True) == "2025-03-14_タイトル.md"


def test_compose_markdown():
    markdown = compose_markdown(_result(), URL, TODAY)
    assert markdown == (
        "[鉄道ストライキが終結](https://example.com/article)\n"
        "scrap at [[2025-03-14]]\n"
        "\n"
        "#鉄道 #労働\n"
        "\n"
        "## 3行まとめ\n"
        "1. 一行目です。\n2. 二行目です。\n3. 三行目です。\n"
        "\n"
        "## 全文和訳\n"
        "## 背景\n詳細な説明です。\n"
    )


def test_compose_markdown_simplified_with_thumbnail():
    markdown = compose_markdown(
        _result(thumbnail_url="https://example.com/images/train.jpg"), URL, TODAY, simplify=True
    )
    assert "![](https://example.com/images/train.jpg)" in markdown
    assert "## 全文和訳" not in markdown
    assert markdown.endswith("3. 三行目です。\n")


def test_save_markdown(tmp_path):
    filename = save_markdown(_result(), URL, tmp_path, today=TODAY)
    assert filename == "📰 鉄道ストライキが終結.md"
    content = (tmp_path / filename).read_text(encoding="utf-8")
    assert content.startswith("[鉄道ストライキが終結](https://example.com/article)")


def test_strip_code_fence():
    assert strip_code_fence("```markdown\n# Title\nBody\n```") == "# Title\nBody"
    assert strip_code_fence("plain text") == "plain text"
    assert strip_code_fence("```\nunterminated") == "```\nunterminated"
