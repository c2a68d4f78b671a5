"""Tests for the LLM-backed summarizer and its output cleaning."""
from types import SimpleNamespace

import pytest

from article_summarizer.config import API_KEY_ENV, ConfigStore
from article_summarizer.exceptions import CredentialNotConfiguredError, SummarizationError
from article_summarizer.summarizer import (
    DETAILS_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    TAGS_SYSTEM_PROMPT,
    TITLE_SYSTEM_PROMPT,
    ClaudeSummarizer,
    clean_details_output,
    clean_summary_output,
    is_japanese,
    parse_tags,
)

REPLIES = {
    SUMMARY_SYSTEM_PROMPT: "以下が3行のまとめです：\n\n1. 一行目です。\n\n2. 二行目です。\n3. 三行目です。",
    TITLE_SYSTEM_PROMPT: "鉄道ストライキが終結",
    TAGS_SYSTEM_PROMPT: "#鉄道 #労働組合 #UK",
    DETAILS_SYSTEM_PROMPT: "## 概要\n<p>運転士が職場に復帰しました。</p>\n![列車](https://example.com/train.jpg)",
}

ARTICLE_HTML = '<p>Body</p><img src="/images/train.jpg" width="800">'


class FakeCompletion:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        system = kwargs["messages"][0]["content"]
        message = SimpleNamespace(content=REPLIES[system])
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    def systems(self):
        return [call["messages"][0]["content"] for call in self.calls]


def make_summarizer(completion, **kwargs):
    return ClaudeSummarizer(api_key="sk-test", completion=completion, **kwargs)


class TestSummarize:
    @pytest.mark.asyncio
    async def test_full_summary(self):
        completion = FakeCompletion()
        result = await make_summarizer(completion).summarize(
            "Rail strike ends", "Plain text", ARTICLE_HTML, "https://example.com/news/1"
        )
        assert result.summary == "1. 一行目です。\n2. 二行目です。\n3. 三行目です。"
        assert result.translated_title == "鉄道ストライキが終結"
        assert result.tags == ["鉄道", "労働組合", "UK"]
        assert result.details == "## 概要\n運転士が職場に復帰しました。\n![列車](https://example.com/train.jpg)"
        assert result.thumbnail_url == "https://example.com/images/train.jpg"
        assert completion.calls[0]["api_key"] == "sk-test"
        assert completion.calls[0]["model"] == "anthropic/claude-3-5-sonnet-20241022"

    @pytest.mark.asyncio
    async def test_japanese_title_not_translated_and_simplify_skips_details(self):
        completion = FakeCompletion()
        result = await make_summarizer(completion).summarize(
            "既に日本語のタイトル",
            "Plain text",
            ARTICLE_HTML,
            "https://example.com/news/1",
            thumbnail_url="https://example.com/og.jpg",
            simplify=True,
        )
        assert result.translated_title == "既に日本語のタイトル"
        assert result.details == ""
        assert result.thumbnail_url == "https://example.com/og.jpg"
        assert completion.systems() == [SUMMARY_SYSTEM_PROMPT, TAGS_SYSTEM_PROMPT]

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self):
        completion = FakeCompletion(error=RuntimeError("overloaded"))
        with pytest.raises(SummarizationError) as excinfo:
            await make_summarizer(completion).generate_summary("Title", "Text")
        assert "overloaded" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_missing_credentials(self, tmp_path, monkeypatch):
        monkeypatch.delenv(API_KEY_ENV, raising=False)
        summarizer = ClaudeSummarizer(
            store=ConfigStore(tmp_path / "config.json"), completion=FakeCompletion()
        )
        with pytest.raises(CredentialNotConfiguredError):
            await summarizer.generate_summary("Title", "Text")

    @pytest.mark.asyncio
    async def test_progress_sink(self):
        messages = []
        await make_summarizer(FakeCompletion(), progress=messages.append).summarize(
            "Title", "Text", ARTICLE_HTML, "https://example.com/"
        )
        assert messages[0] == "🔄 要約を生成中..."
        assert len(messages) == 5


class TestOutputCleaning:
    def test_summary_preamble_and_blank_lines(self):
        raw = "以下が3行のまとめです：\n\n1. A\n\n2. B\n3. C\n"
        assert clean_summary_output(raw) == "1. A\n2. B\n3. C"

    def test_summary_epilogue(self):
        raw = "1. A\n2. B\n3. C\n\n以上が3行のまとめです。"
        assert clean_summary_output(raw) == "1. A\n2. B\n3. C"

    def test_details_keep_media_and_drop_tags(self):
        raw = (
            "記事の詳細は以下の通りです：\n"
            "<div>本文です。</div>\n"
            "![図](https://example.com/fig.png)\n"
            "[Video: デモ](https://example.com/demo.mp4)\n\n\n\n"
            "最後の段落です。"
        )
        assert clean_details_output(raw) == (
            "本文です。\n"
            "![図](https://example.com/fig.png)\n"
            "[Video: デモ](https://example.com/demo.mp4)\n\n"
            "最後の段落です。"
        )

    def test_details_trailing_note(self):
        raw = "本文です。\n\n注：これは要約です。"
        assert clean_details_output(raw) == "本文です。"


def test_is_japanese():
    assert is_japanese("日本語")
    assert is_japanese("カタカナ")
    assert not is_japanese("English only")


def test_parse_tags():
    assert parse_tags("Tags: #AI #機械学習 #Python\n#データ") == ["AI", "機械学習", "Python", "データ"]
    assert parse_tags("no tags") == []
