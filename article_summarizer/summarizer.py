"""Japanese summary, title, tags and details generated through LiteLLM."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .config import ConfigStore, SummarizerConfig
from .exceptions import ArticleSummarizerError, SummarizationError
from .models import SummaryResult
from .thumbnail import select_thumbnail

logger = logging.getLogger("article_summarizer.summarizer")

Completion = Callable[..., Awaitable[Any]]
ProgressSink = Callable[[str], None]

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert Japanese language summarization specialist. You excel at "
    "creating concise, informative summaries in polite Japanese (ですます調)."
)
TITLE_SYSTEM_PROMPT = (
    "You are an expert Japanese translator. You can translate from any language "
    "into Japanese. Always respond in Japanese only."
)
TAGS_SYSTEM_PROMPT = (
    "You are an expert content analyst who creates relevant tags for articles. "
    "Generate appropriate tags following Japanese conventions."
)
DETAILS_SYSTEM_PROMPT = (
    "You are an expert Japanese content analyst and translator. You can analyze and "
    "translate content from any language into Japanese. Your specialty is creating "
    "detailed, comprehensive descriptions of articles in Japanese while preserving "
    "key information and media elements."
)

_JAPANESE = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]")
_TAG = re.compile(r"#(\S+)")

_SUMMARY_NOISE = [
    re.compile(
        r"^(?:Here's a 3-line summary in polite Japanese|以下が3行のまとめです|3行まとめは以下の通りです).*?[：:]?\s*\n+",
        re.IGNORECASE,
    ),
    re.compile(r"^(?:以下に|こちらが).*?3行.*?(?:まとめ|要約).*?[：:]?\s*\n+", re.IGNORECASE),
    re.compile(r"\n+[^\n]*?(?:以上が|これが)[^\n]*?3行[^\n]*?(?:まとめ|要約)[^\n]*$", re.IGNORECASE),
    re.compile(r"\n+[^\n]*?となります。?$", re.IGNORECASE),
]
_DETAILS_NOISE = [
    re.compile(
        r"^(?:はい、)?以下に?.*?(?:詳細|内容|説明)を?(?:日本語で)?.*?(?:提供|記載|説明)(?:いたします|します).*?\n\n?",
        re.IGNORECASE,
    ),
    re.compile(r"^記事の詳細.*?[：:]?\s*\n+", re.IGNORECASE),
    re.compile(r"^Details of the article.*?[：:]?\s*\n+", re.IGNORECASE),
    re.compile(r"\n\n?注[：:][^\n]*$", re.IGNORECASE),
    re.compile(r"\n\n?(?:以上が|これで)[^\n]*?(?:詳細|説明)[^\n]*?(?:です|となります)\.?$", re.IGNORECASE),
]
_MEDIA = re.compile(r"!\[[^\]]*\]\([^)]+\)|\[Video[^\]]*\]\([^)]+\)")
_HTML_TAG = re.compile(r"<[^>]+>")


def is_japanese(text: str) -> bool:
    return bool(_JAPANESE.search(text))


def clean_summary_output(raw: str) -> str:
    """Strip LLM preambles and epilogues around a 3-line summary."""
    cleaned = raw
    for pattern in _SUMMARY_NOISE:
        cleaned = pattern.sub("", cleaned)
    cleaned = re.sub(r"\n{2,}", "\n", cleaned)
    return cleaned.strip()


def clean_details_output(raw: str) -> str:
    """Remove HTML tags and meta commentary while keeping Markdown media links."""
    placeholders: Dict[str, str] = {}

    def _stash(match: re.Match) -> str:
        key = f"__MEDIA_PLACEHOLDER_{len(placeholders)}__"
        placeholders[key] = match.group(0)
        return key

    cleaned = _MEDIA.sub(_stash, raw)
    cleaned = _HTML_TAG.sub("", cleaned)
    for key, value in placeholders.items():
        cleaned = cleaned.replace(key, value)
    for pattern in _DETAILS_NOISE:
        cleaned = pattern.sub("", cleaned)
    cleaned = re.sub(r"\n{3,}", "\n\n", cleaned)
    return cleaned.strip()


def parse_tags(text: str) -> List[str]:
    return _TAG.findall(text)


async def _litellm_completion(**kwargs: Any) -> Any:
    import litellm

    return await litellm.acompletion(**kwargs)


class ClaudeSummarizer:
    """Produces the Japanese summary artifacts for one fetched article."""

    def __init__(
        self,
        config: Optional[SummarizerConfig] = None,
        *,
        api_key: Optional[str] = None,
        store: Optional[ConfigStore] = None,
        completion: Completion = _litellm_completion,
        progress: Optional[ProgressSink] = None,
    ) -> None:
        self.config = config or SummarizerConfig()
        self._api_key = api_key
        self._store = store or ConfigStore()
        self._completion = completion
        self._progress = progress
        logging.getLogger("LiteLLM").setLevel(logging.WARNING)

    def _notify(self, message: str) -> None:
        if self._progress is not None:
            self._progress(message)

    def _resolve_api_key(self) -> str:
        if self._api_key is None:
            self._api_key = self._store.get_api_key()
        return self._api_key

    async def _complete(self, system_prompt: str, user_prompt: str, temperature: float) -> str:
        model = self.config.model_id
        try:
            response = await asyncio.wait_for(
                self._completion(
                    model=model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    api_key=self._resolve_api_key(),
                    max_tokens=self.config.max_tokens,
                    temperature=temperature,
                ),
                timeout=self.config.request_timeout,
            )
        except ArticleSummarizerError:
            raise
        except asyncio.TimeoutError as exc:
            raise SummarizationError(
                f"LLM request timed out after {self.config.request_timeout:.0f}s", model
            ) from exc
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("LLM request failed (model=%s)", model, exc_info=True)
            raise SummarizationError(f"Claude API error: {type(exc).__name__}: {exc}", model) from exc
        return (response.choices[0].message.content or "").strip()

    async def generate_summary(self, title: str, content: str) -> str:
        user_prompt = f"""Please create a concise 3-line summary in Japanese (3行まとめ) that captures the most important points of the following article.

**Requirements:**
- Exactly 3 lines, each capturing a key point
- Use polite Japanese (ですます調)
- Be concise but informative
- Focus on the main ideas and conclusions
- No empty lines between the 3 lines

Article Title: {title}

Article Content:
{content}

Please format your response as three consecutive lines:
1. [First key point in polite Japanese]
2. [Second key point in polite Japanese]
3. [Third key point in polite Japanese]"""
        raw = await self._complete(SUMMARY_SYSTEM_PROMPT, user_prompt, self.config.summary_temperature)
        return clean_summary_output(raw)

    async def translate_title(self, title: str) -> str:
        if is_japanese(title):
            return title
        user_prompt = f"""Translate the following article title into natural Japanese:

"{title}"

Requirements:
- Output only the translated title (no explanations needed)
- Make it natural and readable Japanese
- Preserve the original meaning and tone
- Always respond in Japanese
- Translate from any language to Japanese"""
        translated = await self._complete(TITLE_SYSTEM_PROMPT, user_prompt, self.config.title_temperature)
        return translated or title

    async def generate_tags(self, title: str, content: str) -> List[str]:
        user_prompt = f"""Analyze the following article and generate relevant tags.

**Tag Guidelines:**
- Use multiple tags (3-8 tags recommended)
- Use Japanese for common terms, keep proper nouns in original language
- Replace spaces with underscores
- Replace commas with underscores
- Focus on main topics, technologies, concepts, and themes
- Make tags specific and useful for categorization

Article Title: {title}

Article Content:
{content}

Provide only the tags, separated by spaces, in the format: #tag1 #tag2 #tag3
Example: #人工知能 #機械学習 #Python #データサイエンス"""
        raw = await self._complete(TAGS_SYSTEM_PROMPT, user_prompt, self.config.tags_temperature)
        return parse_tags(raw)

    async def generate_details(self, title: str, article_html: str) -> str:
        user_prompt = f"""以下の記事コンテンツの詳細な日本語の説明を作成してください。

**要件:**
- メインコンテンツの詳細なカバレッジを提供（完全な翻訳ではなく、包括的な詳細）
- 丁寧な日本語（ですます調）で統一
- 適切なmarkdown形式で出力
- コンテンツ内の画像や動画をmarkdown要素として含める:
  - 画像: ![description](url) または ![alt text](url)
  - 動画: [Video: description](url) または埋め込みコードが利用可能な場合
- 重要な技術的詳細、引用、例を保持
- 適切なヘッダーとフォーマットで構造化
- 説明、前置き、メタコメンタリーは含めない
- 詳細コンテンツから直接始める
- どの言語のコンテンツでも日本語で説明してください

記事タイトル: {title}

HTMLコンテンツ:
{article_html}"""
        raw = await self._complete(DETAILS_SYSTEM_PROMPT, user_prompt, self.config.details_temperature)
        return clean_details_output(raw)

    async def summarize(
        self,
        title: str,
        plain_text: str,
        article_html: str,
        canonical_url: str,
        thumbnail_url: Optional[str] = None,
        simplify: bool = False,
    ) -> SummaryResult:
        self._notify("🔄 要約を生成中...")
        summary = await self.generate_summary(title, plain_text)

        self._notify("🔄 タイトルを翻訳中...")
        translated_title = (await self.translate_title(title)).strip() or title

        self._notify("🔄 サムネイル画像を抽出中...")
        thumbnail = thumbnail_url or select_thumbnail(article_html, canonical_url)

        self._notify("🔄 タグを生成中...")
        tags = await self.generate_tags(title, plain_text)

        details = ""
        if not simplify:
            self._notify("🔄 詳細を生成中...")
            details = await self.generate_details(title, article_html)

        return SummaryResult(
            summary=summary,
            details=details,
            translated_title=translated_title,
            tags=tags,
            thumbnail_url=thumbnail,
        )
