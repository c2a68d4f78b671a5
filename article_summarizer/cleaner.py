"""Line-based noise filter for extracted article text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from .config import CleanerConfig

logger = logging.getLogger("article_summarizer.cleaner")


@dataclass(frozen=True)
class LineRule:
    """Rejects a line when ``pattern`` matches.

    ``max_length`` limits the rule to lines shorter than that many characters.
    """

    pattern: Pattern[str]
    reason: str
    max_length: Optional[int] = None

    def rejects(self, line: str) -> bool:
        if self.max_length is not None and len(line) >= self.max_length:
            return False
        return self.pattern.search(line) is not None


def _rule(regex: str, reason: str) -> LineRule:
    return LineRule(re.compile(regex, re.IGNORECASE), reason)


def _prefix(english: Sequence[str], japanese: Sequence[str] = ()) -> str:
    # English labels must end on a word boundary; Japanese has none to match.
    alternatives = [rf"(?:{word})\b" for word in english] + list(japanese)
    return "^(?:" + "|".join(alternatives) + ")"


BOILERPLATE_RULES: Tuple[LineRule, ...] = (
    _rule(
        _prefix(["advertisement", "ad", "sponsored", "PR"], ["関連記事", "広告", "プロモーション"]),
        "advertisement",
    ),
    _rule(_prefix(["share", "tweet", "facebook", "line"], ["シェア", "ツイート"]), "social share"),
    _rule(
        _prefix(["cookie", "privacy", "terms"], ["クッキー", "プライバシー", "利用規約"]),
        "cookie or privacy notice",
    ),
    _rule(_prefix(["subscribe", "newsletter"], ["登録", "メルマガ"]), "subscribe prompt"),
    _rule(_prefix(["follow", "social", "sns"], ["フォロー"]), "follow prompt"),
    _rule(_prefix([r"more\s+(?:news|articles)"], ["その他のニュース"]), "more news"),
    _rule(_prefix(["navigation", "menu"], ["ナビゲーション", "メニュー"]), "navigation label"),
    _rule(_prefix(["category", "tag"], ["カテゴリ", "タグ"]), "category label"),
    _rule(_prefix(["date", "time", "published"], ["日時", "投稿日"]), "date byline"),
    _rule(_prefix(["author", "writer"], ["著者", "筆者"]), "author byline"),
    _rule(_prefix(["source", "via"], ["出典", "引用元"]), "source byline"),
    _rule(_prefix([r"read\s+more"], ["続きを読む", "もっと見る"]), "read more"),
    _rule(_prefix([r"back\s+to"], ["戻る", "トップに戻る"]), "back link"),
    _rule(r"^\d{4}[-/年]\d{1,2}[-/月]\d{1,2}", "date"),
    _rule(r"^[\d\s\-/年月日時分秒:]+$", "date or time only"),
)

UI_ELEMENT_RULES: Tuple[LineRule, ...] = (
    _rule(r"^[<>«»‹›\[\](){}]+$", "brackets only"),
    _rule(r"^[\d\s\-+*.]+$", "digits or symbols only"),
    _rule(r"^[\s　]*[▼▲►◄△▽]+[\s　]*$", "arrow symbols"),
    _rule(r"^[\s　]*[■□●○◆◇★☆]+[\s　]*$", "bullet symbols"),
    _rule(_prefix(["click", "tap", "press"], ["クリック", "タップ", "プレス"]), "click prompt"),
    _rule(_prefix(["here", "above", "below"], ["こちら", "ここ", "上記", "下記"]), "pointer prompt"),
)


def rejection_reason(line: str, rules: Iterable[LineRule]) -> Optional[str]:
    """Return the reason of the first rule rejecting ``line``, if any."""
    for rule in rules:
        if rule.rejects(line):
            return rule.reason
    return None


class ContentCleaner:
    """Drops boilerplate, navigation and decoration lines from plain text."""

    def __init__(
        self,
        config: Optional[CleanerConfig] = None,
        rules: Optional[Sequence[LineRule]] = None,
    ) -> None:
        self.config = config or CleanerConfig()
        repeated = LineRule(
            re.compile(r"(.)\1{%d,}" % self.config.max_repeated_chars),
            "repeated characters",
            max_length=self.config.long_line_threshold,
        )
        if rules is None:
            rules = BOILERPLATE_RULES + UI_ELEMENT_RULES
        self.rules: Tuple[LineRule, ...] = (repeated, *rules)

    def keep(self, line: str) -> bool:
        if len(line) < self.config.min_line_length:
            logger.debug("Dropping short line: %r", line[:50])
            return False
        reason = rejection_reason(line, self.rules)
        if reason is not None:
            logger.debug("Dropping line (%s): %r", reason, line[:50])
            return False
        return True

    def clean(self, text: str) -> str:
        lines = [line.strip() for line in text.split("\n")]
        kept: List[str] = [line for line in lines if line and self.keep(line)]
        logger.debug("Cleaner kept %d of %d lines", len(kept), len(lines))
        return "\n\n".join(kept)


_DEFAULT_CLEANER = ContentCleaner()


def clean(text: str) -> str:
    """Clean ``text`` with the default thresholds and rule set."""
    return _DEFAULT_CLEANER.clean(text)
