"""Matching strategies for pulling one section out of a free-text report.

Strategies are tried in order, most structurally specific first. Each one
returns the cleaned section text, or None when it finds nothing usable.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from functools import lru_cache

from skinreport.extraction.rules import FieldRules, RuleTable

_FLAGS = re.IGNORECASE | re.DOTALL

# A section opened by an emphasised heading runs to the next emphasis marker
# or markdown heading line.
_EMPHASIS_SECTION_END = r"(?=\*\*|\n[ \t]*#{1,6}[ \t]|\Z)"

# Optional list/heading decoration in front of a plain "Label:" line.
_LINE_PREFIX = r"(?:[-•*][ \t]+|#{1,6}[ \t]*|\d+[.)][ \t]*)?"

_LEADING_BULLETS_RE = re.compile(r"^[-–—•*\s]+")
_SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|\Z)")


def cleanup(text: str) -> str:
    """Strip leading bullets/dashes, fold newlines into single spaces, trim."""
    if not text:
        return ""
    text = _LEADING_BULLETS_RE.sub("", text.strip())
    lines = (line.strip() for line in text.splitlines())
    return " ".join(line for line in lines if line)


def split_sentences(text: str) -> list[str]:
    """Split text into cleaned sentences ending in ., ! or ? (plus a trailing fragment)."""
    sentences: list[str] = []
    for match in _SENTENCE_RE.finditer(text or ""):
        sentence = cleanup(match.group(0))
        if sentence:
            sentences.append(sentence)
    return sentences


def label_pattern(label: str) -> str:
    """Regex for a heading label, tolerant of how whitespace between words is written."""
    return r"\s+".join(re.escape(word) for word in label.split())


@lru_cache(maxsize=1024)
def _compile(pattern: str, flags: int) -> re.Pattern[str]:
    return re.compile(pattern, flags)


class MatchStrategy(ABC):
    """Uniform contract for a single extraction strategy."""

    name: str = "base"

    @abstractmethod
    def try_match(self, text: str, rules: FieldRules, table: RuleTable) -> str | None:
        """Return cleaned text for the field, or None if this strategy finds nothing."""


class HeadingStrategy(MatchStrategy):
    """Capture the span after a heading built from each of the field's labels."""

    template: str = ""
    flags: int = _FLAGS

    def build_pattern(self, label: str, table: RuleTable) -> str:
        return self.template.replace("{label}", label_pattern(label))

    def try_match(self, text: str, rules: FieldRules, table: RuleTable) -> str | None:
        for label in rules.labels:
            pattern = _compile(self.build_pattern(label, table), self.flags)
            match = pattern.search(text)
            if match is None:
                continue
            value = cleanup(match.group(1))
            if value:
                return value
        return None


class StrongHeadingStrategy(HeadingStrategy):
    """``**Label ...**`` followed by the section body."""

    name = "strong_heading"
    template = r"\*\*[ \t]*{label}[^*\n]*\*\*[ \t]*:?(.*?)" + _EMPHASIS_SECTION_END


class NumberedHeadingStrategy(HeadingStrategy):
    """``**3. Label ...**`` followed by the section body."""

    name = "numbered_heading"
    template = r"\*\*[ \t]*\d+[.)][ \t]*{label}[^*\n]*\*\*[ \t]*:?(.*?)" + _EMPHASIS_SECTION_END


class ColonHeadingStrategy(HeadingStrategy):
    """A line starting with ``Label:``.

    The section stops at the next emphasised or markdown heading line, at a
    blank line followed by a ``Title:`` line, or at a line that opens with any
    label registered in the table.
    """

    name = "colon_heading"
    flags = _FLAGS | re.MULTILINE

    def build_pattern(self, label: str, table: RuleTable) -> str:
        known = "|".join(label_pattern(item) for item in table.heading_labels()) or label_pattern(label)
        end = (
            r"(?="
            r"\n[ \t]*\*\*"
            r"|\n[ \t]*#{1,6}[ \t]"
            r"|\n[ \t]*\n[ \t]*(?-i:[A-Z])[^\n:]{0,48}:"
            rf"|\n[ \t]*{_LINE_PREFIX}(?:{known})[ \t]*:"
            r"|\Z)"
        )
        return rf"^[ \t]*{_LINE_PREFIX}{label_pattern(label)}[ \t]*:(.*?){end}"


class InlineLabelStrategy(HeadingStrategy):
    """``**Label**: inline text`` up to the next emphasis marker."""

    name = "inline_label"
    flags = re.IGNORECASE
    template = r"\*\*[ \t]*{label}[ \t]*\*\*[ \t]*:?[ \t]*([^*]+)"


class KeywordHarvestStrategy(MatchStrategy):
    """Fallback: every sentence that mentions one of the field's keywords.

    Sentences are grouped by keyword in declaration order, so the result can
    read out of order relative to the report. A sentence matched by two
    keywords appears once per keyword.
    """

    name = "keyword_harvest"

    def try_match(self, text: str, rules: FieldRules, table: RuleTable) -> str | None:
        if not rules.keywords:
            return None
        sentences = split_sentences(text)
        if not sentences:
            return None

        lowered = [sentence.lower() for sentence in sentences]
        collected: list[str] = []
        for keyword in rules.keywords:
            needle = keyword.lower()
            seen: set[str] = set()
            for sentence, low in zip(sentences, lowered):
                if needle in low and sentence not in seen:
                    seen.add(sentence)
                    collected.append(sentence)

        value = " ".join(collected).strip()
        return value or None


DEFAULT_STRATEGIES: tuple[MatchStrategy, ...] = (
    StrongHeadingStrategy(),
    NumberedHeadingStrategy(),
    ColonHeadingStrategy(),
    InlineLabelStrategy(),
    KeywordHarvestStrategy(),
)
