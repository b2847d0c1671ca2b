from __future__ import annotations

from typing import Iterator
import unicodedata

STOPWORDS = frozenset(
    {
        "the",
        "is",
        "at",
        "which",
        "on",
        "and",
        "a",
        "an",
        "with",
        "for",
        "to",
        "of",
        "in",
        "that",
        "this",
        "it",
        "by",
        "from",
        "as",
        "are",
        "be",
        "or",
        "was",
        "were",
        "but",
        "has",
        "have",
        "had",
        "not",
        "you",
        "your",
    }
)

# Math and currency symbols that are not in the Unicode "P*" categories.
_EXTRA_SEPARATORS = frozenset("$+<=>^`|~")


def _is_separator(ch: str) -> bool:
    return ch in _EXTRA_SEPARATORS or unicodedata.category(ch).startswith("P")


def _blank_punctuation(text: str) -> str:
    return "".join(" " if _is_separator(ch) else ch for ch in text)


def tokenize(text: str | None) -> Iterator[str]:
    """Yield lower-cased index terms from ``text`` with punctuation and stop words removed."""
    if not text:
        return
    for tok in _blank_punctuation(text.lower()).split():
        if tok not in STOPWORDS:
            yield tok
