from __future__ import annotations

import re

_FENCED_CODE_RE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE_RE = re.compile(r"`[^`]*`")
_IMAGE_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)")
_LINK_RE = re.compile(r"\[[^\]]*\]\([^)]*\)")
_STRUCTURE_RE = re.compile(r"[#>*_~-]+")
_WS_RE = re.compile(r"\s+")


def strip_markdown(md: str | None) -> str:
    """Drop code, images, links and structural markup, leaving plain prose.

    Every removed span is replaced with a space so neighbouring words stay
    separate tokens.
    """
    if not md:
        return ""
    text = _FENCED_CODE_RE.sub(" ", md)
    text = _INLINE_CODE_RE.sub(" ", text)
    text = _IMAGE_RE.sub(" ", text)
    text = _LINK_RE.sub(" ", text)
    text = _STRUCTURE_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def summarize_to_words(text: str | None, words: int = 20) -> str:
    if not text:
        return ""
    candidate = strip_markdown(text)[:1000]
    toks = candidate.split()
    if len(toks) <= words:
        return " ".join(toks)
    return " ".join(toks[:words]) + "..."
