from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Callable, Hashable, Sequence, TypeVar

import numpy as np

from reporank.query.keywords import tokenize
from reporank.rank.idf import compute_idf, term_freq

T = TypeVar("T")


@dataclass(slots=True)
class Document:
    id: Hashable
    text: str


@dataclass(slots=True)
class ScoredItem:
    item: Any
    score: float


def _default_text(item: Any) -> str:
    text = getattr(item, "text", None)
    if isinstance(text, str):
        return text
    return str(item)


def weighted_vector(tokens: Sequence[str], idf: dict[str, float]) -> dict[str, float]:
    return {term: count * idf.get(term, 0.0) for term, count in term_freq(tokens).items()}


def cosine_score(a: dict[str, float], b: dict[str, float]) -> float:
    """Cosine similarity of two sparse vectors; a zero-norm side counts as norm 1."""
    terms = sorted(a.keys() | b.keys())
    va = np.fromiter((a.get(t, 0.0) for t in terms), dtype=np.float64, count=len(terms))
    vb = np.fromiter((b.get(t, 0.0) for t in terms), dtype=np.float64, count=len(terms))
    na = float(np.linalg.norm(va)) or 1.0
    nb = float(np.linalg.norm(vb)) or 1.0
    score = float(np.dot(va, vb)) / (na * nb)
    return score if math.isfinite(score) else 0.0


def score_documents(
    query: str,
    items: Sequence[T],
    text_of: Callable[[T], str] | None = None,
) -> list[ScoredItem]:
    """Score every item against ``query`` in input order.

    Returns an empty list when the query has no index terms.
    """
    getter = text_of or _default_text
    q_tokens = list(tokenize(query))
    if not q_tokens or not items:
        return []

    docs_tokens = [list(tokenize(getter(item))) for item in items]
    idf = compute_idf(docs_tokens + [q_tokens])

    q_vec = weighted_vector(q_tokens, idf)
    return [
        ScoredItem(item=item, score=cosine_score(q_vec, weighted_vector(tokens, idf)))
        for item, tokens in zip(items, docs_tokens)
    ]


def rank_documents(
    query: str,
    items: Sequence[T],
    text_of: Callable[[T], str] | None = None,
) -> list[T]:
    scored = score_documents(query, items, text_of)
    if not scored:
        return list(items)
    order = sorted(range(len(scored)), key=lambda i: (-scored[i].score, i))
    return [scored[i].item for i in order]
