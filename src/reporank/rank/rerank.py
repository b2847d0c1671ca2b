from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from reporank.config import RankConfig
from reporank.rank.cosine import Document, rank_documents

logger = logging.getLogger(__name__)

T = TypeVar("T")

Enricher = Callable[[T], Awaitable[str | None]]


class RankingSession:
    """Liveness flag for one ranking run; cancel it when the caller goes away."""

    def __init__(self) -> None:
        self.alive = True

    def cancel(self) -> None:
        self.alive = False


class _Cancelled(Exception):
    pass


def is_descriptive(query: str | None, min_chars: int = 20, min_words: int = 3) -> bool:
    if not query:
        return False
    q = query.strip()
    if not q:
        return False
    return len(q) > min_chars or len(q.split()) >= min_words


def base_text(item: Any) -> str:
    name = getattr(item, "name", None) or ""
    description = getattr(item, "description", None) or ""
    return f"{name} {description}"


async def _safe_enrich(enrich: Enricher[T], item: T) -> str:
    try:
        text = await enrich(item)
    except Exception as exc:
        logger.debug("enrichment failed for %r: %s", getattr(item, "id", item), exc)
        return ""
    return text or ""


async def enrich_in_windows(
    items: Sequence[T],
    enrich: Enricher[T],
    concurrency: int,
    session: RankingSession,
) -> list[str]:
    """Fetch extra text for ``items``, ``concurrency`` at a time.

    A window is fully settled before the next one is started.
    """
    size = max(1, concurrency)
    texts: list[str] = []
    for start in range(0, len(items), size):
        if not session.alive:
            raise _Cancelled
        window = [asyncio.ensure_future(_safe_enrich(enrich, item)) for item in items[start : start + size]]
        resolved = await asyncio.gather(*window)
        if not session.alive:
            raise _Cancelled
        texts.extend(resolved)
    return texts


async def maybe_rank(
    query: str,
    items: Sequence[T],
    enrich: Enricher[T] | None = None,
    *,
    settings: RankConfig | None = None,
    session: RankingSession | None = None,
    on_ranked: Callable[[list[T]], Any] | None = None,
    describe: Callable[[T], str] = base_text,
) -> list[T]:
    """Reorder ``items`` by TF-IDF similarity to ``query`` when the query is descriptive.

    Only the first ``enrich_limit`` items are enriched and scored; the rest
    follow in their original order. Any failure, or a cancelled session,
    returns ``items`` in their original order.
    """
    cfg = settings or RankConfig()
    original = list(items)
    live = session or RankingSession()
    if not original or not is_descriptive(query, cfg.descriptive_chars, cfg.descriptive_words):
        return original

    try:
        limit = min(cfg.enrich_limit, len(original))
        head, tail = original[:limit], original[limit:]
        if enrich is not None:
            extras = await enrich_in_windows(head, enrich, cfg.concurrency, live)
        else:
            extras = [""] * len(head)

        docs = [Document(id=idx, text=f"{describe(item)} {extra}") for idx, (item, extra) in enumerate(zip(head, extras))]
        ranked = [head[doc.id] for doc in rank_documents(query, docs)] + tail

        if not live.alive:
            raise _Cancelled
        if on_ranked is not None:
            on_ranked(ranked)
    except _Cancelled:
        logger.debug("ranking abandoned for %r", query)
        return original
    except Exception:
        logger.debug("ranking degraded for %r; keeping original order", query, exc_info=True)
        return original
    return ranked
