from __future__ import annotations

from collections import Counter
import math
from typing import Iterable, Sequence


def term_freq(tokens: Iterable[str]) -> dict[str, int]:
    return dict(Counter(tokens))


def compute_idf(token_sets: Sequence[Iterable[str]]) -> dict[str, float]:
    """Inverse document frequency over ``token_sets``.

    Uses ``ln(N / (1 + df))``. A term found in every set gets a small
    negative weight, which callers rely on for score parity.
    """
    df: Counter[str] = Counter()
    for tokens in token_sets:
        df.update(set(tokens))
    n = len(token_sets) or 1
    return {term: math.log(n / (1 + count)) for term, count in df.items()}
