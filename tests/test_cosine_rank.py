from dataclasses import dataclass

import pytest

from reporank.rank.cosine import Document, cosine_score, rank_documents, score_documents, weighted_vector


@dataclass
class Item:
    name: str
    text: str


def test_cosine_of_vector_with_itself_is_one() -> None:
    v = {"react": 1.3, "native": 0.4, "mobile": 2.0}
    assert cosine_score(v, v) == pytest.approx(1.0)


def test_zero_vector_scores_zero() -> None:
    v = {"react": 1.0}
    assert cosine_score({}, v) == 0.0
    assert cosine_score({"react": 0.0}, v) == 0.0
    assert cosine_score({}, {}) == 0.0


def test_cosine_is_symmetric() -> None:
    a = {"x": 1.0, "y": 2.0, "z": 0.5}
    b = {"y": 1.5, "w": 3.0}
    assert cosine_score(a, b) == cosine_score(b, a)
    assert 0.0 < cosine_score(a, b) < 1.0


def test_weighted_vector_uses_zero_for_unknown_terms() -> None:
    assert weighted_vector(["a", "a", "b"], {"a": 0.5}) == {"a": 1.0, "b": 0.0}


def test_rank_puts_best_match_first() -> None:
    docs = [
        Document(id=1, text="a small game engine"),
        Document(id=2, text="python web framework for building apis"),
        Document(id=3, text="terminal colors"),
    ]
    ranked = rank_documents("fast python web framework", docs)
    assert [d.id for d in ranked] == [2, 1, 3]


def test_equal_scores_keep_input_order() -> None:
    items = [
        Item("a", "same words here"),
        Item("b", "nothing relevant"),
        Item("c", "same words here"),
        Item("d", "other stuff"),
        Item("e", "more stuff"),
    ]
    ranked = rank_documents("words", items)
    assert ranked == [items[0], items[2], items[1], items[3], items[4]]
    assert ranked[0] is items[0]
    assert ranked[1] is items[2]


def test_empty_query_is_a_no_op() -> None:
    items = [Item("b", "beta"), Item("a", "alpha")]
    ranked = rank_documents("the and a", items)
    assert ranked == items
    assert all(x is y for x, y in zip(ranked, items))
    assert score_documents("", items) == []


def test_no_documents() -> None:
    assert rank_documents("python web", []) == []


def test_custom_text_getter() -> None:
    items = [{"desc": "cooking recipes"}, {"desc": "rust compiler internals"}, {"desc": "gardening tips"}]
    ranked = rank_documents("rust compiler", items, text_of=lambda d: d["desc"])
    assert ranked[0] is items[1]


def test_scores_are_in_unit_range() -> None:
    docs = [Document(id=i, text=t) for i, t in enumerate(["go http router", "go", "http client"])]
    scored = score_documents("go http router library", docs)
    assert [s.item.id for s in scored] == [0, 1, 2]
    assert all(0.0 <= s.score <= 1.0 + 1e-12 for s in scored)
