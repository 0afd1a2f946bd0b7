"""Test that merge backends agree with the reference rescanning loop."""

import random

import pytest

from conftest import byte_pairs, example_pairs

from tekkentok.backends import HeapBackend, ReferenceBackend, get_backend, list_backends
from tekkentok.errors import BackendError
from tekkentok.merges import build_merge_table
from tekkentok.model import Vocabulary


def _pieces(text: str) -> list[bytes]:
    data = text.encode("utf-8")
    return [data[i : i + 1] for i in range(len(data))]


# overlapping and chained merges: runs of "a" and "ab" stress leftmost selection
OVERLAP_PAIRS = byte_pairs() + [
    (b"aa", 256),
    (b"ab", 257),
    (b"aaa", 258),
    (b"ba", 259),
    (b"aab", 260),
    (b"abab", 261),
    (b"aaaa", 262),
]


@pytest.mark.parametrize("pairs", [example_pairs(), OVERLAP_PAIRS], ids=["example", "overlap"])
def test_heap_matches_reference_on_random_text(pairs) -> None:
    table = build_merge_table(Vocabulary.from_pairs(pairs))
    reference = ReferenceBackend(table)
    heap = HeapBackend(table)
    rng = random.Random(1234)
    alphabet = "aabthe ringfo"
    for _ in range(200):
        text = "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 40)))
        assert heap.apply(_pieces(text)) == reference.apply(_pieces(text)), text


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("aaa", [b"aa", b"a"]),
        # (a, a) keeps winning over (a, aaa), so b"aaaa" is never formed
        ("aaaa", [b"aa", b"aa"]),
        ("abab", [b"abab"]),
        ("aab", [b"aa", b"b"]),
    ],
)
def test_overlapping_runs(text, expected) -> None:
    table = build_merge_table(Vocabulary.from_pairs(OVERLAP_PAIRS))
    assert ReferenceBackend(table).apply(_pieces(text)) == expected
    assert HeapBackend(table).apply(_pieces(text)) == expected


def test_apply_leaves_input_untouched() -> None:
    table = build_merge_table(Vocabulary.from_pairs(example_pairs()))
    pieces = _pieces("the")
    for backend in (ReferenceBackend(table), HeapBackend(table)):
        backend.apply(pieces)
        assert pieces == [b"t", b"h", b"e"]


def test_short_inputs() -> None:
    table = build_merge_table(Vocabulary.from_pairs(example_pairs()))
    for backend in (ReferenceBackend(table), HeapBackend(table)):
        assert backend.apply([]) == []
        assert backend.apply([b"x"]) == [b"x"]


def test_get_backend_by_name() -> None:
    table = build_merge_table(Vocabulary.from_pairs(example_pairs()))
    assert isinstance(get_backend("auto", table), HeapBackend)
    assert isinstance(get_backend("HEAP", table), HeapBackend)
    assert isinstance(get_backend("reference", table), ReferenceBackend)


def test_unknown_backend() -> None:
    table = build_merge_table(Vocabulary.from_pairs(example_pairs()))
    with pytest.raises(BackendError) as excinfo:
        get_backend("tiktoken", table)
    assert "heap" in excinfo.value.available


def test_list_backends() -> None:
    assert list_backends() == ["heap", "reference"]


def test_tokenizer_backends_agree(make_tokenizer) -> None:
    heap = make_tokenizer(backend="heap")
    reference = make_tokenizer(backend="reference")
    assert heap.backend_name == "heap"
    assert reference.backend_name == "reference"
    text = "and for the information, testing there in the thing"
    assert heap.encode(text) == reference.encode(text)
