"""Merge backends that turn a byte sequence into BPE pieces."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Final, Literal

from .errors import BackendError
from .merges import MergeTable
from .utils import TokenChain, build_pair_heap, push_pair, select_next_merge

log = logging.getLogger(__name__)


class MergeBackend(ABC):
    """Applies a merge table to single-byte pieces until no rule applies."""

    name: str = "base"

    def __init__(self, table: MergeTable) -> None:
        self.table = table

    @classmethod
    def is_available(cls) -> bool:
        """Whether this backend can run in the current environment."""
        return True

    @abstractmethod
    def apply(self, pieces: list[bytes]) -> list[bytes]:
        """Return the merged pieces for ``pieces``; the input list is left untouched."""


class ReferenceBackend(MergeBackend):
    """
    Literal rescanning loop.

    Every step walks the merge rules in rank order and applies the first rule
    found anywhere in the sequence at its leftmost position, then starts over.
    Quadratic or worse in the sequence length; kept as the behavioral
    reference for faster backends.
    """

    name = "reference"

    def apply(self, pieces: list[bytes]) -> list[bytes]:
        tokens = list(pieces)
        while len(tokens) > 1:
            pairs = list(zip(tokens, tokens[1:]))
            best_pos = self._find_best(pairs)
            if best_pos is None:
                break
            tokens[best_pos : best_pos + 2] = [tokens[best_pos] + tokens[best_pos + 1]]
        return tokens

    def _find_best(self, pairs: list[tuple[bytes, bytes]]) -> int | None:
        for rule in self.table:
            target = rule.as_tuple()
            for i, pair in enumerate(pairs):
                if pair == target:
                    return i
        return None


class HeapBackend(MergeBackend):
    """
    Min-heap of adjacent pairs keyed by (rank, position) over a linked chain.

    Picks the same pair as ``ReferenceBackend`` at every step (lowest rank,
    then leftmost position) in O(n log n).
    """

    name = "heap"

    def apply(self, pieces: list[bytes]) -> list[bytes]:
        if len(pieces) < 2 or not self.table:
            return list(pieces)
        chain = TokenChain(pieces)
        heap = build_pair_heap(self.table, chain)
        while True:
            left = select_next_merge(heap, self.table, chain)
            if left is None:
                break
            chain.merge(left)
            push_pair(heap, self.table, chain, chain.prev[left])
            push_pair(heap, self.table, chain, left)
        return chain.pieces()


BackendName = Literal["auto", "heap", "reference"]

_BACKENDS: Final[dict[str, type[MergeBackend]]] = {
    "heap": HeapBackend,
    "reference": ReferenceBackend,
}

# "auto" takes the first available entry
_PREFERENCE: Final[tuple[str, ...]] = ("heap", "reference")


def list_backends() -> list[str]:
    """Return available backend names."""
    return [name for name, cls in _BACKENDS.items() if cls.is_available()]


def get_backend(name: str, table: MergeTable) -> MergeBackend:
    """
    Create a merge backend by name.

    :param name: "auto", "heap" or "reference".
    :param table: Merge table the backend applies.
    :raises BackendError: If the name is unknown or the backend is unavailable.
    """
    key = name.lower()
    if key == "auto":
        for candidate in _PREFERENCE:
            if _BACKENDS[candidate].is_available():
                key = candidate
                break
    backend_cls = _BACKENDS.get(key)
    if backend_cls is None or not backend_cls.is_available():
        raise BackendError(name, available=["auto", *list_backends()])
    log.debug(f"using {backend_cls.name} merge backend")
    return backend_cls(table)


__all__ = [
    "BackendName",
    "MergeBackend",
    "ReferenceBackend",
    "HeapBackend",
    "list_backends",
    "get_backend",
]
