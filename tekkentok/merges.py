"""Derive BPE merge rules from a pretrained vocabulary."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator

from .model import MergeRule, Vocabulary

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeTable:
    """Merge rules sorted by ascending rank, plus a pair -> rank index."""

    rules: tuple[MergeRule, ...] = ()
    pair_ranks: dict[tuple[bytes, bytes], int] = field(default_factory=dict, repr=False)

    @classmethod
    def from_rules(cls, rules: list[MergeRule]) -> "MergeTable":
        ordered = tuple(sorted(rules, key=lambda rule: rule.rank))
        return cls(rules=ordered, pair_ranks={rule.as_tuple(): rule.rank for rule in ordered})

    def rank_of(self, left: bytes, right: bytes) -> int | None:
        """Return the priority of merging ``left`` and ``right``, if such a rule exists."""
        return self.pair_ranks.get((left, right))

    def __iter__(self) -> Iterator[MergeRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __bool__(self) -> bool:
        return bool(self.rules)


def find_split(token: bytes, vocab: Vocabulary) -> tuple[bytes, bytes] | None:
    """
    Find the first split of ``token`` whose halves are both vocabulary entries.

    Args:
        token: Multi-byte token to split.
        vocab: Vocabulary the halves must belong to.

    Returns:
        ``(prefix, suffix)`` for the smallest valid split position, or ``None``.
    """
    for i in range(1, len(token)):
        first, second = token[:i], token[i:]
        if first in vocab and second in vocab:
            return first, second
    return None


def build_merge_table(vocab: Vocabulary) -> MergeTable:
    """
    Reconstruct merge rules from a vocabulary.

    Each token longer than one byte contributes the first split (scanning
    positions left to right) whose prefix and suffix are both in the vocabulary.
    The first valid split wins even when a later split would also be valid.
    Tokens without any valid split contribute nothing.

    Args:
        vocab: Vocabulary to derive merges from.

    Returns:
        Immutable merge table sorted by the merged token's rank.
    """
    rules: list[MergeRule] = []
    unsplittable = 0
    for token, rank in vocab:
        if len(token) < 2:
            continue
        split = find_split(token, vocab)
        if split is None:
            unsplittable += 1
            continue
        rules.append(MergeRule(left=split[0], right=split[1], rank=rank))

    table = MergeTable.from_rules(rules)
    log.debug(
        f"derived {len(table)} merge rules from {len(vocab)} tokens "
        f"({unsplittable} multi-byte tokens have no valid split)"
    )
    return table
