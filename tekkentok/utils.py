"""Linked token chain and heap helpers for merge selection."""

from __future__ import annotations

import heapq

from .merges import MergeTable

# (merge rank, left position, right position)
HeapEntry = tuple[int, int, int]

NO_NODE = -1


class TokenChain:
    """
    Doubly linked list over token pieces.

    Positions are the original byte offsets, so a surviving node keeps its
    position across merges and positions always increase left to right.
    """

    def __init__(self, pieces: list[bytes]) -> None:
        n = len(pieces)
        self.values: list[bytes] = list(pieces)
        self.prev: list[int] = list(range(-1, n - 1))
        self.next: list[int] = list(range(1, n + 1))
        if n:
            self.next[-1] = NO_NODE
        self.alive: list[bool] = [True] * n

    def merge(self, left: int) -> None:
        """Fold the node right of ``left`` into ``left``."""
        right = self.next[left]
        self.values[left] += self.values[right]
        self.alive[right] = False
        after = self.next[right]
        self.next[left] = after
        if after != NO_NODE:
            self.prev[after] = left

    def pieces(self) -> list[bytes]:
        out: list[bytes] = []
        node = 0 if self.values else NO_NODE
        while node != NO_NODE:
            out.append(self.values[node])
            node = self.next[node]
        return out


def push_pair(heap: list[HeapEntry], table: MergeTable, chain: TokenChain, left: int) -> None:
    """Push the pair starting at ``left`` onto the heap if a merge rule covers it."""
    if left == NO_NODE:
        return
    right = chain.next[left]
    if right == NO_NODE:
        return
    rank = table.rank_of(chain.values[left], chain.values[right])
    if rank is not None:
        heapq.heappush(heap, (rank, left, right))


def build_pair_heap(table: MergeTable, chain: TokenChain) -> list[HeapEntry]:
    """
    Build a min-heap over every adjacent pair that has a merge rule.

    Args:
        table: Merge table to rank pairs with.
        chain: Token chain to scan.

    Returns:
        Heap ordered by (rank, left position).
    """
    heap: list[HeapEntry] = []
    for left in range(len(chain.values) - 1):
        rank = table.rank_of(chain.values[left], chain.values[left + 1])
        if rank is not None:
            heap.append((rank, left, left + 1))
    heapq.heapify(heap)
    return heap


def select_next_merge(
    heap: list[HeapEntry], table: MergeTable, chain: TokenChain
) -> int | None:
    """
    Pop the lowest-ranked, leftmost pair that is still present in the chain.

    Entries are invalidated lazily: an entry is stale when either node was
    merged away, the nodes are no longer adjacent, or the right node grew so
    the pair no longer carries the recorded rank.

    Returns:
        Left position of the pair to merge, or ``None`` when nothing applies.
    """
    while heap:
        rank, left, right = heapq.heappop(heap)
        if not (chain.alive[left] and chain.alive[right]) or chain.next[left] != right:
            continue
        if table.rank_of(chain.values[left], chain.values[right]) != rank:
            continue
        return left
    return None
