"""Throughput and compression measurements for a loaded tokenizer."""

from __future__ import annotations

import time
from typing import Mapping, Protocol, Sequence

SECONDS_EPS = 1e-12


class SupportsEncodeDecode(Protocol):
    def encode(self, text: str) -> list[int]: ...

    def decode(self, ids: Sequence[int]) -> str: ...


def measure_encoding_speed(
    tokenizer: SupportsEncodeDecode,
    text: str,
    warmup: int = 1,
    trials: int = 3,
) -> float:
    """
    Return tokens/second for encoding.

    Args:
        tokenizer: Tokenizer to measure.
        text: Text to encode.
        warmup: Number of untimed runs.
        trials: Number of timed runs.
    """
    for _ in range(warmup):
        tokenizer.encode(text)
    total_tokens = 0
    total_time = 0.0
    for _ in range(max(trials, 1)):
        start = time.perf_counter()
        ids = tokenizer.encode(text)
        total_time += time.perf_counter() - start
        total_tokens += len(ids)
    return total_tokens / max(total_time, SECONDS_EPS)


def measure_decoding_speed(
    tokenizer: SupportsEncodeDecode,
    ids: Sequence[int],
    warmup: int = 1,
    trials: int = 3,
) -> float:
    """Return tokens/second for decoding ``ids``."""
    for _ in range(warmup):
        tokenizer.decode(ids)
    total_time = 0.0
    for _ in range(max(trials, 1)):
        start = time.perf_counter()
        tokenizer.decode(ids)
        total_time += time.perf_counter() - start
    return (len(ids) * max(trials, 1)) / max(total_time, SECONDS_EPS)


def bytes_per_token(text: str, num_tokens: int) -> float:
    """UTF-8 bytes covered by each token on average (higher means better compression)."""
    return len(text.encode("utf-8")) / max(num_tokens, 1)


def average_tokens_per_word(num_tokens: int, num_words: int) -> float:
    return num_tokens / max(num_words, 1)


def baseline_token_counts(text: str) -> Mapping[str, int]:
    """
    Return token counts for trivial byte, character and whitespace tokenizers.

    Args:
        text: Text to count.

    Returns:
        Mapping of baseline name to count.
    """
    return {
        "byte": len(text.encode("utf-8")),
        "character": len(text),
        "whitespace": len(text.split()),
    }
