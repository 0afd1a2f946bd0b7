"""Shared fixtures: the example vocabulary and model-file writers."""

import base64
import json
from pathlib import Path

import pytest

from tekkentok.encode_decode import Tokenizer
from tekkentok.model import TokenizerConfig, Vocabulary

EXAMPLE_MERGED = {
    b"th": 256,
    b"he": 257,
    b"er": 258,
    b"in": 259,
    b"the": 260,
    b"ing": 261,
    b"tion": 262,
    b"and": 263,
    b"for": 264,
}
EXAMPLE_NUM_SPECIAL = 5


def byte_pairs() -> list[tuple[bytes, int]]:
    return [(bytes([b]), b) for b in range(256)]


def example_pairs() -> list[tuple[bytes, int]]:
    """Single bytes 0-255 plus a handful of common English merges."""
    return byte_pairs() + list(EXAMPLE_MERGED.items())


def write_model(
    path: Path,
    pairs: list[tuple[bytes, int]],
    *,
    vocab_size: int = 300,
    num_special_tokens: int = EXAMPLE_NUM_SPECIAL,
    version: str = "example",
    pattern: str = "pattern",
) -> Path:
    """Write a model file in the tekken JSON layout."""
    payload = {
        "config": {
            "default_vocab_size": vocab_size,
            "default_num_special_tokens": num_special_tokens,
            "pattern": pattern,
            "version": version,
        },
        "vocab": [
            {"token_bytes": base64.b64encode(token).decode("ascii"), "rank": rank}
            for token, rank in pairs
        ],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


@pytest.fixture
def example_vocab() -> Vocabulary:
    return Vocabulary.from_pairs(example_pairs())


@pytest.fixture
def make_tokenizer():
    """Return a builder for tokenizers over arbitrary pairs."""

    def build(
        pairs: list[tuple[bytes, int]] | None = None,
        num_special_tokens: int = EXAMPLE_NUM_SPECIAL,
        vocab_size: int = 300,
        **options,
    ) -> Tokenizer:
        config = TokenizerConfig(
            vocab_size=vocab_size,
            num_special_tokens=num_special_tokens,
            pattern="pattern",
            version="example",
        )
        vocab = Vocabulary.from_pairs(example_pairs() if pairs is None else pairs)
        return Tokenizer(config, vocab, **options)

    return build


@pytest.fixture
def example_tokenizer(make_tokenizer) -> Tokenizer:
    return make_tokenizer()


@pytest.fixture
def example_model_file(tmp_path: Path) -> Path:
    return write_model(tmp_path / "model.json", example_pairs())
