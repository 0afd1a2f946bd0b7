"""Data classes, configuration, and model-file loading for the Tekken tokenizer."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedVocabulary, ModelMalformed, ModelNotFound

log = logging.getLogger(__name__)


class TokenizerConfig(BaseModel):
    """Scalars read from the ``config`` block of a model file."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Advertised total; independent of how many vocab entries were actually loaded
    vocab_size: int = Field(0, alias="default_vocab_size", ge=0)
    # How many of the reserved special token slots occupy the low end of the id space
    num_special_tokens: int = Field(0, alias="default_num_special_tokens", ge=0)
    # Pre-tokenization regex; stored for format fidelity, never executed
    pattern: str = ""
    version: str = "v3"


@dataclass(frozen=True)
class Vocabulary:
    """Bidirectional bytes <-> rank mapping, immutable once built."""

    token_to_rank: dict[bytes, int] = field(default_factory=dict, repr=False)
    rank_to_token: dict[int, bytes] = field(default_factory=dict, repr=False)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[bytes, int]]) -> "Vocabulary":
        """
        Build a vocabulary from ``(token_bytes, rank)`` pairs.

        Args:
            pairs: Iterable of token byte-strings and their ranks.

        Returns:
            Vocabulary holding every pair.

        Raises:
            MalformedVocabulary: If a token is empty, a rank is negative, or the
                pairs do not form a one-to-one mapping.
        """
        token_to_rank: dict[bytes, int] = {}
        rank_to_token: dict[int, bytes] = {}
        for token, rank in pairs:
            token = bytes(token)
            if not token:
                raise MalformedVocabulary("empty token", rank=rank)
            if rank < 0:
                raise MalformedVocabulary("negative rank", token=token, rank=rank)
            existing_rank = token_to_rank.get(token)
            if existing_rank is not None:
                if existing_rank == rank:
                    continue
                raise MalformedVocabulary(
                    f"token listed twice with ranks {existing_rank} and {rank}",
                    token=token,
                )
            if rank in rank_to_token:
                raise MalformedVocabulary(
                    f"rank shared with token {rank_to_token[rank]!r}",
                    token=token,
                    rank=rank,
                )
            token_to_rank[token] = rank
            rank_to_token[rank] = token
        return cls(token_to_rank=token_to_rank, rank_to_token=rank_to_token)

    def lookup(self, token: bytes) -> int | None:
        """Return the rank of ``token``, or ``None`` if it is not in the vocabulary."""
        return self.token_to_rank.get(token)

    def reverse_lookup(self, rank: int) -> bytes | None:
        """Return the token bytes for ``rank``, or ``None`` if the rank is unassigned."""
        return self.rank_to_token.get(rank)

    def __contains__(self, token: object) -> bool:
        return token in self.token_to_rank

    def __iter__(self) -> Iterator[tuple[bytes, int]]:
        return iter(self.token_to_rank.items())

    def __len__(self) -> int:
        return len(self.token_to_rank)


@dataclass(frozen=True)
class MergeRule:
    """
    Represents a merge like (b'th', b'e') -> b'the' with the merged token's rank.

    Args:
        left: Left byte-string of the merge.
        right: Right byte-string of the merge.
        rank: Rank of ``left + right``; lower ranks merge first.
    """

    left: bytes
    right: bytes
    rank: int

    def as_tuple(self) -> tuple[bytes, bytes]:
        return self.left, self.right

    @property
    def merged(self) -> bytes:
        return self.left + self.right


def _parse_vocab_entry(index: int, entry: Any) -> tuple[bytes, int]:
    """
    Decode one ``{"token_bytes": base64, "rank": int}`` entry.

    Args:
        index: Position of the entry, used in error messages.
        entry: Raw JSON value.

    Returns:
        Tuple of token bytes and rank.
    """
    if not isinstance(entry, dict) or "token_bytes" not in entry or "rank" not in entry:
        raise ModelMalformed(f"vocab entry {index} needs token_bytes and rank")
    rank = entry["rank"]
    if not isinstance(rank, int) or isinstance(rank, bool):
        raise ModelMalformed(f"vocab entry {index} has non-integer rank {rank!r}")
    try:
        token = base64.b64decode(entry["token_bytes"], validate=True)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise ModelMalformed(f"vocab entry {index} has invalid base64 token_bytes") from exc
    return token, rank


def load_model(path: Path | str) -> tuple[TokenizerConfig, Vocabulary]:
    """
    Load a Tekken model from a file in JSON format.

    Args:
        path: Path to the model file.

    Returns:
        Tuple containing the tokenizer configuration and the vocabulary.

    Raises:
        ModelNotFound: If the file does not exist.
        ModelMalformed: If the JSON cannot be parsed, the config block is missing
            or invalid, or a vocab entry cannot be decoded.
    """
    path = Path(path)
    if not path.is_file():
        raise ModelNotFound("tokenizer file not found", model_path=str(path))

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ModelMalformed(
            f"failed to parse tokenizer JSON: {exc}", model_path=str(path)
        ) from exc

    if not isinstance(payload, dict):
        raise ModelMalformed("model file must contain a JSON object", model_path=str(path))

    raw_config = payload.get("config")
    if not raw_config or not isinstance(raw_config, dict):
        raise ModelMalformed("missing config in tokenizer file", model_path=str(path))
    try:
        config = TokenizerConfig.model_validate(raw_config)
    except ValidationError as exc:
        raise ModelMalformed(f"invalid config: {exc}", model_path=str(path)) from exc

    raw_vocab = payload.get("vocab") or []
    if not isinstance(raw_vocab, list):
        raise ModelMalformed("vocab must be a list", model_path=str(path))
    vocab = Vocabulary.from_pairs(
        _parse_vocab_entry(idx, entry) for idx, entry in enumerate(raw_vocab)
    )

    if config.vocab_size and len(vocab) + config.num_special_tokens > config.vocab_size:
        log.warning(
            f"loaded {len(vocab)} vocab entries plus {config.num_special_tokens} "
            f"special tokens exceed advertised vocab size {config.vocab_size}"
        )
    log.debug(f"parsed {len(vocab)} vocab entries from {path}")
    return config, vocab
