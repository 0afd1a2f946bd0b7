"""Encoding and decoding logic for a pretrained Tekken BPE vocabulary."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, Sequence

from .backends import BackendName, MergeBackend, get_backend
from .errors import SpecialTokenEncountered
from .merges import MergeTable, build_merge_table
from .model import TokenizerConfig, Vocabulary, load_model
from .normalize import NormalizationForm, normalize_text
from .special import CANONICAL_SPECIAL_TOKENS, SpecialTokenPolicy, SpecialTokenRegistry

log = logging.getLogger(__name__)


class Tokenizer:
    """
    Read-only runtime wrapper around a loaded vocabulary.

    Special tokens occupy ids ``[0, num_special_tokens)``; a vocabulary token of
    rank ``r`` has id ``r + num_special_tokens``. Nothing is mutated after
    construction, so one instance can be shared across threads.
    """

    def __init__(
        self,
        config: TokenizerConfig,
        vocab: Vocabulary,
        *,
        special_tokens: Sequence[str] = CANONICAL_SPECIAL_TOKENS,
        backend: BackendName | str = "auto",
        normalization: NormalizationForm = "none",
    ) -> None:
        self.config = config
        self.vocab = vocab
        self.specials = SpecialTokenRegistry(config.num_special_tokens, special_tokens)
        self.merges: MergeTable = build_merge_table(vocab)
        self.normalization = normalization
        self._backend: MergeBackend = get_backend(backend, self.merges)

    @classmethod
    def load(cls, path: Path | str, **options) -> "Tokenizer":
        """
        Load a tokenizer from a model file.

        Args:
            path: Path to the JSON model file.
            **options: Keyword arguments forwarded to the constructor.

        Returns:
            Ready-to-use tokenizer.
        """
        start = time.perf_counter()
        config, vocab = load_model(path)
        tokenizer = cls(config, vocab, **options)
        log.info(
            f"loaded tokenizer {config.version} from {path}: {len(vocab)} tokens, "
            f"{len(tokenizer.merges)} merges, {config.num_special_tokens} special tokens "
            f"({time.perf_counter() - start:.2f} s)"
        )
        return tokenizer

    # ------------------------------------------------------------------
    # configuration passthrough

    @property
    def num_special_tokens(self) -> int:
        return self.config.num_special_tokens

    @property
    def version(self) -> str:
        return self.config.version

    @property
    def pattern(self) -> str:
        return self.config.pattern

    @property
    def backend_name(self) -> str:
        return self._backend.name

    def vocab_size(self) -> int:
        """Return the advertised vocabulary size from the model config."""
        return self.config.vocab_size

    def bos_id(self) -> int:
        return self.specials.bos_id

    def eos_id(self) -> int:
        return self.specials.eos_id

    def pad_id(self) -> int:
        return self.specials.pad_id

    def unk_id(self) -> int:
        return self.specials.unk_id

    def is_special_token(self, token_id: int) -> bool:
        return self.specials.is_special(token_id)

    def is_byte(self, token_id: int) -> bool:
        """Return True if ``token_id`` lies in the rank range of the 256 base bytes."""
        if self.is_special_token(token_id):
            return False
        return 0 <= token_id - self.num_special_tokens < 256

    def get_special_token_id(self, name: str) -> int:
        return self.specials.id_of(name)

    # ------------------------------------------------------------------
    # encoding

    def _apply_merges(self, data: bytes) -> list[bytes]:
        """
        Seed one piece per byte and merge them with the configured backend.

        Args:
            data: Raw bytes to merge.

        Returns:
            List of merged pieces.
        """
        return self._backend.apply([data[i : i + 1] for i in range(len(data))])

    def _pieces_to_ids(self, pieces: Iterable[bytes]) -> list[int]:
        offset = self.num_special_tokens
        ids: list[int] = []
        for piece in pieces:
            rank = self.vocab.lookup(piece)
            if rank is not None:
                ids.append(rank + offset)
                continue
            # no entry for the whole piece: fall back to its bytes, then to <unk>
            for byte in piece:
                byte_rank = self.vocab.lookup(bytes([byte]))
                if byte_rank is None:
                    log.debug(f"byte {byte:#04x} missing from vocabulary, emitting unk")
                    ids.append(self.unk_id())
                else:
                    ids.append(byte_rank + offset)
        return ids

    def encode(self, text: str, add_bos: bool = False, add_eos: bool = False) -> list[int]:
        """
        Encode the text into a list of token IDs.

        Args:
            text: Text to encode.
            add_bos: Prepend the beginning-of-sequence id.
            add_eos: Append the end-of-sequence id.

        Returns:
            List of token IDs; empty text always yields an empty list.
        """
        if not text:
            return []
        data = normalize_text(text, self.normalization).encode("utf-8")
        ids = self._pieces_to_ids(self._apply_merges(data))
        if add_bos:
            ids.insert(0, self.bos_id())
        if add_eos:
            ids.append(self.eos_id())
        return ids

    def encode_batch(self, texts: Iterable[str]) -> list[list[int]]:
        return [self.encode(text) for text in texts]

    def count_tokens(self, text: str) -> int:
        return len(self.encode(text))

    # ------------------------------------------------------------------
    # decoding

    def _raw_piece(self, token_id: int) -> bytes:
        rank = token_id - self.num_special_tokens
        piece = self.vocab.reverse_lookup(rank)
        if piece is not None:
            return piece
        # unmapped rank: reinterpret it as a single raw byte
        return bytes([rank & 0xFF])

    def decode_bytes(
        self,
        ids: Iterable[int],
        policy: SpecialTokenPolicy | str = SpecialTokenPolicy.IGNORE,
    ) -> bytes:
        """
        Decode token IDs to the underlying byte stream.

        Args:
            ids: Token IDs to decode.
            policy: What to do with special ids (ignore, keep or raise).

        Returns:
            Concatenated bytes of every decoded id.

        Raises:
            SpecialTokenEncountered: If ``policy`` is raise and a special id is present.
        """
        policy = SpecialTokenPolicy.get(policy)
        parts: list[bytes] = []
        for token_id in ids:
            if self.is_special_token(token_id):
                if policy is SpecialTokenPolicy.IGNORE:
                    continue
                if policy is SpecialTokenPolicy.RAISE:
                    raise SpecialTokenEncountered(token_id)
                parts.append(self.specials.name_of(token_id).encode("utf-8"))
            else:
                parts.append(self._raw_piece(token_id))
        return b"".join(parts)

    def decode(
        self,
        ids: Iterable[int],
        policy: SpecialTokenPolicy | str = SpecialTokenPolicy.IGNORE,
    ) -> str:
        """
        Decode a list of token IDs into a string.

        Invalid UTF-8 in the byte stream is replaced with U+FFFD.
        """
        return self.decode_bytes(ids, policy).decode("utf-8", errors="replace")

    def decode_batch(
        self,
        batch: Iterable[Iterable[int]],
        policy: SpecialTokenPolicy | str = SpecialTokenPolicy.IGNORE,
    ) -> list[str]:
        return [self.decode(ids, policy) for ids in batch]

    def to_string(self, ids: Iterable[int]) -> str:
        """Decode keeping special tokens visible, for debugging and inspection."""
        return self.decode(ids, SpecialTokenPolicy.KEEP)

    def id_to_piece(self, token_id: int) -> bytes:
        """
        Return the piece a single id stands for.

        Special ids map to their name (or ``<SPECIAL_n>``) as UTF-8 bytes, other
        ids to their vocabulary bytes or the raw-byte fallback.
        """
        if self.is_special_token(token_id):
            return self.specials.name_of(token_id).encode("utf-8")
        return self._raw_piece(token_id)

    def __repr__(self) -> str:
        return (
            f"Tokenizer(version={self.version!r}, vocab_size={self.vocab_size()}, "
            f"entries={len(self.vocab)}, merges={len(self.merges)}, "
            f"num_special_tokens={self.num_special_tokens}, backend={self.backend_name!r})"
        )
