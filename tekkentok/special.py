"""Special token names, decode policies, and the position-indexed registry."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Final, Sequence

from .errors import UnknownSpecialToken

log = logging.getLogger(__name__)

# Positions are part of the model format: id n is the n-th name below.
CANONICAL_SPECIAL_TOKENS: Final[tuple[str, ...]] = (
    "<unk>",
    "<s>",
    "</s>",
    "[INST]",
    "[/INST]",
    "[AVAILABLE_TOOLS]",
    "[/AVAILABLE_TOOLS]",
    "[TOOL_RESULTS]",
    "[/TOOL_RESULTS]",
    "[TOOL_CALLS]",
    "[IMG]",
    "<pad>",
    "[IMG_BREAK]",
    "[IMG_END]",
    "[PREFIX]",
    "[MIDDLE]",
    "[SUFFIX]",
    "[SYSTEM_PROMPT]",
    "[/SYSTEM_PROMPT]",
    "[TOOL_CONTENT]",
)

UNK: Final[str] = "<unk>"
BOS: Final[str] = "<s>"
EOS: Final[str] = "</s>"
PAD: Final[str] = "<pad>"


class SpecialTokenPolicy(str, Enum):
    """How decoding treats ids in the special range."""

    IGNORE = "ignore"
    KEEP = "keep"
    RAISE = "raise"

    @classmethod
    def get(cls, policy: "SpecialTokenPolicy | str") -> "SpecialTokenPolicy":
        """Get policy by enum member or name (case-insensitive)."""
        if isinstance(policy, cls):
            return policy
        try:
            return cls[str(policy).upper()]
        except KeyError:
            raise ValueError(
                f"unknown special token policy: {policy!r} "
                f"(available: {', '.join(p.value for p in cls)})"
            ) from None


class SpecialTokenRegistry:
    """
    Ordered special token names plus the number of active slots.

    The name list and the active count are independent: a model may activate
    more slots than there are names (those ids get a generic placeholder) or
    fewer (the remaining names are still resolvable by name).
    """

    def __init__(
        self,
        num_active: int,
        names: Sequence[str] = CANONICAL_SPECIAL_TOKENS,
    ) -> None:
        if num_active < 0:
            raise ValueError(f"num_active must be non-negative, got {num_active}")
        self.names: tuple[str, ...] = tuple(names)
        self.num_active = num_active
        self._positions = {name: idx for idx, name in enumerate(self.names)}
        # role ids are fixed by name position, regardless of num_active
        self.unk_id = self.id_of(UNK)
        self.bos_id = self.id_of(BOS)
        self.eos_id = self.id_of(EOS)
        self.pad_id = self.id_of(PAD)
        if num_active > len(self.names):
            log.debug(
                f"{num_active - len(self.names)} active special slots have no name"
            )

    def id_of(self, name: str) -> int:
        """Return the position of ``name``; raise ``UnknownSpecialToken`` if absent."""
        try:
            return self._positions[name]
        except KeyError:
            raise UnknownSpecialToken(name) from None

    def name_of(self, token_id: int) -> str:
        """Return the registered name for ``token_id`` or a ``<SPECIAL_n>`` placeholder."""
        if 0 <= token_id < len(self.names):
            return self.names[token_id]
        return f"<SPECIAL_{token_id}>"

    def is_special(self, token_id: int) -> bool:
        return token_id < self.num_active

    def __len__(self) -> int:
        return len(self.names)

    def __repr__(self) -> str:
        return f"SpecialTokenRegistry(num_active={self.num_active}, names={len(self.names)})"
