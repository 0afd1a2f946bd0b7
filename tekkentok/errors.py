"""Exception hierarchy for model loading, vocabulary and special-token failures."""

from __future__ import annotations


class TekkenError(Exception):
    """Base exception for all tekkentok errors."""


class ModelLoadError(TekkenError):
    """Raised when a model file cannot be turned into a tokenizer."""

    def __init__(self, message: str, *, model_path: str | None = None) -> None:
        if model_path:
            message = f"{message} (path: {model_path})"
        super().__init__(message)
        self.model_path = model_path


class ModelNotFound(ModelLoadError):
    """Raised when the model file does not exist."""


class ModelMalformed(ModelLoadError):
    """Raised when the model file is not valid JSON or misses required fields."""


class MalformedVocabulary(ModelMalformed):
    """Raised when vocabulary entries are not a one-to-one bytes <-> rank mapping."""

    def __init__(
        self,
        message: str,
        *,
        token: bytes | None = None,
        rank: int | None = None,
    ) -> None:
        extra = ""
        if token is not None:
            extra += f" (token: {token!r})"
        if rank is not None:
            extra += f" (rank: {rank})"
        super().__init__(message + extra)
        self.token = token
        self.rank = rank


class SpecialTokenError(TekkenError):
    """Raised when special token handling fails."""


class SpecialTokenEncountered(SpecialTokenError):
    """Raised when decoding with the ``raise`` policy meets a special token id."""

    def __init__(self, token_id: int) -> None:
        super().__init__(
            f"decoding tokens containing special tokens is not allowed (id: {token_id})"
        )
        self.token_id = token_id


class UnknownSpecialToken(SpecialTokenError):
    """Raised when a special token name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown special token: {name!r}")
        self.name = name


class InvalidVersion(TekkenError):
    """Raised when a model version string has no known model file."""

    def __init__(self, version: str, available: tuple[str, ...]) -> None:
        super().__init__(
            f"invalid tekken tokenizer version: {version!r} "
            f"(available: {', '.join(available)})"
        )
        self.version = version
        self.available = available


class BackendError(TekkenError):
    """Raised when an encoder backend name is unknown."""

    def __init__(self, name: str, available: list[str]) -> None:
        super().__init__(f"unknown encoder backend: {name!r} (available: {available})")
        self.name = name
        self.available = available


class ConfigError(TekkenError):
    """Raised when runtime settings cannot be read or validated."""
