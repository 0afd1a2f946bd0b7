"""tekkentok - inference-time BPE tokenizer for pretrained Tekken vocabularies."""

from importlib.metadata import PackageNotFoundError, version

from .backends import get_backend, list_backends
from .encode_decode import Tokenizer
from .errors import (
    BackendError,
    ConfigError,
    InvalidVersion,
    MalformedVocabulary,
    ModelLoadError,
    ModelMalformed,
    ModelNotFound,
    SpecialTokenEncountered,
    SpecialTokenError,
    TekkenError,
    UnknownSpecialToken,
)
from .factory import TokenizerFactory, from_pretrained
from .merges import MergeTable, build_merge_table
from .model import MergeRule, TokenizerConfig, Vocabulary, load_model
from .special import CANONICAL_SPECIAL_TOKENS, SpecialTokenPolicy, SpecialTokenRegistry

try:
    __version__ = version("tekkentok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "__version__",
    "Tokenizer",
    "TokenizerConfig",
    "TokenizerFactory",
    "Vocabulary",
    "MergeRule",
    "MergeTable",
    "SpecialTokenPolicy",
    "SpecialTokenRegistry",
    "CANONICAL_SPECIAL_TOKENS",
    "build_merge_table",
    "load_model",
    "from_pretrained",
    "get_backend",
    "list_backends",
    "TekkenError",
    "ModelLoadError",
    "ModelNotFound",
    "ModelMalformed",
    "MalformedVocabulary",
    "SpecialTokenError",
    "SpecialTokenEncountered",
    "UnknownSpecialToken",
    "InvalidVersion",
    "BackendError",
    "ConfigError",
]
