"""Resolve Tekken model versions to model files and build tokenizers."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final

from .encode_decode import Tokenizer
from .errors import InvalidVersion
from .settings import ENV_VARS, RuntimeSettings

log = logging.getLogger(__name__)

VALID_VERSIONS: Final[tuple[str, ...]] = ("240718", "240911")
DEFAULT_VERSION: Final[str] = "240911"
DEFAULT_DATA_DIR: Final[Path] = Path(__file__).resolve().parent / "data"


def _default_data_dir() -> Path:
    env_dir = os.environ.get(ENV_VARS["data_dir"])
    return Path(env_dir) if env_dir else DEFAULT_DATA_DIR


class TokenizerFactory:
    """Locates ``tekken_<version>.json`` files inside a data directory."""

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else _default_data_dir()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @data_dir.setter
    def data_dir(self, value: Path | str) -> None:
        self._data_dir = Path(value)

    def model_path(self, version: str = DEFAULT_VERSION) -> Path:
        """
        Return the model file path for ``version``.

        :raises InvalidVersion: If the version is not one of ``VALID_VERSIONS``.
        """
        if version not in VALID_VERSIONS:
            raise InvalidVersion(version, VALID_VERSIONS)
        return self.data_dir / f"tekken_{version}.json"

    def get_tekken_tokenizer(self, version: str = DEFAULT_VERSION, **options) -> Tokenizer:
        """
        Load the Tekken tokenizer for a model version.

        :param version: Model version, "240718" or "240911".
        :param options: Keyword arguments forwarded to ``Tokenizer``.
        :raises InvalidVersion: If the version is unknown.
        :raises ModelNotFound: If the model file is missing from the data directory.

        .. code-block:: python

            tokenizer = TokenizerFactory("path/to/data").get_tekken_tokenizer("240911")
            ids = tokenizer.encode("Hello world", add_bos=True)
        """
        path = self.model_path(version)
        log.info(f"resolved tekken version {version} to {path}")
        return Tokenizer.load(path, **options)

    @classmethod
    def from_settings(cls, settings: RuntimeSettings) -> Tokenizer:
        """Build a tokenizer from runtime settings; an explicit model path wins."""
        options = settings.tokenizer_options()
        if settings.model_path is not None:
            return Tokenizer.load(settings.model_path, **options)
        return cls(settings.data_dir).get_tekken_tokenizer(settings.version, **options)


def from_pretrained(model: Path | str, **options) -> Tokenizer:
    """
    Load a tokenizer from a model version or a model file path.

    :param model: A version from ``VALID_VERSIONS`` or a path to a model file.
    :param options: Keyword arguments forwarded to ``Tokenizer``.
    """
    if isinstance(model, str) and model in VALID_VERSIONS:
        return TokenizerFactory().get_tekken_tokenizer(model, **options)
    return Tokenizer.load(model, **options)
