"""Runtime settings read from JSON/YAML files and TEKKENTOK_* environment variables."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ValidationError

from .backends import BackendName
from .errors import ConfigError
from .normalize import NormalizationForm

ENV_PREFIX = "TEKKENTOK_"

# setting name -> environment variable
ENV_VARS: dict[str, str] = {
    "data_dir": f"{ENV_PREFIX}DATA_DIR",
    "version": f"{ENV_PREFIX}VERSION",
    "backend": f"{ENV_PREFIX}BACKEND",
    "log_level": f"{ENV_PREFIX}LOG_LEVEL",
}


class RuntimeSettings(BaseModel):
    # Explicit model file; when unset the file is resolved from data_dir + version
    model_path: Optional[Path] = None
    data_dir: Optional[Path] = None
    version: str = "240911"

    backend: BackendName = "auto"
    # Off by default so encoding works on the raw UTF-8 bytes of the input
    normalization: NormalizationForm = "none"
    special_token_policy: Literal["ignore", "keep", "raise"] = "ignore"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    def tokenizer_options(self) -> dict:
        """Keyword arguments for ``Tokenizer`` construction."""
        return {"backend": self.backend, "normalization": self.normalization}


def _read_config_file(path: Path) -> dict:
    """
    Read a settings file.

    Args:
        path: Path to a .json, .yml or .yaml file.

    Returns:
        dict: Settings as a dictionary.
    """
    if not path.is_file():
        raise ConfigError(f"settings file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        try:
            return json.loads(text) or {}
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON in {path}: {exc}") from exc
    if path.suffix in {".yml", ".yaml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:
            raise ConfigError(
                "YAML settings requested but PyYAML is not installed. "
                "Install it or provide a JSON file."
            ) from exc
        try:
            return yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    raise ConfigError(f"unsupported settings format: {path.suffix}")


def _env_overrides(environ: Mapping[str, str]) -> dict:
    return {key: environ[var] for key, var in ENV_VARS.items() if environ.get(var)}


def load_settings(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides,
) -> RuntimeSettings:
    """
    Build runtime settings from defaults, a settings file, the environment and overrides.

    Later sources win: file < environment < explicit overrides. Overrides set to
    ``None`` are skipped so unset CLI options do not clobber other sources.

    Args:
        path: Optional JSON/YAML settings file.
        environ: Environment mapping (defaults to ``os.environ``).
        **overrides: Explicit values, typically from the command line.

    Returns:
        RuntimeSettings: Validated settings.
    """
    data: dict = _read_config_file(path) if path else {}
    if not isinstance(data, dict):
        raise ConfigError(f"settings file must contain a mapping: {path}")
    data.update(_env_overrides(os.environ if environ is None else environ))
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return RuntimeSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"invalid settings: {exc}") from exc
