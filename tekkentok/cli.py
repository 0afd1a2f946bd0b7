"""Command-line interface for the Tekken tokenizer."""

import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import NoReturn, Optional

import typer

from . import metrics
from .encode_decode import Tokenizer
from .errors import TekkenError
from .factory import TokenizerFactory
from .normalize import render_bytes
from .settings import RuntimeSettings, load_settings

app = typer.Typer(help="tekkentok - Tekken BPE tokenizer")

MIN_PYTHON = (3, 10)
REQUIRED_PACKAGES = {
    "pydantic": "Required for model config and settings validation",
    "typer": "Required for the command-line interface",
}
RECOMMENDED_PACKAGES = {
    "pyyaml": "Recommended for YAML settings files",
}


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1)


def _settings(ctx: typer.Context) -> RuntimeSettings:
    return ctx.obj["settings"]


def _load_tokenizer(ctx: typer.Context) -> Tokenizer:
    """Build the tokenizer described by the global options, once per invocation."""
    if ctx.obj.get("tokenizer") is None:
        try:
            ctx.obj["tokenizer"] = TokenizerFactory.from_settings(_settings(ctx))
        except TekkenError as exc:
            _fail(exc)
    return ctx.obj["tokenizer"]


def _read_ids(path: Path) -> list[int]:
    raw = path.read_text(encoding="utf-8").strip()
    try:
        return [int(part) for part in raw.split()] if raw else []
    except ValueError as exc:
        raise typer.BadParameter(f"token file must hold integers: {exc}") from exc


@app.callback()
def main(
    ctx: typer.Context,
    model: Optional[Path] = typer.Option(
        None, exists=True, dir_okay=False, help="Path to a tekken model JSON file"
    ),
    model_version: Optional[str] = typer.Option(
        None, "--model-version", help="Model version to load from the data directory"
    ),
    data_dir: Optional[Path] = typer.Option(
        None, file_okay=False, help="Directory holding tekken_<version>.json files"
    ),
    config: Optional[Path] = typer.Option(None, help="Path to settings JSON/YAML file"),
    backend: Optional[str] = typer.Option(None, help="Merge backend: auto, heap or reference"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Load settings shared by every command."""
    try:
        settings = load_settings(
            config,
            model_path=model,
            version=model_version,
            data_dir=data_dir,
            backend=backend,
            log_level="DEBUG" if verbose else None,
        )
    except TekkenError as exc:
        _fail(exc)
    _configure_logging(settings.log_level)
    ctx.obj = {"settings": settings, "tokenizer": None}


@app.command()
def encode(
    ctx: typer.Context,
    input: Path = typer.Option(..., "--in", exists=True, dir_okay=False, help="Input text file"),
    output: Path = typer.Option(..., "--out", dir_okay=False, help="Output file for token IDs"),
    bos: bool = typer.Option(False, "--bos", help="Prepend the beginning-of-sequence id"),
    eos: bool = typer.Option(False, "--eos", help="Append the end-of-sequence id"),
):
    """Encode text to token IDs."""
    tokenizer = _load_tokenizer(ctx)
    text = input.read_text(encoding="utf-8")
    ids = tokenizer.encode(text, add_bos=bos, add_eos=eos)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(" ".join(str(idx) for idx in ids), encoding="utf-8")
    typer.echo(f"Wrote {len(ids)} tokens to {output}")


@app.command()
def decode(
    ctx: typer.Context,
    input: Path = typer.Option(..., "--in", exists=True, dir_okay=False, help="Input token file"),
    output: Path = typer.Option(..., "--out", dir_okay=False, help="Output text file"),
    policy: Optional[str] = typer.Option(
        None, help="Special token policy: ignore, keep or raise"
    ),
):
    """Decode token IDs back to text."""
    tokenizer = _load_tokenizer(ctx)
    ids = _read_ids(input)
    try:
        text = tokenizer.decode(ids, policy or _settings(ctx).special_token_policy)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--policy") from exc
    except TekkenError as exc:
        _fail(exc)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    typer.echo(f"Wrote decoded text to {output}")


@app.command()
def inspect(
    ctx: typer.Context,
    input: Path = typer.Option(..., "--in", exists=True, dir_okay=False, help="Input token file"),
):
    """Print each token ID with the piece it stands for."""
    tokenizer = _load_tokenizer(ctx)
    for token_id in _read_ids(input):
        kind = "special" if tokenizer.is_special_token(token_id) else "piece"
        typer.echo(f"{token_id}\t{kind}\t{render_bytes(tokenizer.id_to_piece(token_id))}")


@app.command()
def stats(
    ctx: typer.Context,
    input: Path = typer.Option(
        ..., "--in", exists=True, dir_okay=False, help="Input text file for stats"
    ),
):
    """Display tokenizer statistics and basic metrics."""
    tokenizer = _load_tokenizer(ctx)
    text = input.read_text(encoding="utf-8")
    ids = tokenizer.encode(text)
    baselines = metrics.baseline_token_counts(text)
    typer.echo(f"Version: {tokenizer.version} (backend: {tokenizer.backend_name})")
    typer.echo(f"Vocab size: {tokenizer.vocab_size()} ({len(tokenizer.vocab)} entries loaded)")
    typer.echo(f"Special tokens: {tokenizer.num_special_tokens}")
    typer.echo(f"Merges derived: {len(tokenizer.merges)}")
    typer.echo(f"Input length: {baselines['byte']} bytes, tokens produced: {len(ids)}")
    typer.echo(f"Bytes per token: {metrics.bytes_per_token(text, len(ids)):.2f}")
    typer.echo(
        "Avg tokens per word: "
        f"{metrics.average_tokens_per_word(len(ids), baselines['whitespace']):.2f}"
    )
    speed = metrics.measure_encoding_speed(tokenizer, text, warmup=0, trials=1)
    typer.echo(f"Encoding speed: {speed:,.0f} tokens/s")


@app.command()
def check():
    """Check the Python version and installed dependencies."""
    python_ok = sys.version_info >= MIN_PYTHON
    typer.echo("Python Version Check")
    typer.echo(f"Required: Python {'.'.join(map(str, MIN_PYTHON))} or higher")
    typer.echo(f"Installed: Python {sys.version.split()[0]}")
    typer.echo(f"Status: {'OK' if python_ok else 'NOT COMPATIBLE'}\n")

    def report(packages: dict[str, str], missing_label: str) -> bool:
        all_ok = True
        for name, reason in packages.items():
            try:
                status = f"OK ({version(name)})"
            except PackageNotFoundError:
                status = missing_label
                all_ok = False
            typer.echo(f"{name}: {status} - {reason}")
        return all_ok

    typer.echo("Required Packages")
    required_ok = report(REQUIRED_PACKAGES, "MISSING")
    typer.echo("\nRecommended Packages")
    recommended_ok = report(RECOMMENDED_PACKAGES, "NOT INSTALLED")

    typer.echo("\nOverall Status")
    if not python_ok:
        typer.echo("ERROR: Python version is not compatible.")
        raise typer.Exit(code=1)
    if not required_ok:
        typer.echo("ERROR: Some required packages are missing.")
        raise typer.Exit(code=1)
    if not recommended_ok:
        typer.echo("WARNING: Some recommended packages are not installed.")
    else:
        typer.echo("All requirements and recommendations are met.")


if __name__ == "__main__":
    app()
