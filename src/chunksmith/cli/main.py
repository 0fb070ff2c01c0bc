import json
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from ..chunking import chunk_message, get_chunking_stats, validate_chunk_boundaries
from ..core.config import SETTINGS, Settings
from ..core.errors import ChunkingConfigError
from ..core.logging import log, setup_logging

app = typer.Typer(add_completion=False, help="chunksmith: split long messages for length-capped transports")
console = Console()

# Exit code for unusable configuration (limits, config files)
CONFIG_ERROR_EXIT = 2


@app.callback()
def _init(
    config_file: str | None = typer.Option(
        None,
        "--config",
        help="Config file (.chunksmith.yaml auto-discovered)",
    ),
) -> None:
    try:
        loaded = Settings.load_config(config_file)
    except (ValidationError, ValueError, OSError) as e:
        typer.echo(f"❌ Config error: {e}", err=True)
        raise typer.Exit(CONFIG_ERROR_EXIT) from e

    # Commands and the engine read the shared SETTINGS instance
    for key, value in loaded.model_dump().items():
        setattr(SETTINGS, key, value)

    setup_logging(format_type=SETTINGS.LOG_FORMAT, level=SETTINGS.LOG_LEVEL)  # type: ignore[arg-type]


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    source = Path(path)
    if not source.exists():
        typer.echo(f"❌ File not found: {path}", err=True)
        raise typer.Exit(1)
    return source.read_text(encoding="utf-8")


def _chunk_or_exit(
    text: str, max_length: int | None, references: bool | None, links: bool | None = None
) -> list[str]:
    try:
        return chunk_message(text, max_length, format_references=references, format_links=links)
    except ChunkingConfigError as e:
        typer.echo(f"❌ Config error: {e}", err=True)
        raise typer.Exit(CONFIG_ERROR_EXIT) from e


@app.command()
def version() -> None:
    from .. import __version__

    typer.echo(__version__)


@app.command()
def config() -> None:
    """Print the effective settings."""
    for k, v in SETTINGS.model_dump().items():
        typer.echo(f"{k}={v}")


@app.command()
def chunk(
    path: str = typer.Argument("-", help="Text file to chunk, or - for stdin"),
    max_length: int | None = typer.Option(
        None, "--max-length", help="Transport limit per message (default: MESSAGE_MAX_LENGTH)"
    ),
    output_format: str = typer.Option("text", "--format", help="Output format: text|json"),
    references: bool | None = typer.Option(
        None,
        "--references/--no-references",
        help="Rewrite numbered source references as markdown links",
    ),
    links: bool | None = typer.Option(
        None,
        "--links/--no-links",
        help="Tidy social, video and forum links and broken markdown links",
    ),
) -> None:
    """
    Split a message into numbered chunks.

    Examples:
        chunksmith chunk answer.md --max-length 2000
        cat answer.md | chunksmith chunk - --format json
    """
    if output_format not in ("text", "json"):
        typer.echo(f"❌ Unknown format: {output_format} (expected text or json)", err=True)
        raise typer.Exit(1)

    text = _read_text(path)
    chunks = _chunk_or_exit(text, max_length, references, links)
    log.debug("cli.chunk.done", path=path, chunk_count=len(chunks))

    if output_format == "json":
        typer.echo(json.dumps(chunks, indent=2, ensure_ascii=False))
        return

    for index, part in enumerate(chunks):
        if index:
            typer.echo("")
        typer.echo(part)


@app.command()
def validate(
    path: str = typer.Argument(..., help="JSON file holding an array of chunk strings"),
) -> None:
    """Check a chunk list for constructs split across boundaries."""
    try:
        chunks = json.loads(_read_text(path))
    except json.JSONDecodeError as e:
        typer.echo(f"❌ Invalid JSON: {e}", err=True)
        raise typer.Exit(1) from e

    if not isinstance(chunks, list) or not all(isinstance(c, str) for c in chunks):
        typer.echo("❌ Expected a JSON array of strings", err=True)
        raise typer.Exit(1)

    if not validate_chunk_boundaries(chunks):
        typer.echo(f"❌ Boundary violation in {len(chunks)} chunks")
        raise typer.Exit(1)

    typer.echo(f"✅ {len(chunks)} chunks, boundaries clean")


@app.command()
def stats(
    path: str = typer.Argument("-", help="Text file to chunk, or - for stdin"),
    max_length: int | None = typer.Option(
        None, "--max-length", help="Transport limit per message (default: MESSAGE_MAX_LENGTH)"
    ),
) -> None:
    """Chunk a message and show size statistics."""
    chunks = _chunk_or_exit(_read_text(path), max_length, None)
    summary = get_chunking_stats(chunks)

    table = Table(title="Chunking Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in summary.items():
        table.add_row(key, str(value))
    console.print(table)


if __name__ == "__main__":
    app()
