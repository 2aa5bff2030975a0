"""CLI command implementations"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from helpparse.config import Settings, load_config
from helpparse.core.pipeline import default_parsers, detect_content, parse_file


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}", e)


def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log parser decisions at DEBUG level")] = False,
    ):
    """Parse help content (Markdown, MDX, JSON, CSV) into HTML, metadata, and a table of contents."""
    level = "DEBUG" if verbose else _settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def parse_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="File to parse")],
    fmt: Annotated[Optional[str], typer.Option("--format", "-f", help="Parser name or format; default detects")] = None,
    base_path: Annotated[Optional[str], typer.Option("--base-path", help="Prefix for relative asset URLs")] = None,
    delimiter: Annotated[Optional[str], typer.Option("--delimiter", help="CSV delimiter character")] = None,
    no_header: Annotated[bool, typer.Option("--no-header", help="CSV first row is data, not column names")] = False,
    as_list: Annotated[bool, typer.Option("--as-list", help="Render CSV rows as a list instead of a table")] = False,
    html_only: Annotated[bool, typer.Option("--html", help="Print only the rendered HTML")] = False,
    ):
    """Parse a file and print the result as JSON."""
    settings = _settings(overrides={
        "default_format": fmt, "base_path": base_path, "csv_delimiter": delimiter,
        "csv_has_header": False if no_header else None,
        "csv_render_as_table": False if as_list else None,
    })
    try:
        name, result = parse_file(path, settings=settings)
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}", e)
    except ValueError as e:
        _fail(str(e))

    if html_only:
        for warning in result.warnings:
            typer.echo(f"Warning: {warning}", err=True)
        typer.echo(result.html)
        return
    payload = {"parser": name, **result.model_dump(mode="json")}
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


def detect_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="File to inspect")],
    ):
    """Rank every registered parser by confidence for a file."""
    content = _read(path)
    for r in detect_content(content, filename=path.name):
        typer.echo(f"{r.parser_name:<10} {r.format:<6} {r.confidence:.2f}")


def formats_cmd():
    """List registered parsers and the file extensions they claim."""
    for p in default_parsers():
        typer.echo(f"{p.name:<10} {p.format:<6} {', '.join('.' + e for e in p.extensions)}")
