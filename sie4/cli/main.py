"""
Main CLI application.

Entry point for the sie4 command.
"""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING, Annotated

import typer

import sie4
from sie4.cli.context import ConfigError, ExitCode, get_exit_code, resolve_max_record_bytes
from sie4.cli.output import OutputFormat, get_output_adapter

if TYPE_CHECKING:
    from sie4.core.parser import ReaderConfig

# Create main app
app = typer.Typer(
    name="sie4",
    help="Streaming reader for SIE 4 accounting files",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sie4 {sie4.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log reader progress to stderr"),
    ] = False,
) -> None:
    """Streaming reader for SIE 4 accounting files."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _resolve_format(format: str) -> OutputFormat:
    try:
        return OutputFormat(format)
    except ValueError:
        typer.echo(f"Unknown format: {format}", err=True)
        typer.echo("Available formats: terminal, json", err=True)
        raise typer.Exit(ExitCode.USAGE) from None


def _build_config(
    file: Path,
    encoding: str,
    strict_eof: bool,
    max_record_bytes: int | None,
) -> ReaderConfig:
    from sie4.core.parser import DETECTION_SAMPLE_SIZE, ReaderConfig, TextDecoder, detect_encoding

    try:
        limit = resolve_max_record_bytes(max_record_bytes)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(ExitCode.CONFIG) from None

    if encoding == "auto":
        with file.open("rb") as f:
            encoding = detect_encoding(f.read(DETECTION_SAMPLE_SIZE))

    try:
        TextDecoder(encoding)
    except LookupError:
        typer.echo(f"Unknown encoding: {encoding}", err=True)
        raise typer.Exit(ExitCode.CONFIG) from None

    try:
        return ReaderConfig(encoding=encoding, strict_eof=strict_eof, max_record_bytes=limit)
    except ValueError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(ExitCode.CONFIG) from None


# =============================================================================
# Validate Command
# =============================================================================


@app.command()
def validate(
    file: Annotated[Path, typer.Argument(help="SIE file to read", exists=True)],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: terminal, json"),
    ] = "terminal",
    encoding: Annotated[
        str,
        typer.Option("--encoding", "-e", help="Text encoding, or 'auto' to detect"),
    ] = "auto",
    strict_eof: Annotated[
        bool,
        typer.Option("--strict-eof", help="Treat a truncated trailing record as an error"),
    ] = False,
    max_record_bytes: Annotated[
        int | None,
        typer.Option(
            "--max-record-bytes",
            help="Largest record to buffer in bytes (0 = unlimited). Defaults to SIE4_MAX_RECORD_BYTES or 16MiB.",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--out", "-o", help="Write output to file"),
    ] = None,
    color: Annotated[
        bool,
        typer.Option("--color/--no-color", help="Enable/disable colored output"),
    ] = True,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress non-error output"),
    ] = False,
) -> None:
    """Read a SIE file to the end and report what was found."""
    from sie4.core.parser import parse_file

    output_format = _resolve_format(format)
    config = _build_config(file, encoding, strict_eof, max_record_bytes)

    try:
        result = parse_file(file, config)
    except OSError as e:
        typer.echo(f"Error reading file: {e}", err=True)
        raise typer.Exit(ExitCode.FATAL) from None

    adapter = get_output_adapter(output_format, color=color)
    rendered = adapter.render_result(result)

    if output:
        output.write_text(rendered, encoding="utf-8")
        if not quiet:
            typer.echo(f"Output written to {output}")
    elif not quiet or result.has_fatal_errors:
        typer.echo(rendered)

    raise typer.Exit(get_exit_code(result.has_fatal_errors))


# =============================================================================
# Dump Command
# =============================================================================


@app.command()
def dump(
    file: Annotated[Path, typer.Argument(help="SIE file to dump", exists=True)],
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: terminal, json"),
    ] = "terminal",
    encoding: Annotated[
        str,
        typer.Option("--encoding", "-e", help="Text encoding, or 'auto' to detect"),
    ] = "auto",
    strict_eof: Annotated[
        bool,
        typer.Option("--strict-eof", help="Treat a truncated trailing record as an error"),
    ] = False,
    max_record_bytes: Annotated[
        int | None,
        typer.Option("--max-record-bytes", help="Largest record to buffer in bytes (0 = unlimited)"),
    ] = None,
    color: Annotated[
        bool,
        typer.Option("--color/--no-color", help="Enable/disable colored output"),
    ] = True,
) -> None:
    """Stream the records of a SIE file, one per line."""
    from sie4.core.parser import ParserError, open_file

    output_format = _resolve_format(format)
    config = _build_config(file, encoding, strict_eof, max_record_bytes)
    adapter = get_output_adapter(output_format, color=color)

    with open_file(file, config) as reader:
        for result in reader:
            if isinstance(result, ParserError):
                typer.echo(adapter.render_error(result), err=True)
                raise typer.Exit(ExitCode.FATAL)
            typer.echo(adapter.render_item(result))

    raise typer.Exit(ExitCode.SUCCESS)


if __name__ == "__main__":
    app()
