"""
LinkedIn Export Parser CLI

Command-line interface for parsing LinkedIn data exports.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

# Initialize console for rich output
console = Console(stderr=True)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging with rich handler."""
    handlers: list[logging.Handler] = [RichHandler(console=console, show_path=False)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=handlers,
        force=True,
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option(
    "--config", "-c",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (default: config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, config_path: Optional[str]) -> None:
    """LinkedIn Export Parser - Normalize your data export into clean records."""
    from src.pipeline.errors import ConfigError
    from src.utils.config import load_config

    ctx.ensure_object(dict)

    try:
        config = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    ctx.obj["config"] = config

    if verbose:
        ctx.obj["log_level"] = "DEBUG"
    elif quiet:
        ctx.obj["log_level"] = "WARNING"
    else:
        ctx.obj["log_level"] = config.logging.level

    setup_logging(ctx.obj["log_level"], config.logging.file)


@cli.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False),
)
@click.option(
    "--timeout", "-t",
    "timeout_seconds",
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    help="Parse timeout in seconds (default from config)",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Write the parsed payload as JSON to stdout",
)
@click.option(
    "--show-warnings",
    default=None,
    type=int,
    help="Number of warnings to list (default from config)",
)
@click.pass_context
def parse(
    ctx: click.Context,
    paths: tuple[str, ...],
    timeout_seconds: Optional[float],
    as_json: bool,
    show_warnings: Optional[int],
) -> None:
    """Parse LinkedIn export archives or CSV/XLSX files."""
    from src.pipeline.errors import NoUsableFilesError, ParseTimeoutError
    from src.pipeline.ingest import FileBlob
    from src.pipeline.parse import parse_into_store
    from src.utils.store import ParsedDataStore

    config = ctx.obj["config"]
    timeout = timeout_seconds if timeout_seconds is not None else config.parser.timeout_seconds
    max_warnings = show_warnings if show_warnings is not None else config.logging.max_warnings_reported

    blobs = [FileBlob.from_path(path) for path in paths]
    store = ParsedDataStore(max_warnings_reported=max_warnings)

    try:
        payload = asyncio.run(parse_into_store(
            store,
            blobs,
            timeout_seconds=timeout,
            header_scan_rows=config.parser.header_scan_rows,
            extensions=tuple(config.parser.supported_extensions),
        ))
    except (NoUsableFilesError, ParseTimeoutError) as e:
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(payload.to_dict(), indent=2, ensure_ascii=False))
        return

    console.print("\n[bold blue]LinkedIn Export Parser[/bold blue]")
    console.print("=" * 50)

    console.print("\n[bold]Files processed:[/bold]")
    table = Table(show_header=True, header_style="bold")
    table.add_column("File type")
    table.add_column("Rows", justify="right")
    for label, count in payload.summary.rows.items():
        table.add_row(label, str(count))
    console.print(table)

    console.print("\n[bold]Records:[/bold]")
    table = Table(show_header=False)
    table.add_column("Collection", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("Contacts", str(len(payload.contacts)))
    table.add_row("Messages", str(len(payload.messages)))
    table.add_row("Invitations", str(len(payload.invites)))
    table.add_row("Company follows", str(len(payload.company_follows)))
    table.add_row("Saved jobs", str(len(payload.saved_jobs)))
    console.print(table)

    warnings = payload.summary.warnings
    if warnings and max_warnings > 0:
        console.print(f"\n[yellow]Warnings ({len(warnings)}):[/yellow]")
        for warning in warnings[:max_warnings]:
            console.print(f"  • {warning}")
        if len(warnings) > max_warnings:
            console.print(f"  [dim]...and {len(warnings) - max_warnings} more[/dim]")

    console.print()


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from src import __version__

    console.print(f"LinkedIn Export Parser v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
