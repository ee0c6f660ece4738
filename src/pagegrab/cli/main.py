"""
pagegrab CLI - Main entry point.

Fetch a page and print its title, text, links, images or tables.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.traceback import install as install_rich_traceback

from pagegrab import __app_name__, __version__
from pagegrab.core.backends.base import BackendError
from pagegrab.core.config.loader import ConfigError, load_app_config
from pagegrab.core.config.models import AppConfig, FetchConfig, OutputFormat, TableStrategy
from pagegrab.core.document import FetchedDocument
from pagegrab.core.logging import setup_logging
from pagegrab.core.scraper import PageScraper

from .render import render, write_output

# Load environment variables from .env (if present)
load_dotenv()

install_rich_traceback(show_locals=False, width=120)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=__app_name__,
    help="Fetch a web page and extract structured data from its HTML",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """pagegrab - Pull title, text, links, images and tables out of web pages."""
    pass


def _load_config(
    config_path: Path | None,
    strategies: list[TableStrategy] | None = None,
    verbose: bool = False,
) -> AppConfig:
    """Load configuration, apply command-line overrides and set up logging."""
    try:
        config = load_app_config(config_path)
    except ConfigError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        if e.details:
            err_console.print(f"[dim]{escape(str(e.details))}[/dim]")
        raise typer.Exit(1)

    if strategies:
        config.extraction.strategies = list(dict.fromkeys(strategies))
    if verbose:
        config.logging.level = "DEBUG"

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    return config


def _fetch_overrides(fetch: FetchConfig, **overrides: object) -> FetchConfig:
    """Apply command-line fetch settings, validated like the config file."""
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return fetch
    try:
        return FetchConfig.model_validate({**fetch.model_dump(), **updates})
    except ValidationError as e:
        err_console.print(f"[red]Invalid option:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _emit(fmt: OutputFormat, data: object, output: Path | None, as_json: bool) -> None:
    if output:
        write_output(output, data)
        err_console.print(f"[green]Saved {fmt.value} to[/green] [cyan]{output}[/cyan]")
    else:
        render(console, fmt, data, as_json=as_json)


# =============================================================================
# Fetch Command
# =============================================================================


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL to fetch"),
    fmt: Optional[OutputFormat] = typer.Option(
        None,
        "--format",
        "-f",
        help="What to extract (default from config: all)",
        case_sensitive=False,
    ),
    user_agent: Optional[str] = typer.Option(None, "--user-agent", "-A", help="User-Agent header"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Request timeout in seconds"),
    strategy: Optional[List[TableStrategy]] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Table strategy to try (repeat to set the order)",
        case_sensitive=False,
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to pagegrab.yaml"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save results to a file"),
    as_json: bool = typer.Option(False, "--json", "-j", help="Print JSON instead of tables"),
    verbose: bool = typer.Option(False, "--verbose", help="Log strategy and fetch details"),
) -> None:
    """Fetch a URL and extract data from it.

    Examples:

        # Every table on the page
        pagegrab fetch https://example.com/stats -f tables

        # Links as JSON, with a custom user agent
        pagegrab fetch https://example.com -f links --json -A "MyBot/1.0"

        # Force the regex fallback
        pagegrab fetch https://example.com -f tables -s regex
    """
    config = _load_config(config_path, strategy, verbose)
    config.fetch = _fetch_overrides(config.fetch, user_agent=user_agent, timeout_seconds=timeout)

    fmt = fmt or config.default_format

    async def _run() -> object:
        async with PageScraper(config) as scraper:
            return await scraper.scrape(url, fmt)

    try:
        data = asyncio.run(_run())
    except BackendError as e:
        status = f" (HTTP {e.status_code})" if e.status_code else ""
        err_console.print(f"[red]Failed to fetch {url}{status}:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _emit(fmt, data, output, as_json)


# =============================================================================
# Tables Command
# =============================================================================


@app.command()
def tables(
    source: str = typer.Argument(..., help="HTML file to read ('-' for stdin)"),
    strategy: Optional[List[TableStrategy]] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Table strategy to try (repeat to set the order)",
        case_sensitive=False,
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to pagegrab.yaml"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save results to a file"),
    as_json: bool = typer.Option(False, "--json", "-j", help="Print JSON instead of tables"),
    verbose: bool = typer.Option(False, "--verbose", help="Log strategy details"),
) -> None:
    """Extract tables from a local HTML file."""
    config = _load_config(config_path, strategy, verbose)

    if source == "-":
        markup = sys.stdin.read()
    else:
        path = Path(source)
        if not path.is_file():
            err_console.print(f"[red]File not found:[/red] {source}")
            raise typer.Exit(1)
        markup = path.read_text(encoding="utf-8", errors="replace")

    document = FetchedDocument.from_markup(markup, config=config.extraction)
    data = PageScraper(config).extract(document, OutputFormat.TABLES)

    _emit(OutputFormat.TABLES, data, output, as_json)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
