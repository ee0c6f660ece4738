"""
Terminal rendering for scrape output.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from pagegrab.core.config.models import OutputFormat


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def write_output(path: Path, data: Any) -> None:
    """Write scrape output to a file: JSON, or plain text for text/raw."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = data if isinstance(data, str) else to_json(data)
    path.write_text(content, encoding="utf-8")


def _table_view(record: dict[str, Any]) -> Table:
    title = f"Table {record['index']}"
    if record["caption"]:
        title += f": {record['caption']}"

    view = Table(title=title, show_header=True, header_style="bold magenta")
    for header in record["headers"]:
        view.add_column(header, overflow="fold")

    for row in record["rows"]:
        values = [row.get(h) for h in record["headers"]] if isinstance(row, dict) else list(row)
        values += [None] * (len(record["headers"]) - len(values))
        view.add_row(*("" if v is None else str(v) for v in values))

    view.caption = f"{record['rowCount']} row(s)"
    return view


def render_tables(console: Console, tables: list[dict[str, Any]]) -> None:
    if not tables:
        console.print("[dim]No tables found.[/dim]")
        return
    for record in tables:
        console.print(_table_view(record))
        console.print()


def render_records(console: Console, records: list[dict[str, Any]], columns: list[str]) -> None:
    """Render links or images as a single rich table."""
    if not records:
        console.print("[dim]Nothing found.[/dim]")
        return
    view = Table(show_header=True, header_style="bold magenta")
    for column in columns:
        view.add_column(column.capitalize(), overflow="fold")
    for record in records:
        view.add_row(*(str(record.get(column) or "") for column in columns))
    console.print(view)


def render(console: Console, fmt: OutputFormat, data: Any, as_json: bool = False) -> None:
    """Print scrape output for a human, or as JSON when asked."""
    if isinstance(data, str):
        typer.echo(data)
    elif as_json or fmt is OutputFormat.ALL:
        typer.echo(to_json(data))
    elif fmt is OutputFormat.TABLES:
        render_tables(console, data)
    elif fmt is OutputFormat.LINKS:
        render_records(console, data, ["href", "text"])
    elif fmt is OutputFormat.IMAGES:
        render_records(console, data, ["src", "alt", "width", "height"])
    else:
        typer.echo(to_json(data))
