# Copyright (c) Syntropy Systems
"""gradewatch stats command - one-shot statistics for a page."""

import typer
from rich.console import Console
from rich.markup import escape

from gradewatch.config import load_config
from gradewatch.controller import STATUS_UP_TO_DATE
from gradewatch.dom import Page
from gradewatch.locator import locate
from gradewatch.render import build_panel
from gradewatch.sources import SourceError, load_html
from gradewatch.stats import compute_statistics

console = Console()


def stats(
    source: str = typer.Argument(..., help="HTML file or http(s) URL of the transcript page"),
    as_json: bool = typer.Option(False, "--json", help="Print the snapshot as JSON"),
) -> None:
    """Compute grade-point statistics for a transcript page."""
    config = load_config()

    try:
        markup = load_html(source)
    except SourceError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    page = Page(markup)
    table = locate(
        page.tables(),
        min_score=config.min_table_score,
        require_columns=config.require_columns,
    )
    if table is None:
        console.print("[yellow]No transcript table found[/yellow]")
        raise typer.Exit(1)

    snapshot = compute_statistics(table, require_columns=config.require_columns)

    if as_json:
        typer.echo(snapshot.model_dump_json(by_alias=True, indent=2))
        return

    console.print(build_panel(snapshot, STATUS_UP_TO_DATE, config.decimal_separator))
