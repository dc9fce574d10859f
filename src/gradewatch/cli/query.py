# Copyright (c) Syntropy Systems
"""gradewatch query command - ask a running server for statistics."""

import typer
from rich.console import Console
from rich.markup import escape

from gradewatch.client import DEFAULT_SERVER_URL, GradewatchClient, GradewatchClientError
from gradewatch.config import load_config
from gradewatch.controller import STATUS_UP_TO_DATE, STATUS_WAITING
from gradewatch.render import build_panel

console = Console()


def query(
    server: str = typer.Option(
        DEFAULT_SERVER_URL,
        "--server", "-s",
        envvar="GRADEWATCH_SERVER_URL",
        help="URL of a running 'gradewatch serve'",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw response as JSON"),
) -> None:
    """Show the latest statistics from a gradewatch server."""
    config = load_config()

    try:
        with GradewatchClient(server) as client:
            response = client.get_stats()
    except GradewatchClientError as e:
        console.print(f"[red]Could not reach {escape(server)}:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if as_json:
        typer.echo(response.model_dump_json(by_alias=True, indent=2))
        return

    if not response.has_table:
        status = "No transcript table on the page"
    elif response.stats is None:
        status = STATUS_WAITING
    else:
        status = STATUS_UP_TO_DATE
    console.print(build_panel(response.stats, status, config.decimal_separator))
