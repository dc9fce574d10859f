# Copyright (c) Syntropy Systems
"""CLI command for serving the stats query protocol."""

import dataclasses
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from gradewatch.config import load_config
from gradewatch.controller import AsyncioScheduler, StatsController
from gradewatch.dom import Page
from gradewatch.sources import FileWatcher, SourceError

console = Console()


def serve(
    path: Path = typer.Argument(..., help="HTML file to watch and serve statistics for"),
    port: int = typer.Option(8080, "--port", "-p", help="Port to listen on"),
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
) -> None:
    """
    Serve statistics for a transcript page over HTTP.

    The page is re-read whenever the file changes. Ask for the latest
    snapshot with 'gradewatch query' or POST {"type": "gradewatch/get-stats"}
    to /api/v1/messages.
    """
    try:
        import uvicorn
    except ImportError:
        console.print("[red]Error:[/red] uvicorn is required for server mode.")
        console.print("Install with: pip install gradewatch[server]")
        raise typer.Exit(1)

    from gradewatch.server import create_app

    config = dataclasses.replace(load_config(), reattach_on_detach=True)

    watcher = FileWatcher(path)
    try:
        page = Page(watcher.read())
    except SourceError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    controller = StatsController(page, AsyncioScheduler(), config=config)
    app = create_app(controller, page=page, watcher=watcher, poll_interval=config.poll_interval)

    console.print("[bold]gradewatch server[/bold]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    console.print(f"  Page: {path}")
    console.print()

    uvicorn.run(app, host=host, port=port)
