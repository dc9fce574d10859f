# Copyright (c) Syntropy Systems
"""gradewatch watch command - live updating statistics view."""
from __future__ import annotations

import asyncio
import dataclasses
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.markup import escape

from gradewatch.config import GradewatchConfig, load_config
from gradewatch.controller import AsyncioScheduler, StatsController
from gradewatch.dom import Page
from gradewatch.render import build_panel
from gradewatch.sources import FileWatcher, SourceError, follow_file

console = Console()


async def _watch(page: Page, watcher: FileWatcher, config: GradewatchConfig, live: Live) -> None:
    controller = StatsController(page, AsyncioScheduler(), config=config)
    controller.add_listener(
        lambda snapshot, status: live.update(build_panel(snapshot, status, config.decimal_separator))
    )
    controller.start()
    await follow_file(page, watcher, config.poll_interval)


def watch(
    path: Path = typer.Argument(..., help="HTML file to watch"),
    interval: Optional[float] = typer.Option(
        None,
        "--interval", "-i",
        help="Seconds between file checks (default: poll_interval from config)",
    ),
) -> None:
    """Watch a saved transcript page and keep the statistics current.

    Every change to the file is applied to the page as a mutation. Press
    Ctrl+C to exit.
    """
    config = dataclasses.replace(load_config(), reattach_on_detach=True)
    if interval is not None:
        config.poll_interval = interval

    watcher = FileWatcher(path)
    try:
        page = Page(watcher.read())
    except SourceError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    console.print("[dim]Starting watch mode...[/dim]")

    try:
        with Live(console=console, refresh_per_second=4) as live:
            asyncio.run(_watch(page, watcher, config, live))
    except KeyboardInterrupt:
        console.print("\n[dim]Watch stopped[/dim]")
