# Copyright (c) Syntropy Systems
"""gradewatch init command."""

from pathlib import Path

import typer
import yaml
from rich.console import Console

from gradewatch.config import CONFIG_DIR_NAME, CONFIG_FILE_NAME, GradewatchConfig

console = Console()


def init(
    path: Path = typer.Argument(
        Path(),
        help="Directory to initialize (default: current directory)",
    ),
) -> None:
    """Write a default .gradewatch/config.yaml."""
    target = path.resolve()
    config_dir = target / CONFIG_DIR_NAME
    config_path = config_dir / CONFIG_FILE_NAME

    if config_path.exists():
        console.print(f"[yellow]Already initialized:[/yellow] {config_dir}")
        return

    config_dir.mkdir(parents=True, exist_ok=True)
    with config_path.open("w") as f:
        yaml.dump(GradewatchConfig().to_dict(), f, default_flow_style=False, allow_unicode=True)

    console.print(f"[green]Initialized gradewatch config:[/green] {config_path}")
