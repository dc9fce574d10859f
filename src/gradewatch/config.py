# Copyright (c) Syntropy Systems
"""Configuration management for gradewatch."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import cast

import yaml

CONFIG_DIR_NAME = ".gradewatch"
CONFIG_FILE_NAME = "config.yaml"


@dataclass
class GradewatchConfig:
    """Configuration for gradewatch."""

    # Quiet period before a burst of table mutations is recomputed (seconds)
    debounce_interval: float = 0.12

    # Minimum number of header keywords a table must match to be picked
    min_table_score: int = 2

    # Reject tables whose credits/grade/course columns cannot be resolved
    require_columns: bool = False

    # Go back to searching when the attached table leaves the document
    reattach_on_detach: bool = False

    # Poll interval for watched files (seconds)
    poll_interval: float = 1.0

    # Decimal separator used when rendering numbers
    decimal_separator: str = ","

    def to_dict(self) -> dict[str, object]:
        """Return the configuration as a plain mapping."""
        return asdict(self)


def find_config_dir(start_path: Path | None = None) -> Path | None:
    """Find the nearest .gradewatch directory by walking up from start_path.

    Returns None if no .gradewatch directory is found.
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()

    while current != current.parent:
        config_dir = current / CONFIG_DIR_NAME
        if config_dir.is_dir():
            return config_dir
        current = current.parent

    # Check root
    config_dir = current / CONFIG_DIR_NAME
    if config_dir.is_dir():
        return config_dir

    return None


def get_global_config_dir() -> Path:
    """Get the global gradewatch config directory (~/.gradewatch)."""
    return Path.home() / CONFIG_DIR_NAME


def _apply(config: GradewatchConfig, data: dict[str, object]) -> None:
    debounce_interval = data.get("debounce_interval")
    if isinstance(debounce_interval, (int, float)) and not isinstance(debounce_interval, bool):
        config.debounce_interval = float(debounce_interval)
    min_table_score = data.get("min_table_score")
    if isinstance(min_table_score, int) and not isinstance(min_table_score, bool):
        config.min_table_score = min_table_score
    require_columns = data.get("require_columns")
    if isinstance(require_columns, bool):
        config.require_columns = require_columns
    reattach_on_detach = data.get("reattach_on_detach")
    if isinstance(reattach_on_detach, bool):
        config.reattach_on_detach = reattach_on_detach
    poll_interval = data.get("poll_interval")
    if isinstance(poll_interval, (int, float)) and not isinstance(poll_interval, bool):
        config.poll_interval = float(poll_interval)
    decimal_separator = data.get("decimal_separator")
    if isinstance(decimal_separator, str) and decimal_separator:
        config.decimal_separator = decimal_separator


def load_config(config_dir: Path | None = None) -> GradewatchConfig:
    """Load configuration from .gradewatch/config.yaml or defaults.

    Looks for config in:
    1. Provided config_dir
    2. Nearest .gradewatch directory walking up
    3. ~/.gradewatch/config.yaml
    4. Defaults
    """
    config = GradewatchConfig()

    config_path = None

    if config_dir is not None:
        config_path = config_dir / CONFIG_FILE_NAME
    else:
        found_dir = find_config_dir()
        if found_dir is not None:
            config_path = found_dir / CONFIG_FILE_NAME
        else:
            global_config = get_global_config_dir() / CONFIG_FILE_NAME
            if global_config.exists():
                config_path = global_config

    if config_path is not None and config_path.exists():
        with config_path.open() as f:
            data = yaml.safe_load(f) or {}
        if isinstance(data, dict):
            _apply(config, cast("dict[str, object]", data))

    return config
