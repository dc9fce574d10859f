# Copyright (c) Syntropy Systems
"""gradewatch server module for the stats query protocol."""

from .app import create_app, get_controller

__all__ = [
    "create_app",
    "get_controller",
]
