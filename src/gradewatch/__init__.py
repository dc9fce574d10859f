"""
gradewatch - Transcript grade-point statistics.

Find the results table, average the grades, keep up as the page changes.
"""

__version__ = "0.1.0"

from gradewatch.controller import ControllerState, StatsController
from gradewatch.dom import Page
from gradewatch.grades import interpret_grade, parse_credits
from gradewatch.locator import locate, resolve_columns
from gradewatch.stats import compute_statistics
from gradewatch.text import normalize

__all__ = [
    "ControllerState",
    "Page",
    "StatsController",
    "__version__",
    "compute_statistics",
    "interpret_grade",
    "locate",
    "normalize",
    "parse_credits",
    "resolve_columns",
]
