# Copyright (c) Syntropy Systems
"""Rich rendering of a statistics snapshot."""
from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.table import Table

from gradewatch.models.stats import SkipReason

if TYPE_CHECKING:
    from datetime import datetime

    from gradewatch.models.stats import SkipSummary, StatisticsSnapshot

PLACEHOLDER = "-"
WAITING_FOR_ROWS = "Waiting for table rows…"
ALL_INCLUDED = "All graded rows are included."

SKIP_REASON_COPY = {
    SkipReason.PASS_FAIL: "Pass/fail grade (ignored)",
    SkipReason.MISSING_CREDITS: "Missing credits",
    SkipReason.MISSING_GRADE: "Missing or unsupported grade",
}


def format_average(value: float | None, decimal_separator: str = ",") -> str:
    """Format an average with exactly two decimals."""
    if value is None:
        return PLACEHOLDER
    return f"{value:.2f}".replace(".", decimal_separator)


def format_credits(value: float, decimal_separator: str = ",") -> str:
    """Format a credit sum with up to two decimals."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        text = "0"
    return text.replace(".", decimal_separator)


def format_skip_summary(summary: SkipSummary) -> str:
    examples = f" (ex: {', '.join(summary.examples)})" if summary.examples else ""
    return f"{SKIP_REASON_COPY[summary.reason]}: {summary.count}{examples}"


def format_timestamp(timestamp: datetime) -> str:
    return f"Updated {timestamp.astimezone().strftime('%H:%M')}"


def skipped_lines(snapshot: StatisticsSnapshot | None) -> list[str]:
    if snapshot is None:
        return [WAITING_FOR_ROWS]
    if not snapshot.skipped:
        return [ALL_INCLUDED]
    return [format_skip_summary(summary) for summary in snapshot.skipped]


def build_metrics_table(snapshot: StatisticsSnapshot | None, decimal_separator: str = ",") -> Table:
    """Build the averages and counters table."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Weighted average", justify="right")
    table.add_column("Simple average", justify="right")
    table.add_column("Included", justify="right")
    table.add_column("Total", justify="right")

    if snapshot is None:
        table.add_row(PLACEHOLDER, PLACEHOLDER, "0 courses / 0 hp", "0 courses / 0 hp")
        return table

    table.add_row(
        f"[bold]{format_average(snapshot.weighted_average, decimal_separator)}[/bold]",
        f"[bold]{format_average(snapshot.simple_average, decimal_separator)}[/bold]",
        f"{snapshot.included_courses} courses / "
        f"{format_credits(snapshot.included_credits, decimal_separator)} hp",
        f"{snapshot.total_courses} courses / "
        f"{format_credits(snapshot.total_credits, decimal_separator)} hp",
    )
    return table


def build_panel(
    snapshot: StatisticsSnapshot | None,
    status: str,
    decimal_separator: str = ",",
) -> Table:
    """Build the full display layout."""
    layout = Table.grid(padding=(0, 1))
    layout.add_row(f"[bold]Transcript GPA[/bold]  [dim]{escape(status)}[/dim]")
    layout.add_row(build_metrics_table(snapshot, decimal_separator))
    layout.add_row("Excluded rows:")
    for line in skipped_lines(snapshot):
        layout.add_row(f"  • {escape(line)}")
    if snapshot is not None:
        layout.add_row(f"[dim]{format_timestamp(snapshot.timestamp)}[/dim]")
    return layout
