# Copyright (c) Syntropy Systems
"""Row classification and grade-point averaging."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable

from gradewatch.dom import cell_text, data_rows
from gradewatch.grades import Missing, PassFail, interpret_grade, parse_credits
from gradewatch.locator import normalized_headers, resolve_columns
from gradewatch.models.stats import MAX_EXAMPLES, SkipReason, SkipSummary, StatisticsSnapshot

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bs4 import Tag

    from gradewatch.locator import ColumnIndexes

UNKNOWN_COURSE_LABEL = "okänd kurs"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RawRow:
    """Cell text of one table row for the recognised columns."""

    course_code: str
    course_name: str
    credits: str
    grade: str

    @classmethod
    def from_row(cls, row: Tag, columns: ColumnIndexes) -> RawRow:
        return cls(
            course_code=cell_text(row, columns.course_code),
            course_name=cell_text(row, columns.course_name),
            credits=cell_text(row, columns.credits),
            grade=cell_text(row, columns.grade),
        )

    @property
    def is_course(self) -> bool:
        return bool(self.course_code or self.course_name)

    @property
    def label(self) -> str:
        return self.course_code or self.course_name or UNKNOWN_COURSE_LABEL


@dataclass
class _SkipTally:
    count: int = 0
    examples: list[str] = field(default_factory=list)

    def add(self, label: str) -> None:
        self.count += 1
        if len(self.examples) < MAX_EXAMPLES:
            self.examples.append(label)


@dataclass
class StatsAccumulator:
    """Running sums for one computation pass."""

    total_courses: int = 0
    total_credits: float = 0.0
    included_courses: int = 0
    included_credits: float = 0.0
    weighted_sum: float = 0.0
    simple_sum: float = 0.0
    skips: dict[SkipReason, _SkipTally] = field(
        default_factory=lambda: {reason: _SkipTally() for reason in SkipReason}
    )

    def skip(self, reason: SkipReason, label: str) -> None:
        self.skips[reason].add(label)

    def add_row(self, row: RawRow) -> None:
        if not row.is_course:
            return

        credits = parse_credits(row.credits)

        self.total_courses += 1
        if credits is not None:
            self.total_credits += credits

        if credits is None:
            self.skip(SkipReason.MISSING_CREDITS, row.label)
            return

        grade = interpret_grade(row.grade)
        if isinstance(grade, Missing):
            self.skip(SkipReason.MISSING_GRADE, row.label)
            return
        if isinstance(grade, PassFail):
            self.skip(SkipReason.PASS_FAIL, row.label)
            return

        self.included_courses += 1
        self.included_credits += credits
        self.weighted_sum += credits * grade.value
        self.simple_sum += grade.value

    def snapshot(self, timestamp: datetime) -> StatisticsSnapshot:
        weighted = self.weighted_sum / self.included_credits if self.included_credits > 0 else None
        simple = self.simple_sum / self.included_courses if self.included_courses > 0 else None
        skipped = [
            SkipSummary(reason=reason, count=tally.count, examples=list(tally.examples))
            for reason, tally in self.skips.items()
            if tally.count > 0
        ]
        return StatisticsSnapshot(
            weighted_average=weighted,
            simple_average=simple,
            included_courses=self.included_courses,
            total_courses=self.total_courses,
            included_credits=self.included_credits,
            total_credits=self.total_credits,
            skipped=skipped,
            timestamp=timestamp,
        )


def summarize_rows(
    rows: Iterable[RawRow],
    clock: Callable[[], datetime] = utc_now,
) -> StatisticsSnapshot:
    """Aggregate already extracted rows into a snapshot."""
    accumulator = StatsAccumulator()
    for row in rows:
        accumulator.add_row(row)
    return accumulator.snapshot(clock())


def extract_rows(table: Tag, require_columns: bool = False) -> list[RawRow]:
    """Read the recognised columns of every data row."""
    columns = resolve_columns(normalized_headers(table), fallback=None if require_columns else 0)
    return [RawRow.from_row(row, columns) for row in data_rows(table)]


def compute_statistics(
    table: Tag,
    clock: Callable[[], datetime] = utc_now,
    require_columns: bool = False,
) -> StatisticsSnapshot:
    """Compute a fresh snapshot from the current contents of `table`."""
    return summarize_rows(extract_rows(table, require_columns=require_columns), clock=clock)
