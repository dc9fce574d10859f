# Copyright (c) Syntropy Systems
"""Finding the transcript table among all tables on a page."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, NamedTuple

from gradewatch.dom import header_cells
from gradewatch.text import normalize

if TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger(__name__)

# Header vocabulary (Swedish and English), matched as substrings of normalised headers
COURSE_CODE_KEYWORDS = ("kurs", "course")
COURSE_NAME_KEYWORDS = ("kursnamn", "course name")
CREDITS_KEYWORDS = ("hp", "hogskolepoang", "credits")
GRADE_KEYWORDS = ("resultat", "betyg", "grade", "result")

DETECTION_KEYWORDS = ("kurs", "hp", "resultat", "course", "credits", "result")

MIN_TABLE_SCORE = 2


class ColumnIndexes(NamedTuple):
    """Positions of the recognised columns; None when unresolved."""

    course_code: int | None
    course_name: int | None
    credits: int | None
    grade: int | None


def normalized_headers(table: Tag) -> list[str]:
    return [normalize(cell.get_text()) for cell in header_cells(table)]


def count_matches(headers: Sequence[str], keywords: Iterable[str]) -> int:
    """Number of keywords that occur in at least one header."""
    return sum(1 for keyword in keywords if any(keyword in header for header in headers))


def find_index(headers: Sequence[str], options: Iterable[str], fallback: int | None = 0) -> int | None:
    """Index of the first header containing any option, else `fallback`."""
    options = tuple(options)
    for index, header in enumerate(headers):
        if any(option in header for option in options):
            return index
    return fallback


def resolve_columns(headers: Sequence[str], fallback: int | None = 0) -> ColumnIndexes:
    """Map each recognised column to a header position.

    Unmatched columns get `fallback`; the default of 0 reproduces the lenient
    behaviour, pass None to leave them unresolved.
    """
    return ColumnIndexes(
        course_code=find_index(headers, COURSE_CODE_KEYWORDS, fallback),
        course_name=find_index(headers, COURSE_NAME_KEYWORDS, fallback),
        credits=find_index(headers, CREDITS_KEYWORDS, fallback),
        grade=find_index(headers, GRADE_KEYWORDS, fallback),
    )


def missing_columns(headers: Sequence[str]) -> list[str]:
    """Names of required columns that no header matches."""
    columns = resolve_columns(headers, fallback=None)
    missing: list[str] = []
    if columns.course_code is None and columns.course_name is None:
        missing.append("course")
    if columns.credits is None:
        missing.append("credits")
    if columns.grade is None:
        missing.append("grade")
    return missing


def score_table(table: Tag) -> int | None:
    """Keyword score of a table, or None when it has no header cells."""
    headers = normalized_headers(table)
    if not headers:
        return None
    return count_matches(headers, DETECTION_KEYWORDS)


def locate(
    tables: Iterable[Tag],
    min_score: int = MIN_TABLE_SCORE,
    require_columns: bool = False,
) -> Tag | None:
    """Pick the table whose headers look most like a transcript.

    The strictly highest score wins, so ties go to the earliest table. Nothing
    is returned unless the winner scores at least `min_score`.
    """
    best_table: Tag | None = None
    best_score = -1

    for position, table in enumerate(tables):
        headers = normalized_headers(table)
        if not headers:
            continue
        if require_columns:
            missing = missing_columns(headers)
            if missing:
                logger.debug("Table %d lacks columns: %s", position, ", ".join(missing))
                continue
        score = count_matches(headers, DETECTION_KEYWORDS)
        logger.debug("Table %d scored %d", position, score)
        if score > best_score:
            best_table = table
            best_score = score

    if best_table is None or best_score < min_score:
        return None
    return best_table
