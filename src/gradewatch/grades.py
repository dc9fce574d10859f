# Copyright (c) Syntropy Systems
"""Parsing of credit and grade cells."""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Union

from typing_extensions import TypeAlias

from gradewatch.text import normalize

_NON_NUMERIC_RE = re.compile(r"[^0-9.]+")
_LEADING_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")
_GRADE_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?")

SCALE_GRADES = ("3", "4", "5")
FAIL_GRADE = "u"
PASS_FAIL_GRADES = ("g", "pass", "godkand", "p")


@dataclass(frozen=True)
class Numeric:
    """A grade that counts towards the averages."""

    value: float


@dataclass(frozen=True)
class PassFail:
    """A pass/fail mark with no numeric weight."""


@dataclass(frozen=True)
class Missing:
    """An empty or unrecognised grade."""


GradeOutcome: TypeAlias = Union[Numeric, PassFail, Missing]


def parse_credits(text: str) -> float | None:
    """Parse a credits cell such as "7,5 hp".

    The first decimal comma becomes a period and everything except digits and
    periods is dropped. The leading decimal number of what remains is the
    result; None when there is none.
    """
    if not text:
        return None
    cleaned = _NON_NUMERIC_RE.sub("", text.replace(",", ".", 1))
    if not cleaned:
        return None
    match = _LEADING_NUMBER_RE.match(cleaned)
    if match is None:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def interpret_grade(text: str) -> GradeOutcome:
    """Classify a grade cell. The first matching rule wins."""
    if not text:
        return Missing()

    normalized = normalize(text)

    if normalized in SCALE_GRADES:
        return Numeric(float(int(normalized)))

    if normalized == FAIL_GRADE:
        return Numeric(0.0)

    if _GRADE_NUMBER_RE.fullmatch(normalized):
        value = float(normalized)
        return Numeric(value) if math.isfinite(value) else Missing()

    if normalized in PASS_FAIL_GRADES:
        return PassFail()

    return Missing()
