# Copyright (c) Syntropy Systems
"""Pydantic models for transcript statistics."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field, model_validator
from typing_extensions import Self

from .base import FrozenModel

MAX_EXAMPLES = 3


class SkipReason(str, Enum):
    """Why a course row was left out of the averages.

    Declaration order is the order summaries are reported in.
    """

    PASS_FAIL = "passFail"
    MISSING_CREDITS = "missingCredits"
    MISSING_GRADE = "missingGrade"


class SkipSummary(FrozenModel):
    """Count of rows skipped for one reason, with a few example labels."""

    reason: SkipReason
    count: int = Field(ge=1)
    examples: list[str] = Field(default_factory=list, max_length=MAX_EXAMPLES)


class StatisticsSnapshot(FrozenModel):
    """Result of one pass over the transcript table."""

    weighted_average: float | None = None
    simple_average: float | None = None
    included_courses: int = Field(default=0, ge=0)
    total_courses: int = Field(default=0, ge=0)
    included_credits: float = Field(default=0.0, ge=0)
    total_credits: float = Field(default=0.0, ge=0)
    skipped: list[SkipSummary] = Field(default_factory=list)
    timestamp: datetime

    @model_validator(mode="after")
    def _check_invariants(self) -> Self:
        if (self.weighted_average is None) != (self.included_credits == 0):
            msg = "weighted_average must be null exactly when included_credits is zero"
            raise ValueError(msg)
        if (self.simple_average is None) != (self.included_courses == 0):
            msg = "simple_average must be null exactly when included_courses is zero"
            raise ValueError(msg)
        if self.included_courses > self.total_courses:
            msg = "included_courses cannot exceed total_courses"
            raise ValueError(msg)
        return self

    def skip_summary(self, reason: SkipReason) -> SkipSummary | None:
        """Return the summary for `reason`, if any row was skipped for it."""
        for summary in self.skipped:
            if summary.reason is reason:
                return summary
        return None
