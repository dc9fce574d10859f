# Copyright (c) Syntropy Systems
"""Pydantic models for gradewatch."""

from .api import GET_STATS_MESSAGE, ErrorResponse, HealthResponse, StatsRequest, StatsResponse
from .stats import MAX_EXAMPLES, SkipReason, SkipSummary, StatisticsSnapshot

__all__ = [
    "GET_STATS_MESSAGE",
    "MAX_EXAMPLES",
    "ErrorResponse",
    "HealthResponse",
    "SkipReason",
    "SkipSummary",
    "StatisticsSnapshot",
    "StatsRequest",
    "StatsResponse",
]
