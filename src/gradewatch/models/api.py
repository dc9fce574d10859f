# Copyright (c) Syntropy Systems
"""Pydantic models for the query protocol."""

from __future__ import annotations

from .base import GradewatchBaseModel
from .stats import StatisticsSnapshot

GET_STATS_MESSAGE = "gradewatch/get-stats"


class StatsRequest(GradewatchBaseModel):
    """Message asking for the latest snapshot."""

    type: str | None = None


class StatsResponse(GradewatchBaseModel):
    """Latest snapshot plus whether a table is attached."""

    stats: StatisticsSnapshot | None = None
    has_table: bool = False


class HealthResponse(GradewatchBaseModel):
    """Response from health check."""

    status: str
    state: str
    version: str


class ErrorResponse(GradewatchBaseModel):
    """Error detail returned by the API."""

    detail: str
