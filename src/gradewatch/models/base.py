# Copyright (c) Syntropy Systems
"""Shared Pydantic model helpers for gradewatch."""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GradewatchBaseModel(BaseModel):
    """Base model with shared config for gradewatch schemas.

    Fields are snake_case in Python and camelCase on the wire.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )


class FrozenModel(GradewatchBaseModel):
    """Immutable value object."""

    model_config: ClassVar[ConfigDict] = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
        frozen=True,
    )
