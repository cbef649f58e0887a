"""Config schema definitions."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from tidydraws.reshape.spec import DEFAULT_DRAW_INDICES, DEFAULT_SEP


class ReshapeConfig(BaseModel):
    draw_indices: list[str] = Field(default_factory=lambda: list(DEFAULT_DRAW_INDICES))
    sep: str = DEFAULT_SEP
    regex: bool = False
    variable_column: str = ".variable"
    value_column: str = ".value"
    drop_indices: bool = False
    include_sample_stats: bool = True

    @field_validator("draw_indices")
    @classmethod
    def validate_draw_indices(cls, value: list[str]) -> list[str]:
        """Require at least one identity column and no repeats."""
        if not value:
            raise ValueError("draw_indices must name at least one column")
        if len(set(value)) != len(value):
            raise ValueError(f"draw_indices has repeated names: {value}")
        return value

    @field_validator("sep")
    @classmethod
    def validate_sep(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"sep is not a valid regular expression: {e}") from None
        return value


class SummaryConfig(BaseModel):
    point: Literal["mean", "median", "mode"] = "median"
    interval: Literal["qi", "hdi"] = "qi"
    widths: list[float] = Field(default_factory=lambda: [0.95])

    @field_validator("widths")
    @classmethod
    def validate_widths(cls, value: list[float]) -> list[float]:
        """Validate that every width lies strictly between 0 and 1."""
        if not value or not all(0 < w < 1 for w in value):
            raise ValueError(f"widths must be non-empty and within (0, 1), got {value}")
        return value


class CompareConfig(BaseModel):
    fun: Literal["-", "+", "*", "/"] = "-"
    comparison: Literal["default", "pairwise", "ordered", "control"] = "default"


class AppConfig(BaseModel):
    reshape: ReshapeConfig = ReshapeConfig()
    summary: SummaryConfig = SummaryConfig()
    compare: CompareConfig = CompareConfig()
