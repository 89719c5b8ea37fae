"""
models/records.py — Pydantic models for survey input records and summary rows.

SurveyRecord is the typed, null-marked form of one CPS respondent in one
period. The pipeline works on polars DataFrames with RECORD_SCHEMA columns;
records_to_frame() bridges in-memory records to that form.

SummaryRow mirrors one output row of the aggregator (one per period x group
[x secondary]). Rates are 0-1 fractions; None means undefined.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

import polars as pl
from pydantic import BaseModel, ConfigDict, field_validator

RECORD_SCHEMA: dict[str, type[pl.DataType]] = {
    "year": pl.Int64,
    "month": pl.Int64,
    "age": pl.Int64,
    "nativity": pl.Int64,
    "arrival_year": pl.Int64,
    "labor_force": pl.Int64,
    "empstat": pl.Int64,
    "usual_hours": pl.Float64,
    "part_time_reason": pl.Int64,
    "educ": pl.Int64,
    "sex": pl.Int64,
    "occ": pl.Int64,
    "weight": pl.Float64,
    "earnings": pl.Float64,
}


class SurveyRecord(BaseModel):
    """One respondent in one survey period. Missing values are None."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int | None = None
    age: int
    nativity: int | None = None
    arrival_year: int | None = None
    labor_force: int | None = None
    empstat: int | None = None
    usual_hours: float | None = None
    part_time_reason: int | None = None
    educ: int | None = None
    sex: int | None = None
    occ: int | None = None
    weight: float = 0.0
    earnings: float | None = None

    @field_validator("weight", mode="before")
    @classmethod
    def non_negative_weight(cls, v: Any) -> float:
        """Missing, unparseable, NaN, or negative weights count as 0."""
        try:
            w = float(v)
        except (TypeError, ValueError):
            return 0.0
        if math.isnan(w) or w < 0:
            return 0.0
        return w

    def to_row(self) -> dict[str, Any]:
        return self.model_dump()


def records_to_frame(records: Iterable[SurveyRecord]) -> pl.DataFrame:
    """Build a RECORD_SCHEMA DataFrame from in-memory SurveyRecords."""
    return pl.DataFrame([r.to_row() for r in records], schema=RECORD_SCHEMA)


class SummaryRow(BaseModel):
    """One aggregated (period, group[, secondary]) cell."""

    year: int
    month: int | None = None
    group: str
    secondary: str | None = None

    records: int = 0
    population: float = 0.0
    labor_force: float = 0.0
    not_in_labor_force: float = 0.0
    employed: float = 0.0
    unemployed: float = 0.0
    part_time: float = 0.0
    part_time_econ: float = 0.0
    full_time: float = 0.0
    median_weekly_earnings: float | None = None

    lfpr: float | None = None
    emp_pop_ratio: float | None = None
    unemployment_rate: float | None = None
    part_time_share: float | None = None
    part_time_econ_share: float | None = None
    full_time_share: float | None = None

    @classmethod
    def from_frame(cls, df: pl.DataFrame) -> list["SummaryRow"]:
        """Convert an aggregator output frame into SummaryRow objects."""
        fields = set(cls.model_fields)
        return [
            cls(**{k: v for k, v in row.items() if k in fields})
            for row in df.iter_rows(named=True)
        ]
