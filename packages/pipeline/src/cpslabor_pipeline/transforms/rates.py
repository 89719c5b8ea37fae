"""
transforms/rates.py — Derive labor-market rates from weighted sums.

Rates are ratios of two weighted sums in the same row. A rate whose
denominator is not positive is null ("undefined"), never 0 and never NaN,
and one undefined cell never affects another row.

Internally rates are 0-1 fractions; to_percent() converts them to 0-100
for display tables.

Column order of summary tables (SUMMARY_COLUMNS, after the period columns):
    group, secondary, records,
    population, labor_force, not_in_labor_force, employed, unemployed,
    part_time, part_time_econ, full_time,
    lfpr, emp_pop_ratio, unemployment_rate,
    part_time_share, part_time_econ_share, full_time_share,
    median_weekly_earnings
"""

from __future__ import annotations

from typing import Final

import polars as pl

# rate column → (numerator, denominator)
RATE_DEFINITIONS: Final[dict[str, tuple[str, str]]] = {
    "lfpr": ("labor_force", "population"),
    "emp_pop_ratio": ("employed", "population"),
    "unemployment_rate": ("unemployed", "labor_force"),
    "part_time_share": ("part_time", "employed"),
    "part_time_econ_share": ("part_time_econ", "employed"),
    "full_time_share": ("full_time", "employed"),
}

RATE_COLUMNS: Final[list[str]] = list(RATE_DEFINITIONS)

PERIOD_COLUMNS: Final[list[str]] = ["year", "month"]

SUMMARY_COLUMNS: Final[list[str]] = [
    "group",
    "secondary",
    "records",
    "population",
    "labor_force",
    "not_in_labor_force",
    "employed",
    "unemployed",
    "part_time",
    "part_time_econ",
    "full_time",
    *RATE_COLUMNS,
    "median_weekly_earnings",
]


def safe_ratio(numerator: str, denominator: str) -> pl.Expr:
    """numerator / denominator, or null when the denominator is not > 0."""
    den = pl.col(denominator)
    return (
        pl.when(den > 0)
        .then(pl.col(numerator) / den)
        .otherwise(pl.lit(None, dtype=pl.Float64))
    )


def derive_rates(df: pl.DataFrame) -> pl.DataFrame:
    """
    Append every rate in RATE_DEFINITIONS whose inputs are present.

    Sum columns are left untouched; existing rate columns are recomputed.
    """
    exprs = [
        safe_ratio(num, den).alias(name)
        for name, (num, den) in RATE_DEFINITIONS.items()
        if num in df.columns and den in df.columns
    ]
    return df.with_columns(exprs) if exprs else df


def to_percent(df: pl.DataFrame, *, decimals: int | None = None) -> pl.DataFrame:
    """
    Scale rate columns from 0-1 fractions to 0-100 percentages.

    Args:
        df:       Frame with rate columns from derive_rates().
        decimals: If set, round the scaled rates.
    """
    exprs = []
    for name in RATE_COLUMNS:
        if name not in df.columns:
            continue
        expr = pl.col(name) * 100.0
        if decimals is not None:
            expr = expr.round(decimals)
        exprs.append(expr.alias(name))
    return df.with_columns(exprs) if exprs else df


def order_columns(df: pl.DataFrame) -> pl.DataFrame:
    """Select period columns then SUMMARY_COLUMNS, keeping those present."""
    ordered = [c for c in (*PERIOD_COLUMNS, *SUMMARY_COLUMNS) if c in df.columns]
    return df.select(ordered)
