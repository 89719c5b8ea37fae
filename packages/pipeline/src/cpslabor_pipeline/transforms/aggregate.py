"""
transforms/aggregate.py — Weighted labor-force sums per (period, group[, secondary]) cell.

Input is the output of transforms.classify.classify(): RECORD_SCHEMA columns
plus a non-null `group`. Output has one row per cell with weighted sums, an
unweighted record count, and the weighted median of weekly earnings. Rates
are added afterwards by transforms.rates.derive_rates().

The optional "All" pseudo-group is aggregated over the union of a period's
classified records, so its sums equal the sum of the group sums and its
median is a true median of the pooled records.

Usage:
    from cpslabor_pipeline.transforms.aggregate import aggregate, summarize
    from cpslabor_pipeline.transforms.classify import ARRIVAL_COHORT, classify

    cells = aggregate(classify(df, ARRIVAL_COHORT), ARRIVAL_COHORT)
    table = summarize(df, ARRIVAL_COHORT, secondary="education")  # incl. rates
"""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl
import structlog

from cpslabor_shared.codes import AnalysisGroup, EducationTier, EmploymentStatus
from cpslabor_shared.constants import (
    ECONOMIC_PART_TIME_REASONS,
    FULL_TIME_HOURS,
    LABFORCE_IN_LF,
    SEX_LABELS,
    SecondaryDimension,
)

from cpslabor_pipeline.transforms.classify import GroupingScheme, classify
from cpslabor_pipeline.transforms.rates import derive_rates, order_columns
from cpslabor_pipeline.transforms.weighted import clean_weight_expr, weighted_median_by

log = structlog.get_logger(__name__)

SUM_COLUMNS: list[str] = [
    "population",
    "labor_force",
    "not_in_labor_force",
    "employed",
    "unemployed",
    "part_time",
    "part_time_econ",
    "full_time",
]


class EmptyInputError(ValueError):
    """Raised when there is nothing to aggregate for a requested period."""


# ---------------------------------------------------------------------------
# Secondary dimensions
# ---------------------------------------------------------------------------


def secondary_expr(dimension: SecondaryDimension) -> pl.Expr:
    """
    Expression producing the `secondary` label for a breakdown dimension.

    sex:        SEX code → "Male" / "Female"
    education:  EDUC code → education tier label
    occupation: OCC code, zero-padded to 4 digits → leading 2 digits
    Unknown or missing codes yield null.
    """
    if dimension == "sex":
        return (
            pl.col("sex")
            .replace_strict(SEX_LABELS, default=None, return_dtype=pl.String)
            .alias("secondary")
        )
    if dimension == "education":
        tiers = {code: tier.value for code, tier in EducationTier.code_map().items()}
        return (
            pl.col("educ")
            .replace_strict(tiers, default=None, return_dtype=pl.String)
            .alias("secondary")
        )
    if dimension == "occupation":
        return (
            pl.when(pl.col("occ") > 0)
            .then(pl.col("occ").cast(pl.String).str.zfill(4).str.slice(0, 2))
            .otherwise(pl.lit(None, dtype=pl.String))
            .alias("secondary")
        )
    raise ValueError(f"Unknown secondary dimension: {dimension!r}")


# ---------------------------------------------------------------------------
# Row-level flags
# ---------------------------------------------------------------------------


def employment_status_expr(unemployed_codes: Iterable[int]) -> pl.Expr:
    """EMPSTAT → EmploymentStatus value, decoded with EmploymentStatus.code_map()."""
    statuses = {
        code: status.value
        for code, status in EmploymentStatus.code_map(frozenset(unemployed_codes)).items()
    }
    unrecognized = EmploymentStatus.UNRECOGNIZED.value
    return (
        pl.col("empstat")
        .replace_strict(statuses, default=unrecognized, return_dtype=pl.String)
        .fill_null(unrecognized)
        .alias("_status")
    )


def _flag_columns(unemployed_codes: Iterable[int]) -> list[pl.Expr]:
    hours = pl.col("usual_hours")
    part_time = (hours > 0) & (hours < FULL_TIME_HOURS)
    return [
        (pl.col("labor_force") == LABFORCE_IN_LF).fill_null(False).alias("_in_lf"),
        employment_status_expr(unemployed_codes),
        part_time.fill_null(False).alias("_part_time"),
        (hours >= FULL_TIME_HOURS).fill_null(False).alias("_full_time"),
        (
            part_time
            & pl.col("part_time_reason").is_in(sorted(ECONOMIC_PART_TIME_REASONS))
        )
        .fill_null(False)
        .alias("_part_time_econ"),
    ]


def _sum_where(cond: pl.Expr, name: str) -> pl.Expr:
    return pl.col("weight").filter(cond).sum().alias(name)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def _check_periods(
    df: pl.DataFrame,
    period_cols: list[str],
    expected_periods: Iterable[int | tuple[int, ...]] | None,
) -> None:
    if df.is_empty():
        raise EmptyInputError("no records to aggregate")
    if expected_periods is None:
        return
    present = set(df.select(period_cols).unique().rows())
    for period in expected_periods:
        key = period if isinstance(period, tuple) else (period,)
        if key not in present:
            label = "-".join(str(p) for p in key)
            raise EmptyInputError(f"no records for period {label}")


def aggregate(
    classified: pl.DataFrame,
    scheme: GroupingScheme,
    *,
    period_cols: list[str] | None = None,
    secondary: SecondaryDimension | None = None,
    include_all: bool = True,
    expected_periods: Iterable[int | tuple[int, ...]] | None = None,
) -> pl.DataFrame:
    """
    Compute weighted sums and median earnings per cell.

    Args:
        classified:       Output of classify(); rows with a null group are ignored.
        scheme:           Grouping scheme (supplies the unemployed code set
                          and the group display order).
        period_cols:      Period key columns, ["year"] or ["year", "month"].
        secondary:        Optional breakdown dimension. Records with no
                          label in that dimension are left out of the table.
        include_all:      Add an "All" pseudo-group row per period.
        expected_periods: Periods that must be present, e.g. [2019, 2020] or
                          [(2023, 1), (2023, 2)].

    Returns:
        DataFrame with period columns, `group`, optional `secondary`,
        `records`, SUM_COLUMNS, and `median_weekly_earnings`.

    Raises:
        EmptyInputError: if there are no classified records at all, or a
                         period in expected_periods has none.
    """
    period_cols = period_cols or ["year"]
    if "group" not in classified.columns:
        raise ValueError("aggregate() expects a classified frame with a 'group' column")

    df = classified.filter(pl.col("group").is_not_null())
    _check_periods(df, period_cols, expected_periods)

    df = df.with_columns(clean_weight_expr("weight"))

    keys = [*period_cols, "group"]
    if secondary is not None:
        df = df.with_columns(secondary_expr(secondary))
        unlabelled = df["secondary"].null_count()
        if unlabelled:
            log.info("secondary_unlabelled_dropped", dimension=secondary, count=unlabelled)
        df = df.filter(pl.col("secondary").is_not_null())
        keys.append("secondary")

    if include_all:
        df = pl.concat(
            [df, df.with_columns(pl.lit(AnalysisGroup.ALL.value).alias("group"))]
        )

    df = df.with_columns(_flag_columns(scheme.unemployed_codes))

    status = pl.col("_status")
    sums = df.group_by(keys).agg(
        pl.len().alias("records"),
        pl.col("weight").sum().alias("population"),
        _sum_where(pl.col("_in_lf"), "labor_force"),
        _sum_where(~pl.col("_in_lf"), "not_in_labor_force"),
        _sum_where(status == EmploymentStatus.EMPLOYED.value, "employed"),
        _sum_where(status == EmploymentStatus.UNEMPLOYED.value, "unemployed"),
        _sum_where(pl.col("_part_time"), "part_time"),
        _sum_where(pl.col("_part_time_econ"), "part_time_econ"),
        _sum_where(pl.col("_full_time"), "full_time"),
    )

    medians = weighted_median_by(
        df, keys, value_col="earnings", output_col="median_weekly_earnings"
    )
    result = sums.join(medians, on=keys, how="left")

    group_order = {g.value: i for i, g in enumerate((*scheme.groups, AnalysisGroup.ALL))}
    order_cols = [
        pl.col("group")
        .replace_strict(group_order, default=len(group_order), return_dtype=pl.Int64)
        .alias("_group_order")
    ]
    sort_cols = [*period_cols, "_group_order"]
    if secondary == "education":
        # attainment order, lowest first
        tier_rank = {t.value: i for i, t in enumerate(EducationTier.ordered())}
        order_cols.append(
            pl.col("secondary")
            .replace_strict(tier_rank, default=len(tier_rank), return_dtype=pl.Int64)
            .alias("_secondary_order")
        )
        sort_cols.append("_secondary_order")
    elif secondary is not None:
        sort_cols.append("secondary")
    result = (
        result.with_columns(order_cols)
        .sort(sort_cols)
        .drop([c for c in ("_group_order", "_secondary_order") if c in sort_cols])
    )

    log.debug(
        "cells_aggregated",
        scheme=scheme.kind,
        secondary=secondary,
        cells=len(result),
        periods=result.select(period_cols).n_unique(),
    )
    return result


def summarize(
    records: pl.DataFrame,
    scheme: GroupingScheme,
    *,
    period_cols: list[str] | None = None,
    secondary: SecondaryDimension | None = None,
    include_all: bool = True,
    expected_periods: Iterable[int | tuple[int, ...]] | None = None,
) -> pl.DataFrame:
    """
    classify → aggregate → derive_rates, with columns in output order.

    Rates are 0-1 fractions; use transforms.rates.to_percent() for display.
    """
    cells = aggregate(
        classify(records, scheme),
        scheme,
        period_cols=period_cols,
        secondary=secondary,
        include_all=include_all,
        expected_periods=expected_periods,
    )
    return order_columns(derive_rates(cells))
