"""
transforms/classify.py — Assign survey records to nativity / arrival-cohort groups.

Works on polars DataFrames with RECORD_SCHEMA columns (see
cpslabor_shared.models.records). Adds a `group` String column; records that
fall outside every group of the scheme get a null group and are dropped
from aggregation, never defaulted into a group.

Two schemes are provided:

  SIMPLE          — Domestic-Born / Foreign-Born
  ARRIVAL_COHORT  — Native-Born / Recent Immigrant / Prior Immigrant

Arrival-cohort rules, first match wins:
  1. native-born                                    → Native-Born
  2. foreign-born and arrival_year == year - 1      → Recent Immigrant
  3. foreign-born and 0 < arrival_year < year - 1   → Prior Immigrant
  4. anything else (null arrival year, arrival in the survey year) → excluded

Usage:
    from cpslabor_pipeline.transforms.classify import ARRIVAL_COHORT, classify

    df = classify(records_df, ARRIVAL_COHORT)
    audit = exclusion_counts(classify(records_df, ARRIVAL_COHORT, drop_excluded=False))
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

import polars as pl
import structlog

from cpslabor_shared.codes import AnalysisGroup, Nativity
from cpslabor_shared.constants import (
    FOREIGN_BORN_CODES,
    MIN_WORKING_AGE,
    NATIVE_BORN_CODES,
    UNEMPLOYED_CODES,
    UNEMPLOYED_CODES_WITH_NEW_ENTRANTS,
)
from cpslabor_shared.models.records import SurveyRecord

from cpslabor_pipeline.transforms.weighted import clean_weight_expr

log = structlog.get_logger(__name__)

SchemeKind = Literal["simple", "arrival_cohort"]


@dataclass(frozen=True)
class GroupingScheme:
    """
    Descriptor for one way of splitting respondents into analysis groups.

    The code sets are part of the scheme so that two studies with different
    boundaries are two scheme values, not two copies of the pipeline.
    """

    kind: SchemeKind
    native_codes: frozenset[int] = NATIVE_BORN_CODES
    foreign_codes: frozenset[int] = FOREIGN_BORN_CODES
    unemployed_codes: frozenset[int] = UNEMPLOYED_CODES
    min_age: int = MIN_WORKING_AGE
    groups: tuple[AnalysisGroup, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.native_codes & self.foreign_codes:
            raise ValueError(
                f"native and foreign nativity codes overlap: "
                f"{sorted(self.native_codes & self.foreign_codes)}"
            )
        if not self.groups:
            object.__setattr__(self, "groups", _default_groups(self.kind))


def _default_groups(kind: SchemeKind) -> tuple[AnalysisGroup, ...]:
    if kind == "simple":
        return (AnalysisGroup.DOMESTIC_BORN, AnalysisGroup.FOREIGN_BORN)
    if kind == "arrival_cohort":
        return (
            AnalysisGroup.NATIVE_BORN,
            AnalysisGroup.RECENT_IMMIGRANT,
            AnalysisGroup.PRIOR_IMMIGRANT,
        )
    raise ValueError(f"Unknown grouping scheme kind: {kind!r}")


SIMPLE = GroupingScheme(kind="simple")
ARRIVAL_COHORT = GroupingScheme(
    kind="arrival_cohort",
    unemployed_codes=UNEMPLOYED_CODES_WITH_NEW_ENTRANTS,
)

SCHEMES: dict[str, GroupingScheme] = {
    "simple": SIMPLE,
    "arrival-cohort": ARRIVAL_COHORT,
}


# ---------------------------------------------------------------------------
# Frame-level classification
# ---------------------------------------------------------------------------


def group_expr(scheme: GroupingScheme) -> pl.Expr:
    """
    Polars expression yielding the analysis group label, or null if excluded.

    Null comparisons evaluate as false inside when(), so null age, nativity,
    or arrival year can never satisfy a branch.
    """
    eligible = pl.col("age") >= scheme.min_age
    native = pl.col("nativity").is_in(sorted(scheme.native_codes))
    foreign = pl.col("nativity").is_in(sorted(scheme.foreign_codes))

    if scheme.kind == "simple":
        expr = (
            pl.when(eligible & native)
            .then(pl.lit(AnalysisGroup.DOMESTIC_BORN.value))
            .when(eligible & foreign)
            .then(pl.lit(AnalysisGroup.FOREIGN_BORN.value))
        )
    else:
        arrival = pl.col("arrival_year")
        prior_year = pl.col("year") - 1
        expr = (
            pl.when(eligible & native)
            .then(pl.lit(AnalysisGroup.NATIVE_BORN.value))
            .when(eligible & foreign & (arrival == prior_year))
            .then(pl.lit(AnalysisGroup.RECENT_IMMIGRANT.value))
            .when(eligible & foreign & (arrival > 0) & (arrival < prior_year))
            .then(pl.lit(AnalysisGroup.PRIOR_IMMIGRANT.value))
        )
    return expr.otherwise(pl.lit(None, dtype=pl.String)).alias("group")


def classify(
    df: pl.DataFrame,
    scheme: GroupingScheme,
    *,
    drop_excluded: bool = True,
) -> pl.DataFrame:
    """
    Add a `group` column according to scheme.

    Args:
        df:            Records with RECORD_SCHEMA columns.
        scheme:        Grouping scheme descriptor.
        drop_excluded: If True, drop rows with a null group.

    Returns:
        DataFrame with the `group` column appended.
    """
    result = df.with_columns(group_expr(scheme))
    if drop_excluded:
        n_before = len(result)
        result = result.filter(pl.col("group").is_not_null())
        log.debug(
            "records_classified",
            scheme=scheme.kind,
            kept=len(result),
            excluded=n_before - len(result),
        )
    return result


def exclusion_counts(
    classified: pl.DataFrame,
    *,
    period_cols: list[str] | None = None,
    min_age: int = MIN_WORKING_AGE,
) -> pl.DataFrame:
    """
    Count working-age records that no group accepted, per period.

    Expects the output of classify(..., drop_excluded=False). Records under
    min_age are outside the survey universe and are not counted.

    Returns:
        DataFrame with period columns, `excluded` (row count) and
        `excluded_weight` (sum of non-negative weights), sorted by period.
    """
    period_cols = period_cols or ["year"]
    return (
        classified.filter(
            (pl.col("age") >= min_age) & pl.col("group").is_null()
        )
        .group_by(period_cols)
        .agg(
            pl.len().alias("excluded"),
            clean_weight_expr("weight").sum().alias("excluded_weight"),
        )
        .sort(period_cols)
    )


# ---------------------------------------------------------------------------
# Record-level classification
# ---------------------------------------------------------------------------


def classify_record(
    record: SurveyRecord,
    scheme: GroupingScheme,
) -> AnalysisGroup | None:
    """
    Classify a single record. Returns None when the record is excluded.

    Agrees with group_expr() on every input.
    """
    if record.age < scheme.min_age:
        return None

    nativity = Nativity.from_code(
        record.nativity,
        native_codes=scheme.native_codes,
        foreign_codes=scheme.foreign_codes,
    )
    if nativity is Nativity.UNRECOGNIZED:
        return None

    if scheme.kind == "simple":
        if nativity is Nativity.NATIVE_BORN:
            return AnalysisGroup.DOMESTIC_BORN
        return AnalysisGroup.FOREIGN_BORN

    if nativity is Nativity.NATIVE_BORN:
        return AnalysisGroup.NATIVE_BORN

    arrival = record.arrival_year
    if arrival is None:
        return None
    if arrival == record.year - 1:
        return AnalysisGroup.RECENT_IMMIGRANT
    if 0 < arrival < record.year - 1:
        return AnalysisGroup.PRIOR_IMMIGRANT
    return None
