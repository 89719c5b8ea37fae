"""
transforms/weighted.py — Survey-weight helpers: weight cleaning and weighted medians.

The weighted median is the smallest value v such that the cumulative weight
of values <= v is at least half of the total weight. Only rows with a
non-null, positive value and a positive weight take part, in both the
ordering and the total.

Usage:
    from cpslabor_pipeline.transforms.weighted import (
        clean_weight_expr,
        weighted_median,
        weighted_median_by,
    )

    df = df.with_columns(clean_weight_expr("weight"))
    medians = weighted_median_by(df, ["year", "group"], value_col="earnings")
    weighted_median([500.0, 800.0, 1200.0], [1.0, 1.0, 3.0])   # 1200.0
"""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl


def clean_weight_expr(weight_col: str = "weight") -> pl.Expr:
    """Cast to Float64 and map null, NaN, and negative weights to 0."""
    return (
        pl.col(weight_col)
        .cast(pl.Float64, strict=False)
        .fill_nan(None)
        .fill_null(0.0)
        .clip(lower_bound=0.0)
        .alias(weight_col)
    )


def weighted_median_by(
    df: pl.DataFrame,
    keys: list[str],
    *,
    value_col: str,
    weight_col: str = "weight",
    output_col: str | None = None,
) -> pl.DataFrame:
    """
    Weighted median of value_col within each keys group.

    Groups with no valid (value, weight) pair are absent from the result;
    join it back with how="left" to carry them as null.

    Args:
        df:         Input DataFrame.
        keys:       Grouping columns.
        value_col:  Column to take the median of.
        weight_col: Column holding weights.
        output_col: Result column name (default: value_col).

    Returns:
        DataFrame with keys and one median column.
    """
    out = output_col or value_col
    valid = df.select([*keys, value_col, weight_col]).filter(
        pl.col(value_col).is_not_null()
        & pl.col(value_col).is_not_nan()
        & (pl.col(value_col) > 0)
        & (pl.col(weight_col) > 0)
    )
    if valid.is_empty():
        return pl.DataFrame(schema={**valid.select(keys).schema, out: pl.Float64})

    # Equal values form one block: the first row of a block that reaches the
    # half-weight threshold has the same value as the block's last row.
    ranked = valid.sort([*keys, value_col]).with_columns(
        pl.col(weight_col).cum_sum().over(keys).alias("_cum_weight"),
        pl.col(weight_col).sum().over(keys).alias("_total_weight"),
    )
    return (
        ranked.filter(pl.col("_cum_weight") >= pl.col("_total_weight") / 2)
        .group_by(keys)
        .agg(pl.col(value_col).min().cast(pl.Float64).alias(out))
    )


def weighted_median(
    values: Sequence[float | None],
    weights: Sequence[float | None],
) -> float | None:
    """
    Weighted median of a single sequence. Returns None if nothing is valid.

    Raises:
        ValueError: if values and weights differ in length.
    """
    if len(values) != len(weights):
        raise ValueError(
            f"values and weights differ in length: {len(values)} != {len(weights)}"
        )
    df = pl.DataFrame(
        {"_key": [0] * len(values), "value": values, "weight": weights},
        schema={"_key": pl.Int64, "value": pl.Float64, "weight": pl.Float64},
    ).with_columns(clean_weight_expr("weight"))
    result = weighted_median_by(df, ["_key"], value_col="value")
    if result.is_empty():
        return None
    return result["value"][0]
