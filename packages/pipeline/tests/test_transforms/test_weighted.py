"""
tests/test_transforms/test_weighted.py — Tests for weight cleaning and weighted medians.
"""

from __future__ import annotations

import math

import polars as pl
import pytest

from cpslabor_pipeline.transforms.weighted import (
    clean_weight_expr,
    weighted_median,
    weighted_median_by,
)


class TestCleanWeight:
    def test_invalid_weights_become_zero(self):
        df = pl.DataFrame({"weight": [12.5, None, -3.0, math.nan, 0.0]})
        result = df.with_columns(clean_weight_expr())
        assert result["weight"].to_list() == [12.5, 0.0, 0.0, 0.0, 0.0]

    def test_integer_weights_cast_to_float(self):
        df = pl.DataFrame({"weight": [1, 2]})
        result = df.with_columns(clean_weight_expr())
        assert result.schema["weight"] == pl.Float64


class TestWeightedMedian:
    def test_unweighted_odd_count(self):
        assert weighted_median([3.0, 1.0, 2.0], [1.0, 1.0, 1.0]) == pytest.approx(2.0)

    def test_heavy_value_dominates(self):
        assert weighted_median([500.0, 800.0, 1200.0], [1.0, 1.0, 3.0]) == pytest.approx(1200.0)

    def test_exact_half_takes_smaller_value(self):
        # cumulative weight at 100 is exactly half the total
        assert weighted_median([100.0, 200.0], [1.0, 1.0]) == pytest.approx(100.0)

    def test_ties_form_one_block(self):
        assert weighted_median([5.0, 5.0, 5.0, 9.0], [1.0, 1.0, 1.0, 2.0]) == pytest.approx(5.0)

    def test_invariant_under_reordering(self):
        values = [300.0, 100.0, 700.0, 500.0, 900.0]
        weights = [2.0, 4.0, 1.0, 3.0, 5.0]
        forward = weighted_median(values, weights)
        backward = weighted_median(values[::-1], weights[::-1])
        assert forward == backward

    def test_invariant_under_splitting_a_record(self):
        values = [300.0, 100.0, 700.0]
        weights = [4.0, 2.0, 3.0]
        split = weighted_median([300.0, 300.0, 100.0, 700.0], [1.5, 2.5, 2.0, 3.0])
        assert split == weighted_median(values, weights)

    def test_zero_weight_and_missing_values_ignored(self):
        result = weighted_median(
            [None, 50.0, 400.0, 600.0, -10.0],
            [100.0, 0.0, 1.0, 1.0, 100.0],
        )
        assert result == pytest.approx(400.0)

    def test_nothing_valid_returns_none(self):
        assert weighted_median([None, 0.0], [1.0, 1.0]) is None
        assert weighted_median([], []) is None

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="differ in length"):
            weighted_median([1.0, 2.0], [1.0])


class TestWeightedMedianBy:
    def test_per_group(self):
        df = pl.DataFrame({
            "group": ["a", "a", "a", "b", "b"],
            "earnings": [100.0, 200.0, 300.0, 1000.0, 2000.0],
            "weight": [1.0, 1.0, 1.0, 1.0, 5.0],
        })
        result = weighted_median_by(df, ["group"], value_col="earnings").sort("group")
        assert result["earnings"].to_list() == [200.0, 2000.0]

    def test_group_without_valid_values_absent(self):
        df = pl.DataFrame({
            "group": ["a", "b"],
            "earnings": [100.0, None],
            "weight": [1.0, 1.0],
        })
        result = weighted_median_by(df, ["group"], value_col="earnings", output_col="median")
        assert result["group"].to_list() == ["a"]
        assert "median" in result.columns

    def test_empty_result_keeps_schema(self):
        df = pl.DataFrame({
            "year": [2020],
            "earnings": [None],
            "weight": [1.0],
        }, schema={"year": pl.Int64, "earnings": pl.Float64, "weight": pl.Float64})
        result = weighted_median_by(df, ["year"], value_col="earnings", output_col="median")
        assert result.is_empty()
        assert dict(result.schema) == {"year": pl.Int64, "median": pl.Float64}
