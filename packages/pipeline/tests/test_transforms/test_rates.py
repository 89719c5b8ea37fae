"""
tests/test_transforms/test_rates.py — Tests for rate derivation and presentation.
"""

from __future__ import annotations

import polars as pl
import pytest

from cpslabor_pipeline.transforms.rates import (
    RATE_COLUMNS,
    SUMMARY_COLUMNS,
    derive_rates,
    order_columns,
    safe_ratio,
    to_percent,
)


@pytest.fixture
def sums_df() -> pl.DataFrame:
    return pl.DataFrame({
        "year": [2020, 2020],
        "group": ["Native-Born", "Recent Immigrant"],
        "population": [200.0, 0.0],
        "labor_force": [150.0, 0.0],
        "employed": [120.0, 0.0],
        "unemployed": [30.0, 0.0],
        "part_time": [24.0, 0.0],
        "part_time_econ": [6.0, 0.0],
        "full_time": [96.0, 0.0],
    })


class TestDeriveRates:
    def test_rates_as_fractions(self, sums_df):
        row = derive_rates(sums_df).row(0, named=True)
        assert row["lfpr"] == pytest.approx(0.75)
        assert row["emp_pop_ratio"] == pytest.approx(0.6)
        assert row["unemployment_rate"] == pytest.approx(0.2)
        assert row["part_time_share"] == pytest.approx(0.2)
        assert row["part_time_econ_share"] == pytest.approx(0.05)
        assert row["full_time_share"] == pytest.approx(0.8)

    def test_zero_denominator_is_null_without_affecting_other_rows(self, sums_df):
        result = derive_rates(sums_df)
        undefined = result.row(1, named=True)
        assert all(undefined[c] is None for c in RATE_COLUMNS)
        assert result.row(0, named=True)["lfpr"] == pytest.approx(0.75)

    def test_sums_untouched(self, sums_df):
        result = derive_rates(sums_df)
        assert result.select(sums_df.columns).equals(sums_df)

    def test_skips_rates_without_inputs(self):
        df = pl.DataFrame({"population": [10.0], "labor_force": [5.0]})
        result = derive_rates(df)
        assert "lfpr" in result.columns
        assert "unemployment_rate" not in result.columns

    def test_safe_ratio_negative_denominator_is_null(self):
        df = pl.DataFrame({"n": [1.0], "d": [-2.0]})
        assert df.select(safe_ratio("n", "d").alias("r"))["r"][0] is None


class TestToPercent:
    def test_scales_and_rounds(self, sums_df):
        result = to_percent(derive_rates(sums_df), decimals=1)
        assert result["lfpr"][0] == pytest.approx(75.0)
        assert result["part_time_econ_share"][0] == pytest.approx(5.0)
        assert result["lfpr"][1] is None

    def test_leaves_sums_alone(self, sums_df):
        result = to_percent(derive_rates(sums_df))
        assert result["population"].to_list() == [200.0, 0.0]


class TestOrderColumns:
    def test_period_first_then_documented_order(self, sums_df):
        rated = derive_rates(sums_df)
        result = order_columns(rated.select(sorted(rated.columns)))
        expected = ["year"] + [c for c in SUMMARY_COLUMNS if c in rated.columns]
        assert result.columns == expected
