"""
tests/test_sources/test_cps_extract.py — Tests for the IPUMS CPS extract source.

Reads the fixture extract from tests/fixtures/; no network access.
"""

from __future__ import annotations

import polars as pl
import pytest

from cpslabor_shared.models.records import RECORD_SCHEMA
from cpslabor_pipeline.sources.cps_extract import CpsExtractSource


class TestTransform:
    def test_output_matches_record_schema(self, sample_extract_df):
        df = CpsExtractSource().transform(sample_extract_df)
        assert dict(df.schema) == RECORD_SCHEMA
        assert len(df) == len(sample_extract_df)

    def test_niu_sentinels_become_null(self, sample_extract_df):
        df = CpsExtractSource().transform(sample_extract_df)
        # row 4: hours 999, earnings 9999.99, occ 0, YRIMMIG 0
        row = df.row(3, named=True)
        assert row["usual_hours"] is None
        assert row["earnings"] is None
        assert row["occ"] is None
        assert row["arrival_year"] is None
        # row 8: NATIVITY 0 (unknown)
        assert df.row(7, named=True)["nativity"] is None

    def test_valid_values_kept(self, sample_extract_df):
        row = CpsExtractSource().transform(sample_extract_df).row(1, named=True)
        assert row["arrival_year"] == 2022
        assert row["usual_hours"] == pytest.approx(20.0)
        assert row["earnings"] == pytest.approx(400.0)
        assert row["weight"] == pytest.approx(800.0)

    def test_negative_weight_cleaned(self, sample_extract_df):
        df = CpsExtractSource().transform(sample_extract_df)
        assert df["weight"].min() == pytest.approx(0.0)

    def test_asec_weight_fallback(self, sample_extract_df):
        raw = sample_extract_df.rename({"WTFINL": "ASECWT"})
        df = CpsExtractSource().transform(raw)
        assert df["weight"][0] == pytest.approx(1000.5)

    def test_explicit_weight_var(self, sample_extract_df):
        raw = sample_extract_df.with_columns(pl.lit(2.0).alias("ASECWTH"))
        df = CpsExtractSource(weight_var="ASECWTH").transform(raw)
        assert df["weight"].to_list() == [2.0] * len(raw)

    def test_missing_weight_raises(self, sample_extract_df):
        with pytest.raises(ValueError, match="weight variable"):
            CpsExtractSource().transform(sample_extract_df.drop("WTFINL"))

    def test_missing_required_variable_raises(self, sample_extract_df):
        with pytest.raises(ValueError, match="NATIVITY"):
            CpsExtractSource().transform(sample_extract_df.drop("NATIVITY"))

    def test_optional_columns_added_as_null(self, sample_extract_df):
        raw = sample_extract_df.select("YEAR", "AGE", "NATIVITY", "WTFINL")
        df = CpsExtractSource().transform(raw)
        assert df["earnings"].null_count() == len(df)
        assert df["month"].null_count() == len(df)


class TestRun:
    @pytest.mark.asyncio
    async def test_reads_csv(self, fixture_path):
        df = await CpsExtractSource().run(path=fixture_path / "cps_extract_sample.csv")
        assert len(df) == 9
        assert df["year"].unique().to_list() == [2023]

    @pytest.mark.asyncio
    async def test_reads_parquet_with_lowercase_names(self, sample_extract_df, tmp_path):
        path = tmp_path / "extract.parquet"
        sample_extract_df.rename({c: c.lower() for c in sample_extract_df.columns}).write_parquet(path)
        df = await CpsExtractSource().run(path=path)
        assert len(df) == 9

    @pytest.mark.asyncio
    async def test_year_filter(self, fixture_path):
        df = await CpsExtractSource().run(
            path=fixture_path / "cps_extract_sample.csv", years=[2019]
        )
        assert df.is_empty()

    @pytest.mark.asyncio
    async def test_missing_file_is_descriptive(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Could not locate CPS extract"):
            await CpsExtractSource().run(path=tmp_path / "nope.csv")

    @pytest.mark.asyncio
    async def test_metadata_records_path(self, fixture_path):
        source = CpsExtractSource()
        await source.run(path=fixture_path / "cps_extract_sample.csv")
        meta = await source.get_metadata()
        assert meta["source_name"] == "IPUMS-CPS"
        assert meta["path"].endswith("cps_extract_sample.csv")
