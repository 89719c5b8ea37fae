"""
tests/test_shared/test_records.py — Tests for SurveyRecord, SummaryRow and Settings.
"""

from __future__ import annotations

from pathlib import Path

import pydantic
import pytest

from cpslabor_shared.config import Settings
from cpslabor_shared.models.records import RECORD_SCHEMA, SummaryRow, SurveyRecord
from cpslabor_pipeline.transforms.aggregate import summarize
from cpslabor_pipeline.transforms.classify import ARRIVAL_COHORT


class TestSurveyRecord:
    @pytest.mark.parametrize("raw", [None, "n/a", float("nan"), -3.0])
    def test_bad_weight_counts_as_zero(self, raw):
        assert SurveyRecord(year=2020, age=30, weight=raw).weight == 0.0

    def test_numeric_string_weight(self):
        assert SurveyRecord(year=2020, age=30, weight="12.5").weight == pytest.approx(12.5)

    def test_frozen(self, make_record):
        record = make_record()
        with pytest.raises(pydantic.ValidationError):
            record.age = 40

    def test_frame_has_record_schema(self, records_df):
        df = records_df({"nativity": 5}, {"earnings": 500.0})
        assert dict(df.schema) == RECORD_SCHEMA
        assert df["earnings"].to_list() == [None, 500.0]


class TestSummaryRow:
    def test_from_frame(self, scenario_2020_df):
        rows = SummaryRow.from_frame(summarize(scenario_2020_df, ARRIVAL_COHORT))
        by_group = {r.group: r for r in rows}
        assert set(by_group) == {"Native-Born", "Recent Immigrant", "All"}
        assert by_group["Recent Immigrant"].unemployment_rate == pytest.approx(1.0)
        assert by_group["All"].population == pytest.approx(150.0)
        assert by_group["All"].records == 2
        assert by_group["Native-Born"].median_weekly_earnings is None


class TestSettings:
    def test_table_dir_and_slash_stripping(self, monkeypatch):
        monkeypatch.setenv("PROCESSED_DIR", "/tmp/out/")
        s = Settings()
        assert s.processed_dir == "/tmp/out"
        assert s.table_dir == Path("/tmp/out/tables")

    def test_rejects_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(pydantic.ValidationError):
            Settings()
