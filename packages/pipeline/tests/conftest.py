"""
tests/conftest.py — Shared pytest fixtures for the pipeline test suite.

Provides:
  fixture_path()      — resolves paths to tests/fixtures/
  make_record()       — SurveyRecord factory with working-age, employed defaults
  records_df()        — in-memory RECORD_SCHEMA frame builder
  scenario_2020_df    — the two-record 2020 native / recent-immigrant scenario
  sample_extract_df   — raw IPUMS-style extract loaded from fixtures
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import polars as pl
import pytest

from cpslabor_shared.models.records import SurveyRecord, records_to_frame

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def fixture_path() -> Path:
    return FIXTURES_DIR


# ---------------------------------------------------------------------------
# In-memory records
# ---------------------------------------------------------------------------

_RECORD_DEFAULTS: dict[str, Any] = {
    "year": 2020,
    "age": 35,
    "nativity": 1,
    "labor_force": 2,
    "empstat": 10,
    "weight": 100.0,
}


@pytest.fixture
def make_record() -> Callable[..., SurveyRecord]:
    """
    Build a SurveyRecord; unspecified fields take working-age, employed,
    native-born defaults.
    """
    def _make(**overrides: Any) -> SurveyRecord:
        return SurveyRecord(**{**_RECORD_DEFAULTS, **overrides})

    return _make


@pytest.fixture
def records_df(make_record) -> Callable[..., pl.DataFrame]:
    """records_df(dict, dict, ...) → RECORD_SCHEMA DataFrame."""
    def _build(*rows: dict[str, Any]) -> pl.DataFrame:
        return records_to_frame(make_record(**row) for row in rows)

    return _build


@pytest.fixture
def scenario_2020_df(records_df) -> pl.DataFrame:
    """Native-born employed (w=100) and a 2019 arrival, unemployed (w=50)."""
    return records_df(
        {"nativity": 1, "weight": 100.0, "labor_force": 2, "empstat": 10},
        {
            "nativity": 5,
            "arrival_year": 2019,
            "weight": 50.0,
            "labor_force": 2,
            "empstat": 21,
        },
    )


# ---------------------------------------------------------------------------
# Raw extract
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_extract_df() -> pl.DataFrame:
    """Raw IPUMS CPS-style extract CSV loaded as polars DataFrame."""
    return pl.read_csv(FIXTURES_DIR / "cps_extract_sample.csv")
