"""
sources/base.py — Abstract base class for survey microdata sources.

A source turns some external microdata file into a RECORD_SCHEMA frame:
  extract()      — read the raw file, original column names preserved
  transform()    — rename, null out not-in-universe codes, cast to RECORD_SCHEMA
  get_metadata() — describe where the records came from

Pipelines call run(), which chains the two steps and logs timings and
per-year record counts.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Any

import polars as pl
import structlog

from cpslabor_shared.models.records import RECORD_SCHEMA

log = structlog.get_logger(__name__)


def _elapsed_ms(since: float) -> int:
    return int((time.monotonic() - since) * 1000)


class BaseSource(ABC):
    """Abstract base for survey record sources."""

    name: str = "unknown"

    def __init__(self) -> None:
        self._log = log.bind(source_name=self.name)

    @abstractmethod
    async def extract(self, **kwargs: Any) -> pl.DataFrame:
        """Read raw microdata. kwargs are source-specific (path, years, ...)."""
        ...

    @abstractmethod
    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        """
        Map a raw extract onto RECORD_SCHEMA.

        The result has exactly the RECORD_SCHEMA columns and dtypes;
        not-in-universe codes are null and absent optional variables are
        all-null columns.
        """
        ...

    @abstractmethod
    async def get_metadata(self) -> dict[str, Any]:
        ...

    async def run(self, **kwargs: Any) -> pl.DataFrame:
        """
        extract() then transform(), logged.

        Errors from either step are logged with the elapsed time and re-raised.
        """
        run_log = self._log.bind(**{k: str(v) for k, v in kwargs.items()})
        started = time.monotonic()
        step = "extract"
        try:
            raw = await self.extract(**kwargs)
            run_log.info("extract_complete", raw_rows=len(raw), raw_cols=raw.width,
                         duration_ms=_elapsed_ms(started))

            step = "transform"
            transform_started = time.monotonic()
            records = self.transform(raw)
        except Exception as exc:
            run_log.error("source_run_failed", step=step, error=str(exc),
                          duration_ms=_elapsed_ms(started), exc_info=True)
            raise

        run_log.info(
            "records_ready",
            rows=len(records),
            by_year=self._rows_by_year(records),
            duration_ms=_elapsed_ms(transform_started),
        )
        return records

    @staticmethod
    def _rows_by_year(records: pl.DataFrame) -> dict[int, int]:
        if records.is_empty():
            return {}
        counts = records.group_by("year").len().sort("year")
        return dict(counts.iter_rows())

    @staticmethod
    def _conform_to_schema(df: pl.DataFrame) -> pl.DataFrame:
        """Add absent RECORD_SCHEMA columns as null, then cast and order all of them."""
        absent = [
            pl.lit(None, dtype=dtype).alias(col)
            for col, dtype in RECORD_SCHEMA.items()
            if col not in df.columns
        ]
        if absent:
            df = df.with_columns(absent)
        return df.select(
            [pl.col(col).cast(dtype, strict=False) for col, dtype in RECORD_SCHEMA.items()]
        )
