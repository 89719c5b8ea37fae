"""
loaders/csv_writer.py — Write summary tables as CSV for the paper's tables and figures.

All pipelines funnel their summary DataFrames through this module. The
writer:
  - Puts columns in the documented order (transforms.rates.SUMMARY_COLUMNS)
  - Converts rates to 0-100 percentages unless told otherwise
  - Writes undefined rates as empty cells, never as 0
  - Creates the output directory on first use
  - Returns a WriteResult with the path and row count

Usage:
    from cpslabor_pipeline.loaders.csv_writer import CsvTableWriter

    writer = CsvTableWriter()                      # settings.table_dir
    result = writer.write("headline_labor_indicators", summary_df)
    print(result.path, result.rows_written)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path

import polars as pl
import structlog

from cpslabor_shared.config import settings

from cpslabor_pipeline.transforms.rates import order_columns, to_percent

log = structlog.get_logger(__name__)


@dataclass
class WriteResult:
    """Summary of one table write."""

    table: str
    path: Path
    rows_written: int = 0
    duration_ms: int = 0


class CsvTableWriter:
    """Writes summary frames to <table_dir>/<name>.csv."""

    def __init__(
        self,
        table_dir: str | Path | None = None,
        *,
        percent: bool = True,
        decimals: int | None = 2,
    ) -> None:
        self.table_dir = Path(table_dir) if table_dir is not None else settings.table_dir
        self.percent = percent
        self.decimals = decimals

    def prepare(self, df: pl.DataFrame) -> pl.DataFrame:
        """Apply column order and percentage scaling without writing."""
        out = order_columns(df)
        if self.percent:
            out = to_percent(out, decimals=self.decimals)
        return out

    def write(self, name: str, df: pl.DataFrame) -> WriteResult:
        t0 = time.monotonic()
        self.table_dir.mkdir(parents=True, exist_ok=True)
        path = self.table_dir / f"{name}.csv"

        out = self.prepare(df)
        out.write_csv(path, null_value="")

        result = WriteResult(
            table=name,
            path=path,
            rows_written=len(out),
            duration_ms=int((time.monotonic() - t0) * 1000),
        )
        log.info("summary_table_saved", table=name, path=str(path), rows=len(out))
        return result
