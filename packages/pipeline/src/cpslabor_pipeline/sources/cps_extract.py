"""
sources/cps_extract.py — IPUMS CPS extract files (already downloaded).

Submitting, polling, and downloading the extract is done outside this
package. This source reads the resulting file (CSV, optionally gzipped,
or Parquet) and maps IPUMS variable names onto the record schema:

  YEAR → year          MONTH → month          AGE → age
  NATIVITY → nativity  YRIMMIG → arrival_year LABFORCE → labor_force
  EMPSTAT → empstat    UHRSWORKT → usual_hours PTREASON → part_time_reason
  EDUC → educ          SEX → sex              OCC → occ
  EARNWEEK → earnings  WTFINL | ASECWT | ASECWTH → weight

Not-in-universe codes (NIU_SENTINELS) become null, so e.g. YRIMMIG 0 can
never be read as "arrived in year 0".

Usage:
    source = CpsExtractSource()
    df = await source.run(path="data/raw/cps_00001.csv", years=[2023])
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import polars as pl

from cpslabor_shared.constants import NIU_SENTINELS

from cpslabor_pipeline.sources.base import BaseSource
from cpslabor_pipeline.transforms.weighted import clean_weight_expr

COLUMN_MAP: dict[str, str] = {
    "YEAR": "year",
    "MONTH": "month",
    "AGE": "age",
    "NATIVITY": "nativity",
    "YRIMMIG": "arrival_year",
    "LABFORCE": "labor_force",
    "EMPSTAT": "empstat",
    "UHRSWORKT": "usual_hours",
    "PTREASON": "part_time_reason",
    "EDUC": "educ",
    "SEX": "sex",
    "OCC": "occ",
    "EARNWEEK": "earnings",
}

# First weight variable present wins: basic monthly final weight, then ASEC
WEIGHT_CANDIDATES: tuple[str, ...] = ("WTFINL", "ASECWT", "ASECWTH")

REQUIRED_COLUMNS: tuple[str, ...] = ("YEAR", "AGE", "NATIVITY")


class CpsExtractSource(BaseSource):
    """Reads a downloaded IPUMS CPS extract into RECORD_SCHEMA rows."""

    name = "IPUMS-CPS"

    def __init__(self, weight_var: str | None = None) -> None:
        super().__init__()
        self._weight_var = weight_var
        self._path: Path | None = None

    async def extract(  # type: ignore[override]
        self,
        *,
        path: str | Path,
        years: list[int] | None = None,
        **kwargs: Any,
    ) -> pl.DataFrame:
        """
        Read the extract file.

        Args:
            path:  CSV(.gz) or Parquet extract file.
            years: If given, keep only these survey years.

        Raises:
            FileNotFoundError: if the extract file does not exist.
        """
        self._path = Path(path)
        if not self._path.is_file():
            raise FileNotFoundError(
                f"Could not locate CPS extract at {self._path}. Download the "
                "extract from IPUMS CPS and point --extract (or EXTRACT_PATH) at it."
            )

        if self._path.suffix == ".parquet":
            raw = pl.read_parquet(self._path)
        else:
            raw = pl.read_csv(self._path, infer_schema_length=10000)

        raw = raw.rename({c: c.upper() for c in raw.columns})
        if years and "YEAR" in raw.columns:
            raw = raw.filter(pl.col("YEAR").is_in(years))
        return raw

    def transform(self, raw: pl.DataFrame) -> pl.DataFrame:
        missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
        if missing:
            raise ValueError(f"CPS extract is missing required variables: {missing}")

        weight_var = self._weight_var or next(
            (c for c in WEIGHT_CANDIDATES if c in raw.columns), None
        )
        if weight_var is None or weight_var not in raw.columns:
            raise ValueError(
                f"CPS extract has no weight variable; expected one of {WEIGHT_CANDIDATES}"
            )

        df = raw.with_columns(
            [
                pl.when(pl.col(col).cast(pl.Float64).is_in([float(c) for c in codes]))
                .then(None)
                .otherwise(pl.col(col))
                .alias(col)
                for col, codes in NIU_SENTINELS.items()
                if col in raw.columns
            ]
        )

        renames = {src: dst for src, dst in COLUMN_MAP.items() if src in df.columns}
        df = df.select(
            [pl.col(src).alias(dst) for src, dst in renames.items()]
            + [pl.col(weight_var).alias("weight")]
        )
        return self._conform_to_schema(df).with_columns(clean_weight_expr("weight"))

    async def get_metadata(self) -> dict[str, Any]:
        return {
            "source_name": self.name,
            "path": str(self._path) if self._path else None,
            "weight_var": self._weight_var,
            "description": "IPUMS CPS microdata extract",
        }
