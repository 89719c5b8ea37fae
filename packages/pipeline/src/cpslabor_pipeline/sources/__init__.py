"""
cpslabor_pipeline.sources — survey data source adapters.

  CpsExtractSource — downloaded IPUMS CPS extract (CSV / Parquet)
"""

from cpslabor_pipeline.sources.cps_extract import CpsExtractSource

__all__ = [
    "CpsExtractSource",
]
