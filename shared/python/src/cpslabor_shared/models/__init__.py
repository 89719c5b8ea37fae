"""
cpslabor_shared.models — Pydantic models for survey records and summary rows.

These models are used by:
- packages/pipeline: build in-memory inputs and read back aggregated cells
- tests: construct concrete scenarios without an extract file
"""

from cpslabor_shared.models.records import (
    RECORD_SCHEMA,
    SummaryRow,
    SurveyRecord,
    records_to_frame,
)

__all__ = [
    "RECORD_SCHEMA",
    "SurveyRecord",
    "SummaryRow",
    "records_to_frame",
]
