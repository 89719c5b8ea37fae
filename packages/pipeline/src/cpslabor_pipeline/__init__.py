"""
cpslabor_pipeline — labor-market indicators by nativity from CPS microdata.

Architecture:
  sources/     — downloaded IPUMS CPS extract → typed, null-marked records
  transforms/  — cohort classification, weighted aggregation, rate derivation
  loaders/     — CSV summary tables in a fixed column order
  pipelines/   — orchestrators that wire sources -> transforms -> loaders
  utils/       — structlog configuration

Quick start:
    from cpslabor_pipeline.pipelines.nativity_indicators import run
    import asyncio
    result = asyncio.run(run(scheme="arrival-cohort", dry_run=True))

In-memory use (no files):
    from cpslabor_shared.models import SurveyRecord, records_to_frame
    from cpslabor_pipeline.transforms.aggregate import summarize
    from cpslabor_pipeline.transforms.classify import ARRIVAL_COHORT

    table = summarize(records_to_frame(records), ARRIVAL_COHORT)

CLI:
    python scripts/run_pipeline.py simple --years 2023
    python scripts/run_pipeline.py arrival-cohort --extract data/raw/cps_00002.csv
"""

__version__ = "0.1.0"
