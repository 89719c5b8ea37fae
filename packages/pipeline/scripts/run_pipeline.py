#!/usr/bin/env python3
"""
scripts/run_pipeline.py — CLI entry point for cpslabor summary tables.

Usage:
    python scripts/run_pipeline.py simple --years 2023
    python scripts/run_pipeline.py simple --years 2023 --monthly --breakdowns headline sex
    python scripts/run_pipeline.py arrival-cohort --extract data/raw/cps_asec.csv
    python scripts/run_pipeline.py all --dry-run

Available schemes:
    simple          — Domestic-Born vs Foreign-Born
    arrival-cohort  — Native-Born, Recent Immigrant (arrived the prior year), Prior Immigrant
    all             — Run both schemes against the same extract
"""

from __future__ import annotations

import argparse
import asyncio
import sys


def parse_years(s: str) -> list[int]:
    """Accept "2019-2023" or "2019,2021,2023"."""
    try:
        if "-" in s:
            start, end = (int(p) for p in s.split("-", 1))
            if end < start:
                raise ValueError
            return list(range(start, end + 1))
        return [int(p.strip()) for p in s.split(",") if p.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid years: {s!r}; expected YYYY, YYYY-YYYY, or YYYY,YYYY"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run_pipeline",
        description="Labor-market indicators by nativity from an IPUMS CPS extract",
    )
    parser.add_argument(
        "scheme",
        choices=["simple", "arrival-cohort", "all"],
        help="Grouping scheme to run",
    )
    parser.add_argument(
        "--extract",
        default=None,
        metavar="PATH",
        help="Downloaded extract file, CSV or Parquet (default: EXTRACT_PATH setting)",
    )
    parser.add_argument(
        "--years",
        type=parse_years,
        default=None,
        metavar="YEARS",
        help="Survey years to include, as range (1994-2024) or list (2019,2023)",
    )
    parser.add_argument(
        "--monthly",
        action="store_true",
        help="Aggregate per year and month instead of per year",
    )
    parser.add_argument(
        "--breakdowns",
        nargs="+",
        choices=["headline", "sex", "education", "occupation"],
        default=None,
        help="Tables to produce (default: all)",
    )
    parser.add_argument(
        "--no-all-row",
        action="store_true",
        help="Omit the 'All' pseudo-group rows",
    )
    parser.add_argument(
        "--table-dir",
        default=None,
        metavar="DIR",
        help="Output directory for CSV tables (default: <PROCESSED_DIR>/tables)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute the tables but do not write CSVs",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    return parser


async def run_pipeline(args: argparse.Namespace) -> int:
    """Dispatch to the pipeline once per scheme and return exit code."""
    from cpslabor_pipeline.utils.logging import bind_run_context, configure_logging, get_logger
    configure_logging(log_level=args.log_level)
    log = get_logger("run_pipeline")

    from cpslabor_pipeline.pipelines.nativity_indicators import run

    schemes = ["simple", "arrival-cohort"] if args.scheme == "all" else [args.scheme]

    for scheme in schemes:
        bind_run_context(scheme=scheme, extract=args.extract)
        log.info("pipeline_dispatch", dry_run=args.dry_run)
        try:
            result = await run(
                scheme=scheme,
                extract_path=args.extract,
                years=args.years,
                monthly=args.monthly,
                breakdowns=args.breakdowns,
                include_all=not args.no_all_row,
                table_dir=args.table_dir,
                dry_run=args.dry_run,
            )
            log.info("done", tables=result.tables, rows_written=result.rows_written)
        except Exception as exc:
            log.error("pipeline_failed", error=str(exc), exc_info=True)
            return 1

    return 0


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    exit_code = asyncio.run(run_pipeline(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
