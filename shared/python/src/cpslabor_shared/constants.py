"""
constants.py — IPUMS CPS code sets shared across the pipeline.

All raw survey codes the classifier and aggregator depend on are defined
here so the grouping schemes and the source adapter stay in sync.
Codes follow the IPUMS CPS harmonized coding.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# NATIVITY
# ---------------------------------------------------------------------------
NATIVITY_NATIVE_PARENTS: Final[int] = 1
NATIVITY_FATHER_FOREIGN: Final[int] = 2
NATIVITY_MOTHER_FOREIGN: Final[int] = 3
NATIVITY_BOTH_PARENTS_FOREIGN: Final[int] = 4
NATIVITY_FOREIGN_BORN: Final[int] = 5

# Every native-born NATIVITY code (respondent born in the U.S. or outlying areas)
NATIVE_BORN_CODES: Final[frozenset[int]] = frozenset({1, 2, 3, 4})
FOREIGN_BORN_CODES: Final[frozenset[int]] = frozenset({NATIVITY_FOREIGN_BORN})

# ---------------------------------------------------------------------------
# LABFORCE / EMPSTAT
# ---------------------------------------------------------------------------
LABFORCE_NOT_IN_LF: Final[int] = 1
LABFORCE_IN_LF: Final[int] = 2

# 10 = at work, 12 = has job, not at work last week
EMPLOYED_CODES: Final[frozenset[int]] = frozenset({10, 12})

# 20 = unemployed, 21 = experienced worker, 22 = new worker.
# Basic-monthly tables have used {20, 21}; the ASEC arrival-cohort series
# used {20, 21, 22}. Schemes choose one of these explicitly.
UNEMPLOYED_CODES: Final[frozenset[int]] = frozenset({20, 21})
UNEMPLOYED_CODES_WITH_NEW_ENTRANTS: Final[frozenset[int]] = frozenset({20, 21, 22})

# ---------------------------------------------------------------------------
# Hours / part-time
# ---------------------------------------------------------------------------
FULL_TIME_HOURS: Final[int] = 35

# PTREASON codes counted as part time for economic reasons
ECONOMIC_PART_TIME_REASONS: Final[frozenset[int]] = frozenset({1, 2, 3, 4})

# ---------------------------------------------------------------------------
# SEX
# ---------------------------------------------------------------------------
SEX_LABELS: Final[dict[int, str]] = {
    1: "Male",
    2: "Female",
}

# ---------------------------------------------------------------------------
# EDUC → education tier: (lowest code, highest code) inclusive
# ---------------------------------------------------------------------------
EDUCATION_TIER_RANGES: Final[dict[str, tuple[int, int]]] = {
    "Less than high school": (2, 72),
    "High school graduate": (73, 73),
    "Some college or associate": (80, 100),
    "Bachelor's degree": (110, 122),
    "Advanced degree": (123, 125),
}

# ---------------------------------------------------------------------------
# Not-in-universe / missing sentinels per raw IPUMS column.
# The source adapter nulls these so the core never sees them as values.
# ---------------------------------------------------------------------------
NIU_SENTINELS: Final[dict[str, tuple[float, ...]]] = {
    "YRIMMIG": (0,),
    "UHRSWORKT": (997, 999),
    "PTREASON": (0, 99),
    "EARNWEEK": (9999.99, 999999.99),
    "EDUC": (0, 1, 999),
    "SEX": (9,),
    "OCC": (0,),
    "NATIVITY": (0, 9),
}

# Civilian noninstitutional population convention
MIN_WORKING_AGE: Final[int] = 16

SecondaryDimension = Literal["sex", "education", "occupation"]
