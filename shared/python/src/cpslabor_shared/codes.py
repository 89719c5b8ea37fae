"""
codes.py — Closed enumerations over raw IPUMS CPS survey codes.

Every decoder maps an arbitrary raw code (including None) onto a member;
codes outside the known sets decode to UNRECOGNIZED rather than to a
default category.

Usage:
    from cpslabor_shared.codes import Nativity, EducationTier

    Nativity.from_code(5)            # Nativity.FOREIGN_BORN
    Nativity.from_code(0)            # Nativity.UNRECOGNIZED
    EducationTier.from_code(111)     # EducationTier.BACHELORS
"""

from __future__ import annotations

from collections.abc import Collection
from enum import Enum

from cpslabor_shared.constants import (
    EDUCATION_TIER_RANGES,
    EMPLOYED_CODES,
    FOREIGN_BORN_CODES,
    NATIVE_BORN_CODES,
    UNEMPLOYED_CODES,
)


class AnalysisGroup(str, Enum):
    """Mutually exclusive analysis groups, plus the "All" pseudo-group."""

    NATIVE_BORN = "Native-Born"
    RECENT_IMMIGRANT = "Recent Immigrant"
    PRIOR_IMMIGRANT = "Prior Immigrant"
    DOMESTIC_BORN = "Domestic-Born"
    FOREIGN_BORN = "Foreign-Born"
    ALL = "All"


class Nativity(str, Enum):
    NATIVE_BORN = "native_born"
    FOREIGN_BORN = "foreign_born"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_code(
        cls,
        code: int | None,
        *,
        native_codes: Collection[int] = NATIVE_BORN_CODES,
        foreign_codes: Collection[int] = FOREIGN_BORN_CODES,
    ) -> "Nativity":
        if code in native_codes:
            return cls.NATIVE_BORN
        if code in foreign_codes:
            return cls.FOREIGN_BORN
        return cls.UNRECOGNIZED


class EmploymentStatus(str, Enum):
    EMPLOYED = "employed"
    UNEMPLOYED = "unemployed"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def code_map(
        cls,
        unemployed_codes: Collection[int] = UNEMPLOYED_CODES,
    ) -> dict[int, "EmploymentStatus"]:
        """EMPSTAT code → status for every recognized code.

        Not-in-labor-force codes (30-36) are absent and decode to UNRECOGNIZED.
        """
        mapping = {code: cls.UNEMPLOYED for code in unemployed_codes}
        mapping.update({code: cls.EMPLOYED for code in EMPLOYED_CODES})
        return mapping

    @classmethod
    def from_code(
        cls,
        code: int | None,
        *,
        unemployed_codes: Collection[int] = UNEMPLOYED_CODES,
    ) -> "EmploymentStatus":
        return cls.code_map(unemployed_codes).get(code, cls.UNRECOGNIZED)


class EducationTier(str, Enum):
    LESS_THAN_HIGH_SCHOOL = "Less than high school"
    HIGH_SCHOOL = "High school graduate"
    SOME_COLLEGE = "Some college or associate"
    BACHELORS = "Bachelor's degree"
    ADVANCED = "Advanced degree"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def code_map(cls) -> dict[int, "EducationTier"]:
        """EDUC code → tier for every code inside a tier range."""
        return {
            code: tier
            for tier in cls.ordered()
            for code in range(
                EDUCATION_TIER_RANGES[tier.value][0],
                EDUCATION_TIER_RANGES[tier.value][1] + 1,
            )
        }

    @classmethod
    def from_code(cls, code: int | None) -> "EducationTier":
        return cls.code_map().get(code, cls.UNRECOGNIZED)

    @classmethod
    def ordered(cls) -> list["EducationTier"]:
        """Recognized tiers, lowest attainment first."""
        return [t for t in cls if t is not cls.UNRECOGNIZED]
