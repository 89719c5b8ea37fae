"""
cpslabor_shared — shared configuration, survey code sets, and models for cpslabor.

Usage:
    from cpslabor_shared.config import settings
    from cpslabor_shared.codes import Nativity, EmploymentStatus, EducationTier
    from cpslabor_shared.models.records import SurveyRecord, SummaryRow
    from cpslabor_shared.constants import EMPLOYED_CODES, NIU_SENTINELS
"""

__version__ = "0.1.0"
