"""
payroll_ingestion -- loaders for the employee and attendance sheets.

Parsing and malformed-row handling live here so that the engines only
ever receive well-formed ``CompensationProfile`` and ``AttendanceEntry``
objects.
"""

from payroll_ingestion.loaders import (
    load_attendance,
    load_profiles,
    parse_attendance_row,
    parse_profile_row,
)
from payroll_ingestion.types import LoadResult, SkippedRow

__all__ = [
    "LoadResult",
    "SkippedRow",
    "load_attendance",
    "load_profiles",
    "parse_attendance_row",
    "parse_profile_row",
]
