"""
Attendance and profile loaders (``payroll_ingestion.loaders``).

Responsibility
--------------
Turn rows from the employee sheet and the attendance sheet into
``CompensationProfile`` and ``AttendanceEntry`` objects.  Malformed rows
(too few fields, unparseable dates, times or amounts, time-out before
time-in, negative, NaN or infinite amounts) are skipped and reported in the
``LoadResult``; the engines never see them.

Source layouts
--------------
Attendance (6+ columns, header row):
    employee number, last name, first name, date (MM/DD/YYYY),
    log in (H:MM or HH:MM), log out

Employee details (19+ columns, header row):
    0 employee number, 1 last name, 2 first name, 3-12 personal and
    government identifiers, 13 basic salary, 14 rice subsidy,
    15 phone allowance, 16 clothing allowance, 17 gross semi-monthly
    rate, 18 hourly rate.  Thousands separators are stripped.

Failure modes
-------------
* Missing file -> ``FileNotFoundError`` propagates.
* Row-level problems never raise; they become ``SkippedRow`` entries.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from payroll_engines.overtime import STANDARD_DAILY_HOURS
from payroll_engines.types import LATE_GRACE_CUTOFF, AttendanceEntry, CompensationProfile
from payroll_ingestion.adapters import DelimitedSourceAdapter, SourceAdapter
from payroll_ingestion.types import LoadResult, SkippedRow
from payroll_kernel.exceptions import InvalidEntryError, InvalidProfileError
from payroll_kernel.logging_config import get_logger

logger = get_logger("ingestion.loaders")

DEFAULT_DATE_FORMAT = "%m/%d/%Y"

ATTENDANCE_MIN_FIELDS = 6
PROFILE_MIN_FIELDS = 19


def parse_amount(value: str) -> Decimal:
    """Parse a sheet amount such as ``"90,000"`` to a finite ``Decimal``."""
    try:
        amount = Decimal(value.replace(",", "").strip())
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"invalid amount {value!r}")
    return amount


def parse_clock_time(value: str) -> time:
    """Parse ``8:05`` or ``08:05`` (optionally with seconds)."""
    text = value.strip()
    if len(text) == 4 and text[1] == ":":
        text = "0" + text
    return time.fromisoformat(text)


def parse_work_date(value: str, date_format: str = DEFAULT_DATE_FORMAT) -> date:
    return datetime.strptime(value.strip(), date_format).date()


def parse_attendance_row(
    fields: list[str],
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    standard_hours: Decimal = STANDARD_DAILY_HOURS,
    grace_cutoff: time = LATE_GRACE_CUTOFF,
) -> AttendanceEntry:
    """
    Build an ``AttendanceEntry`` from one attendance row.

    Raises:
        ValueError: for too few fields or unparseable values.
        InvalidEntryError: when time-out precedes time-in.
    """
    if len(fields) < ATTENDANCE_MIN_FIELDS:
        raise ValueError(
            f"expected {ATTENDANCE_MIN_FIELDS} fields, got {len(fields)}"
        )
    employee_id = fields[0].strip()
    if not employee_id:
        raise ValueError("missing employee number")

    return AttendanceEntry(
        employee_id=employee_id,
        work_date=parse_work_date(fields[3], date_format),
        time_in=parse_clock_time(fields[4]),
        time_out=parse_clock_time(fields[5]),
        standard_hours=standard_hours,
        grace_cutoff=grace_cutoff,
    )


def parse_profile_row(fields: list[str]) -> CompensationProfile:
    """
    Build a ``CompensationProfile`` from one employee-details row.

    Raises:
        ValueError: for too few fields or unparseable, NaN or infinite
            amounts.
        InvalidProfileError: for negative amounts.
    """
    if len(fields) < PROFILE_MIN_FIELDS:
        raise ValueError(f"expected {PROFILE_MIN_FIELDS} fields, got {len(fields)}")
    employee_id = fields[0].strip()
    if not employee_id:
        raise ValueError("missing employee number")

    return CompensationProfile(
        employee_id=employee_id,
        last_name=fields[1].strip(),
        first_name=fields[2].strip(),
        basic_salary=parse_amount(fields[13]),
        rice_subsidy=parse_amount(fields[14]),
        phone_allowance=parse_amount(fields[15]),
        clothing_allowance=parse_amount(fields[16]),
        semi_monthly_rate=parse_amount(fields[17]),
        hourly_rate=parse_amount(fields[18]),
    )


def load_attendance(
    source_path: Path,
    options: dict[str, Any] | None = None,
    *,
    standard_hours: Decimal = STANDARD_DAILY_HOURS,
    grace_cutoff: time = LATE_GRACE_CUTOFF,
    adapter: SourceAdapter | None = None,
) -> LoadResult[AttendanceEntry]:
    """
    Load attendance entries, skipping rows that cannot be used.

    Options are passed to the adapter (``delimiter``, ``has_header``,
    ``encoding`` ...) plus ``date_format`` for the date column.
    """
    options = dict(options or {})
    date_format = options.pop("date_format", DEFAULT_DATE_FORMAT)
    adapter = adapter or DelimitedSourceAdapter()

    records: list[AttendanceEntry] = []
    skipped: list[SkippedRow] = []
    for line_number, fields in adapter.read(source_path, options):
        try:
            records.append(
                parse_attendance_row(
                    fields,
                    date_format=date_format,
                    standard_hours=standard_hours,
                    grace_cutoff=grace_cutoff,
                )
            )
        except (ValueError, InvalidEntryError) as exc:
            skipped.append(SkippedRow(line_number, str(exc), tuple(fields)))
            logger.warning(
                "attendance_row_skipped",
                extra={
                    "source": source_path.name,
                    "line_number": line_number,
                    "reason": str(exc),
                },
            )

    logger.info(
        "attendance_loaded",
        extra={
            "source": source_path.name,
            "record_count": len(records),
            "skipped_count": len(skipped),
        },
    )
    return LoadResult(records=tuple(records), skipped=tuple(skipped))


def load_profiles(
    source_path: Path,
    options: dict[str, Any] | None = None,
    *,
    adapter: SourceAdapter | None = None,
) -> LoadResult[CompensationProfile]:
    """Load compensation profiles, skipping rows that cannot be used."""
    adapter = adapter or DelimitedSourceAdapter()

    records: list[CompensationProfile] = []
    skipped: list[SkippedRow] = []
    for line_number, fields in adapter.read(source_path, dict(options or {})):
        try:
            records.append(parse_profile_row(fields))
        except (ValueError, InvalidProfileError) as exc:
            skipped.append(SkippedRow(line_number, str(exc), tuple(fields)))
            logger.warning(
                "profile_row_skipped",
                extra={
                    "source": source_path.name,
                    "line_number": line_number,
                    "reason": str(exc),
                },
            )

    logger.info(
        "profiles_loaded",
        extra={
            "source": source_path.name,
            "record_count": len(records),
            "skipped_count": len(skipped),
        },
    )
    return LoadResult(records=tuple(records), skipped=tuple(skipped))
