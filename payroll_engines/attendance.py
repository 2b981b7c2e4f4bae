"""
Attendance Aggregator (``payroll_engines.attendance``).

Responsibility
--------------
Reduce one employee's attendance entries to ``PeriodTotals``: one record
per ISO week (weekly path) or one record for a caller-supplied date range
(monthly path).  Both paths share a single reducer.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.

Invariants enforced
-------------------
* Period start/end are the min/max dates of the contributing entries,
  not calendar week boundaries.
* Totals are kept in minutes: total_minutes is the integer sum of the
  entries' worked minutes and total_overtime_minutes the exact sum of
  their overtime minutes.  Hours are derived from these on read, so
  regrouping the same entries never changes a total.
* Totals are derived fresh from the full entry set; an existing
  ``PeriodTotals`` is never patched.
* A period with no entries produces no record.
* Inputs are never mutated; repeated calls return equal results.

Week semantics
--------------
Weeks are keyed by ISO (week-based year, week number).  At a year
boundary ISO may place 30 Dec in week 1 of the following year; that is
the defined grouping, not an error.

Failure modes
-------------
* ``InvalidPeriodError`` when a range starts after it ends.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from payroll_engines.tracer import traced_engine
from payroll_engines.types import AttendanceEntry, PeriodTotals
from payroll_kernel.exceptions import InvalidPeriodError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.attendance")


def week_period_id(week_year: int, week_number: int) -> str:
    """Identifier of an ISO week period, e.g. ``2024-W10``."""
    return f"{week_year}-W{week_number:02d}"


def range_period_id(start: date, end: date) -> str:
    """Identifier of an explicit date-range period."""
    return f"{start.isoformat()}..{end.isoformat()}"


def reduce_entries(
    employee_id: str,
    period_id: str,
    entries: Sequence[AttendanceEntry],
    week_number: int | None = None,
) -> PeriodTotals | None:
    """
    Reduce a group of entries to one ``PeriodTotals``.

    Returns None for an empty group.
    """
    if not entries:
        return None

    dates = [e.work_date for e in entries]
    return PeriodTotals(
        employee_id=employee_id,
        period_id=period_id,
        period_start=min(dates),
        period_end=max(dates),
        total_minutes=sum(e.worked_minutes for e in entries),
        total_overtime_minutes=sum(
            (e.overtime_minutes for e in entries), Decimal("0")
        ),
        entry_count=len(entries),
        late_count=sum(1 for e in entries if e.is_late),
        week_number=week_number,
    )


@traced_engine("attendance", "1.0", fingerprint_fields=("employee_id",))
def aggregate(
    employee_id: str,
    entries: Iterable[AttendanceEntry],
) -> tuple[PeriodTotals, ...]:
    """
    Group an employee's entries by ISO week and total each week.

    Entries for other employees are ignored.  Weeks are returned in order
    of their first appearance in ``entries``.

    Args:
        employee_id: Employee whose totals are wanted.
        entries: Attendance entries, normally in date order.

    Returns:
        One ``PeriodTotals`` per week with at least one entry; an empty
        tuple when the employee has no entries.
    """
    groups: dict[tuple[int, int], list[AttendanceEntry]] = {}
    for entry in entries:
        if entry.employee_id != employee_id:
            continue
        groups.setdefault((entry.week_year, entry.week_number), []).append(entry)

    results: list[PeriodTotals] = []
    for (week_year, week_number), group in groups.items():
        totals = reduce_entries(
            employee_id,
            week_period_id(week_year, week_number),
            group,
            week_number=week_number,
        )
        if totals is not None:
            results.append(totals)

    logger.info(
        "attendance_aggregated",
        extra={
            "employee_id": employee_id,
            "period_count": len(results),
            "entry_count": sum(t.entry_count for t in results),
        },
    )
    return tuple(results)


@traced_engine(
    "attendance", "1.0", fingerprint_fields=("employee_id", "start", "end")
)
def aggregate_range(
    employee_id: str,
    entries: Iterable[AttendanceEntry],
    start: date,
    end: date,
) -> PeriodTotals | None:
    """
    Total an employee's entries falling in ``[start, end]`` (inclusive).

    This is the monthly path: a date filter in front of the same reducer
    used for weeks.  Returns None when no entry falls in the range.

    Raises:
        InvalidPeriodError: if ``start`` is after ``end``.
    """
    if start > end:
        raise InvalidPeriodError(start, end)

    selected = [
        e for e in entries
        if e.employee_id == employee_id and start <= e.work_date <= end
    ]
    totals = reduce_entries(employee_id, range_period_id(start, end), selected)

    logger.info(
        "attendance_range_aggregated",
        extra={
            "employee_id": employee_id,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "entry_count": len(selected),
        },
    )
    return totals
