"""
Payroll Engine Value Objects (``payroll_engines.types``).

Responsibility
--------------
Frozen dataclass value objects for the nouns of the payroll engine:
compensation profiles, attendance entries, period totals, deduction
lines and payroll summaries.

Architecture position
---------------------
**Engines layer** -- pure data definitions with ZERO I/O.  Consumed by
the aggregator, the assembler and ``PayrollService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.  Attendance is
  stored in minutes and converted to hours only when read.
* An ``AttendanceEntry`` never has time-out before time-in.
* A ``CompensationProfile`` never carries a negative or non-finite rate
  or allowance.

Failure modes
-------------
* ``InvalidEntryError`` for an inverted attendance entry.
* ``InvalidProfileError`` for a negative, NaN or infinite monetary
  profile field.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Self

from payroll_engines.overtime import STANDARD_DAILY_HOURS, compute_overtime_hours
from payroll_kernel.exceptions import InvalidEntryError, InvalidProfileError

LATE_GRACE_CUTOFF = time(8, 10)

_MINUTES_PER_HOUR = Decimal("60")


def minutes_to_hours(minutes: int | Decimal) -> Decimal:
    """Convert a minute count to fractional hours."""
    return Decimal(minutes) / _MINUTES_PER_HOUR


class PayBasis(str, Enum):
    """Period length a pay figure or schedule table refers to."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class CompensationProfile:
    """Pay terms for one employee, as loaded by the caller."""

    employee_id: str
    hourly_rate: Decimal
    rice_subsidy: Decimal = Decimal("0")
    phone_allowance: Decimal = Decimal("0")
    clothing_allowance: Decimal = Decimal("0")
    basic_salary: Decimal = Decimal("0")
    semi_monthly_rate: Decimal = Decimal("0")
    last_name: str = ""
    first_name: str = ""

    def __post_init__(self) -> None:
        for name in (
            "hourly_rate",
            "rice_subsidy",
            "phone_allowance",
            "clothing_allowance",
            "basic_salary",
            "semi_monthly_rate",
        ):
            value = Decimal(getattr(self, name))
            if not value.is_finite() or value < 0:
                raise InvalidProfileError(self.employee_id, name, value)

    @property
    def allowances(self) -> dict[str, Decimal]:
        """Allowance name -> amount, in a stable order."""
        return {
            "rice_subsidy": self.rice_subsidy,
            "phone_allowance": self.phone_allowance,
            "clothing_allowance": self.clothing_allowance,
        }

    @property
    def total_allowances(self) -> Decimal:
        return sum(self.allowances.values(), Decimal("0"))

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.employee_id


@dataclass(frozen=True)
class AttendanceEntry:
    """
    One day's time-in/time-out record for an employee.

    Worked minutes, overtime minutes, ISO week and the late flag are
    derived once at construction.  Minutes are the stored unit so that
    totals add exactly; hours are read through properties.
    """

    employee_id: str
    work_date: date
    time_in: time
    time_out: time
    standard_hours: Decimal = field(default=STANDARD_DAILY_HOURS, repr=False)
    grace_cutoff: time = field(default=LATE_GRACE_CUTOFF, repr=False)

    worked_minutes: int = field(init=False)
    overtime_minutes: Decimal = field(init=False)
    week_year: int = field(init=False)
    week_number: int = field(init=False)
    is_late: bool = field(init=False)

    def __post_init__(self) -> None:
        if self.time_out < self.time_in:
            raise InvalidEntryError(
                self.employee_id, self.work_date, self.time_in, self.time_out
            )

        elapsed = (
            datetime.combine(self.work_date, self.time_out)
            - datetime.combine(self.work_date, self.time_in)
        )
        minutes = int(elapsed.total_seconds()) // 60
        iso = self.work_date.isocalendar()

        object.__setattr__(self, "worked_minutes", minutes)
        object.__setattr__(
            self,
            "overtime_minutes",
            compute_overtime_hours(
                Decimal(minutes), self.standard_hours * _MINUTES_PER_HOUR
            ),
        )
        object.__setattr__(self, "week_year", iso.year)
        object.__setattr__(self, "week_number", iso.week)
        object.__setattr__(self, "is_late", self.time_in > self.grace_cutoff)

    @property
    def hours_worked(self) -> Decimal:
        return minutes_to_hours(self.worked_minutes)

    @property
    def overtime_hours(self) -> Decimal:
        return minutes_to_hours(self.overtime_minutes)


@dataclass(frozen=True)
class PeriodTotals:
    """Minutes aggregated over one period for one employee."""

    employee_id: str
    period_id: str
    period_start: date
    period_end: date
    total_minutes: int = 0
    total_overtime_minutes: Decimal = Decimal("0")
    entry_count: int = 0
    late_count: int = 0
    week_number: int | None = None

    @classmethod
    def empty(
        cls,
        employee_id: str,
        period_id: str,
        start: date,
        end: date,
    ) -> Self:
        """Totals for a requested range in which no attendance exists."""
        return cls(
            employee_id=employee_id,
            period_id=period_id,
            period_start=start,
            period_end=end,
        )

    @property
    def total_hours(self) -> Decimal:
        return minutes_to_hours(self.total_minutes)

    @property
    def total_overtime_hours(self) -> Decimal:
        return minutes_to_hours(self.total_overtime_minutes)

    @property
    def has_attendance(self) -> bool:
        return self.entry_count > 0


@dataclass(frozen=True)
class DeductionLine:
    """One computed deduction (a contribution scheme or withholding tax)."""

    code: str
    name: str
    amount: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    """
    Gross-to-net result for one employee and one period.

    Output only: built fresh by ``assemble`` and never mutated.
    """

    employee_id: str
    period_id: str
    period_start: date
    period_end: date
    base_pay: Decimal
    gross_pay: Decimal
    allowances: tuple[tuple[str, Decimal], ...]
    deductions: tuple[DeductionLine, ...]
    total_deductions: Decimal
    net_pay: Decimal
    total_hours: Decimal
    total_overtime_hours: Decimal
    overtime_pay: Decimal = Decimal("0")
    late_count: int = 0

    @property
    def total_allowances(self) -> Decimal:
        return sum((amount for _, amount in self.allowances), Decimal("0"))

    def deduction(self, code: str) -> Decimal:
        """Amount of the named deduction, zero when absent."""
        for line in self.deductions:
            if line.code == code:
                return line.amount
        return Decimal("0")

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping; amounts rendered as strings."""
        return {
            "employee_id": self.employee_id,
            "period_id": self.period_id,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "total_hours": str(self.total_hours),
            "total_overtime_hours": str(self.total_overtime_hours),
            "late_count": self.late_count,
            "base_pay": str(self.base_pay),
            "allowances": {name: str(amount) for name, amount in self.allowances},
            "gross_pay": str(self.gross_pay),
            "deductions": {line.code: str(line.amount) for line in self.deductions},
            "total_deductions": str(self.total_deductions),
            "net_pay": str(self.net_pay),
            "overtime_pay": str(self.overtime_pay),
        }
