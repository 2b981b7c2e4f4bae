"""
Overtime Rule (``payroll_engines.overtime``).

Responsibility
--------------
Two pure functions: daily hours worked -> overtime hours, and
(overtime hours, hourly rate) -> overtime pay.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO state.
Called once per attendance entry (by ``AttendanceEntry``) or once per
aggregated total (by ``PayrollService``), whichever granularity the
caller needs.

Invariants enforced
-------------------
* overtime_hours = max(0, hours_worked - threshold); exactly zero when
  hours_worked equals the threshold.
* overtime_pay = overtime_hours x hourly_rate x multiplier, quantized
  to 0.01.

Failure modes
-------------
* Negative hours, rates or thresholds raise ``ValueError`` (programming
  errors; attendance validation happens before this point).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

STANDARD_DAILY_HOURS = Decimal("8")
OVERTIME_MULTIPLIER = Decimal("1.25")

_CENT = Decimal("0.01")


def compute_overtime_hours(
    hours_worked: Decimal,
    threshold: Decimal = STANDARD_DAILY_HOURS,
) -> Decimal:
    """Hours beyond the regular daily threshold (never negative)."""
    if hours_worked < 0:
        raise ValueError("hours_worked cannot be negative")
    if threshold < 0:
        raise ValueError("threshold cannot be negative")
    return max(Decimal("0"), hours_worked - threshold)


def compute_overtime_pay(
    overtime_hours: Decimal,
    hourly_rate: Decimal,
    multiplier: Decimal = OVERTIME_MULTIPLIER,
) -> Decimal:
    """Premium pay for overtime hours, quantized to cents."""
    if overtime_hours < 0:
        raise ValueError("overtime_hours cannot be negative")
    if hourly_rate < 0:
        raise ValueError("hourly_rate cannot be negative")
    if multiplier <= 0:
        raise ValueError("multiplier must be positive")
    return (overtime_hours * hourly_rate * multiplier).quantize(
        _CENT, rounding=ROUND_HALF_UP
    )
