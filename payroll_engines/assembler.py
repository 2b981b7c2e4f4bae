"""
Payroll Assembler (``payroll_engines.assembler``).

Responsibility
--------------
Combine a compensation profile, one period's totals and the computed
deductions into a ``PayrollSummary``.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Deductions are computed by
the caller (``PayrollService``) and passed in; the assembler does no
schedule lookups.

Invariants enforced
-------------------
* base_pay = total_hours x hourly_rate (quantized to 0.01).
* gross_pay = base_pay + sum(allowances).
* total_deductions = sum of all deduction lines (contributions + tax).
* net_pay = gross_pay - total_deductions.
* Deductions are computed from base pay only, while gross and net
  include allowances.  Allowances are not subject to statutory
  deduction in this model; downstream consumers rely on these figures.
* A period with zero hours still yields a summary
  (gross_pay == allowance sum).

Failure modes
-------------
* ``EmployeeMismatchError`` if profile and totals disagree on employee.
* ``InvalidDeductionError`` for a negative deduction amount.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from payroll_engines.tracer import traced_engine
from payroll_engines.types import (
    CompensationProfile,
    DeductionLine,
    PayrollSummary,
    PeriodTotals,
)
from payroll_kernel.exceptions import EmployeeMismatchError, InvalidDeductionError
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.assembler")

_CENT = Decimal("0.01")


def compute_base_pay(total_hours: Decimal, hourly_rate: Decimal) -> Decimal:
    """Hours x rate, allowances excluded."""
    return (total_hours * hourly_rate).quantize(_CENT, rounding=ROUND_HALF_UP)


def _normalize_deductions(
    deductions: Iterable[DeductionLine] | Mapping[str, Decimal],
) -> tuple[DeductionLine, ...]:
    if isinstance(deductions, Mapping):
        lines = tuple(
            DeductionLine(code=code, name=code, amount=amount)
            for code, amount in deductions.items()
        )
    else:
        lines = tuple(deductions)

    for line in lines:
        if line.amount < 0:
            raise InvalidDeductionError(line.code, line.amount)
    return lines


@traced_engine("assembler", "1.0")
def assemble(
    profile: CompensationProfile,
    totals: PeriodTotals,
    deductions: Iterable[DeductionLine] | Mapping[str, Decimal],
    overtime_pay: Decimal | None = None,
) -> PayrollSummary:
    """
    Build the gross-to-net summary for one employee and period.

    Args:
        profile: The employee's compensation profile.
        totals: Aggregated hours for the period.
        deductions: Contribution and tax amounts, either as
            ``DeductionLine`` objects or a code -> amount mapping.
        overtime_pay: Informational overtime premium to report; it is
            not added to gross pay.

    Returns:
        A new ``PayrollSummary``.
    """
    if profile.employee_id != totals.employee_id:
        raise EmployeeMismatchError(profile.employee_id, totals.employee_id)

    lines = _normalize_deductions(deductions)

    base_pay = compute_base_pay(totals.total_hours, profile.hourly_rate)
    allowances = tuple(profile.allowances.items())
    allowance_total = sum((amount for _, amount in allowances), Decimal("0"))
    gross_pay = (base_pay + allowance_total).quantize(_CENT, rounding=ROUND_HALF_UP)
    total_deductions = sum((line.amount for line in lines), Decimal("0")).quantize(
        _CENT, rounding=ROUND_HALF_UP
    )
    net_pay = gross_pay - total_deductions

    summary = PayrollSummary(
        employee_id=profile.employee_id,
        period_id=totals.period_id,
        period_start=totals.period_start,
        period_end=totals.period_end,
        base_pay=base_pay,
        gross_pay=gross_pay,
        allowances=allowances,
        deductions=lines,
        total_deductions=total_deductions,
        net_pay=net_pay,
        total_hours=totals.total_hours,
        total_overtime_hours=totals.total_overtime_hours,
        overtime_pay=overtime_pay if overtime_pay is not None else Decimal("0"),
        late_count=totals.late_count,
    )

    if net_pay < 0:
        logger.warning(
            "payroll_negative_net_pay",
            extra={
                "employee_id": profile.employee_id,
                "period_id": totals.period_id,
                "gross_pay": str(gross_pay),
                "total_deductions": str(total_deductions),
            },
        )

    logger.info(
        "payroll_assembled",
        extra={
            "employee_id": profile.employee_id,
            "period_id": totals.period_id,
            "base_pay": str(base_pay),
            "gross_pay": str(gross_pay),
            "total_deductions": str(total_deductions),
            "net_pay": str(net_pay),
            "deduction_count": len(lines),
        },
    )
    return summary
