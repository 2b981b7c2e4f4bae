"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the canonical import surface
    for higher layers (payroll_config, payroll_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import payroll_kernel (logging, exceptions) and sibling
    engine modules.  MUST NOT import payroll_config or payroll_services.

Invariants enforced:
    - Purity: engines never read the clock or the filesystem.
    - Decimal-only arithmetic for money and hours.
    - Determinism: identical inputs always produce identical outputs.
    - Bracket tables are injected, never embedded.

Usage:
    from payroll_engines import (
        ContributionScheduleEngine,
        ProgressiveTaxEngine,
        aggregate,
        assemble,
    )
"""

from payroll_engines.assembler import assemble, compute_base_pay
from payroll_engines.attendance import (
    aggregate,
    aggregate_range,
    range_period_id,
    reduce_entries,
    week_period_id,
)
from payroll_engines.contributions import (
    WEEKS_PER_MONTH,
    ContributionScheduleEngine,
    compute_rate_contribution,
    compute_scheme_contribution,
    convert_basis,
    lookup_fixed_tier,
    to_monthly_basis,
)
from payroll_engines.overtime import (
    OVERTIME_MULTIPLIER,
    STANDARD_DAILY_HOURS,
    compute_overtime_hours,
    compute_overtime_pay,
)
from payroll_engines.schedules import (
    ContributionBracket,
    ContributionMethod,
    ContributionScheme,
    RateSchedule,
    TaxBracket,
    TaxTable,
)
from payroll_engines.tax import ProgressiveTaxEngine, compute_progressive_tax
from payroll_engines.tracer import traced_engine
from payroll_engines.types import (
    LATE_GRACE_CUTOFF,
    AttendanceEntry,
    CompensationProfile,
    DeductionLine,
    PayBasis,
    PayrollSummary,
    PeriodTotals,
)

__all__ = [
    "LATE_GRACE_CUTOFF",
    "OVERTIME_MULTIPLIER",
    "STANDARD_DAILY_HOURS",
    "WEEKS_PER_MONTH",
    "AttendanceEntry",
    "CompensationProfile",
    "ContributionBracket",
    "ContributionMethod",
    "ContributionScheduleEngine",
    "ContributionScheme",
    "DeductionLine",
    "PayBasis",
    "PayrollSummary",
    "PeriodTotals",
    "ProgressiveTaxEngine",
    "RateSchedule",
    "TaxBracket",
    "TaxTable",
    "aggregate",
    "aggregate_range",
    "assemble",
    "compute_base_pay",
    "compute_overtime_hours",
    "compute_overtime_pay",
    "compute_progressive_tax",
    "compute_rate_contribution",
    "compute_scheme_contribution",
    "convert_basis",
    "lookup_fixed_tier",
    "range_period_id",
    "reduce_entries",
    "to_monthly_basis",
    "traced_engine",
    "week_period_id",
]
