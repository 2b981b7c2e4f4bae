"""
Configuration Schema (``payroll_config.schema``).

Frozen dataclasses describing one payroll configuration set: identity,
effective range, engine rules, contribution schemes and tax tables.
Bracket types come from ``payroll_engines.schedules`` so a loaded set
can be injected into the engines without translation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum

from payroll_engines.overtime import OVERTIME_MULTIPLIER, STANDARD_DAILY_HOURS
from payroll_engines.contributions import WEEKS_PER_MONTH
from payroll_engines.schedules import ContributionScheme, TaxTable
from payroll_engines.types import LATE_GRACE_CUTOFF, PayBasis


class ConfigStatus(str, Enum):
    """Lifecycle of a configuration set."""

    DRAFT = "draft"
    PUBLISHED = "published"
    SUPERSEDED = "superseded"


class TaxBase(str, Enum):
    """Which figure the withholding tax is computed on."""

    BASE_PAY = "base_pay"
    BASE_PAY_LESS_CONTRIBUTIONS = "base_pay_less_contributions"


@dataclass(frozen=True)
class PayrollRules:
    """Engine parameters that vary by jurisdiction or policy."""

    standard_daily_hours: Decimal = STANDARD_DAILY_HOURS
    overtime_multiplier: Decimal = OVERTIME_MULTIPLIER
    late_grace_cutoff: time = LATE_GRACE_CUTOFF
    weekly_to_monthly_factor: Decimal = WEEKS_PER_MONTH
    tax_base: TaxBase = TaxBase.BASE_PAY


@dataclass(frozen=True)
class PayrollConfigurationSet:
    """
    A versioned, immutable set of payroll schedules and rules.

    Contract
    --------
    * ``schemes`` are applied in the listed order.
    * ``tax_tables`` hold at most one table per pay basis.
    * ``checksum`` is the SHA-256 of the assembled source data.
    """

    config_id: str
    version: int
    jurisdiction: str
    currency: str
    effective_from: date
    effective_to: date | None = None
    status: ConfigStatus = ConfigStatus.DRAFT
    description: str = ""
    rules: PayrollRules = field(default_factory=PayrollRules)
    schemes: tuple[ContributionScheme, ...] = ()
    tax_tables: tuple[TaxTable, ...] = ()
    checksum: str = ""

    def covers(self, as_of_date: date) -> bool:
        """True when ``as_of_date`` falls in the effective range."""
        if as_of_date < self.effective_from:
            return False
        return self.effective_to is None or as_of_date <= self.effective_to

    def scheme(self, code: str) -> ContributionScheme | None:
        for scheme in self.schemes:
            if scheme.code == code:
                return scheme
        return None

    def tax_table(self, basis: PayBasis) -> TaxTable | None:
        for table in self.tax_tables:
            if table.basis == basis:
                return table
        return None
