"""
Configuration Validator (``payroll_config.validator``).

Responsibility
--------------
Validates a ``PayrollConfigurationSet`` before it is handed to the
engines, catching problems a single table cannot see on its own.

Invariants enforced
-------------------
* Scheme codes are unique; at most one tax table per pay basis.
* Every scheme and tax table passes the structural checks in
  ``payroll_engines.schedules`` (coverage of [0, inf), no gaps or
  overlaps).
* Engine rules are positive (daily hours, multiplier, weekly factor).
* The effective range is not inverted.

Warnings (do not block use)
---------------------------
* A tax bracket's ``base_tax`` differs by more than 1.00 from the tax
  accumulated at the end of the previous bracket.
* No weekly tax table (weekly pay then goes through the x4 adapter).
* A rate scheme whose cap is zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from payroll_config.schema import PayrollConfigurationSet
from payroll_engines.schedules import (
    TaxTable,
    validate_scheme,
    validate_tax_brackets,
)
from payroll_engines.types import PayBasis

_BASE_TAX_TOLERANCE = Decimal("1.00")


@dataclass
class ConfigValidationResult:
    """
    Result of configuration validation.

    Contract
    --------
    * ``is_valid`` returns ``True`` only when ``errors`` is empty.
    * Warnings do not block use but should be reviewed.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_configuration(config: PayrollConfigurationSet) -> ConfigValidationResult:
    """
    Validate a configuration set.

    Postconditions:
        - Returns a ``ConfigValidationResult`` with errors and warnings.
        - A configuration with errors MUST NOT be used.
    """
    result = ConfigValidationResult()

    _validate_effective_range(config, result)
    _validate_rules(config, result)
    _validate_schemes(config, result)
    _validate_tax_tables(config, result)

    return result


def _validate_effective_range(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    if config.effective_to is not None and config.effective_to < config.effective_from:
        result.add_error(
            f"effective_to {config.effective_to} precedes "
            f"effective_from {config.effective_from}"
        )


def _validate_rules(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    rules = config.rules
    if rules.standard_daily_hours <= 0:
        result.add_error("standard_daily_hours must be positive")
    if rules.overtime_multiplier <= 0:
        result.add_error("overtime_multiplier must be positive")
    if rules.weekly_to_monthly_factor <= 0:
        result.add_error("weekly_to_monthly_factor must be positive")


def _validate_schemes(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    seen: set[str] = set()
    for scheme in config.schemes:
        if scheme.code in seen:
            result.add_error(f"Duplicate scheme: {scheme.code} appears more than once")
        seen.add(scheme.code)

        for err in validate_scheme(scheme):
            result.add_error(f"Scheme '{scheme.code}': {err}")

        if scheme.rate_schedule is not None and scheme.rate_schedule.cap == 0:
            result.add_warning(f"Scheme '{scheme.code}' has a zero cap")


def _validate_tax_tables(
    config: PayrollConfigurationSet, result: ConfigValidationResult
) -> None:
    seen: set[PayBasis] = set()
    for table in config.tax_tables:
        if table.basis in seen:
            result.add_error(f"More than one {table.basis.value} tax table")
        seen.add(table.basis)

        for err in validate_tax_brackets(table.brackets):
            result.add_error(f"Tax table '{table.code}': {err}")
        _check_base_tax_continuity(table, result)

    if not config.tax_tables:
        result.add_error("No tax tables configured")
    elif PayBasis.WEEKLY not in seen:
        result.add_warning(
            "No weekly tax table; weekly pay will be scaled to the monthly table"
        )


def _check_base_tax_continuity(
    table: TaxTable, result: ConfigValidationResult
) -> None:
    """Each base_tax should equal the tax due at the previous bracket's top."""
    for prev, cur in zip(table.brackets, table.brackets[1:]):
        if prev.upper is None:
            continue
        expected = prev.base_tax + (prev.upper - prev.lower) * prev.marginal_rate
        if abs(expected - cur.base_tax) > _BASE_TAX_TOLERANCE:
            result.add_warning(
                f"Tax table '{table.code}': base tax {cur.base_tax} at "
                f"{cur.lower} differs from accumulated {expected}"
            )
