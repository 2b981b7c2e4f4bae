"""
Schedule Definitions (``payroll_engines.schedules``).

Responsibility
--------------
Immutable bracket tables for statutory contributions and withholding
tax, plus the structural checks every table must pass before an engine
may use it.

Architecture position
---------------------
**Engines layer** -- pure data definitions.  Built by
``payroll_config.loader`` from YAML and injected into the contribution
and tax engines; nothing here knows where a table came from.

Invariants enforced
-------------------
* Contribution brackets are inclusive ``[lower, upper]``; consecutive
  brackets are contiguous at the scheme granularity (e.g. 3249.99 ->
  3250.00 for a 0.01 step) with no overlap.
* Tax brackets are half-open ``[lower, upper)``; each lower bound equals
  the previous upper bound.
* Every table starts at 0 and ends with an unbounded bracket, so a
  lookup is total over ``[0, inf)``.
* Rate schedules have ``floor <= cap`` and ``0 <= employee_share <= 1``.

Failure modes
-------------
* ``InvalidScheduleError`` at construction for any violated invariant.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from payroll_engines.types import PayBasis
from payroll_kernel.exceptions import InvalidScheduleError

DEFAULT_GRANULARITY = Decimal("0.01")


class ContributionMethod(str, Enum):
    """How a scheme turns a pay base into a contribution."""

    FIXED_TIER = "fixed_tier"  # bracket -> fixed amount
    RATE = "rate"  # percentage of pay with floor and cap


@dataclass(frozen=True)
class ContributionBracket:
    """Inclusive pay range mapped to a fixed contribution amount."""

    lower: Decimal
    upper: Decimal | None  # None = unbounded
    amount: Decimal

    def contains(self, pay_base: Decimal) -> bool:
        if pay_base < self.lower:
            return False
        return self.upper is None or pay_base <= self.upper


@dataclass(frozen=True)
class RateSchedule:
    """
    Percentage-of-pay contribution.

    The full contribution is clamp(pay x rate, floor, cap); the reported
    amount is that value times ``employee_share`` (0.5 when the employer
    pays the other half).
    """

    rate: Decimal
    floor: Decimal
    cap: Decimal
    employee_share: Decimal = Decimal("1")


@dataclass(frozen=True)
class ContributionScheme:
    """One named statutory contribution with its own table and rule."""

    code: str
    name: str
    method: ContributionMethod
    basis: PayBasis = PayBasis.MONTHLY
    brackets: tuple[ContributionBracket, ...] = ()
    rate_schedule: RateSchedule | None = None
    granularity: Decimal = DEFAULT_GRANULARITY

    def __post_init__(self) -> None:
        errors = validate_scheme(self)
        if errors:
            raise InvalidScheduleError(self.code, errors[0])


@dataclass(frozen=True)
class TaxBracket:
    """Half-open pay range with base tax and marginal rate on the excess."""

    lower: Decimal
    upper: Decimal | None  # None = unbounded
    base_tax: Decimal
    marginal_rate: Decimal

    def contains(self, pay_base: Decimal) -> bool:
        if pay_base < self.lower:
            return False
        return self.upper is None or pay_base < self.upper


@dataclass(frozen=True)
class TaxTable:
    """Progressive withholding table for one pay basis."""

    code: str
    name: str
    basis: PayBasis
    brackets: tuple[TaxBracket, ...]

    def __post_init__(self) -> None:
        errors = validate_tax_brackets(self.brackets)
        if errors:
            raise InvalidScheduleError(self.code, errors[0])


# ---------------------------------------------------------------------------
# Structural validation (shared with payroll_config.validator)
# ---------------------------------------------------------------------------


def validate_scheme(scheme: ContributionScheme) -> list[str]:
    """Return every structural problem with a scheme (empty when valid)."""
    if scheme.granularity <= 0:
        return ["granularity must be positive"]
    if scheme.method == ContributionMethod.FIXED_TIER:
        if scheme.rate_schedule is not None:
            return ["fixed_tier scheme cannot carry a rate schedule"]
        return validate_contribution_brackets(scheme.brackets, scheme.granularity)
    if scheme.brackets:
        return ["rate scheme cannot carry brackets"]
    if scheme.rate_schedule is None:
        return ["rate scheme requires a rate schedule"]
    return validate_rate_schedule(scheme.rate_schedule)


def validate_contribution_brackets(
    brackets: tuple[ContributionBracket, ...],
    granularity: Decimal = DEFAULT_GRANULARITY,
) -> list[str]:
    """Check coverage of [0, inf) with inclusive, gap-free brackets."""
    if not brackets:
        return ["schedule has no brackets"]

    errors: list[str] = []
    if brackets[0].lower != 0:
        errors.append(f"first bracket starts at {brackets[0].lower}, not 0")

    for i, bracket in enumerate(brackets):
        if bracket.amount < 0:
            errors.append(f"bracket {i} has negative amount {bracket.amount}")
        if bracket.upper is None:
            if i != len(brackets) - 1:
                errors.append(f"bracket {i} is unbounded but not last")
            continue
        if bracket.upper < bracket.lower:
            errors.append(
                f"bracket {i} upper {bracket.upper} is below lower {bracket.lower}"
            )
        if i + 1 < len(brackets):
            nxt = brackets[i + 1].lower
            if nxt <= bracket.upper:
                errors.append(
                    f"brackets {i} and {i + 1} overlap at {nxt}"
                )
            elif nxt - bracket.upper > granularity:
                errors.append(
                    f"gap between {bracket.upper} and {nxt} "
                    f"(granularity {granularity})"
                )

    if brackets[-1].upper is not None:
        errors.append(f"last bracket is bounded at {brackets[-1].upper}")
    return errors


def validate_rate_schedule(schedule: RateSchedule) -> list[str]:
    errors: list[str] = []
    if schedule.rate < 0:
        errors.append(f"rate {schedule.rate} is negative")
    if schedule.floor < 0:
        errors.append(f"floor {schedule.floor} is negative")
    if schedule.floor > schedule.cap:
        errors.append(f"floor {schedule.floor} exceeds cap {schedule.cap}")
    if not Decimal("0") <= schedule.employee_share <= Decimal("1"):
        errors.append(
            f"employee_share {schedule.employee_share} must be between 0 and 1"
        )
    return errors


def validate_tax_brackets(brackets: tuple[TaxBracket, ...]) -> list[str]:
    """Check coverage of [0, inf) with contiguous half-open brackets."""
    if not brackets:
        return ["tax table has no brackets"]

    errors: list[str] = []
    if brackets[0].lower != 0:
        errors.append(f"first bracket starts at {brackets[0].lower}, not 0")

    for i, bracket in enumerate(brackets):
        if bracket.base_tax < 0:
            errors.append(f"bracket {i} has negative base tax")
        if not Decimal("0") <= bracket.marginal_rate <= Decimal("1"):
            errors.append(
                f"bracket {i} marginal rate {bracket.marginal_rate} out of range"
            )
        if bracket.upper is None:
            if i != len(brackets) - 1:
                errors.append(f"bracket {i} is unbounded but not last")
            continue
        if bracket.upper <= bracket.lower:
            errors.append(
                f"bracket {i} upper {bracket.upper} not above lower {bracket.lower}"
            )
        if i + 1 < len(brackets) and brackets[i + 1].lower != bracket.upper:
            errors.append(
                f"bracket {i + 1} starts at {brackets[i + 1].lower}, "
                f"expected {bracket.upper}"
            )

    if brackets[-1].upper is not None:
        errors.append(f"last bracket is bounded at {brackets[-1].upper}")
    return errors
