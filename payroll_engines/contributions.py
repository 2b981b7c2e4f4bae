"""
Contribution Schedule Engine (``payroll_engines.contributions``).

Responsibility
--------------
Turn a base-pay figure into statutory contribution amounts using
externally supplied schemes.  Two strategies:

* **fixed tier** -- the amount of the first inclusive bracket containing
  the pay base;
* **rate** -- clamp(pay x rate, floor, cap) x employee_share.

A period-basis adapter scales weekly pay to the monthly basis that most
tables are defined against.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Schedule-agnostic: no
bracket values live in code; schemes are injected at construction
(normally from ``payroll_config``).

Invariants enforced
-------------------
* Lookups are total over ``[0, inf)`` for a validated scheme.
* Negative or missing pay bases yield ``Decimal("0")`` -- an explicit
  policy, never a fallthrough.
* Fixed-tier pay bases are quantized to the scheme granularity
  (ROUND_HALF_UP) before lookup, so 3249.994 is matched as 3249.99.
* Results are quantized to 0.01.

Known approximation
-------------------
Weekly -> monthly conversion multiplies by a fixed factor (default 4).
A calendar month is not four weeks; callers needing calendar accuracy
must pass an already-monthly figure with ``PayBasis.MONTHLY``.

Failure modes
-------------
* ``MissingBracketCoverageError`` when no bracket contains the pay base.
* ``UnknownSchemeError`` for a scheme code that was not injected.
* ``ScheduleBasisError`` for monthly pay against a weekly table.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from payroll_engines.schedules import (
    ContributionBracket,
    ContributionMethod,
    ContributionScheme,
    RateSchedule,
)
from payroll_engines.tracer import traced_engine
from payroll_engines.types import DeductionLine, PayBasis
from payroll_kernel.exceptions import (
    MissingBracketCoverageError,
    ScheduleBasisError,
    UnknownSchemeError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.contributions")

WEEKS_PER_MONTH = Decimal("4")

_CENT = Decimal("0.01")
_ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Period-basis adapter
# ---------------------------------------------------------------------------


def to_monthly_basis(
    weekly_amount: Decimal,
    factor: Decimal = WEEKS_PER_MONTH,
) -> Decimal:
    """Scale a weekly figure to the monthly basis (weekly x factor)."""
    return weekly_amount * factor


def convert_basis(
    amount: Decimal,
    from_basis: PayBasis,
    to_basis: PayBasis,
    factor: Decimal = WEEKS_PER_MONTH,
) -> Decimal:
    """
    Express ``amount`` on the basis a schedule is defined against.

    Raises:
        ScheduleBasisError: for monthly -> weekly, which is not defined.
    """
    if from_basis == to_basis:
        return amount
    if from_basis == PayBasis.WEEKLY and to_basis == PayBasis.MONTHLY:
        return to_monthly_basis(amount, factor)
    raise ScheduleBasisError(from_basis.value, to_basis.value)


# ---------------------------------------------------------------------------
# Lookup strategies
# ---------------------------------------------------------------------------


def lookup_fixed_tier(
    pay_base: Decimal | None,
    brackets: Iterable[ContributionBracket],
    granularity: Decimal = _CENT,
    schedule_code: str = "",
) -> Decimal:
    """
    Fixed amount of the first bracket whose [lower, upper] holds the pay.

    Returns:
        The bracket amount; ``Decimal("0")`` for a None or negative pay
        base.

    Raises:
        MissingBracketCoverageError: if no bracket contains the pay base.
    """
    if pay_base is None or pay_base < 0:
        return _ZERO

    pay = pay_base.quantize(granularity, rounding=ROUND_HALF_UP)
    for bracket in brackets:
        if bracket.contains(pay):
            return bracket.amount.quantize(_CENT, rounding=ROUND_HALF_UP)

    raise MissingBracketCoverageError(schedule_code, pay)


def compute_rate_contribution(
    pay_base: Decimal | None,
    schedule: RateSchedule,
) -> Decimal:
    """
    Percentage-of-pay contribution with floor, cap and employee share.

    Returns ``Decimal("0")`` for a None or negative pay base.
    """
    if pay_base is None or pay_base < 0:
        return _ZERO

    full = pay_base * schedule.rate
    full = max(full, schedule.floor)
    full = min(full, schedule.cap)
    return (full * schedule.employee_share).quantize(_CENT, rounding=ROUND_HALF_UP)


@traced_engine("contributions", "1.0", fingerprint_fields=("pay_base",))
def compute_scheme_contribution(
    scheme: ContributionScheme,
    pay_base: Decimal | None,
) -> Decimal:
    """Apply a scheme's own strategy to a pay base already on its basis."""
    if scheme.method == ContributionMethod.FIXED_TIER:
        return lookup_fixed_tier(
            pay_base,
            scheme.brackets,
            granularity=scheme.granularity,
            schedule_code=scheme.code,
        )
    return compute_rate_contribution(pay_base, scheme.rate_schedule)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ContributionScheduleEngine:
    """
    Compute contributions for a set of injected schemes.

    Pure -- holds only the frozen schemes it was built with and may be
    shared across threads.

    Usage:
        engine = ContributionScheduleEngine(config.schemes)
        sss = engine.compute_contribution("SSS", Decimal("3500"))
        lines = engine.compute_all(weekly_base_pay, PayBasis.WEEKLY)
    """

    def __init__(
        self,
        schemes: Iterable[ContributionScheme] | Mapping[str, ContributionScheme],
        weekly_to_monthly_factor: Decimal = WEEKS_PER_MONTH,
    ):
        if isinstance(schemes, Mapping):
            schemes = schemes.values()
        self._schemes: dict[str, ContributionScheme] = {
            scheme.code: scheme for scheme in schemes
        }
        self._factor = weekly_to_monthly_factor

    @property
    def scheme_codes(self) -> tuple[str, ...]:
        return tuple(self._schemes)

    def scheme(self, code: str) -> ContributionScheme:
        try:
            return self._schemes[code]
        except KeyError:
            raise UnknownSchemeError(code, self.scheme_codes) from None

    def compute_contribution(
        self,
        scheme: str,
        pay_base: Decimal | None,
        pay_basis: PayBasis = PayBasis.MONTHLY,
    ) -> Decimal:
        """
        Contribution for ``pay_base`` under the named scheme.

        Args:
            scheme: Scheme code (e.g. "SSS").
            pay_base: Base pay (hours x rate), allowances excluded.
            pay_basis: Period the pay figure covers.  Weekly figures are
                scaled to a monthly table's basis by the adapter.

        Returns:
            The contribution, quantized to 0.01; zero for a None or
            negative pay base.
        """
        definition = self.scheme(scheme)
        if pay_base is None or pay_base < 0:
            logger.debug(
                "contribution_zero_default",
                extra={"scheme": scheme, "pay_base": str(pay_base)},
            )
            return _ZERO

        schedule_pay = convert_basis(
            pay_base, pay_basis, definition.basis, self._factor
        )
        amount = compute_scheme_contribution(definition, pay_base=schedule_pay)

        logger.info(
            "contribution_computed",
            extra={
                "scheme": scheme,
                "pay_base": str(pay_base),
                "pay_basis": pay_basis.value,
                "schedule_pay": str(schedule_pay),
                "amount": str(amount),
            },
        )
        return amount

    def on_pay_basis(
        self,
        scheme: str,
        amount: Decimal,
        pay_basis: PayBasis,
    ) -> Decimal:
        """
        Express a contribution computed by ``scheme`` on ``pay_basis``.

        A monthly table yields a monthly amount even for weekly pay; this
        divides it back by the weekly -> monthly factor.  The result is
        not quantized and is meant for intermediate figures such as a
        tax base, never for a deduction line.
        """
        definition = self.scheme(scheme)
        if definition.basis == pay_basis:
            return amount
        if definition.basis == PayBasis.MONTHLY and pay_basis == PayBasis.WEEKLY:
            return amount / self._factor
        raise ScheduleBasisError(pay_basis.value, definition.basis.value)

    def compute_all(
        self,
        pay_base: Decimal | None,
        pay_basis: PayBasis = PayBasis.MONTHLY,
    ) -> tuple[DeductionLine, ...]:
        """One ``DeductionLine`` per scheme, in scheme order."""
        return tuple(
            DeductionLine(
                code=code,
                name=definition.name,
                amount=self.compute_contribution(code, pay_base, pay_basis),
            )
            for code, definition in self._schemes.items()
        )
