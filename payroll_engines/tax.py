"""
Progressive Tax Engine (``payroll_engines.tax``).

Responsibility
--------------
Marginal withholding tax over a pay base: find the bracket whose
``[lower, upper)`` contains the pay base and return
``base_tax + (pay_base - lower) x marginal_rate``.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Tax tables are injected at
construction; no bracket values live in code.

Invariants enforced
-------------------
* Zero, negative or missing pay base -> ``Decimal("0")``.
* Results are quantized to 0.01 (ROUND_HALF_UP).
* One table per pay basis.  A weekly pay base with only a monthly table
  available is scaled by the weekly -> monthly adapter (see
  ``payroll_engines.contributions``) and the MONTHLY tax amount is
  returned as is.  Like contributions, the caller deducts that monthly
  figure from the weekly summary; it is not divided back to a week.

Failure modes
-------------
* ``MissingBracketCoverageError`` if no bracket contains the pay base.
* ``MissingTaxTableError`` if no table can serve the pay basis.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from payroll_engines.contributions import WEEKS_PER_MONTH, to_monthly_basis
from payroll_engines.schedules import TaxTable
from payroll_engines.tracer import traced_engine
from payroll_engines.types import PayBasis
from payroll_kernel.exceptions import (
    MissingBracketCoverageError,
    MissingTaxTableError,
)
from payroll_kernel.logging_config import get_logger

logger = get_logger("engines.tax")

_CENT = Decimal("0.01")
_ZERO = Decimal("0")


@traced_engine("tax", "1.0", fingerprint_fields=("pay_base",))
def compute_progressive_tax(
    pay_base: Decimal | None,
    table: TaxTable,
) -> Decimal:
    """
    Marginal tax on ``pay_base`` under ``table``.

    Raises:
        MissingBracketCoverageError: if no bracket contains the pay base.
    """
    if pay_base is None or pay_base <= 0:
        return _ZERO

    for bracket in table.brackets:
        if bracket.contains(pay_base):
            tax = bracket.base_tax + (pay_base - bracket.lower) * bracket.marginal_rate
            return tax.quantize(_CENT, rounding=ROUND_HALF_UP)

    raise MissingBracketCoverageError(table.code, pay_base)


class ProgressiveTaxEngine:
    """
    Withholding tax over injected tables, one per pay basis.

    Usage:
        engine = ProgressiveTaxEngine(config.tax_tables)
        tax = engine.compute_tax(Decimal("6000"), PayBasis.WEEKLY)
    """

    def __init__(
        self,
        tables: Iterable[TaxTable],
        weekly_to_monthly_factor: Decimal = WEEKS_PER_MONTH,
    ):
        self._tables: dict[PayBasis, TaxTable] = {
            table.basis: table for table in tables
        }
        self._factor = weekly_to_monthly_factor

    @property
    def bases(self) -> tuple[PayBasis, ...]:
        return tuple(self._tables)

    def compute_tax(
        self,
        pay_base: Decimal | None,
        pay_basis: PayBasis = PayBasis.WEEKLY,
    ) -> Decimal:
        """
        Withholding tax on a pay base of the given basis.

        A weekly pay base with no weekly table falls back to the monthly
        table: the base is scaled by the weekly -> monthly factor and the
        monthly tax on it is returned unscaled.  The fallback is logged
        as ``tax_monthly_table_fallback``.

        Raises:
            MissingTaxTableError: if no table serves ``pay_basis``.
        """
        if pay_base is None or pay_base <= 0:
            return _ZERO

        table = self._tables.get(pay_basis)
        taxable = pay_base
        if table is None:
            if pay_basis == PayBasis.WEEKLY and PayBasis.MONTHLY in self._tables:
                table = self._tables[PayBasis.MONTHLY]
                taxable = to_monthly_basis(pay_base, self._factor)
                logger.warning(
                    "tax_monthly_table_fallback",
                    extra={"pay_base": str(pay_base), "taxable": str(taxable)},
                )
            else:
                raise MissingTaxTableError(pay_basis.value)

        tax = compute_progressive_tax(pay_base=taxable, table=table)

        logger.info(
            "tax_computed",
            extra={
                "table": table.code,
                "pay_base": str(pay_base),
                "pay_basis": pay_basis.value,
                "taxable": str(taxable),
                "tax": str(tax),
            },
        )
        return tax
