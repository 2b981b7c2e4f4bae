"""
Tests for the progressive withholding tax engine.

Covers:
- Bracket boundaries of the bundled weekly and monthly tables
- Zero and negative pay
- Weekly -> monthly fallback when no weekly table is configured
- Tax table structural validation
"""

import logging
from decimal import Decimal

import pytest

from payroll_engines.schedules import TaxBracket, TaxTable
from payroll_engines.tax import ProgressiveTaxEngine, compute_progressive_tax
from payroll_engines.types import PayBasis
from payroll_kernel.exceptions import InvalidScheduleError, MissingTaxTableError


def _table(basis: PayBasis, *rows: tuple[str, str | None, str, str]) -> TaxTable:
    return TaxTable(
        code=f"T-{basis.value}",
        name="test table",
        basis=basis,
        brackets=tuple(
            TaxBracket(
                lower=Decimal(lower),
                upper=Decimal(upper) if upper is not None else None,
                base_tax=Decimal(base),
                marginal_rate=Decimal(rate),
            )
            for lower, upper, base, rate in rows
        ),
    )


class TestShippedTables:
    """Tests against the bundled TRAIN-law withholding tables."""

    @pytest.fixture(autouse=True)
    def _engine(self, default_config):
        self.engine = ProgressiveTaxEngine(default_config.tax_tables)

    def test_zero_pay_zero_tax(self):
        assert self.engine.compute_tax(Decimal("0")) == Decimal("0")

    def test_negative_pay_zero_tax(self):
        assert self.engine.compute_tax(Decimal("-500")) == Decimal("0")

    def test_exempt_bracket(self):
        assert self.engine.compute_tax(Decimal("4000")) == Decimal("0")

    def test_lower_bound_inclusive(self):
        assert self.engine.compute_tax(Decimal("4808")) == Decimal("0")
        assert self.engine.compute_tax(Decimal("7692")) == Decimal("432.60")

    def test_marginal_rate_on_excess(self):
        assert self.engine.compute_tax(Decimal("6000")) == Decimal("178.80")
        assert self.engine.compute_tax(Decimal("10000")) == Decimal("894.20")

    def test_top_bracket(self):
        assert self.engine.compute_tax(Decimal("200000")) == Decimal("58509.55")

    def test_monthly_table(self):
        assert self.engine.compute_tax(
            Decimal("24000"), PayBasis.MONTHLY
        ) == Decimal("475.05")

    def test_both_bases_configured(self):
        assert set(self.engine.bases) == {PayBasis.WEEKLY, PayBasis.MONTHLY}


class TestBasisFallback:
    def setup_method(self):
        self.monthly = _table(
            PayBasis.MONTHLY,
            ("0", "20833", "0", "0"),
            ("20833", None, "0", "0.15"),
        )
        self.weekly = _table(PayBasis.WEEKLY, ("0", None, "0", "0.10"))

    def test_weekly_pay_scaled_to_monthly_table(self, caplog):
        """Monthly tax on 6000 x 4 is returned unscaled for the week."""
        engine = ProgressiveTaxEngine([self.monthly])
        with caplog.at_level(logging.WARNING, logger="payroll_kernel"):
            tax = engine.compute_tax(Decimal("6000"), PayBasis.WEEKLY)

        assert tax == Decimal("475.05")
        assert "tax_monthly_table_fallback" in caplog.messages

    def test_no_fallback_when_weekly_table_present(self, caplog):
        engine = ProgressiveTaxEngine([self.monthly, self.weekly])
        with caplog.at_level(logging.WARNING, logger="payroll_kernel"):
            engine.compute_tax(Decimal("6000"), PayBasis.WEEKLY)
        assert "tax_monthly_table_fallback" not in caplog.messages

    def test_monthly_pay_without_monthly_table(self):
        engine = ProgressiveTaxEngine([self.weekly])
        with pytest.raises(MissingTaxTableError) as exc_info:
            engine.compute_tax(Decimal("24000"), PayBasis.MONTHLY)
        assert exc_info.value.pay_basis == "monthly"

    def test_no_tables(self):
        with pytest.raises(MissingTaxTableError):
            ProgressiveTaxEngine([]).compute_tax(Decimal("100"))

    def test_zero_pay_needs_no_table(self):
        assert ProgressiveTaxEngine([]).compute_tax(Decimal("0")) == Decimal("0")


class TestComputeProgressiveTax:
    def test_rounds_half_up(self):
        table = _table(PayBasis.WEEKLY, ("0", None, "0", "0.15"))
        # 0.15 x 0.10 = 0.015 -> 0.02
        assert compute_progressive_tax(pay_base=Decimal("0.10"), table=table) == Decimal(
            "0.02"
        )


class TestTaxTableValidation:
    def test_non_contiguous_rejected(self):
        with pytest.raises(InvalidScheduleError, match="expected"):
            _table(
                PayBasis.WEEKLY,
                ("0", "100", "0", "0"),
                ("150", None, "0", "0.1"),
            )

    def test_rate_out_of_range_rejected(self):
        with pytest.raises(InvalidScheduleError, match="marginal rate"):
            _table(PayBasis.WEEKLY, ("0", None, "0", "1.5"))

    def test_bounded_last_bracket_rejected(self):
        with pytest.raises(InvalidScheduleError):
            _table(PayBasis.WEEKLY, ("0", "100", "0", "0"))
