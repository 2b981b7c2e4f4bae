"""Tests for configuration set validation."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from payroll_config.assembler import assemble_from_directory
from payroll_config.schema import PayrollRules
from payroll_config.validator import ConfigValidationResult, validate_configuration
from payroll_engines.schedules import (
    ContributionMethod,
    ContributionScheme,
    RateSchedule,
    TaxBracket,
    TaxTable,
)
from payroll_engines.types import PayBasis
from tests.conftest import SHIPPED_SET


class TestValidateConfiguration:
    def setup_method(self):
        self.config = assemble_from_directory(SHIPPED_SET)

    def test_shipped_set_is_clean(self):
        result = validate_configuration(self.config)
        assert result.is_valid
        assert result.warnings == []

    def test_inverted_effective_range(self):
        config = replace(self.config, effective_to=date(2023, 1, 1))
        result = validate_configuration(config)
        assert not result.is_valid
        assert any("precedes" in e for e in result.errors)

    def test_non_positive_rules(self):
        config = replace(
            self.config, rules=PayrollRules(weekly_to_monthly_factor=Decimal("0"))
        )
        result = validate_configuration(config)
        assert "weekly_to_monthly_factor must be positive" in result.errors

    def test_duplicate_scheme(self):
        config = replace(
            self.config, schemes=self.config.schemes + (self.config.schemes[0],)
        )
        result = validate_configuration(config)
        assert any("Duplicate scheme: SSS" in e for e in result.errors)

    def test_zero_cap_warning(self):
        scheme = ContributionScheme(
            code="ZERO",
            name="Zero",
            method=ContributionMethod.RATE,
            rate_schedule=RateSchedule(
                rate=Decimal("0.01"), floor=Decimal("0"), cap=Decimal("0")
            ),
        )
        config = replace(self.config, schemes=self.config.schemes + (scheme,))
        result = validate_configuration(config)
        assert result.is_valid
        assert any("zero cap" in w for w in result.warnings)

    def test_no_tax_tables(self):
        result = validate_configuration(replace(self.config, tax_tables=()))
        assert "No tax tables configured" in result.errors

    def test_duplicate_tax_basis(self):
        weekly = self.config.tax_table(PayBasis.WEEKLY)
        config = replace(self.config, tax_tables=self.config.tax_tables + (weekly,))
        result = validate_configuration(config)
        assert "More than one weekly tax table" in result.errors

    def test_missing_weekly_table_warns(self):
        monthly = self.config.tax_table(PayBasis.MONTHLY)
        result = validate_configuration(replace(self.config, tax_tables=(monthly,)))
        assert result.is_valid
        assert any("No weekly tax table" in w for w in result.warnings)

    def test_base_tax_discontinuity_warns(self):
        table = TaxTable(
            code="JUMPY",
            name="Jumpy",
            basis=PayBasis.WEEKLY,
            brackets=(
                TaxBracket(Decimal("0"), Decimal("1000"), Decimal("0"), Decimal("0.1")),
                TaxBracket(Decimal("1000"), None, Decimal("500"), Decimal("0.2")),
            ),
        )
        monthly = self.config.tax_table(PayBasis.MONTHLY)
        result = validate_configuration(
            replace(self.config, tax_tables=(table, monthly))
        )
        assert result.is_valid
        assert any("JUMPY" in w for w in result.warnings)


class TestValidationResult:
    def test_errors_make_invalid(self):
        result = ConfigValidationResult()
        result.add_warning("just a warning")
        assert result.is_valid
        result.add_error("broken")
        assert not result.is_valid
