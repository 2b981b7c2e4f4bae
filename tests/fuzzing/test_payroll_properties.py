"""
Property-based tests for the payroll engines using Hypothesis.

Properties:
- Overtime is max(0, hours - threshold) and exactly zero at the threshold
- Period totals equal the exact sum of entry minutes
- Aggregation is idempotent and leaves its input untouched
- Contribution lookups are total and monotonic non-decreasing
- Tax is zero at zero pay and monotonic non-decreasing
- Gross minus deductions equals net for every summary
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from payroll_config import get_active_config
from payroll_engines.attendance import aggregate
from payroll_engines.contributions import ContributionScheduleEngine
from payroll_engines.overtime import STANDARD_DAILY_HOURS, compute_overtime_hours
from payroll_engines.tax import ProgressiveTaxEngine
from payroll_engines.types import AttendanceEntry, PayBasis
from payroll_services import PayrollService
from tests.conftest import make_profile

CONFIG = get_active_config(date(2024, 3, 4))

SETTINGS = settings(
    max_examples=200,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)

pay_amounts = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000000"),
    places=2,
    allow_nan=False,
    allow_infinity=False,
)


@composite
def attendance_entries(draw, employee_id: str = "10001"):
    """A day's entry somewhere in 2023-2025 with time-out after time-in."""
    work_date = draw(st.dates(min_value=date(2023, 1, 1), max_value=date(2025, 12, 31)))
    start_minute = draw(st.integers(min_value=0, max_value=23 * 60))
    length = draw(st.integers(min_value=0, max_value=24 * 60 - 1 - start_minute))
    clock_in = datetime.combine(work_date, time(0, 0)) + timedelta(minutes=start_minute)
    clock_out = clock_in + timedelta(minutes=length)
    return AttendanceEntry(
        employee_id=employee_id,
        work_date=work_date,
        time_in=clock_in.time(),
        time_out=clock_out.time(),
    )


class TestOvertimeProperties:
    @given(
        hours=st.decimals(
            min_value=Decimal("0"),
            max_value=Decimal("24"),
            places=4,
            allow_nan=False,
            allow_infinity=False,
        )
    )
    @SETTINGS
    def test_overtime_formula(self, hours):
        overtime = compute_overtime_hours(hours)
        assert overtime == max(Decimal("0"), hours - STANDARD_DAILY_HOURS)
        assert overtime >= 0
        if hours <= STANDARD_DAILY_HOURS:
            assert overtime == 0


class TestAggregationProperties:
    @given(entries=st.lists(attendance_entries(), max_size=40))
    @SETTINGS
    def test_totals_are_exact_sums(self, entries):
        periods = aggregate(employee_id="10001", entries=entries)

        assert sum(p.total_minutes for p in periods) == sum(
            e.worked_minutes for e in entries
        )
        assert sum((p.total_overtime_minutes for p in periods), Decimal("0")) == sum(
            (e.overtime_minutes for e in entries), Decimal("0")
        )
        assert sum(p.entry_count for p in periods) == len(entries)

    @given(entries=st.lists(attendance_entries(), max_size=40))
    @SETTINGS
    def test_one_period_per_iso_week(self, entries):
        periods = aggregate(employee_id="10001", entries=entries)
        weeks = {(e.week_year, e.week_number) for e in entries}

        assert len(periods) == len(weeks)
        for period in periods:
            assert period.period_start <= period.period_end

    @given(entries=st.lists(attendance_entries(), max_size=40))
    @SETTINGS
    def test_idempotent_and_pure(self, entries):
        snapshot = list(entries)
        assert aggregate(employee_id="10001", entries=entries) == aggregate(
            employee_id="10001", entries=entries
        )
        assert entries == snapshot


class TestScheduleProperties:
    contributions = ContributionScheduleEngine(CONFIG.schemes)
    tax = ProgressiveTaxEngine(CONFIG.tax_tables)

    @pytest.mark.parametrize("scheme", ["SSS", "PHILHEALTH", "PAGIBIG"])
    @given(a=pay_amounts, b=pay_amounts)
    @SETTINGS
    def test_contribution_total_and_monotonic(self, scheme, a, b):
        low, high = sorted((a, b))
        c_low = self.contributions.compute_contribution(scheme, low)
        c_high = self.contributions.compute_contribution(scheme, high)
        assert Decimal("0") <= c_low <= c_high

    @given(
        pay=st.decimals(
            min_value=Decimal("-1000000"),
            max_value=Decimal("-0.01"),
            places=2,
            allow_nan=False,
            allow_infinity=False,
        )
    )
    @SETTINGS
    def test_negative_pay_contributes_nothing(self, pay):
        for code in self.contributions.scheme_codes:
            assert self.contributions.compute_contribution(code, pay) == 0

    @pytest.mark.parametrize("basis", [PayBasis.WEEKLY, PayBasis.MONTHLY])
    @given(a=pay_amounts, b=pay_amounts)
    @SETTINGS
    def test_tax_monotonic(self, basis, a, b):
        low, high = sorted((a, b))
        assert self.tax.compute_tax(Decimal("0"), basis) == 0
        assert self.tax.compute_tax(low, basis) <= self.tax.compute_tax(high, basis)

    @given(pay=pay_amounts)
    @SETTINGS
    def test_tax_below_pay(self, pay):
        assert self.tax.compute_tax(pay, PayBasis.WEEKLY) <= pay


class TestSummaryProperties:
    service = PayrollService(CONFIG)

    @given(
        entries=st.lists(attendance_entries(), min_size=1, max_size=20),
        rate=st.decimals(
            min_value=Decimal("0"),
            max_value=Decimal("2000"),
            places=2,
            allow_nan=False,
            allow_infinity=False,
        ),
    )
    @SETTINGS
    def test_gross_minus_deductions_is_net(self, entries, rate):
        profile = make_profile(hourly_rate=str(rate))
        for summary in self.service.compute_weekly(profile, entries):
            assert summary.gross_pay == summary.base_pay + summary.total_allowances
            assert summary.net_pay == summary.gross_pay - summary.total_deductions
            assert summary.total_deductions == sum(
                (line.amount for line in summary.deductions), Decimal("0")
            )
