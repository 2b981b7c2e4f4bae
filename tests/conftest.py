"""
Pytest fixtures for the payroll engine test suite.

Provides:
- The bundled PH-2024-v1 configuration set
- Builders for compensation profiles and attendance entries
- Logging state reset between tests
"""

from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from payroll_config import DEFAULT_CONFIG_DIR, get_active_config
from payroll_engines.types import AttendanceEntry, CompensationProfile
from payroll_kernel.logging_config import LogContext, reset_logging

SHIPPED_SET = DEFAULT_CONFIG_DIR / "PH-2024-v1"

# Monday of ISO week 10, 2024
WEEK_10_MONDAY = date(2024, 3, 4)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture(scope="session")
def default_config():
    """The published configuration set covering March 2024."""
    return get_active_config(WEEK_10_MONDAY)


def make_profile(
    employee_id: str = "10001",
    hourly_rate: str = "100",
    rice: str = "500",
    phone: str = "500",
    clothing: str = "500",
) -> CompensationProfile:
    return CompensationProfile(
        employee_id=employee_id,
        hourly_rate=Decimal(hourly_rate),
        rice_subsidy=Decimal(rice),
        phone_allowance=Decimal(phone),
        clothing_allowance=Decimal(clothing),
        last_name="Garcia",
        first_name="Manuel",
    )


def make_entry(
    work_date: date,
    time_in: str = "08:00",
    time_out: str = "16:30",
    employee_id: str = "10001",
) -> AttendanceEntry:
    return AttendanceEntry(
        employee_id=employee_id,
        work_date=work_date,
        time_in=time.fromisoformat(time_in),
        time_out=time.fromisoformat(time_out),
    )


def make_week(
    monday: date = WEEK_10_MONDAY,
    days: int = 5,
    time_in: str = "08:00",
    time_out: str = "16:30",
    employee_id: str = "10001",
) -> list[AttendanceEntry]:
    """One entry per day starting on ``monday`` (8.5 hours by default)."""
    return [
        make_entry(monday + timedelta(days=i), time_in, time_out, employee_id)
        for i in range(days)
    ]


@pytest.fixture
def profile() -> CompensationProfile:
    """Hourly rate 100, allowances 500 + 500 + 500."""
    return make_profile()


@pytest.fixture
def week_10_entries() -> list[AttendanceEntry]:
    """Mon-Fri of ISO week 10 2024 at 8.5 hours per day."""
    return make_week()
