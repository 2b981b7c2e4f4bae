"""
Typed Exception Hierarchy for the Payroll Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll figures are audited. Callers must be able to tell a bad attendance
row from a broken bracket table without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        amount = engine.compute_contribution("SSS", pay_base)
    except MissingBracketCoverageError as e:
        log.error("sss table gap", extra={"pay_base": e.pay_base})
        api_response(code=e.code, scheme=e.schedule_code)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollEngineError (base)
    |
    +-- AttendanceError
    |   +-- InvalidEntryError
    |   +-- InvalidPeriodError
    |
    +-- ProfileError
    |   +-- InvalidProfileError
    |
    +-- ScheduleError
    |   +-- MissingBracketCoverageError
    |   +-- InvalidScheduleError
    |   +-- UnknownSchemeError
    |   +-- MissingTaxTableError
    |   +-- ScheduleBasisError
    |
    +-- AssemblyError
    |   +-- EmployeeMismatchError
    |   +-- InvalidDeductionError
    |   +-- PayrollComputationError
    |
    +-- ConfigurationError
        +-- ConfigValidationError
        +-- ConfigNotFoundError
        +-- ConfigAssemblyError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Attendance      | INVALID_ENTRY               | time-out earlier than time-in
                | INVALID_PERIOD              | range start after range end
----------------|-----------------------------|-----------------------------------------
Profile         | INVALID_PROFILE             | negative or non-finite rate or allowance
----------------|-----------------------------|-----------------------------------------
Schedule        | MISSING_BRACKET_COVERAGE    | no bracket contains the pay base
                | INVALID_SCHEDULE            | gap, overlap or open lower end in table
                | UNKNOWN_SCHEME              | scheme code not configured
                | MISSING_TAX_TABLE           | no tax table usable for the pay basis
                | SCHEDULE_BASIS_UNSUPPORTED  | basis conversion not defined
----------------|-----------------------------|-----------------------------------------
Assembly        | EMPLOYEE_MISMATCH           | profile and totals for different people
                | INVALID_DEDUCTION           | negative deduction amount
                | COMPUTATION_FAILED          | decimal arithmetic failed for a period
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIG_VALIDATION_FAILED    | configuration set failed validation
                | CONFIG_NOT_FOUND            | no set for jurisdiction/date
                | CONFIG_ASSEMBLY_FAILED      | root.yaml missing or incomplete

Negative or missing pay bases passed to bracket or tax lookups are NOT
errors: they map to a zero amount by policy.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal


class PayrollEngineError(Exception):
    """
    Base exception for all payroll engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_ENGINE_ERROR"


# Attendance-related exceptions


class AttendanceError(PayrollEngineError):
    """Base exception for attendance errors."""

    code: str = "ATTENDANCE_ERROR"


class InvalidEntryError(AttendanceError):
    """Attendance entry whose time-out precedes its time-in."""

    code: str = "INVALID_ENTRY"

    def __init__(
        self,
        employee_id: str,
        work_date: date,
        time_in: time,
        time_out: time,
    ):
        self.employee_id = employee_id
        self.work_date = work_date
        self.time_in = time_in
        self.time_out = time_out
        super().__init__(
            f"Invalid attendance entry for {employee_id} on {work_date}: "
            f"time-out {time_out} is before time-in {time_in}"
        )


class InvalidPeriodError(AttendanceError):
    """Requested aggregation range is inverted."""

    code: str = "INVALID_PERIOD"

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(f"Invalid period: start {start} is after end {end}")


# Profile-related exceptions


class ProfileError(PayrollEngineError):
    """Base exception for compensation profile errors."""

    code: str = "PROFILE_ERROR"


class InvalidProfileError(ProfileError):
    """Compensation profile carries a negative or non-finite monetary field."""

    code: str = "INVALID_PROFILE"

    def __init__(self, employee_id: str, field_name: str, value: Decimal):
        self.employee_id = employee_id
        self.field_name = field_name
        self.value = value
        super().__init__(
            f"Invalid profile {employee_id}: {field_name} must be a finite, "
            f"non-negative amount (got {value})"
        )


# Schedule-related exceptions


class ScheduleError(PayrollEngineError):
    """Base exception for contribution/tax schedule errors."""

    code: str = "SCHEDULE_ERROR"


class MissingBracketCoverageError(ScheduleError):
    """No bracket in the schedule contains the pay base."""

    code: str = "MISSING_BRACKET_COVERAGE"

    def __init__(self, schedule_code: str, pay_base: Decimal):
        self.schedule_code = schedule_code
        self.pay_base = pay_base
        super().__init__(
            f"Schedule {schedule_code} has no bracket covering {pay_base}"
        )


class InvalidScheduleError(ScheduleError):
    """Bracket table is structurally invalid."""

    code: str = "INVALID_SCHEDULE"

    def __init__(self, schedule_code: str, reason: str):
        self.schedule_code = schedule_code
        self.reason = reason
        super().__init__(f"Invalid schedule {schedule_code}: {reason}")


class UnknownSchemeError(ScheduleError):
    """Contribution scheme code is not configured."""

    code: str = "UNKNOWN_SCHEME"

    def __init__(self, scheme_code: str, available: tuple[str, ...] = ()):
        self.scheme_code = scheme_code
        self.available = available
        super().__init__(
            f"Unknown contribution scheme: {scheme_code} "
            f"(available: {', '.join(available) or 'none'})"
        )


class MissingTaxTableError(ScheduleError):
    """No tax table can serve the requested pay basis."""

    code: str = "MISSING_TAX_TABLE"

    def __init__(self, pay_basis: str):
        self.pay_basis = pay_basis
        super().__init__(f"No tax table configured for {pay_basis} pay")


class ScheduleBasisError(ScheduleError):
    """Pay figure cannot be converted to the schedule's basis."""

    code: str = "SCHEDULE_BASIS_UNSUPPORTED"

    def __init__(self, from_basis: str, to_basis: str):
        self.from_basis = from_basis
        self.to_basis = to_basis
        super().__init__(
            f"Cannot convert {from_basis} pay to a {to_basis} schedule basis"
        )


# Assembly-related exceptions


class AssemblyError(PayrollEngineError):
    """Base exception for payroll assembly errors."""

    code: str = "ASSEMBLY_ERROR"


class EmployeeMismatchError(AssemblyError):
    """Profile and period totals belong to different employees."""

    code: str = "EMPLOYEE_MISMATCH"

    def __init__(self, profile_employee_id: str, totals_employee_id: str):
        self.profile_employee_id = profile_employee_id
        self.totals_employee_id = totals_employee_id
        super().__init__(
            f"Profile {profile_employee_id} cannot be assembled with totals "
            f"for {totals_employee_id}"
        )


class InvalidDeductionError(AssemblyError):
    """Deduction line carries a negative amount."""

    code: str = "INVALID_DEDUCTION"

    def __init__(self, deduction_code: str, amount: Decimal):
        self.deduction_code = deduction_code
        self.amount = amount
        super().__init__(
            f"Deduction {deduction_code} cannot be negative (got {amount})"
        )


class PayrollComputationError(AssemblyError):
    """Decimal arithmetic failed while computing one employee's period."""

    code: str = "COMPUTATION_FAILED"

    def __init__(self, employee_id: str, period_id: str, reason: str):
        self.employee_id = employee_id
        self.period_id = period_id
        self.reason = reason
        super().__init__(
            f"Payroll for {employee_id} in {period_id} could not be computed: "
            f"{reason}"
        )


# Configuration-related exceptions


class ConfigurationError(PayrollEngineError):
    """Base exception for configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class ConfigValidationError(ConfigurationError):
    """Configuration set failed validation."""

    code: str = "CONFIG_VALIDATION_FAILED"

    def __init__(self, config_id: str, errors: list[str]):
        self.config_id = config_id
        self.errors = errors
        super().__init__(
            f"Configuration {config_id} failed validation:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


class ConfigNotFoundError(ConfigurationError):
    """No published configuration set matches the request."""

    code: str = "CONFIG_NOT_FOUND"

    def __init__(self, jurisdiction: str, as_of_date: date):
        self.jurisdiction = jurisdiction
        self.as_of_date = as_of_date
        super().__init__(
            f"No published payroll configuration for {jurisdiction} "
            f"effective on {as_of_date}"
        )


class ConfigAssemblyError(ConfigurationError):
    """Configuration fragments could not be assembled."""

    code: str = "CONFIG_ASSEMBLY_FAILED"

    def __init__(self, fragment_dir: str, reason: str):
        self.fragment_dir = fragment_dir
        self.reason = reason
        super().__init__(f"Cannot assemble configuration in {fragment_dir}: {reason}")
