"""
payroll_services.payroll_service -- Gross-to-net orchestration over the engines.

Responsibility:
    Wires one ``PayrollConfigurationSet`` into the pure engines and runs
    the per-employee pipeline: aggregate attendance, compute base-pay
    deductions, compute the informational overtime premium, assemble the
    summary.  ``run_batch`` fans the pipeline out over many employees.

Architecture position:
    Services -- orchestration over engines + config.  Holds no mutable
    state after construction; one instance may serve many threads.

Invariants enforced:
    - Deductions are computed on base pay only; allowances never enter
      the contribution or tax basis.
    - Zero base pay yields no deduction lines, so a period without
      attendance pays exactly its allowances.
    - Weekly summaries use the weekly pay basis, range summaries the
      monthly one; the basis adapters live in the engines.

Failure modes:
    - Decimal arithmetic failures (``ArithmeticError``) in the pipeline
      are re-raised as ``PayrollComputationError``.
    - Engine errors propagate from ``compute_weekly`` and
      ``compute_for_range``.
    - ``run_batch`` captures any ``PayrollEngineError`` per employee as a
      ``BatchFailure``; other employees are unaffected.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from uuid import uuid4

from payroll_config.schema import PayrollConfigurationSet, TaxBase
from payroll_engines.assembler import assemble, compute_base_pay
from payroll_engines.attendance import aggregate, aggregate_range, range_period_id
from payroll_engines.contributions import ContributionScheduleEngine
from payroll_engines.overtime import compute_overtime_pay
from payroll_engines.tax import ProgressiveTaxEngine
from payroll_engines.types import (
    AttendanceEntry,
    CompensationProfile,
    DeductionLine,
    PayBasis,
    PayrollSummary,
    PeriodTotals,
)
from payroll_kernel.exceptions import PayrollComputationError, PayrollEngineError
from payroll_kernel.logging_config import LogContext, get_logger

logger = get_logger("services.payroll")

WITHHOLDING_TAX_CODE = "WHT"
WITHHOLDING_TAX_NAME = "Withholding Tax"


@dataclass(frozen=True)
class BatchFailure:
    """One employee whose computation raised."""

    employee_id: str
    error_code: str
    message: str


@dataclass(frozen=True)
class BatchResult:
    """Outcome of ``PayrollService.run_batch``."""

    run_id: str
    summaries: dict[str, tuple[PayrollSummary, ...]] = field(default_factory=dict)
    failures: tuple[BatchFailure, ...] = ()

    @property
    def all_succeeded(self) -> bool:
        return not self.failures

    @property
    def summary_count(self) -> int:
        return sum(len(s) for s in self.summaries.values())


class PayrollService:
    """
    Payroll computation for one configuration set.

    Usage:
        config = get_active_config(date(2024, 3, 4))
        service = PayrollService(config)
        summaries = service.compute_weekly(profile, entries)
    """

    def __init__(self, config: PayrollConfigurationSet):
        self._config = config
        rules = config.rules
        self._contributions = ContributionScheduleEngine(
            config.schemes, rules.weekly_to_monthly_factor
        )
        self._tax = ProgressiveTaxEngine(
            config.tax_tables, rules.weekly_to_monthly_factor
        )

    @property
    def config(self) -> PayrollConfigurationSet:
        return self._config

    # ------------------------------------------------------------------
    # Deductions
    # ------------------------------------------------------------------

    def compute_deductions(
        self, base_pay: Decimal, pay_basis: PayBasis
    ) -> tuple[DeductionLine, ...]:
        """
        Contribution lines in scheme order followed by withholding tax.

        When the tax base excludes contributions, each contribution is
        first expressed on ``pay_basis`` so a weekly base pay is reduced by
        weekly-equivalent amounts, not by monthly table figures.
        """
        if base_pay <= 0:
            return ()

        contributions = self._contributions.compute_all(base_pay, pay_basis)
        tax_base = base_pay
        if self._config.rules.tax_base == TaxBase.BASE_PAY_LESS_CONTRIBUTIONS:
            tax_base = base_pay - sum(
                (
                    self._contributions.on_pay_basis(line.code, line.amount, pay_basis)
                    for line in contributions
                ),
                Decimal("0"),
            )
        tax = self._tax.compute_tax(tax_base, pay_basis)
        return contributions + (
            DeductionLine(
                code=WITHHOLDING_TAX_CODE, name=WITHHOLDING_TAX_NAME, amount=tax
            ),
        )

    # ------------------------------------------------------------------
    # Per-employee pipeline
    # ------------------------------------------------------------------

    def _summarize(
        self,
        profile: CompensationProfile,
        totals: PeriodTotals,
        pay_basis: PayBasis,
    ) -> PayrollSummary:
        with LogContext.bind(
            employee_id=profile.employee_id, period_id=totals.period_id
        ):
            try:
                base_pay = compute_base_pay(totals.total_hours, profile.hourly_rate)
                deductions = self.compute_deductions(base_pay, pay_basis)
                overtime_pay = compute_overtime_pay(
                    totals.total_overtime_hours,
                    profile.hourly_rate,
                    self._config.rules.overtime_multiplier,
                )
                return assemble(
                    profile=profile,
                    totals=totals,
                    deductions=deductions,
                    overtime_pay=overtime_pay,
                )
            except ArithmeticError as exc:
                raise PayrollComputationError(
                    profile.employee_id, totals.period_id, repr(exc)
                ) from exc

    def compute_weekly(
        self,
        profile: CompensationProfile,
        entries: Iterable[AttendanceEntry],
    ) -> tuple[PayrollSummary, ...]:
        """One summary per ISO week the employee has attendance in."""
        periods = aggregate(employee_id=profile.employee_id, entries=entries)
        return tuple(
            self._summarize(profile, totals, PayBasis.WEEKLY) for totals in periods
        )

    def compute_for_range(
        self,
        profile: CompensationProfile,
        entries: Iterable[AttendanceEntry],
        start: date,
        end: date,
    ) -> PayrollSummary:
        """
        Monthly-basis summary over ``[start, end]``.

        A range without attendance still produces a summary paying the
        profile's allowances.
        """
        totals = aggregate_range(
            employee_id=profile.employee_id, entries=entries, start=start, end=end
        )
        if totals is None:
            totals = PeriodTotals.empty(
                profile.employee_id, range_period_id(start, end), start, end
            )
            logger.info(
                "payroll_range_without_attendance",
                extra={
                    "employee_id": profile.employee_id,
                    "period_id": totals.period_id,
                },
            )
        return self._summarize(profile, totals, PayBasis.MONTHLY)

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def run_batch(
        self,
        profiles: Sequence[CompensationProfile],
        entries: Iterable[AttendanceEntry],
        max_workers: int | None = None,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> BatchResult:
        """
        Compute every profile in parallel.

        Weekly summaries by default; when both ``start`` and ``end`` are
        given, one range summary per employee.  Summaries are keyed by
        employee id in profile order.
        """
        run_id = str(uuid4())
        by_employee: dict[str, list[AttendanceEntry]] = defaultdict(list)
        for entry in entries:
            by_employee[entry.employee_id].append(entry)

        known = {profile.employee_id for profile in profiles}
        orphans = sorted(set(by_employee) - known)
        if orphans:
            logger.warning(
                "attendance_without_profile",
                extra={"run_id": run_id, "employee_ids": orphans},
            )

        range_mode = start is not None and end is not None

        def _run(profile: CompensationProfile) -> tuple[PayrollSummary, ...]:
            with LogContext.bind(
                run_id=run_id, config_id=self._config.config_id
            ):
                employee_entries = by_employee.get(profile.employee_id, [])
                if range_mode:
                    return (
                        self.compute_for_range(
                            profile, employee_entries, start, end
                        ),
                    )
                return self.compute_weekly(profile, employee_entries)

        logger.info(
            "payroll_batch_started",
            extra={
                "run_id": run_id,
                "config_id": self._config.config_id,
                "employee_count": len(profiles),
                "mode": "range" if range_mode else "weekly",
            },
        )

        completed: dict[str, tuple[PayrollSummary, ...]] = {}
        failures: list[BatchFailure] = []
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {pool.submit(_run, profile): profile for profile in profiles}
            for future in as_completed(futures):
                profile = futures[future]
                try:
                    completed[profile.employee_id] = future.result()
                except PayrollEngineError as exc:
                    failures.append(
                        BatchFailure(profile.employee_id, exc.code, str(exc))
                    )
                    logger.error(
                        "payroll_employee_failed",
                        extra={
                            "run_id": run_id,
                            "employee_id": profile.employee_id,
                            "error_code": exc.code,
                        },
                        exc_info=True,
                    )

        summaries = {
            profile.employee_id: completed[profile.employee_id]
            for profile in profiles
            if profile.employee_id in completed
        }
        failures.sort(key=lambda f: f.employee_id)
        result = BatchResult(
            run_id=run_id, summaries=summaries, failures=tuple(failures)
        )

        logger.info(
            "payroll_batch_completed",
            extra={
                "run_id": run_id,
                "summary_count": result.summary_count,
                "failure_count": len(result.failures),
            },
        )
        return result
