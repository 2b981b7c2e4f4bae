"""
payroll_services -- Orchestration over the payroll engines.

Usage:
    from payroll_config import get_active_config
    from payroll_services import PayrollService

    service = PayrollService(get_active_config(date(2024, 3, 4)))
    result = service.run_batch(profiles, entries)
"""

from payroll_services.payroll_service import (
    WITHHOLDING_TAX_CODE,
    BatchFailure,
    BatchResult,
    PayrollService,
)

__all__ = [
    "WITHHOLDING_TAX_CODE",
    "BatchFailure",
    "BatchResult",
    "PayrollService",
]
