"""
Payroll kernel: structured logging and the typed exception hierarchy.

Every other package imports from here; this package imports from none
of them.
"""

from payroll_kernel.exceptions import PayrollEngineError
from payroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)

__all__ = [
    "LogContext",
    "PayrollEngineError",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
