"""Source adapters for payroll ingestion (file I/O only)."""

from payroll_ingestion.adapters.base import SourceAdapter
from payroll_ingestion.adapters.delimited_adapter import DelimitedSourceAdapter

__all__ = [
    "SourceAdapter",
    "DelimitedSourceAdapter",
]
