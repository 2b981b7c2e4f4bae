"""
payroll_ingestion.types -- Pure frozen dataclasses for loader results.

ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SkippedRow:
    """A source row the loader could not turn into a record."""

    line_number: int
    reason: str
    raw: tuple[str, ...] = ()


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """Records parsed from one source file plus the rows that were skipped."""

    records: tuple[T, ...]
    skipped: tuple[SkippedRow, ...] = ()

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
