"""
Source adapter protocol.

Contract:
    SourceAdapter.read() yields (line_number, fields) per source record,
    streaming.  Line numbers are 1-indexed positions in the file so a
    skipped row can be reported back to whoever maintains the sheet.

Architecture: payroll_ingestion/adapters. File I/O only, no engine imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading tabular source files into positional rows."""

    def read(
        self, source_path: Path, options: dict[str, Any]
    ) -> Iterator[tuple[int, list[str]]]:
        """Yield (line_number, fields) per record. Streams; does not load entire file."""
        ...
