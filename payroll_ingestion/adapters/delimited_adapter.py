"""
Delimited text source adapter (TSV by default, CSV via ``delimiter``).

Uses csv.reader. Configurable: delimiter, encoding, has_header, quoting,
skip_rows. Handles BOM via utf-8-sig when encoding is utf-8. Streams rows.
Blank lines are dropped.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterator

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "none": csv.QUOTE_NONE,
}


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _get_quoting(options: dict[str, Any]) -> int:
    q = options.get("quoting", "minimal")
    if isinstance(q, int):
        return q
    return _QUOTING.get(str(q).lower(), csv.QUOTE_MINIMAL)


class DelimitedSourceAdapter:
    """Read delimited files as one positional field list per row."""

    def read(
        self, source_path: Path, options: dict[str, Any]
    ) -> Iterator[tuple[int, list[str]]]:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", "\t")
        has_header = options.get("has_header", True)
        skip_rows = int(options.get("skip_rows", 0))
        quoting = _get_quoting(options)

        with source_path.open("r", encoding=encoding, newline="") as f:
            reader = csv.reader(f, delimiter=delimiter, quoting=quoting)
            to_skip = skip_rows + (1 if has_header else 0)
            for row in reader:
                line_number = reader.line_num
                if to_skip:
                    to_skip -= 1
                    continue
                if not any(cell.strip() for cell in row):
                    continue
                yield line_number, row
