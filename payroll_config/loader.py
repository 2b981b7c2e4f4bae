"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads individual YAML fragment files and parses them into typed
``payroll_config.schema`` / ``payroll_engines.schedules`` dataclass
instances.  This is build/test tooling: services obtain configuration
through ``payroll_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Consumed by
``payroll_config.assembler``.  Depends on the engines layer only for
the schedule value types.

Invariants enforced
-------------------
* Amounts are parsed to ``Decimal`` via ``str()`` so YAML floats never
  leak binary rounding into a bracket bound.
* Every parsed object is a frozen dataclass; schedule structure is
  checked on construction (``InvalidScheduleError``).
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unparseable dates, times or amounts  -> ``ValueError``.
* Structurally invalid bracket table  -> ``InvalidScheduleError``.
"""

from __future__ import annotations

import hashlib
import json
from datetime import date, time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollRules, TaxBase
from payroll_engines.schedules import (
    DEFAULT_GRANULARITY,
    ContributionBracket,
    ContributionMethod,
    ContributionScheme,
    RateSchedule,
    TaxBracket,
    TaxTable,
)
from payroll_engines.types import PayBasis


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_date(value: Any) -> date:
    """Parse a date from YAML (string or date object)."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_time(value: Any) -> time:
    """Parse a time of day from an ``HH:MM`` string."""
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        return time.fromisoformat(value.strip().zfill(5))
    raise ValueError(f"Cannot parse time from {value!r} (quote it in YAML)")


def parse_decimal(value: Any) -> Decimal:
    """Parse an amount, rate or hour figure to ``Decimal``."""
    if isinstance(value, bool):
        raise ValueError(f"Cannot parse amount from {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        raise ValueError(f"Cannot parse amount from {value!r}") from None


def _parse_optional_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return parse_decimal(value)


def parse_rules(data: dict[str, Any]) -> PayrollRules:
    """Parse ``PayrollRules``; absent keys keep their defaults."""
    defaults = PayrollRules()
    return PayrollRules(
        standard_daily_hours=parse_decimal(
            data.get("standard_daily_hours", defaults.standard_daily_hours)
        ),
        overtime_multiplier=parse_decimal(
            data.get("overtime_multiplier", defaults.overtime_multiplier)
        ),
        late_grace_cutoff=parse_time(
            data.get("late_grace_cutoff", defaults.late_grace_cutoff)
        ),
        weekly_to_monthly_factor=parse_decimal(
            data.get("weekly_to_monthly_factor", defaults.weekly_to_monthly_factor)
        ),
        tax_base=TaxBase(data.get("tax_base", defaults.tax_base.value)),
    )


def parse_scheme(data: dict[str, Any]) -> ContributionScheme:
    """
    Parse a ``ContributionScheme`` from a dict.

    ``method: fixed_tier`` requires ``brackets`` (each with ``lower``,
    ``upper`` -- null for unbounded -- and ``amount``); ``method: rate``
    requires ``rate_schedule`` (``rate``, ``floor``, ``cap``,
    ``employee_share``).

    Raises:
        KeyError: if required keys are missing.
        InvalidScheduleError: if the table is structurally invalid.
    """
    method = ContributionMethod(data["method"])

    brackets = tuple(
        ContributionBracket(
            lower=parse_decimal(b["lower"]),
            upper=_parse_optional_decimal(b.get("upper")),
            amount=parse_decimal(b["amount"]),
        )
        for b in data.get("brackets", ())
    )

    rate_schedule = None
    rate_data = data.get("rate_schedule")
    if rate_data is not None:
        rate_schedule = RateSchedule(
            rate=parse_decimal(rate_data["rate"]),
            floor=parse_decimal(rate_data.get("floor", "0")),
            cap=parse_decimal(rate_data["cap"]),
            employee_share=parse_decimal(rate_data.get("employee_share", "1")),
        )

    return ContributionScheme(
        code=data["code"],
        name=data.get("name", data["code"]),
        method=method,
        basis=PayBasis(data.get("basis", PayBasis.MONTHLY.value)),
        brackets=brackets,
        rate_schedule=rate_schedule,
        granularity=parse_decimal(data.get("granularity", DEFAULT_GRANULARITY)),
    )


def parse_tax_table(data: dict[str, Any]) -> TaxTable:
    """
    Parse a ``TaxTable`` from a dict.

    Raises:
        KeyError: if required keys are missing.
        InvalidScheduleError: if the table is structurally invalid.
    """
    brackets = tuple(
        TaxBracket(
            lower=parse_decimal(b["lower"]),
            upper=_parse_optional_decimal(b.get("upper")),
            base_tax=parse_decimal(b.get("base_tax", "0")),
            marginal_rate=parse_decimal(b.get("marginal_rate", "0")),
        )
        for b in data["brackets"]
    )
    return TaxTable(
        code=data["code"],
        name=data.get("name", data["code"]),
        basis=PayBasis(data["basis"]),
        brackets=brackets,
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
