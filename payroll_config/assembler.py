"""
payroll_config.assembler -- composes YAML fragments into one configuration set.

Responsibility:
    Payroll administrators edit small YAML fragments -- one file per
    contribution scheme, one per tax table.  This module composes them
    into a single ``PayrollConfigurationSet``.

Fragment structure::

    sets/PH-2024-v1/
    +-- root.yaml              # Identity, jurisdiction, effective range, rules
    +-- schemes/               # One YAML per contribution scheme
    |   +-- 01_sss.yaml
    |   +-- 02_philhealth.yaml
    |   +-- 03_pagibig.yaml
    +-- tax_tables/            # One YAML per pay basis
        +-- monthly.yaml
        +-- weekly.yaml

    Scheme files are applied in file-name order unless ``root.yaml``
    lists ``scheme_order``.

Invariants enforced:
    - ``root.yaml`` must exist in every fragment directory.
    - A deterministic SHA-256 checksum is computed over all assembled
      raw data.
    - The result is a frozen dataclass.

Failure modes:
    - ``ConfigAssemblyError`` -- root.yaml missing or lacking mandatory fields.
    - ``yaml.YAMLError`` (propagated from loader) -- invalid YAML syntax.
    - ``InvalidScheduleError`` (propagated) -- structurally invalid table.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from payroll_config.loader import (
    compute_checksum,
    load_yaml_file,
    parse_date,
    parse_rules,
    parse_scheme,
    parse_tax_table,
)
from payroll_config.schema import ConfigStatus, PayrollConfigurationSet
from payroll_kernel.exceptions import ConfigAssemblyError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.assembler")

_REQUIRED_ROOT_KEYS = ("config_id", "jurisdiction", "currency", "effective_from")


def _load_fragment_dir(directory: Path) -> list[dict[str, Any]]:
    if not directory.is_dir():
        return []
    return [load_yaml_file(path) for path in sorted(directory.glob("*.yaml"))]


def _order_schemes(
    raw_schemes: list[dict[str, Any]],
    scheme_order: list[str] | None,
    fragment_dir: Path,
) -> list[dict[str, Any]]:
    if not scheme_order:
        return raw_schemes
    by_code = {s.get("code"): s for s in raw_schemes}
    missing = [code for code in scheme_order if code not in by_code]
    if missing:
        raise ConfigAssemblyError(
            str(fragment_dir), f"scheme_order names unknown schemes {missing}"
        )
    ordered = [by_code[code] for code in scheme_order]
    ordered.extend(s for s in raw_schemes if s.get("code") not in scheme_order)
    return ordered


def assemble_from_directory(fragment_dir: Path) -> PayrollConfigurationSet:
    """
    Assemble a configuration set from a fragment directory.

    Raises:
        ConfigAssemblyError: if root.yaml is missing or incomplete.
    """
    root_path = fragment_dir / "root.yaml"
    if not root_path.exists():
        raise ConfigAssemblyError(str(fragment_dir), "root.yaml not found")

    root = load_yaml_file(root_path)
    missing = [key for key in _REQUIRED_ROOT_KEYS if key not in root]
    if missing:
        raise ConfigAssemblyError(
            str(fragment_dir), f"root.yaml missing required keys {missing}"
        )

    raw_schemes = _order_schemes(
        _load_fragment_dir(fragment_dir / "schemes"),
        root.get("scheme_order"),
        fragment_dir,
    )
    raw_tax_tables = _load_fragment_dir(fragment_dir / "tax_tables")

    checksum = compute_checksum(
        {"root": root, "schemes": raw_schemes, "tax_tables": raw_tax_tables}
    )

    config = PayrollConfigurationSet(
        config_id=root["config_id"],
        version=int(root.get("version", 1)),
        jurisdiction=root["jurisdiction"],
        currency=root["currency"],
        effective_from=parse_date(root["effective_from"]),
        effective_to=(
            parse_date(root["effective_to"]) if root.get("effective_to") else None
        ),
        status=ConfigStatus(root.get("status", ConfigStatus.DRAFT.value)),
        description=root.get("description", ""),
        rules=parse_rules(root.get("rules", {})),
        schemes=tuple(parse_scheme(s) for s in raw_schemes),
        tax_tables=tuple(parse_tax_table(t) for t in raw_tax_tables),
        checksum=checksum,
    )

    logger.info(
        "config_set_assembled",
        extra={
            "config_id": config.config_id,
            "version": config.version,
            "scheme_count": len(config.schemes),
            "tax_table_count": len(config.tax_tables),
            "checksum": checksum,
        },
    )
    return config
