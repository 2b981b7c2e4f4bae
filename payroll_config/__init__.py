"""
payroll_config -- single public entrypoint for payroll configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Contribution schedules, tax tables and
    engine rules live in versioned YAML fragment sets under
    ``payroll_config/sets/``; engines receive them by injection and
    never read files themselves.

Architecture position:
    Configuration -- sits above ``payroll_engines`` (whose schedule types
    it produces) and below ``payroll_services``.  The engines MUST NEVER
    import from ``payroll_config``.

Invariants enforced:
    - Single entrypoint: all runtime config flows through
      ``get_active_config()``.
    - Validation: a set with validation errors is never returned.
    - Deterministic assembly: the same YAML always yields the same
      checksum.

Failure modes:
    - ``ConfigNotFoundError`` -- no PUBLISHED set for the jurisdiction
      covering the date.
    - ``ConfigValidationError`` -- the matching set failed validation.

Audit relevance:
    Every successful call emits a ``PAYROLL_CONFIG_TRACE`` log entry with
    the config_id, version and checksum, tying each payroll run to the
    exact schedules that produced its figures.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from payroll_config.assembler import assemble_from_directory
from payroll_config.schema import (
    ConfigStatus,
    PayrollConfigurationSet,
    PayrollRules,
    TaxBase,
)
from payroll_config.validator import ConfigValidationResult, validate_configuration
from payroll_kernel.exceptions import ConfigNotFoundError, ConfigValidationError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config")

DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"
DEFAULT_JURISDICTION = "PH"

__all__ = [
    "DEFAULT_CONFIG_DIR",
    "ConfigStatus",
    "ConfigValidationResult",
    "PayrollConfigurationSet",
    "PayrollRules",
    "TaxBase",
    "assemble_from_directory",
    "get_active_config",
    "validate_configuration",
]


def get_active_config(
    as_of_date: date,
    config_dir: Path | None = None,
    jurisdiction: str = DEFAULT_JURISDICTION,
) -> PayrollConfigurationSet:
    """The ONLY public configuration entrypoint.

    Scans every set directory under ``config_dir``, keeps the PUBLISHED
    sets for ``jurisdiction`` whose effective range covers
    ``as_of_date``, and returns the one with the highest version.

    Args:
        as_of_date: Date the payroll period falls in.
        config_dir: Override path to the sets directory.
            Defaults to payroll_config/sets/.
        jurisdiction: Jurisdiction code declared in root.yaml.

    Raises:
        ConfigNotFoundError: if no set matches.
        ConfigValidationError: if the matching set fails validation.
    """
    sets_dir = config_dir or DEFAULT_CONFIG_DIR
    config = _find_matching_config(sets_dir, jurisdiction, as_of_date)

    validation = validate_configuration(config)
    if not validation.is_valid:
        raise ConfigValidationError(config.config_id, validation.errors)
    for warning in validation.warnings:
        logger.warning(
            "config_validation_warning",
            extra={"config_id": config.config_id, "warning": warning},
        )

    logger.info(
        "PAYROLL_CONFIG_TRACE",
        extra={
            "trace_type": "PAYROLL_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "jurisdiction": config.jurisdiction,
            "as_of_date": as_of_date.isoformat(),
            "scheme_count": len(config.schemes),
            "tax_table_count": len(config.tax_tables),
        },
    )
    return config


def _find_matching_config(
    sets_dir: Path, jurisdiction: str, as_of_date: date
) -> PayrollConfigurationSet:
    if not sets_dir.is_dir():
        raise ConfigNotFoundError(jurisdiction, as_of_date)

    candidates: list[PayrollConfigurationSet] = []
    for subdir in sorted(sets_dir.iterdir()):
        if not (subdir / "root.yaml").exists():
            continue
        config = assemble_from_directory(subdir)
        if (
            config.jurisdiction == jurisdiction
            and config.status == ConfigStatus.PUBLISHED
            and config.covers(as_of_date)
        ):
            candidates.append(config)

    if not candidates:
        raise ConfigNotFoundError(jurisdiction, as_of_date)
    return max(candidates, key=lambda c: c.version)
