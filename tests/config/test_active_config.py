"""
Tests for get_active_config, the single configuration entrypoint.

Covers:
- Selection by jurisdiction, status, effective range and version
- Not-found and validation failures
- PAYROLL_CONFIG_TRACE emission
"""

import logging
import shutil
from datetime import date
from pathlib import Path

import pytest
import yaml

from payroll_config import get_active_config
from payroll_kernel.exceptions import ConfigNotFoundError, ConfigValidationError
from tests.conftest import SHIPPED_SET


def _copy_set(sets_dir: Path, name: str, **root_overrides) -> Path:
    target = sets_dir / name
    shutil.copytree(SHIPPED_SET, target)
    root = yaml.safe_load((target / "root.yaml").read_text())
    root.update(root_overrides)
    (target / "root.yaml").write_text(yaml.safe_dump(root))
    return target


class TestGetActiveConfig:
    def test_bundled_set(self):
        config = get_active_config(date(2024, 3, 4))
        assert config.config_id == "PH-2024-v1"

    def test_date_before_any_set(self):
        with pytest.raises(ConfigNotFoundError) as exc_info:
            get_active_config(date(2020, 1, 1))
        assert exc_info.value.jurisdiction == "PH"

    def test_unknown_jurisdiction(self):
        with pytest.raises(ConfigNotFoundError):
            get_active_config(date(2024, 3, 4), jurisdiction="SG")

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigNotFoundError):
            get_active_config(date(2024, 3, 4), config_dir=tmp_path / "nope")

    def test_highest_version_wins(self, tmp_path):
        _copy_set(tmp_path, "v1")
        _copy_set(tmp_path, "v2", config_id="PH-2024-v2", version=2)

        config = get_active_config(date(2024, 3, 4), config_dir=tmp_path)
        assert config.config_id == "PH-2024-v2"

    def test_draft_ignored(self, tmp_path):
        _copy_set(tmp_path, "v1")
        _copy_set(tmp_path, "v2", config_id="PH-2024-v2", version=2, status="draft")

        config = get_active_config(date(2024, 3, 4), config_dir=tmp_path)
        assert config.config_id == "PH-2024-v1"

    def test_effective_range_respected(self, tmp_path):
        _copy_set(tmp_path, "v1", effective_to="2024-06-30")
        _copy_set(
            tmp_path,
            "v2",
            config_id="PH-2024-H2",
            version=2,
            effective_from="2024-07-01",
        )

        assert get_active_config(date(2024, 3, 4), config_dir=tmp_path).config_id == (
            "PH-2024-v1"
        )
        assert get_active_config(date(2024, 8, 1), config_dir=tmp_path).config_id == (
            "PH-2024-H2"
        )

    def test_invalid_set_rejected(self, tmp_path):
        target = _copy_set(tmp_path, "v1")
        shutil.rmtree(target / "tax_tables")

        with pytest.raises(ConfigValidationError) as exc_info:
            get_active_config(date(2024, 3, 4), config_dir=tmp_path)
        assert "No tax tables configured" in exc_info.value.errors

    def test_config_trace_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="payroll_kernel"):
            config = get_active_config(date(2024, 3, 4))

        traces = [r for r in caplog.records if r.getMessage() == "PAYROLL_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0].config_set_id == config.config_id
        assert traces[0].checksum == config.checksum
