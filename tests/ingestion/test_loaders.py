"""
Tests for the attendance and employee sheet loaders.

Covers:
- Happy-path parsing of tab-separated sheets
- Single-digit hours, BOM and thousands separators
- Skipped-row reporting for malformed rows and non-finite amounts
- Rules injected from configuration
"""

from datetime import date, time
from decimal import Decimal

import pytest

from payroll_ingestion import load_attendance, load_profiles, parse_attendance_row
from payroll_ingestion.loaders import parse_amount, parse_clock_time
from payroll_kernel.exceptions import InvalidEntryError

ATTENDANCE_HEADER = "Employee #\tLast Name\tFirst Name\tDate\tLog In\tLog Out"

PROFILE_HEADER = "\t".join(
    [
        "Employee #", "Last Name", "First Name", "Birthday", "Address",
        "Phone Number", "SSS #", "Philhealth #", "TIN #", "Pag-ibig #",
        "Status", "Position", "Immediate Supervisor", "Basic Salary",
        "Rice Subsidy", "Phone Allowance", "Clothing Allowance",
        "Gross Semi-monthly Rate", "Hourly Rate",
    ]
)


def _profile_row(employee_id: str, basic: str = "90,000", hourly: str = "535.71") -> str:
    return "\t".join(
        [
            employee_id, "Garcia", "Manuel III", "10/11/1983", "Valero Carpark",
            "966-860-270", "44-4506057-3", "820126853951", "442-605-657-000",
            "691295330870", "Regular", "Chief Executive Officer", "N/A",
            basic, "1,500", "2,000", "1,000", "45,000", hourly,
        ]
    )


def _write(tmp_path, name: str, lines: list[str], encoding: str = "utf-8"):
    path = tmp_path / name
    path.write_text("\n".join(lines) + "\n", encoding=encoding)
    return path


class TestLoadAttendance:
    def test_parses_rows(self, tmp_path):
        path = _write(
            tmp_path,
            "attendance.tsv",
            [
                ATTENDANCE_HEADER,
                "10001\tGarcia\tManuel III\t03/04/2024\t8:00\t17:30",
                "10001\tGarcia\tManuel III\t03/05/2024\t08:20\t17:00",
            ],
        )
        result = load_attendance(path)

        assert result.record_count == 2
        assert result.skipped_count == 0
        first, second = result.records
        assert first.employee_id == "10001"
        assert first.work_date == date(2024, 3, 4)
        assert first.time_in == time(8, 0)
        assert first.hours_worked == Decimal("9.5")
        assert not first.is_late
        assert second.is_late

    def test_skips_malformed_rows(self, tmp_path):
        path = _write(
            tmp_path,
            "attendance.tsv",
            [
                ATTENDANCE_HEADER,
                "10001\tGarcia\tManuel III\t03/04/2024\t8:00\t17:00",
                "10001\tGarcia\tManuel III\t03/05/2024",
                "10001\tGarcia\tManuel III\t2024-03-06\t8:00\t17:00",
                "10001\tGarcia\tManuel III\t03/07/2024\tlate\t17:00",
                "10001\tGarcia\tManuel III\t03/08/2024\t17:00\t8:00",
            ],
        )
        result = load_attendance(path)

        assert result.record_count == 1
        assert [row.line_number for row in result.skipped] == [3, 4, 5, 6]
        assert "expected 6 fields" in result.skipped[0].reason
        assert "time-out" in result.skipped[3].reason

    def test_blank_lines_ignored(self, tmp_path):
        path = _write(
            tmp_path,
            "attendance.tsv",
            [ATTENDANCE_HEADER, "", "10001\tGarcia\tManuel\t03/04/2024\t8:00\t17:00", ""],
        )
        result = load_attendance(path)
        assert result.record_count == 1
        assert result.skipped_count == 0

    def test_byte_order_mark_stripped(self, tmp_path):
        path = tmp_path / "attendance.tsv"
        path.write_bytes(
            "\ufeff10001\tGarcia\tManuel\t03/04/2024\t8:00\t17:00\n".encode("utf-8")
        )
        result = load_attendance(path, {"has_header": False})
        assert result.records[0].employee_id == "10001"

    def test_csv_options(self, tmp_path):
        path = _write(
            tmp_path,
            "attendance.csv",
            ["id,last,first,date,in,out", "10001,Garcia,Manuel,2024-03-04,8:00,17:00"],
        )
        result = load_attendance(path, {"delimiter": ",", "date_format": "%Y-%m-%d"})
        assert result.records[0].work_date == date(2024, 3, 4)

    def test_rules_injected(self, tmp_path):
        path = _write(
            tmp_path,
            "attendance.tsv",
            [ATTENDANCE_HEADER, "10001\tGarcia\tManuel\t03/04/2024\t8:05\t15:05"],
        )
        result = load_attendance(
            path,
            standard_hours=Decimal("6"),
            grace_cutoff=time(8, 0),
        )
        entry = result.records[0]
        assert entry.overtime_hours == Decimal("1")
        assert entry.is_late

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_attendance(tmp_path / "missing.tsv")


class TestLoadProfiles:
    def test_parses_money_columns(self, tmp_path):
        path = _write(tmp_path, "employees.tsv", [PROFILE_HEADER, _profile_row("10001")])
        result = load_profiles(path)

        assert result.record_count == 1
        profile = result.records[0]
        assert profile.employee_id == "10001"
        assert profile.last_name == "Garcia"
        assert profile.first_name == "Manuel III"
        assert profile.basic_salary == Decimal("90000")
        assert profile.rice_subsidy == Decimal("1500")
        assert profile.phone_allowance == Decimal("2000")
        assert profile.clothing_allowance == Decimal("1000")
        assert profile.semi_monthly_rate == Decimal("45000")
        assert profile.hourly_rate == Decimal("535.71")

    def test_quoted_amounts(self, tmp_path):
        row = _profile_row("10002").replace("90,000", '"90,000"')
        path = _write(tmp_path, "employees.tsv", [PROFILE_HEADER, row])
        assert load_profiles(path).records[0].basic_salary == Decimal("90000")

    def test_skips_short_and_invalid_rows(self, tmp_path):
        path = _write(
            tmp_path,
            "employees.tsv",
            [
                PROFILE_HEADER,
                _profile_row("10001"),
                "10002\tLim\tAntonio",
                _profile_row("10003", hourly="n/a"),
                _profile_row("10004", hourly="-5"),
            ],
        )
        result = load_profiles(path)

        assert [p.employee_id for p in result.records] == ["10001"]
        assert [row.line_number for row in result.skipped] == [3, 4, 5]
        assert "non-negative" in result.skipped[2].reason

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", "sNaN"])
    def test_non_finite_amounts_skipped(self, tmp_path, amount):
        path = _write(
            tmp_path,
            "employees.tsv",
            [
                PROFILE_HEADER,
                _profile_row("10001", hourly=amount),
                _profile_row("10002", basic=amount),
                _profile_row("10003"),
            ],
        )
        result = load_profiles(path)

        assert [p.employee_id for p in result.records] == ["10003"]
        assert [row.line_number for row in result.skipped] == [2, 3]
        assert "invalid amount" in result.skipped[0].reason


class TestRowParsers:
    def test_clock_time_variants(self):
        assert parse_clock_time("8:05") == time(8, 5)
        assert parse_clock_time("08:05") == time(8, 5)
        assert parse_clock_time(" 17:30 ") == time(17, 30)

    def test_amount_rejects_non_finite(self):
        assert parse_amount("1,500.50") == Decimal("1500.50")
        with pytest.raises(ValueError):
            parse_amount("NaN")
        with pytest.raises(ValueError):
            parse_amount("Infinity")

    def test_inverted_times_raise(self):
        with pytest.raises(InvalidEntryError):
            parse_attendance_row(["1", "A", "B", "03/04/2024", "17:00", "08:00"])
