#!/usr/bin/env python3
"""
Compute payroll summaries from an employee sheet and an attendance sheet.

Loads the active configuration set for --as-of (or the range start),
loads profiles and attendance, and prints one gross-to-net summary per
employee and period.  Weekly periods are used unless --start and --end
are both given.

Usage:
    python3 scripts/run_payroll.py --employees <path> --attendance <path> [options]

Examples:
    # Weekly summaries for everyone
    python3 scripts/run_payroll.py --employees employees.tsv --attendance attendance.tsv

    # One employee, March 2024, as JSON
    python3 scripts/run_payroll.py --employees employees.tsv --attendance attendance.tsv \\
        --start 2024-03-01 --end 2024-03-31 --employee 10001 --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute gross-to-net payroll from employee and attendance sheets.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--employees",
        required=True,
        type=Path,
        help="Employee details sheet (tab-separated, header row).",
    )
    parser.add_argument(
        "--attendance",
        required=True,
        type=Path,
        help="Attendance sheet (tab-separated, header row).",
    )
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory of configuration sets (default: bundled sets).",
    )
    parser.add_argument(
        "--as-of",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Date used to select the configuration set (YYYY-MM-DD). "
        "Default: --start, else today.",
    )
    parser.add_argument(
        "--start",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Range start (YYYY-MM-DD); requires --end.",
    )
    parser.add_argument(
        "--end",
        type=lambda s: date.fromisoformat(s),
        default=None,
        help="Range end, inclusive (YYYY-MM-DD); requires --start.",
    )
    parser.add_argument(
        "--employee",
        action="append",
        default=None,
        help="Only compute this employee number (repeatable).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print summaries as JSON instead of text.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for the batch (default: executor default).",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Structured log level written to stderr (default: WARNING).",
    )
    args = parser.parse_args(argv)
    if (args.start is None) != (args.end is None):
        parser.error("--start and --end must be given together")
    return args


def _format_summary(summary, display_name: str) -> str:
    lines = [
        f"{summary.employee_id}  {display_name}  {summary.period_id}"
        f"  ({summary.period_start} .. {summary.period_end})",
        f"  Hours worked:     {summary.total_hours:.2f}"
        f"  (overtime {summary.total_overtime_hours:.2f}, late days {summary.late_count})",
        f"  Base pay:         {summary.base_pay:>12,.2f}",
    ]
    for name, amount in summary.allowances:
        label = name.replace("_", " ").capitalize() + ":"
        lines.append(f"  {label:<18}{amount:>12,.2f}")
    lines.append(f"  Gross pay:        {summary.gross_pay:>12,.2f}")
    for line in summary.deductions:
        label = line.name + ":"
        lines.append(f"  {label:<18}{line.amount:>12,.2f}")
    lines.append(f"  Total deductions: {summary.total_deductions:>12,.2f}")
    lines.append(f"  Net pay:          {summary.net_pay:>12,.2f}")
    if summary.overtime_pay:
        lines.append(f"  (Overtime premium, not paid: {summary.overtime_pay:,.2f})")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from payroll_config import get_active_config
    from payroll_ingestion import load_attendance, load_profiles
    from payroll_kernel.exceptions import PayrollEngineError
    from payroll_kernel.logging_config import configure_logging
    from payroll_services import PayrollService

    configure_logging(level=getattr(logging, args.log_level), stream=sys.stderr)

    for path in (args.employees, args.attendance):
        if not path.is_file():
            print(f"ERROR: File not found: {path}", file=sys.stderr)
            return 1

    as_of = args.as_of or args.start or date.today()
    try:
        config = get_active_config(as_of, config_dir=args.config_dir)
    except PayrollEngineError as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1

    rules = config.rules
    profiles = load_profiles(args.employees)
    attendance = load_attendance(
        args.attendance,
        standard_hours=rules.standard_daily_hours,
        grace_cutoff=rules.late_grace_cutoff,
    )
    for label, loaded in (("employees", profiles), ("attendance", attendance)):
        for row in loaded.skipped:
            print(
                f"WARNING: {label} line {row.line_number} skipped: {row.reason}",
                file=sys.stderr,
            )

    selected = list(profiles.records)
    if args.employee:
        wanted = set(args.employee)
        selected = [p for p in selected if p.employee_id in wanted]
        missing = sorted(wanted - {p.employee_id for p in selected})
        for employee_id in missing:
            print(f"ERROR: Employee not found: {employee_id}", file=sys.stderr)
        if missing:
            return 1

    service = PayrollService(config)
    result = service.run_batch(
        selected,
        attendance.records,
        max_workers=args.workers,
        start=args.start,
        end=args.end,
    )

    names = {p.employee_id: p.display_name for p in selected}
    if args.json:
        payload = {
            "run_id": result.run_id,
            "config_id": config.config_id,
            "summaries": [
                s.to_dict()
                for summaries in result.summaries.values()
                for s in summaries
            ],
            "failures": [
                {"employee_id": f.employee_id, "code": f.error_code, "message": f.message}
                for f in result.failures
            ],
        }
        print(json.dumps(payload, indent=2))
    else:
        print(f"Configuration: {config.config_id} (version {config.version})")
        for employee_id, summaries in result.summaries.items():
            if not summaries:
                print(f"\n{employee_id}  {names[employee_id]}: no attendance")
            for summary in summaries:
                print()
                print(_format_summary(summary, names[employee_id]))
        for failure in result.failures:
            print(
                f"ERROR: {failure.employee_id}: [{failure.error_code}] {failure.message}",
                file=sys.stderr,
            )

    return 0 if result.all_succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
