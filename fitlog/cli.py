# -*- coding: utf-8 -*-
"""
CLI tool for the local workout log.

Usage:
    python -m fitlog.cli list
    python -m fitlog.cli weekly [--date YYYY-MM-DD]
    python -m fitlog.cli monthly [--date YYYY-MM-DD]
    python -m fitlog.cli migrate
    python -m fitlog.cli sync show|set CODE|clear|generate
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime

from .config import settings


def _reference(value: str | None) -> datetime:
    if not value:
        return datetime.now()
    return datetime.strptime(value, "%Y-%m-%d")


def _load_workouts() -> list:
    from .workouts.deps import services

    services.local.init()
    return asyncio.run(services.repository().get_all_workouts())


def cmd_list(args: argparse.Namespace) -> int:
    """Print every workout, newest first."""
    workouts = _load_workouts()
    if not workouts:
        print("No workouts recorded.")
        return 0
    for w in workouts:
        names = ", ".join(e.name for e in w.exercises[:3])
        print(f"{w.date:%Y-%m-%d %H:%M}  {w.duration:>3} min  {w.total_sets:>2} sets  {names}")
    return 0


def cmd_weekly(args: argparse.Namespace) -> int:
    """Print the weekly report as JSON."""
    from .reports.generator import generate_weekly_report

    workouts = _load_workouts()
    workouts.sort(key=lambda w: w.date.timestamp())
    report = generate_weekly_report(workouts, _reference(args.date))
    print(report.model_dump_json(by_alias=True, indent=2))
    return 0


def cmd_monthly(args: argparse.Namespace) -> int:
    """Print the monthly report as JSON."""
    from .reports.generator import generate_monthly_report

    workouts = _load_workouts()
    workouts.sort(key=lambda w: w.date.timestamp())
    report = generate_monthly_report(workouts, _reference(args.date))
    print(report.model_dump_json(by_alias=True, indent=2))
    return 0


def cmd_migrate(args: argparse.Namespace) -> int:
    """Replay the legacy JSON records into the SQLite store."""
    from .workouts.deps import services
    from .workouts.storage import WriteError

    services.local.init()
    try:
        count = asyncio.run(services.repository().migrate_legacy(services.legacy))
    except WriteError as exc:
        print(f"Error: {exc}")
        return 1
    print(f"Migrated {count} workouts from {settings.legacy_path}")
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    """Show or change the sync code."""
    from .workouts.deps import services
    from .workouts.sync_code import generate_sync_code

    store = services.sync_codes
    if args.action == "show":
        code = store.get()
        print(code or "Not bound (local-only mode)")
    elif args.action == "set":
        if not args.code:
            print("Error: a code is required for 'set'")
            return 1
        print(f"Bound sync code: {store.set(args.code)}")
    elif args.action == "clear":
        store.set(None)
        print("Sync code cleared")
    else:
        print(f"Bound sync code: {store.set(generate_sync_code())}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Workout log management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("list", help="List workouts")

    weekly_parser = subparsers.add_parser("weekly", help="Weekly report")
    weekly_parser.add_argument("--date", help="Any day of the week (YYYY-MM-DD)")

    monthly_parser = subparsers.add_parser("monthly", help="Monthly report")
    monthly_parser.add_argument("--date", help="Any day of the month (YYYY-MM-DD)")

    subparsers.add_parser("migrate", help="Import legacy JSON records")

    sync_parser = subparsers.add_parser("sync", help="Manage the sync code")
    sync_parser.add_argument("action", choices=["show", "set", "clear", "generate"])
    sync_parser.add_argument("code", nargs="?", help="Code for 'set'")

    args = parser.parse_args()

    logging.basicConfig(level="DEBUG" if args.verbose else settings.log_level)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "list": cmd_list,
        "weekly": cmd_weekly,
        "monthly": cmd_monthly,
        "migrate": cmd_migrate,
        "sync": cmd_sync,
    }

    try:
        return commands[args.command](args)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
