#!/usr/bin/env python
# backend/rehome_ops/commands/schedule.py
"""
Schedule management commands for the Rehome operations console.

Usage:
    python -m rehome_ops.commands.schedule init-db
    python -m rehome_ops.commands.schedule bulk-assign 2025-06-01 2025-06-30 Amsterdam Utrecht
    python -m rehome_ops.commands.schedule month 2025 6
    python -m rehome_ops.commands.schedule check 2025-06-10 --city Amsterdam
"""

import argparse
from datetime import date
import logging
import sys
from typing import List, Optional

import click

from ..core.config import settings
from ..core.exceptions import DomainException
from ..database import Base, SessionLocal, engine
from ..services.availability_service import AvailabilityService
from ..services.schedule_editor import ScheduleEditorService

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

_STATUS_COLORS = {"ok": "green", "warn": "yellow", "error": "red"}


def report(message: str, status: str = "ok") -> None:
    """Print a CLI result line prefixed with the environment; problems go to stderr."""
    tag = click.style(f"[{settings.environment.upper()}]", fg=_STATUS_COLORS[status], bold=True)
    click.echo(f"{tag} {message}", err=status != "ok")


def init_db() -> int:
    """Create the scheduling tables if they do not exist."""
    from .. import models  # noqa: F401  register tables on Base.metadata

    Base.metadata.create_all(bind=engine)
    report(f"Schedule tables ready on {engine.url.render_as_string()}")
    return 0


def bulk_assign(start: date, end: date, cities: List[str]) -> int:
    db = SessionLocal()
    try:
        result = ScheduleEditorService(db).bulk_assign_range(start, end, cities)
    finally:
        db.close()

    report(
        f"Assigned {', '.join(cities)} to {len(result.succeeded_dates)} dates "
        f"({result.assignments_written} new rows)",
    )
    for failed in result.failed_dates:
        report(f"{failed.isoformat()}: {result.errors.get(failed.isoformat())}", "warn")
    return 1 if result.failed_dates else 0


def show_month(year: int, month: int) -> int:
    db = SessionLocal()
    try:
        days = AvailabilityService(db).get_calendar_month(year, month)
    finally:
        db.close()

    for day in days:
        marker = "*" if day.is_today else " "
        if day.is_fully_blocked:
            status = f"BLOCKED ({day.blocked_reason or 'no reason'})"
        elif day.blocked_cities:
            status = f"blocked for {', '.join(day.blocked_cities)}"
        else:
            status = ""
        cities = ", ".join(day.assigned_cities) or "-"
        print(f"{marker} {day.date.isoformat()}  {cities:<40} {status}")
    return 0


def check_date(day: date, city: Optional[str]) -> int:
    db = SessionLocal()
    try:
        validation = AvailabilityService(db).validate_booking_date(day, city=city)
    finally:
        db.close()

    if validation.is_valid:
        report(f"{day.isoformat()} is open for booking")
        return 0
    report(validation.message or "Date is not available", "warn")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rehome schedule management")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create schedule tables")

    bulk = sub.add_parser("bulk-assign", help="Assign cities to every date of a range")
    bulk.add_argument("start", type=date.fromisoformat)
    bulk.add_argument("end", type=date.fromisoformat)
    bulk.add_argument("cities", nargs="+")

    month = sub.add_parser("month", help="Print the synthesized calendar for a month")
    month.add_argument("year", type=int)
    month.add_argument("month", type=int)

    check = sub.add_parser("check", help="Run the booking date gate for one date")
    check.add_argument("date", type=date.fromisoformat)
    check.add_argument("--city")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "init-db":
            return init_db()
        if args.command == "bulk-assign":
            return bulk_assign(args.start, args.end, args.cities)
        if args.command == "month":
            return show_month(args.year, args.month)
        return check_date(args.date, args.city)
    except DomainException as exc:
        report(f"{exc.code}: {exc.message}", "error")
        return 2


if __name__ == "__main__":
    sys.exit(main())
