#!/usr/bin/env python3
"""
Print the calendar layout for one month from the planner database.

Shows each week row with its stacked event bars, or the continuous view
with collapsed overflow counts.

Usage:
    uv run python src/scripts/show_calendar.py --month 2025-06
    uv run python src/scripts/show_calendar.py --month 2025-06 --continuous --months 3
"""

import argparse
import asyncio
import sys
import traceback
from datetime import date, datetime
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH, MAX_VISIBLE_LAYERS, WEEKDAYS
from core.database import SQLiteEntityStore
from core.dates import add_days
from services.calendar import ExpansionState, Placement, render_continuous, render_month
from services.scheduler import PlanningSnapshot

CELL_WIDTH = 10


def parse_month(value: str | None) -> date:
    """YYYY-MM to the first of that month; this month if None."""
    if value:
        return datetime.strptime(value, "%Y-%m").date()
    return date.today().replace(day=1)


def format_bar(p: Placement) -> str:
    """One event bar as text, with caps where the event starts and ends."""
    width = p.span * CELL_WIDTH - 1
    left = "[" if p.is_start else "<"
    right = "]" if p.is_end else ">"
    label = p.title[: max(width - 2, 0)]
    return f"{left}{label.ljust(width - 2, '-')}{right}"


def format_layer(placements: list[Placement]) -> str:
    line = [" " * CELL_WIDTH] * 7
    for p in sorted(placements, key=lambda p: p.start_col):
        line[p.start_col] = format_bar(p) + " "
        for col in range(p.start_col + 1, p.start_col + p.span):
            line[col] = ""
    return "".join(line).rstrip()


def print_week(week_start: date, placements: list[Placement]):
    days = [add_days(week_start, i) for i in range(7)]
    print("".join(f"{WEEKDAYS[i]} {d.day:<{CELL_WIDTH - 4}}" for i, d in enumerate(days)))
    layers: dict[int, list[Placement]] = {}
    for p in placements:
        layers.setdefault(p.layer, []).append(p)
    for layer in sorted(layers):
        print(format_layer(layers[layer]))


def show_month(snapshot: PlanningSnapshot, month: date):
    layout = render_month(snapshot.events, month.year, month.month)
    print(f"\n{month.strftime('%B %Y')} ({layout.window_start} to {layout.window_end})")

    for row in range(6):
        print()
        row_start = add_days(layout.window_start, row * 7)
        print_week(row_start, [p for p in layout.placements if p.row == row])


def show_continuous(snapshot: PlanningSnapshot, month: date, months: int, expanded: list[str]):
    blocks = render_continuous(
        snapshot.events,
        month,
        ExpansionState(set(expanded)),
        months_to_render=months,
        months_before=0,
    )
    for block in blocks:
        print(f"\n=== {block.month.strftime('%B %Y')} ===")
        for week in block.weeks:
            print(f"\n{week.row_key}")
            print_week(week.week_start, week.placements)
            if week.hidden_count and not week.expanded:
                print(f"  +{week.hidden_count} more")


async def main(month_str: str | None, continuous: bool, months: int, expanded: list[str]):
    """Main entry point."""
    try:
        month = parse_month(month_str)

        store = SQLiteEntityStore(DB_PATH)
        if not store.is_available():
            print(f"Database not found at {DB_PATH} (run scripts/init_db.py)")
            return

        tasks, campaigns, projects = await store.load()
        snapshot = PlanningSnapshot(tasks=tasks, campaigns=campaigns, projects=projects)
        print(
            f"Loaded {len(projects)} projects, {len(campaigns)} campaigns, "
            f"{len(tasks)} tasks ({len(snapshot.events)} calendar events)"
        )

        if continuous:
            print(f"Showing up to {MAX_VISIBLE_LAYERS} layers per week")
            show_continuous(snapshot, month, months, expanded)
        else:
            show_month(snapshot, month)

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print the calendar layout for a month")
    parser.add_argument("--month", help="Month to show (YYYY-MM). Defaults to this month.")
    parser.add_argument(
        "--continuous", action="store_true", help="Use the continuous view with collapsed rows"
    )
    parser.add_argument(
        "--months", type=int, default=1, help="Months to show in the continuous view"
    )
    parser.add_argument(
        "--expand",
        action="append",
        default=[],
        help="Week row key to expand (e.g. 2025-06-week-2). Repeatable.",
    )
    args = parser.parse_args()

    asyncio.run(main(args.month, args.continuous, args.months, args.expand))
