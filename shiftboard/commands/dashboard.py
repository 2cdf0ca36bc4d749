"""
shiftboard dashboard - Activity summary across all log categories.
"""

import sys
from datetime import datetime

from rich.table import Table

from shiftboard.commands.common import console, staff_names
from shiftboard.lib.context import BoardContext
from shiftboard.lib.dates import end_of_day, start_of_day, week_range
from shiftboard.lib.stats import fetch_dashboard_stats

CATEGORY_LABELS = {
    "pt_room": "PT실",
    "shockwave": "충격파",
    "bed": "베드",
    "laundry": "세탁",
    "changing_room": "탈의실",
}


def _parse_day(value: str) -> datetime:
    return datetime.strptime(value, "%Y-%m-%d")


def cmd_dashboard(args, ctx: BoardContext) -> int:
    """Summarize activity for this week, or for --start/--end (YYYY-MM-DD)."""
    start, end = week_range(ctx.now())
    try:
        if args.start:
            start = start_of_day(_parse_day(args.start))
        if args.end:
            end = end_of_day(_parse_day(args.end))
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    stats = fetch_dashboard_stats(ctx.storage, start, end)

    console.print(f"[bold]{start:%Y-%m-%d} ~ {end:%Y-%m-%d}[/]  총 {stats.total}건")

    categories = Table(show_header=True, header_style="bold")
    categories.add_column("구분")
    categories.add_column("건수", justify="right")
    for category, category_stats in stats.categories.items():
        label = CATEGORY_LABELS.get(category, category)
        if category in stats.failed_categories:
            label += " [red](조회 실패)[/]"
        categories.add_row(label, str(category_stats.count))
    console.print(categories)

    if stats.staff_performance:
        people = Table(show_header=True, header_style="bold")
        people.add_column("직원")
        people.add_column("건수", justify="right")
        for staff_id, count in stats.staff_performance.most_common():
            people.add_row(staff_names(ctx, [staff_id]), str(count))
        console.print(people)

    if stats.activity_by_date:
        days = "  ".join(f"{day} {count}" for day, count in stats.activity_by_date.items())
        console.print(f"[dim]{days}[/]")

    return 1 if stats.failed_categories else 0
