"""
shiftboard status - Show the rotation grid.
"""

from rich.table import Table
from rich.text import Text

from shiftboard.commands.common import console, staff_names
from shiftboard.lib.context import BoardContext
from shiftboard.lib.dates import KOREAN_WEEKDAYS, format_korean_short, parse_timestamp
from shiftboard.rotation.status import SEVERITY, StatusLevel
from shiftboard.rotation.store import RotationConfigStore

LEVEL_STYLES = {
    StatusLevel.SUCCESS: "green",
    StatusLevel.WARNING: "yellow",
    StatusLevel.DANGER: "bold red",
}

# Sun=0 labels for the routine weekday
SUNDAY_FIRST = [KOREAN_WEEKDAYS[6]] + KOREAN_WEEKDAYS[:6]


def render_cell(ctx: BoardContext, item, status) -> Text:
    text = Text()
    text.append(f"{item.id}. {item.name}\n", style="bold")
    text.append(status.label, style=LEVEL_STYLES[status.status])
    if item.last_serviced_at:
        try:
            serviced = format_korean_short(parse_timestamp(item.last_serviced_at))
        except ValueError:
            serviced = item.last_serviced_at
        text.append(f"\n{serviced} · {staff_names(ctx, item.last_serviced_by)}", style="dim")
    return text


def cmd_status(args, ctx: BoardContext) -> int:
    """Print the rotation items in the configured number of columns."""
    store = RotationConfigStore(ctx).load()
    config = store.config
    cols = config.display_columns

    grid = Table.grid(padding=(0, 2), expand=False)
    for _ in range(cols):
        grid.add_column()

    statuses = store.statuses()
    cells = [render_cell(ctx, item, status) for item, status in statuses]
    for start in range(0, len(cells), cols):
        row = cells[start:start + cols]
        row += [Text("")] * (cols - len(row))
        grid.add_row(*row)

    console.print(
        f"[bold]교체 주기 {config.interval_days}일[/] · 정기 교체 {SUNDAY_FIRST[config.routine_weekday]} · "
        f"{config.pool_size}개"
    )
    console.print(grid)

    counts = {level: 0 for level in StatusLevel}
    for _, status in statuses:
        counts[status.status] += 1
    console.print(
        f"[green]양호 {counts[StatusLevel.SUCCESS]}[/]  "
        f"[yellow]임박 {counts[StatusLevel.WARNING]}[/]  "
        f"[bold red]교체 필요 {counts[StatusLevel.DANGER]}[/]"
    )

    urgent = sorted(
        ((item, status) for item, status in statuses if status.status != StatusLevel.SUCCESS),
        key=lambda pair: (SEVERITY[pair[1].status], pair[1].age_days),
        reverse=True,
    )
    if urgent:
        console.print("우선 교체: " + ", ".join(item.name for item, _ in urgent))
    return 0
