"""
Helpers shared by the shiftboard sub-commands.
"""

import sys

from rich.console import Console

from shiftboard.lib.context import BoardContext
from shiftboard.lib.feedback import FeedbackState, OperationOutcome
from shiftboard.lib.types import Staff, Task

console = Console()

STATE_STYLES = {
    FeedbackState.LOADING: "dim",
    FeedbackState.SUCCESS: "green",
    FeedbackState.ERROR: "bold red",
}


def attach_printer(ctx: BoardContext) -> None:
    """Echo feedback state changes to the terminal."""
    def listener(state: FeedbackState, message: str) -> None:
        if state in STATE_STYLES and message:
            console.print(f"[{STATE_STYLES[state]}]{message}[/]")

    ctx.feedback.subscribe(listener)


def exit_code(outcome: OperationOutcome) -> int:
    return 0 if outcome.success else 1


def resolve_task(ctx: BoardContext, ref: str) -> Task | None:
    """Find a task by id or unique id prefix. Prints the problem and returns None otherwise."""
    tasks = ctx.load_tasks()
    exact = [t for t in tasks if t.id == ref]
    matches = exact or [t for t in tasks if t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        print(f"ERROR: Task '{ref}' not found.", file=sys.stderr)
    else:
        print(f"ERROR: Task id '{ref}' is ambiguous ({len(matches)} matches).", file=sys.stderr)
    return None


def resolve_staff(ctx: BoardContext, ref: str) -> Staff | None:
    """Find a staff member by id, id prefix or exact name."""
    staff = ctx.load_staff()
    matches = [s for s in staff if s.id == ref] or [s for s in staff if s.name == ref] \
        or [s for s in staff if s.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        print(f"ERROR: Staff '{ref}' not found.", file=sys.stderr)
    else:
        print(f"ERROR: Staff '{ref}' is ambiguous ({len(matches)} matches).", file=sys.stderr)
    return None


def resolve_staff_ids(ctx: BoardContext, refs: list[str]) -> list[str] | None:
    """Resolve several staff references; None if any fails."""
    ids = []
    for ref in refs:
        staff = resolve_staff(ctx, ref)
        if staff is None:
            return None
        ids.append(staff.id)
    return ids


def staff_names(ctx: BoardContext, ids: list[str]) -> str:
    by_id = {s.id: s.name for s in ctx.load_staff()}
    return ", ".join(by_id.get(i, i) for i in ids) or "-"
