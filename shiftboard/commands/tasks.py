"""
shiftboard tasks - List and move board tasks.
"""

import sys

from rich.table import Table

from shiftboard.commands.common import console, exit_code, resolve_staff_ids, resolve_task, staff_names
from shiftboard.lib.checklist import checklist_progress, has_checklist, parse_checklist
from shiftboard.lib.context import BoardContext
from shiftboard.lib.types import TaskStatus
from shiftboard.lib.validate import ValidationError
from shiftboard.rotation.store import RotationConfigStore
from shiftboard.workflow.task_lifecycle import InvalidTransition, PendingCompletion, TaskLifecycle

# Board column order
COLUMNS = [TaskStatus.TODO, TaskStatus.IN_PROGRESS, TaskStatus.DONE]


def cmd_tasks_list(args, ctx: BoardContext) -> int:
    """List tasks per board column. Skipped tasks only with --all."""
    tasks = ctx.load_tasks()
    statuses = COLUMNS + [TaskStatus.SKIPPED] if args.all else COLUMNS

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", no_wrap=True)
    table.add_column("상태")
    table.add_column("제목")
    table.add_column("진행")
    table.add_column("담당 / 완료")

    for status in statuses:
        for task in sorted((t for t in tasks if t.status == status), key=lambda t: t.created_at):
            progress = ""
            if has_checklist(task.description):
                p = checklist_progress(task.description)
                progress = f"{p['checked']}/{p['total']} ({p['percentage']}%)"
            people = task.completed_by if status == TaskStatus.DONE else task.assignee_ids
            table.add_row(task.id[:8], status.value, task.title, progress, staff_names(ctx, people))

    console.print(table)
    return 0


def cmd_tasks_show(args, ctx: BoardContext) -> int:
    task = resolve_task(ctx, args.task)
    if task is None:
        return 1

    print(f"{task.title}  [{task.status.value}]")
    print(f"  id:       {task.id}")
    print(f"  date:     {task.created_at}")
    print(f"  assigned: {staff_names(ctx, task.assignee_ids)}")
    if task.completed_by:
        print(f"  done by:  {staff_names(ctx, task.completed_by)}")
    if task.description:
        print()
        print(task.description)
    lines = parse_checklist(task.description)
    if lines:
        print()
        print("Checklist lines (use the index with `tasks check`):")
        for line in lines:
            mark = "x" if line.checked else " "
            print(f"  {line.index:>3} [{mark}] {line.text}")
    return 0


def cmd_tasks_move(args, ctx: BoardContext) -> int:
    """Move a task one column. Moving into 완료 needs --staff."""
    task = resolve_task(ctx, args.task)
    if task is None:
        return 1

    lifecycle = TaskLifecycle(ctx)
    try:
        result = lifecycle.move(task, args.direction)
    except InvalidTransition as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if isinstance(result, PendingCompletion):
        return _confirm(ctx, lifecycle, result, args.staff)
    return exit_code(result)


def cmd_tasks_complete(args, ctx: BoardContext) -> int:
    """Complete a task directly from 할일 or 진행중."""
    task = resolve_task(ctx, args.task)
    if task is None:
        return 1

    lifecycle = TaskLifecycle(ctx)
    try:
        pending = lifecycle.request_completion(task)
    except InvalidTransition as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return _confirm(ctx, lifecycle, pending, args.staff)


def _confirm(ctx: BoardContext, lifecycle: TaskLifecycle, pending: PendingCompletion, refs) -> int:
    if not refs:
        print("ERROR: Completing a task needs the staff who did it (--staff).", file=sys.stderr)
        return 1
    staff_ids = resolve_staff_ids(ctx, refs)
    if staff_ids is None:
        return 1
    try:
        return exit_code(lifecycle.confirm_completion(pending, staff_ids))
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


def cmd_tasks_check(args, ctx: BoardContext) -> int:
    """Check one checklist line; rotation lines also update the rotation item."""
    task = resolve_task(ctx, args.task)
    if task is None:
        return 1
    staff_ids = resolve_staff_ids(ctx, args.staff or [])
    if staff_ids is None:
        return 1

    store = RotationConfigStore(ctx).load()
    lifecycle = TaskLifecycle(ctx, store)
    return exit_code(lifecycle.check_line(task, args.line, staff_ids))


def cmd_tasks_delete(args, ctx: BoardContext) -> int:
    """Delete a task; recurring instances are skipped instead."""
    task = resolve_task(ctx, args.task)
    if task is None:
        return 1
    return exit_code(TaskLifecycle(ctx).delete(task))
