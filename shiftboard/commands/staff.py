"""
shiftboard staff - Manage the staff roster.
"""

import sys

from rich.table import Table

from shiftboard.commands.common import console, exit_code, resolve_staff
from shiftboard.lib.context import BoardContext
from shiftboard.lib.validate import ValidationError
from shiftboard.workflow.staff_lifecycle import StaffLifecycle


def cmd_staff_list(args, ctx: BoardContext) -> int:
    """List staff; inactive (resigned) staff only with --all."""
    staff = ctx.load_staff()
    if not args.all:
        staff = [s for s in staff if s.is_active]

    if not staff:
        print("Staff: none")
        return 0

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", no_wrap=True)
    table.add_column("이름")
    table.add_column("역할")
    table.add_column("상태")
    for s in sorted(staff, key=lambda s: (not s.is_active, s.name)):
        state = "[green]재직[/]" if s.is_active else "[dim]퇴사[/]"
        table.add_row(s.id[:8], f"[{s.color}]●[/] {s.name}", s.role, state)
    console.print(table)
    return 0


def cmd_staff_add(args, ctx: BoardContext) -> int:
    try:
        outcome = StaffLifecycle(ctx).add_staff(args.name, role=args.role or "", color=args.color)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    if outcome.success:
        print(f"  id: {outcome.data.id}")
    return exit_code(outcome)


def cmd_staff_edit(args, ctx: BoardContext) -> int:
    staff = resolve_staff(ctx, args.staff)
    if staff is None:
        return 1

    is_active = None
    if args.activate:
        is_active = True
    elif args.deactivate:
        is_active = False

    try:
        outcome = StaffLifecycle(ctx).update_staff(
            staff, name=args.name, role=args.role, color=args.color, is_active=is_active,
        )
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return exit_code(outcome)


def cmd_staff_remove(args, ctx: BoardContext) -> int:
    """Show what removal will do; execute it only with --yes."""
    staff = resolve_staff(ctx, args.staff)
    if staff is None:
        return 1

    lifecycle = StaffLifecycle(ctx)
    plan = lifecycle.plan_delete(staff)

    print(plan.confirmation)
    print()
    if not args.yes:
        print("Nothing changed. Re-run with --yes to confirm.")
        return 0

    return exit_code(lifecycle.confirm_delete(plan))
