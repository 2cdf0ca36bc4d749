"""
shiftboard generate / change / rename / config - Rotation pool actions.
"""

import sys

from shiftboard.commands.common import exit_code, resolve_staff_ids
from shiftboard.lib.context import BoardContext
from shiftboard.lib.validate import ValidationError
from shiftboard.rotation.generator import RoutineTaskGenerator
from shiftboard.rotation.store import RotationConfigStore


def cmd_generate(args, ctx: BoardContext) -> int:
    """Create the next routine service task (or print it with --dry-run)."""
    store = RotationConfigStore(ctx).load()
    generator = RoutineTaskGenerator(ctx, store)

    if args.dry_run:
        task = generator.draft()
        print(task.title)
        print()
        print(task.description)
        return 0

    return exit_code(generator.generate())


def cmd_change(args, ctx: BoardContext) -> int:
    """Record that an item was serviced now by the given staff."""
    staff_ids = resolve_staff_ids(ctx, args.staff)
    if staff_ids is None:
        return 1

    store = RotationConfigStore(ctx).load()
    try:
        outcome = store.record_service(args.item, staff_ids)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return exit_code(outcome)


def cmd_rename(args, ctx: BoardContext) -> int:
    store = RotationConfigStore(ctx).load()
    try:
        saved = store.rename(args.item, args.name)
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0 if saved else 1


def cmd_config(args, ctx: BoardContext) -> int:
    """Show the rotation settings, or update the ones given."""
    store = RotationConfigStore(ctx).load()
    current = store.config

    updates = (args.count, args.interval, args.routine_day, args.cols)
    if all(value is None for value in updates):
        print(f"count:       {current.pool_size}")
        print(f"interval:    {current.interval_days}")
        print(f"routine_day: {current.routine_weekday}  (0=Sun .. 6=Sat)")
        print(f"cols:        {current.display_columns}")
        return 0

    try:
        outcome = store.update_config(
            pool_size=current.pool_size if args.count is None else args.count,
            interval_days=current.interval_days if args.interval is None else args.interval,
            routine_weekday=current.routine_weekday if args.routine_day is None else args.routine_day,
            display_columns=current.display_columns if args.cols is None else args.cols,
        )
    except ValidationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return exit_code(outcome)
