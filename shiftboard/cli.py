#!/usr/bin/env python3
"""shiftboard CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from shiftboard.commands import dashboard as cmd_dashboard_module
from shiftboard.commands import rotation as cmd_rotation_module
from shiftboard.commands import staff as cmd_staff_module
from shiftboard.commands import status as cmd_status_module
from shiftboard.commands import tasks as cmd_tasks_module
from shiftboard.commands.common import attach_printer
from shiftboard.lib.constants import DEFAULT_STAFF_COLOR
from shiftboard.lib.context import BoardContext
from shiftboard.storage import ConnectivityError


def cli_alert(message: str) -> None:
    print(f"[ALERT] {message}", file=sys.stderr)


def get_context(args) -> BoardContext:
    """Open a session for the board in --dir (board.yaml + data)."""
    config_dir = Path(args.dir) if args.dir else Path.cwd()
    try:
        ctx = BoardContext.create(config_dir=config_dir, alert=cli_alert)
    except ConnectivityError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)
    attach_printer(ctx)
    return ctx


def run_with_context(handler):
    """Wrap a `cmd_x(args, ctx)` handler with session setup and teardown."""
    def run(args):
        ctx = get_context(args)
        try:
            return handler(args, ctx)
        except ConnectivityError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 2
        finally:
            ctx.close()
    return run


def main(argv=None):
    parser = argparse.ArgumentParser(prog='shiftboard', description='Shift board CLI')
    parser.add_argument('--dir', '-d', help='Board directory with board.yaml (default: current directory)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # shiftboard status
    p_status = subparsers.add_parser('status', help='Show rotation grid')
    p_status.set_defaults(func=run_with_context(cmd_status_module.cmd_status))

    # shiftboard generate
    p_generate = subparsers.add_parser('generate', help='Create the next routine service task')
    p_generate.add_argument('--dry-run', action='store_true', help='Print the task without storing it')
    p_generate.set_defaults(func=run_with_context(cmd_rotation_module.cmd_generate))

    # shiftboard change
    p_change = subparsers.add_parser('change', help='Record a serviced item')
    p_change.add_argument('item', type=int, help='Item number')
    p_change.add_argument('--staff', '-s', nargs='+', required=True, help='Staff id or name')
    p_change.set_defaults(func=run_with_context(cmd_rotation_module.cmd_change))

    # shiftboard rename
    p_rename = subparsers.add_parser('rename', help='Rename an item')
    p_rename.add_argument('item', type=int, help='Item number')
    p_rename.add_argument('name', help='New name')
    p_rename.set_defaults(func=run_with_context(cmd_rotation_module.cmd_rename))

    # shiftboard config
    p_config = subparsers.add_parser('config', help='Show or update rotation settings')
    p_config.add_argument('--count', type=int, help='Number of items (1-50)')
    p_config.add_argument('--interval', type=int, help='Service interval in days (1-365)')
    p_config.add_argument('--routine-day', type=int, help='Routine weekday (0=Sun .. 6=Sat)')
    p_config.add_argument('--cols', type=int, help='Grid columns (1-10)')
    p_config.set_defaults(func=run_with_context(cmd_rotation_module.cmd_config))

    # shiftboard tasks ...
    p_tasks = subparsers.add_parser('tasks', help='Board tasks')
    tasks_sub = p_tasks.add_subparsers(dest='tasks_command', required=True)

    p_tasks_list = tasks_sub.add_parser('list', help='List tasks')
    p_tasks_list.add_argument('--all', '-a', action='store_true', help='Include skipped tasks')
    p_tasks_list.set_defaults(func=run_with_context(cmd_tasks_module.cmd_tasks_list))

    p_tasks_show = tasks_sub.add_parser('show', help='Show a task and its checklist')
    p_tasks_show.add_argument('task', help='Task id (or unique prefix)')
    p_tasks_show.set_defaults(func=run_with_context(cmd_tasks_module.cmd_tasks_show))

    p_tasks_move = tasks_sub.add_parser('move', help='Move a task one column')
    p_tasks_move.add_argument('task', help='Task id (or unique prefix)')
    p_tasks_move.add_argument('direction', choices=['next', 'prev'])
    p_tasks_move.add_argument('--staff', '-s', nargs='+', help='Who did it (needed when moving into 완료)')
    p_tasks_move.set_defaults(func=run_with_context(cmd_tasks_module.cmd_tasks_move))

    p_tasks_complete = tasks_sub.add_parser('complete', help='Complete a task directly')
    p_tasks_complete.add_argument('task', help='Task id (or unique prefix)')
    p_tasks_complete.add_argument('--staff', '-s', nargs='+', required=True, help='Who did it')
    p_tasks_complete.set_defaults(func=run_with_context(cmd_tasks_module.cmd_tasks_complete))

    p_tasks_check = tasks_sub.add_parser('check', help='Check a checklist line')
    p_tasks_check.add_argument('task', help='Task id (or unique prefix)')
    p_tasks_check.add_argument('line', type=int, help='Line index (see `tasks show`)')
    p_tasks_check.add_argument('--staff', '-s', nargs='+', help='Who did it')
    p_tasks_check.set_defaults(func=run_with_context(cmd_tasks_module.cmd_tasks_check))

    p_tasks_delete = tasks_sub.add_parser('delete', help='Delete a task (recurring ones are skipped)')
    p_tasks_delete.add_argument('task', help='Task id (or unique prefix)')
    p_tasks_delete.set_defaults(func=run_with_context(cmd_tasks_module.cmd_tasks_delete))

    # shiftboard staff ...
    p_staff = subparsers.add_parser('staff', help='Staff roster')
    staff_sub = p_staff.add_subparsers(dest='staff_command', required=True)

    p_staff_list = staff_sub.add_parser('list', help='List staff')
    p_staff_list.add_argument('--all', '-a', action='store_true', help='Include resigned staff')
    p_staff_list.set_defaults(func=run_with_context(cmd_staff_module.cmd_staff_list))

    p_staff_add = staff_sub.add_parser('add', help='Add a staff member')
    p_staff_add.add_argument('name')
    p_staff_add.add_argument('--role', help='Role label')
    p_staff_add.add_argument('--color', default=DEFAULT_STAFF_COLOR, help='Display color')
    p_staff_add.set_defaults(func=run_with_context(cmd_staff_module.cmd_staff_add))

    p_staff_edit = staff_sub.add_parser('edit', help='Edit a staff member')
    p_staff_edit.add_argument('staff', help='Staff id or name')
    p_staff_edit.add_argument('--name')
    p_staff_edit.add_argument('--role')
    p_staff_edit.add_argument('--color')
    active = p_staff_edit.add_mutually_exclusive_group()
    active.add_argument('--activate', action='store_true', help='Mark as active')
    active.add_argument('--deactivate', action='store_true', help='Mark as resigned')
    p_staff_edit.set_defaults(func=run_with_context(cmd_staff_module.cmd_staff_edit))

    p_staff_remove = staff_sub.add_parser('remove', help='Remove a staff member')
    p_staff_remove.add_argument('staff', help='Staff id or name')
    p_staff_remove.add_argument('--yes', '-y', action='store_true', help='Confirm the shown plan')
    p_staff_remove.set_defaults(func=run_with_context(cmd_staff_module.cmd_staff_remove))

    # shiftboard dashboard
    p_dashboard = subparsers.add_parser('dashboard', help='Activity summary')
    p_dashboard.add_argument('--start', help='First day (YYYY-MM-DD, default: this Sunday)')
    p_dashboard.add_argument('--end', help='Last day (YYYY-MM-DD, default: this Saturday)')
    p_dashboard.set_defaults(func=run_with_context(cmd_dashboard_module.cmd_dashboard))

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
