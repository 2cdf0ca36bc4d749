"""
Checklist text synchronization.

The rotation item list is the source of truth; the checklist embedded in the
open routine task is a display mirror. Syncing is best effort:

- No open rotation task, or no matching unchecked line: silent no-op.
- Storage failure while writing the description: raised to the caller,
  which reports it without undoing the structured update.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from shiftboard.lib.checklist import find_matching_line, parse_checklist, toggle_line
from shiftboard.lib.dates import format_korean_short
from shiftboard.lib.types import Task

if TYPE_CHECKING:
    from shiftboard.lib.context import BoardContext

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of a checklist sync attempt."""
    synced: bool
    task_id: Optional[str] = None
    line_index: Optional[int] = None
    reason: str = ""


def completion_suffix(when: datetime) -> str:
    """Annotation appended to a line checked from the rotation manager."""
    return f" (관리자탭 교체: {format_korean_short(when)})"


def is_rotation_task(task: Task, keywords: list[str]) -> bool:
    text = f"{task.title}\n{task.description}"
    return any(keyword in text for keyword in keywords)


def find_open_rotation_task(tasks: list[Task], keywords: list[str]) -> Task | None:
    """First open (TODO / IN_PROGRESS) task mentioning a rotation keyword."""
    for task in tasks:
        if task.is_open and is_rotation_task(task, keywords):
            return task
    return None


class ChecklistSync:
    """Mirrors structured completions into task checklist text."""

    def __init__(self, ctx: "BoardContext"):
        self.ctx = ctx

    def sync_by_name(self, item_name: str, staff_ids: list[str]) -> SyncResult:
        """Check the open rotation task's line for `item_name`.

        Args:
            item_name: Free-text rotation item name (e.g. "1번 베드")
            staff_ids: Staff credited with the work (recorded on the item
                and in the audit log; the line carries the date)

        Returns:
            SyncResult; synced=False for the silent no-op cases.

        Raises:
            StorageError / ConnectivityError: if the description write fails
        """
        tasks = self.ctx.load_tasks()
        task = find_open_rotation_task(tasks, self.ctx.config.sync_keywords)
        if task is None:
            logger.debug(f"[SYNC] No open rotation task for '{item_name}', skipping")
            return SyncResult(synced=False, reason="no open rotation task")

        line_index = find_matching_line(task.description, item_name)
        if line_index is None:
            logger.debug(f"[SYNC] No unchecked line for '{item_name}' in task {task.id}, skipping")
            return SyncResult(synced=False, task_id=task.id, reason="no matching line")

        description = toggle_line(task.description, line_index, completion_suffix(self.ctx.now()))
        if description == task.description:
            logger.debug(f"[SYNC] Line {line_index} of task {task.id} left unchanged, skipping")
            return SyncResult(synced=False, task_id=task.id, line_index=line_index, reason="unchanged")

        self.ctx.storage.update_task(task.id, {"description": description}).raise_for_failure(
            f"Failed to update checklist of task {task.id}"
        )
        logger.info(f"[SYNC] Checked line {line_index} of task {task.id} for '{item_name}' "
                    f"(by {', '.join(staff_ids) or 'unknown'})")
        return SyncResult(synced=True, task_id=task.id, line_index=line_index)

    def check_line(self, task_id: str, line_index: int, suffix: str = "") -> SyncResult:
        """Check line `line_index` of a stored task and persist it.

        Out-of-range, non-checklist and already-checked lines are no-ops.
        """
        task = self.ctx.find_task(task_id)
        if task is None:
            return SyncResult(synced=False, reason="task not found")

        updated = toggle_line(task.description, line_index, suffix)
        if updated == task.description:
            return SyncResult(synced=False, task_id=task_id, line_index=line_index, reason="unchanged")

        self.ctx.storage.update_task(task_id, {"description": updated}).raise_for_failure(
            f"Failed to update checklist of task {task_id}"
        )
        logger.info(f"[SYNC] Checked line {line_index} of task {task_id}")
        return SyncResult(synced=True, task_id=task_id, line_index=line_index)

    def line_text(self, task_id: str, line_index: int) -> str | None:
        """Text of checklist line `line_index`, or None."""
        task = self.ctx.find_task(task_id)
        if task is None:
            return None
        for item in parse_checklist(task.description):
            if item.index == line_index:
                return item.text
        return None
