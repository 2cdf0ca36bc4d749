"""Task board moves with explicit transitions.

Thin layer over the FSM in fsm.py. This module provides:
- transition() that maps a destination status to an FSM trigger
- TaskLifecycle, the feedback-wrapped board actions (move, complete, delete)

Moving a task into 완료 is two-phase: `move()` / `request_completion()`
return a PendingCompletion, and nothing changes until
`confirm_completion()` is called with the staff who did the work.

Usage:
    lifecycle = TaskLifecycle(ctx)
    pending = lifecycle.move(task, "next")
    lifecycle.confirm_completion(pending, ["staff-1"])
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from shiftboard.lib import validate
from shiftboard.lib.feedback import OperationOutcome
from shiftboard.lib.inputs import CompletionInput
from shiftboard.lib.types import Task, TaskStatus
from shiftboard.rotation.sync import ChecklistSync, is_rotation_task
from shiftboard.storage import Storage
from shiftboard.workflow.fsm import STATES, TRIGGER_FOR, TaskFSM

if TYPE_CHECKING:
    from shiftboard.lib.context import BoardContext
    from shiftboard.rotation.store import RotationConfigStore

logger = logging.getLogger(__name__)

NEXT = "next"
PREV = "prev"

_FORWARD = {TaskStatus.TODO: TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS: TaskStatus.DONE}
_BACKWARD = {TaskStatus.DONE: TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS: TaskStatus.TODO}


class InvalidTransition(Exception):
    """Raised when attempting an invalid status transition."""

    def __init__(self, from_state: str, to_state: str, task_id: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        self.task_id = task_id
        super().__init__(
            f"Invalid transition: {from_state} -> {to_state}"
            + (f" (task: {task_id})" if task_id else "")
        )


@dataclass
class PendingCompletion:
    """A move into 완료 waiting for the performing staff to be chosen."""
    task: Task


def next_status(current: TaskStatus, direction: str) -> TaskStatus | None:
    """Status one column over in `direction` ("next" / "prev"), or None at an edge."""
    if direction == NEXT:
        return _FORWARD.get(current)
    if direction == PREV:
        return _BACKWARD.get(current)
    raise ValueError(f"Unknown direction: {direction}")


def can_transition(task: Task, to_status: TaskStatus) -> bool:
    """Check if a move to `to_status` is valid. Self-transition counts as valid."""
    if task.status == to_status:
        return True
    return (task.status.value, to_status.value) in TRIGGER_FOR


def transition(
    storage: Storage,
    task: Task,
    to_status: TaskStatus,
    completed_by: list[str] | None = None,
    reason: str = "",
) -> None:
    """Transition `task` to `to_status`, writing the change to storage.

    Args:
        storage: Storage the status is written to
        task: Task to move (updated in place)
        to_status: Target status
        completed_by: Staff credited when moving into 완료
        reason: Optional reason for the transition (for logging)

    Raises:
        InvalidTransition: If the transition is not allowed
        StorageError / ConnectivityError: If the write fails (task unchanged)
    """
    reason_str = f" ({reason})" if reason else ""
    current_state = task.status.value

    if current_state == to_status.value:
        logger.debug(f"[TASK] {task.id}: already {current_state}, no-op")
        return

    if current_state not in STATES:
        raise InvalidTransition(current_state, to_status.value, task.id)

    trigger = TRIGGER_FOR.get((current_state, to_status.value))
    if trigger is None:
        raise InvalidTransition(current_state, to_status.value, task.id)

    fsm = TaskFSM(task, storage)
    if not fsm.can(trigger):
        raise InvalidTransition(current_state, to_status.value, task.id)

    logger.info(f"[TASK] {task.id}: {current_state} -> {to_status.value}{reason_str}")
    getattr(fsm, trigger)(completed_by=completed_by)


class TaskLifecycle:
    """Board actions on tasks, each reported through the session feedback."""

    def __init__(self, ctx: "BoardContext", store: Optional["RotationConfigStore"] = None):
        self.ctx = ctx
        self.store = store

    def move(self, task: Task, direction: str) -> OperationOutcome | PendingCompletion:
        """Move `task` one column.

        A forward move out of 진행중 is suspended: the returned
        PendingCompletion must be confirmed with the performing staff.
        Backward moves out of 완료 clear `completedBy`.

        Raises:
            InvalidTransition: no column in that direction
        """
        dest = next_status(task.status, direction)
        if dest is None:
            raise InvalidTransition(task.status.value, direction, task.id)

        if dest == TaskStatus.DONE:
            logger.debug(f"[TASK] {task.id}: completion pending staff selection")
            return PendingCompletion(task)

        def operation():
            transition(self.ctx.storage, task, dest, reason=f"move {direction}")
            return task

        return self.ctx.feedback.run("상태 업데이트 중...", "상태 변경 완료", operation)

    def request_completion(self, task: Task) -> PendingCompletion:
        """Open the staff-selection step directly (from 할일 or 진행중).

        Raises:
            InvalidTransition: task is already 완료 or 건너뜀
        """
        if task.status not in (TaskStatus.TODO, TaskStatus.IN_PROGRESS):
            raise InvalidTransition(task.status.value, TaskStatus.DONE.value, task.id)
        return PendingCompletion(task)

    def confirm_completion(self, pending: PendingCompletion, staff_ids: list[str]) -> OperationOutcome:
        """Write 완료 and `completedBy` together.

        Raises:
            ValidationError: no staff selected (nothing written)
        """
        parsed = validate.parse_input(CompletionInput, staff_ids=staff_ids)
        task = pending.task

        def operation():
            transition(self.ctx.storage, task, TaskStatus.DONE,
                       completed_by=parsed.staff_ids, reason="completed")
            return task

        return self.ctx.feedback.run("완료 처리 중...", "업무 완료!", operation)

    def delete(self, task: Task) -> OperationOutcome:
        """Delete a task. Recurring instances are skipped instead of removed."""
        if task.is_recurring_instance:
            def skip():
                transition(self.ctx.storage, task, TaskStatus.SKIPPED, reason="recurring instance deleted")
                return task

            return self.ctx.feedback.run("삭제 처리 중...", "삭제 완료", skip)

        def remove():
            self.ctx.storage.delete_task(task.id).raise_for_failure(f"Failed to delete task {task.id}")
            logger.info(f"[TASK] {task.id}: deleted")
            return task

        return self.ctx.feedback.run("삭제 중...", "삭제 완료", remove)

    def check_line(self, task: Task, line_index: int, staff_ids: list[str]) -> OperationOutcome:
        """Check one checklist line of `task` on the board.

        On a rotation task, the matching rotation item is marked serviced
        as well (reverse of the rotation manager's sync).
        """
        sync = ChecklistSync(self.ctx)

        def operation():
            result = sync.check_line(task.id, line_index)
            if result.synced and self.store is not None \
                    and is_rotation_task(task, self.ctx.config.sync_keywords):
                text = sync.line_text(task.id, line_index)
                if text:
                    self.store.record_service_by_name(text, staff_ids)
            return result

        return self.ctx.feedback.run("저장 중...", "체크 완료", operation)
