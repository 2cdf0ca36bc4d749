"""Task status state machine using transitions library.

States are the stored TaskStatus labels. Triggers:

    start     할일   -> 진행중
    complete  진행중 -> 완료      (also 할일 -> 완료 for direct completion)
    reopen    완료   -> 진행중
    stop      진행중 -> 할일
    skip      할일 / 진행중 / 완료 -> 건너뜀   (recurring instances only)

The new status is written to storage *before* the model changes state, so a
failed write leaves the machine where it was. Completion writes the status
and `completedBy` in the same call.

Usage:
    from shiftboard.workflow.fsm import TaskFSM

    fsm = TaskFSM(task, storage)
    fsm.start()
    fsm.complete(completed_by=["staff-1"])
"""

import logging

from transitions import Machine

from shiftboard.lib.types import Task, TaskStatus
from shiftboard.storage import Storage

logger = logging.getLogger(__name__)


TODO = TaskStatus.TODO.value
IN_PROGRESS = TaskStatus.IN_PROGRESS.value
DONE = TaskStatus.DONE.value
SKIPPED = TaskStatus.SKIPPED.value

STATES = [TODO, IN_PROGRESS, DONE, SKIPPED]

# Each trigger becomes a method on the FSM
TRANSITIONS = [
    # Forward
    {"trigger": "start", "source": TODO, "dest": IN_PROGRESS},
    {"trigger": "complete", "source": IN_PROGRESS, "dest": DONE},
    {"trigger": "complete", "source": TODO, "dest": DONE},

    # Undo
    {"trigger": "reopen", "source": DONE, "dest": IN_PROGRESS},
    {"trigger": "stop", "source": IN_PROGRESS, "dest": TODO},

    # Deleting a recurring instance keeps the row
    {"trigger": "skip", "source": TODO, "dest": SKIPPED},
    {"trigger": "skip", "source": IN_PROGRESS, "dest": SKIPPED},
    {"trigger": "skip", "source": DONE, "dest": SKIPPED},
]


# Pre-computed lookup: (source, dest) -> trigger name
def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        key = (t["source"], t["dest"])
        if key not in lookup:
            lookup[key] = t["trigger"]
    return lookup


TRIGGER_FOR = _build_trigger_lookup()


class TaskFSM:
    """State machine for one task's status.

    Wraps the transitions library with task-specific logic:
    - Starts from the task's stored status
    - Persists the destination status before the change
    - Logs all transitions
    """

    def __init__(self, task: Task, storage: Storage):
        """Initialize FSM for a task.

        Args:
            task: Task whose status is managed (updated in place on transition)
            storage: Storage the status is written to
        """
        self.task = task
        self.storage = storage

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=task.status.value,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            before_state_change="persist",
            after_state_change="on_state_change",
        )

    def _completed_by_after(self, event) -> list[str]:
        """Attribution the task carries once `event` lands.

        Only a move back to an open column clears it; a skipped instance
        keeps whoever completed it.
        """
        dest = event.transition.dest
        if dest == DONE:
            return list(event.kwargs.get("completed_by") or self.task.completed_by)
        if dest == SKIPPED:
            return list(self.task.completed_by)
        return []

    def persist(self, event) -> None:
        """Write the destination status. Raises StorageError/ConnectivityError on failure."""
        dest = event.transition.dest
        completed_by = self._completed_by_after(event)
        self.storage.update_task_status(self.task.id, dest, completed_by).raise_for_failure(
            f"Failed to update status of task {self.task.id}"
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition. Mirrors the state onto the task."""
        from_state = event.transition.source
        to_state = event.transition.dest

        self.task.completed_by = self._completed_by_after(event)
        self.task.status = TaskStatus(to_state)

        logger.info(f"[FSM] {self.task.id}: {from_state} -> {to_state} ({event.event.name})")

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)
