"""
Staff roster lifecycle.

Removing a staff member is two-phase: `plan_delete()` decides between

    hard  no task or template references the staff -> delete the record
    soft  any history exists -> mark inactive, unassign future tasks

and `StaffLifecycle.confirm_delete(plan)` executes it once the user agreed
to `plan.confirmation`. Past tasks and `completedBy` are never modified.
"""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from shiftboard.lib import validate
from shiftboard.lib.constants import DEFAULT_STAFF_COLOR
from shiftboard.lib.dates import parse_timestamp
from shiftboard.lib.feedback import OperationOutcome, PartialSyncError
from shiftboard.lib.inputs import StaffInput
from shiftboard.lib.types import Staff, Task, Template
from shiftboard.storage import ConnectivityError, StorageError

if TYPE_CHECKING:
    from shiftboard.lib.context import BoardContext

logger = logging.getLogger(__name__)

HARD = "hard"
SOFT = "soft"

# Upper bound on concurrent assignee updates
MAX_CLEANUP_WORKERS = 8


@dataclass
class DeletePlan:
    """What removing a staff member will do."""
    mode: str                                   # "hard" or "soft"
    staff: Staff
    future_task_ids: list[str] = field(default_factory=list)
    consequences: list[str] = field(default_factory=list)
    confirmation: str = ""


def has_history(staff_id: str, tasks: list[Task], templates: list[Template]) -> bool:
    """True if any task assigns or credits the staff, or any template assigns them."""
    in_tasks = any(staff_id in t.assignee_ids or staff_id in t.completed_by for t in tasks)
    in_templates = any(staff_id in t.assignee_ids for t in templates)
    return in_tasks or in_templates


def future_assignments(staff_id: str, tasks: list[Task], now: datetime) -> list[Task]:
    """Tasks scheduled strictly after `now` that assign the staff."""
    result = []
    for task in tasks:
        if staff_id not in task.assignee_ids:
            continue
        try:
            scheduled = parse_timestamp(task.created_at)
        except ValueError:
            logger.warning(f"[STAFF] Task {task.id} has no valid createdAt, leaving it alone")
            continue
        if scheduled > now:
            result.append(task)
    return result


def plan_delete(staff: Staff, tasks: list[Task], templates: list[Template], now: datetime) -> DeletePlan:
    """Decide how `staff` would be removed. Reads only; writes nothing."""
    if not has_history(staff.id, tasks, templates):
        return DeletePlan(
            mode=HARD,
            staff=staff,
            consequences=["직원 기록이 DB에서 즉시 제거됩니다"],
            confirmation=(
                f'"{staff.name}" 직원을 영구 삭제하시겠습니까?\n'
                "(관련 기록이 없어 DB에서 즉시 제거됩니다)"
            ),
        )

    future = future_assignments(staff.id, tasks, now)
    consequences = [
        "과거 기록: 보존됨",
        f"미래 배정: 모두 해제됨 ({len(future)}건)",
        "직원 목록: '퇴사' 상태로 변경됨",
    ]
    bullet_lines = "\n".join(f"• {c}" for c in consequences)
    return DeletePlan(
        mode=SOFT,
        staff=staff,
        future_task_ids=[t.id for t in future],
        consequences=consequences,
        confirmation=(
            f'[기록 보존 알림] "{staff.name}" 님의 과거 업무 기록이 존재합니다.\n\n'
            f"{bullet_lines}\n\n"
            "위 내용대로 퇴사 처리하시겠습니까?"
        ),
    )


class StaffLifecycle:
    """Staff roster actions, each reported through the session feedback."""

    def __init__(self, ctx: "BoardContext"):
        self.ctx = ctx

    def plan_delete(self, staff: Staff) -> DeletePlan:
        """Plan removal against the current tasks and templates."""
        return plan_delete(staff, self.ctx.load_tasks(), self.ctx.load_templates(), self.ctx.now())

    def confirm_delete(self, plan: DeletePlan) -> OperationOutcome:
        """Execute a plan the user has confirmed."""
        if plan.mode == HARD:
            return self.ctx.feedback.run("영구 삭제 중...", "삭제 완료", lambda: self._hard_delete(plan))
        if plan.mode == SOFT:
            return self.ctx.feedback.run(
                "퇴사 처리 및 배정 정리 중...", "퇴사 처리 완료", lambda: self._soft_delete(plan)
            )
        raise ValueError(f"Unknown delete mode: {plan.mode}")

    def _hard_delete(self, plan: DeletePlan) -> Staff:
        self.ctx.storage.delete_staff(plan.staff.id).raise_for_failure(
            f"Failed to delete staff {plan.staff.id}"
        )
        logger.info(f"[STAFF] {plan.staff.id} ({plan.staff.name}): deleted")
        return plan.staff

    def _soft_delete(self, plan: DeletePlan) -> Staff:
        staff = plan.staff
        self.ctx.storage.update_staff(staff.id, {"isActive": False}).raise_for_failure(
            f"Failed to deactivate staff {staff.id}"
        )
        staff.is_active = False
        logger.info(f"[STAFF] {staff.id} ({staff.name}): deactivated")

        failures = self._unassign_future(staff.id, plan.future_task_ids)
        if failures:
            raise PartialSyncError(
                "퇴사 처리는 완료되었지만 일부 미래 배정을 해제하지 못했습니다",
                failures,
            )
        return staff

    def _unassign_future(self, staff_id: str, task_ids: list[str]) -> list[tuple[str, str]]:
        """Remove `staff_id` from each task's assignees in parallel. Returns failures."""
        if not task_ids:
            return []

        # Re-read so concurrent assignee edits since planning are kept
        tasks = {t.id: t for t in self.ctx.load_tasks() if t.id in set(task_ids)}

        def unassign(task_id: str) -> Optional[tuple[str, str]]:
            task = tasks.get(task_id)
            if task is None:
                return (task_id, "task not found")
            remaining = [a for a in task.assignee_ids if a != staff_id]
            try:
                self.ctx.storage.update_task(task_id, {"assigneeIds": remaining}).raise_for_failure()
            except (StorageError, ConnectivityError) as e:
                logger.error(f"[STAFF] Failed to unassign {staff_id} from task {task_id}: {e}")
                return (task_id, str(e))
            return None

        workers = min(MAX_CLEANUP_WORKERS, len(task_ids))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(unassign, task_ids))

        failures = [r for r in results if r is not None]
        logger.info(f"[STAFF] {staff_id}: unassigned from {len(task_ids) - len(failures)}/{len(task_ids)} future tasks")
        return failures

    def add_staff(self, name: str, role: str = "", color: str = DEFAULT_STAFF_COLOR) -> OperationOutcome:
        """Add an active staff member.

        Raises:
            ValidationError: empty name (nothing written)
        """
        parsed = validate.parse_input(StaffInput, name=name, role=role, color=color)
        staff = Staff(id=str(uuid.uuid4()), name=parsed.name, role=parsed.role, color=parsed.color)

        def operation():
            self.ctx.storage.insert_staff(staff.to_record()).raise_for_failure("Failed to add staff")
            logger.info(f"[STAFF] {staff.id} ({staff.name}): added")
            return staff

        return self.ctx.feedback.run("저장 중...", "직원이 추가되었습니다.", operation)

    def update_staff(
        self,
        staff: Staff,
        name: Optional[str] = None,
        role: Optional[str] = None,
        color: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> OperationOutcome:
        """Edit a staff member; None leaves a field unchanged.

        Raises:
            ValidationError: empty name (nothing written)
        """
        parsed = validate.parse_input(
            StaffInput,
            name=staff.name if name is None else name,
            role=staff.role if role is None else role,
            color=staff.color if color is None else color,
        )
        fields = {"name": parsed.name, "role": parsed.role, "color": parsed.color}
        if is_active is not None:
            fields["isActive"] = is_active

        def operation():
            self.ctx.storage.update_staff(staff.id, fields).raise_for_failure(
                f"Failed to update staff {staff.id}"
            )
            staff.name, staff.role, staff.color = parsed.name, parsed.role, parsed.color
            if is_active is not None:
                staff.is_active = is_active
            logger.info(f"[STAFF] {staff.id} ({staff.name}): updated")
            return staff

        return self.ctx.feedback.run("저장 중...", "저장 완료", operation)
