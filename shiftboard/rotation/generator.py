"""
Routine task generator.

Builds the next scheduled service round as one task:

1. Target date = next occurrence of the routine weekday (today counts), 09:00.
2. Each item is "needs service" unless it was serviced within the recent
   window (48h by default) measured against *now* in wall-clock time.
   This differs from the calendar-day age used for status badges, so a badge
   and the generator can disagree near the boundary.
3. Needs-service items become unchecked lines; recent ones become checked
   lines annotated with their service date.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from shiftboard.lib.constants import (
    CHECKED_MARKER,
    RECENT_THRESHOLD_HOURS,
    ROUTINE_HOUR,
    ROUTINE_TITLE_PREFIX,
    UNCHECKED_MARKER,
)
from shiftboard.lib.dates import (
    format_korean_long,
    format_korean_short,
    parse_timestamp,
    start_of_day,
    sunday_weekday,
    to_timestamp,
)
from shiftboard.lib.feedback import OperationOutcome
from shiftboard.lib.types import RotationItem, Task, TaskStatus

if TYPE_CHECKING:
    from shiftboard.lib.context import BoardContext
    from shiftboard.rotation.store import RotationConfigStore

logger = logging.getLogger(__name__)


@dataclass
class Classification:
    """Items split into this round's work and recently serviced ones."""
    needs_service: list[RotationItem] = field(default_factory=list)
    recently_serviced: list[tuple[RotationItem, datetime]] = field(default_factory=list)


def next_routine_date(routine_weekday: int, now: datetime) -> datetime:
    """Next occurrence of `routine_weekday` (0=Sun), today included, at 09:00."""
    days_until = (routine_weekday - sunday_weekday(now) + 7) % 7
    target = start_of_day(now) + timedelta(days=days_until)
    return target.replace(hour=ROUTINE_HOUR)


def classify_items(
    items: list[RotationItem],
    now: datetime,
    recent_threshold: timedelta = timedelta(hours=RECENT_THRESHOLD_HOURS),
) -> Classification:
    """Split items by the rolling recent-service window against `now`.

    A service time in the future, or one that can't be parsed, needs service.
    """
    result = Classification()
    for item in items:
        if not item.last_serviced_at:
            result.needs_service.append(item)
            continue
        try:
            serviced = parse_timestamp(item.last_serviced_at)
        except ValueError:
            logger.warning(f"[ROTATION] Unparseable service time for item {item.id}: {item.last_serviced_at!r}")
            result.needs_service.append(item)
            continue

        diff = now - serviced
        if timedelta(0) <= diff < recent_threshold:
            result.recently_serviced.append((item, serviced))
        else:
            result.needs_service.append(item)
    return result


def render_description(date_label: str, classification: Classification) -> str:
    needs = [f"{UNCHECKED_MARKER} {item.name}" for item in classification.needs_service]
    recent = [
        f"{CHECKED_MARKER} {item.name} (최근 교체됨: {format_korean_short(serviced)})"
        for item, serviced in classification.recently_serviced
    ]

    lines = [f"정기 베드 커버 교체 업무입니다. ({date_label})", "", "**교체 대상:**", *needs]
    if recent:
        lines += ["", "**최근 교체 완료 (건너뛰기 가능):**", *recent]
    return "\n".join(lines)


def build_routine_draft(
    items: list[RotationItem],
    routine_weekday: int,
    now: datetime,
    recent_threshold: timedelta = timedelta(hours=RECENT_THRESHOLD_HOURS),
) -> Task:
    """Task draft (not yet stored) for the next service round."""
    target = next_routine_date(routine_weekday, now)
    date_label = format_korean_long(target)
    classification = classify_items(items, now, recent_threshold)

    return Task(
        id=str(uuid.uuid4()),
        title=f"{ROUTINE_TITLE_PREFIX} ({date_label})",
        description=render_description(date_label, classification),
        status=TaskStatus.TODO,
        assignee_ids=[],
        completed_by=[],
        created_at=to_timestamp(target),
        recurrence_type="none",
    )


class RoutineTaskGenerator:
    """Generates and stores the routine service task."""

    def __init__(self, ctx: "BoardContext", store: "RotationConfigStore"):
        self.ctx = ctx
        self.store = store

    def draft(self) -> Task:
        return build_routine_draft(
            self.store.items,
            self.store.config.routine_weekday,
            self.ctx.now(),
            timedelta(hours=self.ctx.config.recent_threshold_hours),
        )

    def generate(self) -> OperationOutcome:
        """Store the next routine task; a failed insert leaves no task behind."""
        task = self.draft()
        date_label = format_korean_long(parse_timestamp(task.created_at))

        def operation():
            result = self.ctx.storage.insert_task(task.to_record())
            result.raise_for_failure("Failed to create routine task")
            logger.info(f"[ROTATION] Routine task {task.id} created for {task.created_at}")
            return task

        return self.ctx.feedback.run(
            "정기 교체 업무 생성 중...",
            f"{date_label} 업무가 생성되었습니다.",
            operation,
        )
