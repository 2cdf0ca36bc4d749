"""
Shared data types for the shift board.

This module contains dataclasses used across multiple modules to avoid
circular imports. Field names follow Python conventions; `to_record()` /
`from_record()` convert to and from the stored (camelCase) shape.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from shiftboard.lib.constants import DEFAULT_STAFF_COLOR


class TaskStatus(Enum):
    """Task board columns.

    Values are the labels persisted in the task store.
    """
    TODO = "할일"
    IN_PROGRESS = "진행중"
    DONE = "완료"
    SKIPPED = "건너뜀"


OPEN_STATUSES = (TaskStatus.TODO, TaskStatus.IN_PROGRESS)


def parse_status(value: str | None) -> TaskStatus | None:
    """Parse a stored status label (or enum name) into TaskStatus.

    Returns None if the value is unknown.
    """
    if value is None:
        return None
    for status in TaskStatus:
        if status.value == value or status.name == value:
            return status
    return None


@dataclass
class Staff:
    """A staff member who can be assigned or credited with work."""
    id: str
    name: str
    role: str = ""
    color: str = DEFAULT_STAFF_COLOR
    is_active: bool = True

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "color": self.color,
            "isActive": self.is_active,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Staff":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            role=data.get("role", ""),
            color=data.get("color", DEFAULT_STAFF_COLOR),
            is_active=data.get("isActive", True),
        )


@dataclass
class Task:
    """A card on the shift board.

    A task with `source_template_id` set is a recurring instance generated
    from a template.
    """
    id: str
    title: str
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    assignee_ids: list[str] = field(default_factory=list)
    completed_by: list[str] = field(default_factory=list)
    created_at: str = ""                       # ISO timestamp (scheduled day)
    recurrence_type: str = "none"
    source_template_id: Optional[str] = None

    @property
    def is_recurring_instance(self) -> bool:
        return bool(self.source_template_id)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "assigneeIds": list(self.assignee_ids),
            "completedBy": list(self.completed_by),
            "createdAt": self.created_at,
            "recurrenceType": self.recurrence_type,
            "sourceTemplateId": self.source_template_id,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        status = parse_status(data.get("status")) or TaskStatus.TODO
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description") or "",
            status=status,
            assignee_ids=list(data.get("assigneeIds") or []),
            completed_by=list(data.get("completedBy") or []),
            created_at=data.get("createdAt", ""),
            recurrence_type=data.get("recurrenceType") or "none",
            source_template_id=data.get("sourceTemplateId"),
        )


@dataclass
class Template:
    """A recurring-task template. Only assignment matters to this package."""
    id: str
    title: str
    description: str = ""
    assignee_ids: list[str] = field(default_factory=list)
    is_active: bool = True
    created_at: str = ""

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "assigneeIds": list(self.assignee_ids),
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, data: dict) -> "Template":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            description=data.get("description") or "",
            assignee_ids=list(data.get("assigneeIds") or []),
            is_active=data.get("isActive", True),
            created_at=data.get("createdAt", ""),
        )


@dataclass
class RotationItem:
    """One unit of the rotation pool (e.g. a bed cover).

    Stored as `{id, name, lastChanged, lastChangedBy}` inside the settings blob.
    """
    id: int
    name: str
    last_serviced_at: Optional[str] = None     # ISO timestamp
    last_serviced_by: list[str] = field(default_factory=list)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "lastChanged": self.last_serviced_at,
            "lastChangedBy": list(self.last_serviced_by),
        }

    @classmethod
    def from_record(cls, data: dict) -> "RotationItem":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or f"{data['id']}번 베드",
            last_serviced_at=data.get("lastChanged"),
            last_serviced_by=list(data.get("lastChangedBy") or []),
        )


@dataclass
class RotationConfig:
    """Pool size, service interval, routine weekday (0=Sun) and grid columns."""
    pool_size: int = 10
    interval_days: int = 7
    routine_weekday: int = 4
    display_columns: int = 5

    def to_record(self) -> dict:
        return {
            "count": self.pool_size,
            "interval": self.interval_days,
            "routineDay": self.routine_weekday,
            "cols": self.display_columns,
        }

    @classmethod
    def from_record(cls, data: dict) -> "RotationConfig":
        return cls(
            pool_size=int(data.get("count", 10)),
            interval_days=int(data.get("interval", 7)),
            routine_weekday=int(data.get("routineDay", 4)),
            display_columns=int(data.get("cols", 5)),
        )


@dataclass
class RotationLog:
    """Append-only audit record for an activity category."""
    id: str
    created_at: str
    performed_by: list[str] = field(default_factory=list)
    action_type: str = "CHANGE"
    item_id: Optional[int] = None
    item_name: Optional[str] = None
    note: Optional[str] = None

    def to_record(self) -> dict:
        record = {
            "id": self.id,
            "actionType": self.action_type,
            "performedBy": list(self.performed_by),
            "createdAt": self.created_at,
        }
        if self.item_id is not None:
            record["itemId"] = self.item_id
        if self.item_name is not None:
            record["itemName"] = self.item_name
        if self.note:
            record["note"] = self.note
        return record

    @classmethod
    def from_record(cls, data: dict) -> "RotationLog":
        return cls(
            id=data["id"],
            created_at=data.get("createdAt", ""),
            performed_by=list(data.get("performedBy") or []),
            action_type=data.get("actionType", "CHANGE"),
            item_id=data.get("itemId"),
            item_name=data.get("itemName"),
            note=data.get("note"),
        )
