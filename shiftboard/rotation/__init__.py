"""Rotation pool: status badges, persisted config, routine generation, checklist sync."""

from shiftboard.rotation.generator import RoutineTaskGenerator, build_routine_draft, next_routine_date
from shiftboard.rotation.status import RotationStatus, StatusLevel, calculate_status
from shiftboard.rotation.store import RotationConfigStore
from shiftboard.rotation.sync import ChecklistSync, SyncResult

__all__ = [
    "ChecklistSync",
    "RotationConfigStore",
    "RotationStatus",
    "RoutineTaskGenerator",
    "StatusLevel",
    "SyncResult",
    "build_routine_draft",
    "calculate_status",
    "next_routine_date",
]
