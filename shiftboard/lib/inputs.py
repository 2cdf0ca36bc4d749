"""
Input schemas for user-facing operations.

Validated before any write. Use `validate.parse_input(Model, ...)` so
failures surface as `ValidationError`.
"""

from pydantic import BaseModel, Field, field_validator

from shiftboard.lib.constants import (
    DEFAULT_STAFF_COLOR,
    MAX_DISPLAY_COLUMNS,
    MAX_INTERVAL_DAYS,
    MAX_POOL_SIZE,
    MIN_DISPLAY_COLUMNS,
    MIN_INTERVAL_DAYS,
    MIN_POOL_SIZE,
)


def _require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


class RotationConfigInput(BaseModel):
    """Input schema for the rotation settings form."""
    pool_size: int = Field(ge=MIN_POOL_SIZE, le=MAX_POOL_SIZE)
    interval_days: int = Field(ge=MIN_INTERVAL_DAYS, le=MAX_INTERVAL_DAYS)
    routine_weekday: int = Field(ge=0, le=6)
    display_columns: int = Field(ge=MIN_DISPLAY_COLUMNS, le=MAX_DISPLAY_COLUMNS)


class ResizeInput(BaseModel):
    pool_size: int = Field(ge=MIN_POOL_SIZE, le=MAX_POOL_SIZE)


class RenameInput(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _require_text(value)


class CompletionInput(BaseModel):
    """Input schema for the staff-selection step of completing a task."""
    staff_ids: list[str] = Field(min_length=1)


class StaffInput(BaseModel):
    """Input schema for adding or editing a staff member."""
    name: str
    role: str = ""
    color: str = DEFAULT_STAFF_COLOR

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _require_text(value)
