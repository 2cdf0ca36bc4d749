"""
Rotation status engine.

Computes the badge for a rotation item from its last service time:

    no record               -> danger,  age -1, "기록 없음"
    age >= interval         -> danger
    interval-2 <= age < interval -> warning
    otherwise               -> success

Age is counted in calendar days: both timestamps are truncated to local
midnight before subtracting, so anything serviced today has age 0.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from shiftboard.lib.constants import LABEL_NO_RECORD, LABEL_TODAY, NO_RECORD_AGE, WARNING_WINDOW_DAYS
from shiftboard.lib.dates import calendar_days_between, parse_timestamp
from shiftboard.lib.types import RotationItem


class StatusLevel(Enum):
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


# Higher is worse; used to compare badges
SEVERITY = {StatusLevel.SUCCESS: 0, StatusLevel.WARNING: 1, StatusLevel.DANGER: 2}


@dataclass(frozen=True)
class RotationStatus:
    status: StatusLevel
    age_days: int
    label: str


def age_label(age_days: int) -> str:
    if age_days == 0:
        return LABEL_TODAY
    return f"{age_days}일 전 교체"


def level_for_age(age_days: int, interval_days: int) -> StatusLevel:
    if age_days >= interval_days:
        return StatusLevel.DANGER
    if age_days >= interval_days - WARNING_WINDOW_DAYS:
        return StatusLevel.WARNING
    return StatusLevel.SUCCESS


def calculate_status(item: RotationItem, interval_days: int, now: datetime | None = None) -> RotationStatus:
    """Badge for `item` given the configured interval.

    A last-service time in the future (clock skew) counts as today.
    An unparseable timestamp is treated like a missing record.
    """
    if not item.last_serviced_at:
        return RotationStatus(StatusLevel.DANGER, NO_RECORD_AGE, LABEL_NO_RECORD)

    try:
        serviced = parse_timestamp(item.last_serviced_at)
    except ValueError:
        return RotationStatus(StatusLevel.DANGER, NO_RECORD_AGE, LABEL_NO_RECORD)

    now = now or datetime.now()
    age_days = max(0, calendar_days_between(serviced, now))
    return RotationStatus(level_for_age(age_days, interval_days), age_days, age_label(age_days))
