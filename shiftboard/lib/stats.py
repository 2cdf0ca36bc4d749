"""
Activity logs and dashboard aggregation.

Each category (pt_room, shockwave, bed, laundry, changing_room) is an
independent append-only log. The dashboard reads all five in parallel and
counts activity per staff member and per day.
"""

import logging
import uuid
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from shiftboard.lib import validate
from shiftboard.lib.constants import LOG_CATEGORIES
from shiftboard.lib.dates import format_month_day, parse_timestamp, to_timestamp
from shiftboard.lib.types import RotationLog
from shiftboard.storage import ConnectivityError, Storage, StorageError, StorageResult

logger = logging.getLogger(__name__)


def append_log(
    storage: Storage,
    category: str,
    action_type: str,
    staff_ids: list[str],
    when: datetime,
    item_id: Optional[int] = None,
    item_name: Optional[str] = None,
    note: Optional[str] = None,
) -> StorageResult:
    """Append one activity record to `category`.

    Raises:
        ValidationError: unknown category or malformed record (nothing written)
    """
    if category not in LOG_CATEGORIES:
        raise validate.ValidationError("rotation_log", f"Unknown log category: {category}", "category")

    log = RotationLog(
        id=str(uuid.uuid4()),
        created_at=to_timestamp(when),
        performed_by=list(staff_ids),
        action_type=action_type,
        item_id=item_id,
        item_name=item_name,
        note=note,
    )
    record = log.to_record()
    validate.validate_before_write(record, "rotation_log", f"logs[{category}]")
    return storage.append_log(category, record)


def fetch_logs(storage: Storage, category: str, start: datetime, end: datetime) -> list[RotationLog]:
    """Logs of one category with start <= createdAt <= end, newest first."""
    return [RotationLog.from_record(r) for r in storage.query_logs(category, start, end)]


@dataclass
class CategoryStats:
    count: int = 0
    items: list[RotationLog] = field(default_factory=list)


@dataclass
class DashboardStats:
    """Activity over a date range across every log category."""
    categories: dict[str, CategoryStats] = field(default_factory=dict)
    staff_performance: Counter = field(default_factory=Counter)
    activity_by_date: Counter = field(default_factory=Counter)
    failed_categories: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(c.count for c in self.categories.values())


def fetch_dashboard_stats(storage: Storage, start: datetime, end: datetime) -> DashboardStats:
    """Query all categories in parallel and aggregate.

    A category whose query fails contributes no items; it is logged and
    listed in `failed_categories`.
    """

    def fetch(category: str) -> tuple[str, Optional[list[RotationLog]]]:
        try:
            return category, fetch_logs(storage, category, start, end)
        except (StorageError, ConnectivityError) as e:
            logger.warning(f"[STATS] Failed to fetch {category} logs: {e}")
            return category, None

    with ThreadPoolExecutor(max_workers=len(LOG_CATEGORIES)) as pool:
        results = list(pool.map(fetch, LOG_CATEGORIES))

    stats = DashboardStats()
    for category, logs in results:
        if logs is None:
            stats.failed_categories.append(category)
            logs = []
        stats.categories[category] = CategoryStats(count=len(logs), items=logs)

        for log in logs:
            stats.staff_performance.update(log.performed_by)
            try:
                stats.activity_by_date[format_month_day(parse_timestamp(log.created_at))] += 1
            except ValueError:
                logger.warning(f"[STATS] Skipping {category} log {log.id} with invalid createdAt")

    logger.debug(f"[STATS] {stats.total} activities between {start} and {end}")
    return stats
