"""
In-process storage adapter.

Holds every collection in dicts. Used by tests and by embedders that manage
persistence themselves; JsonFileStorage builds on it.
"""

import copy
import logging
from datetime import datetime

from shiftboard.lib.constants import LOG_CATEGORIES
from shiftboard.lib.dates import parse_timestamp
from shiftboard.lib.types import TaskStatus
from shiftboard.storage.base import ConnectivityError, Storage, StorageResult, failed, ok

logger = logging.getLogger(__name__)


class MemoryStorage(Storage):
    """Dict-backed storage.

    Set `connected = False` to simulate an unreachable backend: every call
    then raises ConnectivityError.
    """

    def __init__(self):
        self.connected = True
        self.settings: dict[str, str] = {}
        self.tasks: dict[str, dict] = {}
        self.templates: dict[str, dict] = {}
        self.staff: dict[str, dict] = {}
        self.logs: dict[str, list[dict]] = {category: [] for category in LOG_CATEGORIES}

    def _check(self) -> None:
        if not self.connected:
            raise ConnectivityError("DB Disconnected")

    def _commit(self, collection: str) -> None:
        """Hook called after every successful mutation of `collection`."""
        pass

    # --- Settings ---
    def get_setting(self, key: str) -> str | None:
        self._check()
        return self.settings.get(key)

    def put_setting(self, key: str, value: str) -> StorageResult:
        self._check()
        self.settings[key] = str(value)
        self._commit("settings")
        return ok()

    # --- Tasks ---
    def list_tasks(self) -> list[dict]:
        self._check()
        return [copy.deepcopy(t) for t in self.tasks.values()]

    def insert_task(self, task: dict) -> StorageResult:
        self._check()
        if not task.get("id"):
            return failed("ID is missing")
        record = copy.deepcopy(task)
        record.setdefault("completedBy", [])
        record.setdefault("assigneeIds", [])
        self.tasks[record["id"]] = record
        self._commit("tasks")
        return ok(record["id"])

    def update_task(self, task_id: str, fields: dict) -> StorageResult:
        self._check()
        if task_id not in self.tasks:
            return failed(f"Task not found: {task_id}")
        allowed = {"title", "description", "createdAt", "assigneeIds"}
        for key, value in fields.items():
            if key in allowed:
                self.tasks[task_id][key] = copy.deepcopy(value)
        self._commit("tasks")
        return ok()

    def update_task_status(self, task_id: str, status: str,
                           completed_by: list[str] | None = None) -> StorageResult:
        self._check()
        if task_id not in self.tasks:
            return failed(f"Task not found: {task_id}")
        record = self.tasks[task_id]
        record["status"] = status
        if completed_by is not None:
            record["completedBy"] = list(completed_by)
        elif status != TaskStatus.DONE.value:
            record["completedBy"] = []
        self._commit("tasks")
        return ok()

    def delete_task(self, task_id: str) -> StorageResult:
        self._check()
        if not task_id:
            return failed("ID is missing")
        if self.tasks.pop(task_id, None) is None:
            return failed(f"Task not found: {task_id}")
        self._commit("tasks")
        return ok()

    # --- Templates ---
    def list_templates(self) -> list[dict]:
        self._check()
        return [copy.deepcopy(t) for t in self.templates.values()]

    def insert_template(self, template: dict) -> StorageResult:
        self._check()
        if not template.get("id"):
            return failed("ID is missing")
        self.templates[template["id"]] = copy.deepcopy(template)
        self._commit("templates")
        return ok(template["id"])

    # --- Staff ---
    def list_staff(self) -> list[dict]:
        self._check()
        return [copy.deepcopy(s) for s in self.staff.values()]

    def insert_staff(self, staff: dict) -> StorageResult:
        self._check()
        if not staff.get("id"):
            return failed("ID is missing")
        self.staff[staff["id"]] = copy.deepcopy(staff)
        self._commit("staff")
        return ok(staff["id"])

    def update_staff(self, staff_id: str, fields: dict) -> StorageResult:
        self._check()
        if staff_id not in self.staff:
            return failed(f"Staff not found: {staff_id}")
        for key in ("name", "role", "color", "isActive"):
            if key in fields and fields[key] is not None:
                self.staff[staff_id][key] = fields[key]
        self._commit("staff")
        return ok()

    def delete_staff(self, staff_id: str) -> StorageResult:
        self._check()
        if not staff_id:
            return failed("ID is missing")
        if self.staff.pop(staff_id, None) is None:
            return failed(f"Staff not found: {staff_id}")
        self._commit("staff")
        return ok()

    # --- Logs ---
    def append_log(self, category: str, record: dict) -> StorageResult:
        self._check()
        if category not in self.logs:
            return failed(f"Unknown log category: {category}")
        self.logs[category].append(copy.deepcopy(record))
        self._commit(f"logs/{category}")
        return ok(record.get("id"))

    def query_logs(self, category: str, start: datetime, end: datetime) -> list[dict]:
        """Logs with start <= createdAt <= end, newest first."""
        self._check()
        matches = []
        for record in self.logs.get(category, []):
            try:
                created = parse_timestamp(record["createdAt"])
            except (KeyError, ValueError):
                logger.warning(f"[STORAGE] Skipping {category} log without valid createdAt: {record.get('id')}")
                continue
            if start <= created <= end:
                matches.append((created, copy.deepcopy(record)))
        matches.sort(key=lambda pair: pair[0], reverse=True)
        return [record for _, record in matches]
