"""
Storage contract consumed by the shift board.

The board does not own persistence. Adapters implement this contract:
- Calls that cannot reach the backing store raise ConnectivityError.
- Calls the backing store rejects return StorageResult(success=False, ...).
- Reads return plain records (dicts in the stored camelCase shape).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


class ConnectivityError(Exception):
    """The storage backend is unavailable."""
    pass


class StorageError(Exception):
    """A storage call reported failure."""
    pass


@dataclass
class StorageResult:
    """Result of a storage write."""
    success: bool
    message: str | None = None
    data: Any = None

    def raise_for_failure(self, context: str = "") -> "StorageResult":
        """Raise StorageError if the write failed, else return self."""
        if not self.success:
            prefix = f"{context}: " if context else ""
            raise StorageError(f"{prefix}{self.message or 'storage write failed'}")
        return self


def ok(data: Any = None) -> StorageResult:
    return StorageResult(success=True, data=data)


def failed(message: str) -> StorageResult:
    return StorageResult(success=False, message=message)


class Storage(ABC):
    """Abstract storage collaborator.

    Settings are single opaque strings per key (last write wins). Tasks,
    templates and staff are keyed by string id. Logs are append-only,
    one collection per category.
    """

    # --- Settings ---
    @abstractmethod
    def get_setting(self, key: str) -> str | None: ...

    @abstractmethod
    def put_setting(self, key: str, value: str) -> StorageResult: ...

    # --- Tasks ---
    @abstractmethod
    def list_tasks(self) -> list[dict]: ...

    @abstractmethod
    def insert_task(self, task: dict) -> StorageResult: ...

    @abstractmethod
    def update_task(self, task_id: str, fields: dict) -> StorageResult: ...

    @abstractmethod
    def update_task_status(self, task_id: str, status: str,
                           completed_by: list[str] | None = None) -> StorageResult: ...

    @abstractmethod
    def delete_task(self, task_id: str) -> StorageResult: ...

    # --- Templates ---
    @abstractmethod
    def list_templates(self) -> list[dict]: ...

    @abstractmethod
    def insert_template(self, template: dict) -> StorageResult: ...

    # --- Staff ---
    @abstractmethod
    def list_staff(self) -> list[dict]: ...

    @abstractmethod
    def insert_staff(self, staff: dict) -> StorageResult: ...

    @abstractmethod
    def update_staff(self, staff_id: str, fields: dict) -> StorageResult: ...

    @abstractmethod
    def delete_staff(self, staff_id: str) -> StorageResult: ...

    # --- Logs ---
    @abstractmethod
    def append_log(self, category: str, record: dict) -> StorageResult: ...

    @abstractmethod
    def query_logs(self, category: str, start: datetime, end: datetime) -> list[dict]: ...

    def close(self) -> None:
        """Release resources. Default: nothing to release."""
        logger.debug(f"[STORAGE] {type(self).__name__} closed")
