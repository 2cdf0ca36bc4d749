"""
Session context for the shift board.

One BoardContext is created when a session starts and passed to every
component; nothing in the package reaches for a module-level client.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from shiftboard.lib.config import BoardConfig, load_board_config
from shiftboard.lib.feedback import OperationFeedback, log_alert, threading_scheduler
from shiftboard.lib.types import Staff, Task, Template
from shiftboard.storage import JsonFileStorage, Storage

logger = logging.getLogger(__name__)


@dataclass
class BoardContext:
    """Handle bundling storage, configuration, feedback and the clock."""
    storage: Storage
    config: BoardConfig
    feedback: OperationFeedback
    clock: Callable[[], datetime] = datetime.now
    closed: bool = field(default=False, init=False)

    @classmethod
    def create(
        cls,
        storage: Optional[Storage] = None,
        config: Optional[BoardConfig] = None,
        config_dir: Optional[Path] = None,
        clock: Callable[[], datetime] = datetime.now,
        scheduler=threading_scheduler,
        alert=log_alert,
        on_refresh: Optional[Callable[[], None]] = None,
    ) -> "BoardContext":
        """Create a session context.

        Without explicit storage, opens JsonFileStorage at config.data_dir.
        """
        if config is None:
            config = load_board_config(config_dir)
        if storage is None:
            storage = JsonFileStorage(config.data_dir)

        feedback = OperationFeedback(
            success_clear_seconds=config.success_clear_seconds,
            error_clear_seconds=config.error_clear_seconds,
            scheduler=scheduler,
            alert=alert,
            on_refresh=on_refresh,
        )
        logger.debug(f"[CONTEXT] Session opened with {type(storage).__name__}")
        return cls(storage=storage, config=config, feedback=feedback, clock=clock)

    def now(self) -> datetime:
        return self.clock()

    # Read model helpers
    def load_tasks(self) -> list[Task]:
        return [Task.from_record(r) for r in self.storage.list_tasks()]

    def load_templates(self) -> list[Template]:
        return [Template.from_record(r) for r in self.storage.list_templates()]

    def load_staff(self) -> list[Staff]:
        return [Staff.from_record(r) for r in self.storage.list_staff()]

    def find_task(self, task_id: str) -> Task | None:
        for task in self.load_tasks():
            if task.id == task_id:
                return task
        return None

    def find_staff(self, staff_id: str) -> Staff | None:
        for staff in self.load_staff():
            if staff.id == staff_id:
                return staff
        return None

    def close(self) -> None:
        """Tear down the session (logout or reconfiguration)."""
        if self.closed:
            return
        self.storage.close()
        self.closed = True
        logger.debug("[CONTEXT] Session closed")
