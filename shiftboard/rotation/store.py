"""
Rotation pool state.

Items and config are persisted together as one JSON blob under a single
settings key. That write is the unit of consistency for the rotation
subsystem; it is not atomic with the task store or the activity logs.
Read-modify-write without version checks: the last writer wins.
"""

import json
import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from shiftboard.lib import validate
from shiftboard.lib.checklist import contains_name, names_match, normalize_name
from shiftboard.lib.dates import to_timestamp
from shiftboard.lib.feedback import OperationOutcome, PartialSyncError
from shiftboard.lib.inputs import RenameInput, ResizeInput, RotationConfigInput
from shiftboard.lib.stats import append_log
from shiftboard.lib.types import RotationConfig, RotationItem, Task, TaskStatus
from shiftboard.rotation.status import RotationStatus, calculate_status
from shiftboard.rotation.sync import ChecklistSync
from shiftboard.storage import ConnectivityError, StorageError

if TYPE_CHECKING:
    from shiftboard.lib.context import BoardContext

logger = logging.getLogger(__name__)

SCHEMA_NAME = "rotation_settings"
LOG_CATEGORY = "bed"


def default_item(item_id: int) -> RotationItem:
    return RotationItem(id=item_id, name=f"{item_id}번 베드")


def initialize_items(count: int) -> list[RotationItem]:
    return [default_item(i) for i in range(1, count + 1)]


def resize_items(items: list[RotationItem], new_count: int) -> list[RotationItem]:
    """Grow with default-named items or truncate from the tail.

    Truncated items are discarded, not archived.
    """
    if new_count > len(items):
        return list(items) + [default_item(i) for i in range(len(items) + 1, new_count + 1)]
    return list(items[:new_count])


class RotationConfigStore:
    """Rotation items + config with load/save against the settings store."""

    def __init__(self, ctx: "BoardContext"):
        self.ctx = ctx
        self.config: RotationConfig = RotationConfig(**vars(ctx.config.default_rotation))
        self.items: list[RotationItem] = initialize_items(self.config.pool_size)
        self.sync = ChecklistSync(ctx)

    @property
    def setting_key(self) -> str:
        return self.ctx.config.setting_key

    # --- Persistence ---
    def load(self) -> "RotationConfigStore":
        """Read the blob. Missing or invalid data falls back to defaults."""
        raw = self.ctx.storage.get_setting(self.setting_key)
        default = self.ctx.config.default_rotation
        self.config = RotationConfig(**vars(default))
        self.items = initialize_items(default.pool_size)
        if not raw:
            return self

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"[ROTATION] Failed to parse {self.setting_key}: {e}")
            return self

        if not isinstance(data, dict):
            logger.warning(f"[ROTATION] Ignoring {self.setting_key}: expected an object")
            return self

        if isinstance(data.get("config"), dict):
            try:
                validate.validate({"beds": [], "config": data["config"]}, SCHEMA_NAME)
                self.config = RotationConfig.from_record(data["config"])
            except validate.ValidationError as e:
                logger.warning(f"[ROTATION] Ignoring stored config: {e}")

        beds = data.get("beds")
        if isinstance(beds, list) and beds:
            try:
                validate.validate({"beds": beds, "config": self.config.to_record()}, SCHEMA_NAME)
                self.items = [RotationItem.from_record(b) for b in beds]
            except validate.ValidationError as e:
                logger.warning(f"[ROTATION] Ignoring stored items: {e}")
                self.items = initialize_items(self.config.pool_size)
        else:
            self.items = initialize_items(self.config.pool_size)
        return self

    def to_blob(self) -> dict:
        return {
            "beds": [item.to_record() for item in self.items],
            "config": self.config.to_record(),
        }

    def save(self) -> None:
        """Write items + config as one blob.

        Raises:
            ValidationError: blob doesn't match the schema (nothing written)
            StorageError / ConnectivityError: write failed
        """
        blob = self.to_blob()
        validate.validate_before_write(blob, SCHEMA_NAME, f"settings[{self.setting_key}]")
        payload = json.dumps(blob, ensure_ascii=False)
        self.ctx.storage.put_setting(self.setting_key, payload).raise_for_failure(
            f"Failed to save {self.setting_key}"
        )

    # --- Queries ---
    def get_item(self, item_id: int) -> Optional[RotationItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def find_by_name(self, name: str) -> Optional[RotationItem]:
        """Item whose name fuzzily matches `name` (whitespace-insensitive, either direction).

        When several item names appear inside `name` the longest wins, so
        "11번 베드 (교체 대상)" resolves to "11번 베드" and not "1번 베드".
        """
        target = normalize_name(name)
        matches = [item for item in self.items if names_match(item.name, name)]
        if not matches:
            return None
        contained = [item for item in matches if contains_name(target, normalize_name(item.name))]
        if contained:
            return max(contained, key=lambda item: len(normalize_name(item.name)))
        return matches[0]

    def statuses(self) -> list[tuple[RotationItem, RotationStatus]]:
        now = self.ctx.now()
        return [(item, calculate_status(item, self.config.interval_days, now)) for item in self.items]

    # --- Mutations ---
    def resize(self, new_count: int) -> None:
        """Resize the pool to `new_count` and persist.

        Raises:
            ValidationError: count outside [1, 50] (nothing written)
        """
        validate.parse_input(ResizeInput, pool_size=new_count)
        previous_items, previous_count = self.items, self.config.pool_size
        self.items = resize_items(self.items, new_count)
        self.config.pool_size = new_count
        try:
            self.save()
        except Exception:
            self.items, self.config.pool_size = previous_items, previous_count
            raise

    def rename(self, item_id: int, new_name: str) -> bool:
        """Rename an item and save silently.

        Returns False if the save failed (the failure is logged, not surfaced).

        Raises:
            ValidationError: empty name or unknown item (nothing written)
        """
        parsed = validate.parse_input(RenameInput, name=new_name)
        item = self.get_item(item_id)
        if item is None:
            raise validate.ValidationError("RenameInput", f"Unknown item: {item_id}", "item_id")

        previous_name, item.name = item.name, parsed.name
        try:
            self.save()
        except (StorageError, ConnectivityError) as e:
            item.name = previous_name
            logger.error(f"[ROTATION] Failed to save name of item {item_id}: {e}")
            return False
        return True

    def update_config(
        self,
        pool_size: int,
        interval_days: int,
        routine_weekday: int,
        display_columns: int,
    ) -> OperationOutcome:
        """Apply new settings, resizing the pool to match, in one write.

        Raises:
            ValidationError: any value out of range (nothing written)
        """
        parsed = validate.parse_input(
            RotationConfigInput,
            pool_size=pool_size,
            interval_days=interval_days,
            routine_weekday=routine_weekday,
            display_columns=display_columns,
        )

        def operation():
            previous_items, previous_config = self.items, self.config
            self.config = RotationConfig(**parsed.model_dump())
            self.items = resize_items(self.items, parsed.pool_size)
            try:
                self.save()
            except Exception:
                self.items, self.config = previous_items, previous_config
                raise
            logger.info(f"[ROTATION] Config updated: {self.config}")
            return self.config

        return self.ctx.feedback.run("설정 저장 중...", "설정이 저장되었습니다.", operation)

    def record_service(self, item_id: int, staff_ids: list[str]) -> OperationOutcome:
        """Mark an item serviced now and mirror it into log, audit task and checklist.

        The item write happens first and is never rolled back once stored;
        failures of the mirror writes are reported together as PartialSyncError.

        Raises:
            ValidationError: unknown item (nothing written)
        """
        item = self.get_item(item_id)
        if item is None:
            raise validate.ValidationError("record_service", f"Unknown item: {item_id}", "item_id")

        def operation():
            now = self.ctx.now()
            timestamp = to_timestamp(now)
            previous = (item.last_serviced_at, list(item.last_serviced_by))

            item.last_serviced_at = timestamp
            item.last_serviced_by = list(staff_ids)
            try:
                self.save()
            except Exception:
                item.last_serviced_at, item.last_serviced_by = previous
                raise
            logger.info(f"[ROTATION] Item {item.id} ({item.name}) serviced by {staff_ids}")

            failures = self._mirror_service(item, staff_ids, now)
            if failures:
                log_failed = any(step == "log" for step, _ in failures)
                raise PartialSyncError(
                    "교체 기록은 저장되었지만 일부 동기화에 실패했습니다",
                    failures,
                    alert=log_failed,
                )
            return item

        return self.ctx.feedback.run("교체 기록 업데이트 중...", "교체 완료!", operation)

    def _mirror_service(self, item: RotationItem, staff_ids: list[str], now: datetime) -> list[tuple[str, str]]:
        """Best-effort writes after a service is stored. Returns (step, reason) failures."""
        failures = []

        try:
            append_log(
                self.ctx.storage, LOG_CATEGORY, "CHANGE", staff_ids, now,
                item_id=item.id, item_name=item.name,
            ).raise_for_failure("Failed to write log")
        except (StorageError, ConnectivityError, validate.ValidationError) as e:
            logger.error(f"[ROTATION] Log write failed for item {item.id}: {e}")
            failures.append(("log", str(e)))

        audit = Task(
            id=str(uuid.uuid4()),
            title=f"{item.name} 커버 교체",
            description="배드 관리 탭에서 수동 교체 기록됨",
            status=TaskStatus.DONE,
            assignee_ids=[],
            completed_by=list(staff_ids),
            created_at=to_timestamp(now),
            recurrence_type="none",
        )
        try:
            self.ctx.storage.insert_task(audit.to_record()).raise_for_failure("Failed to write audit task")
        except (StorageError, ConnectivityError) as e:
            logger.error(f"[ROTATION] Audit task failed for item {item.id}: {e}")
            failures.append(("audit_task", str(e)))

        try:
            self.sync.sync_by_name(item.name, staff_ids)
        except (StorageError, ConnectivityError) as e:
            logger.error(f"[ROTATION] Checklist sync failed for item {item.id}: {e}")
            failures.append(("checklist", str(e)))

        return failures

    def record_service_by_name(self, name: str, staff_ids: list[str]) -> Optional[RotationItem]:
        """Update the item matching a checklist line's text.

        Used when a rotation line is checked on the board. The blob is reloaded
        first since the board may be stale. No matching item is a silent
        no-op (most checklist lines are not rotation items).

        Raises:
            StorageError / ConnectivityError: the blob write failed
        """
        self.load()
        item = self.find_by_name(name)
        if item is None:
            logger.debug(f"[ROTATION] No item matches '{name}', ignoring")
            return None

        previous = (item.last_serviced_at, list(item.last_serviced_by))
        item.last_serviced_at = to_timestamp(self.ctx.now())
        item.last_serviced_by = list(staff_ids)
        try:
            self.save()
        except Exception:
            item.last_serviced_at, item.last_serviced_by = previous
            raise
        logger.info(f"[ROTATION] Item {item.id} ({item.name}) serviced via checklist")
        return item
