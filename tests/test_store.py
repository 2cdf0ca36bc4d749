"""Tests for shiftboard.rotation.store module."""

import json

import pytest

from shiftboard.lib.feedback import FeedbackState, PartialSyncError
from shiftboard.lib.types import Task, TaskStatus
from shiftboard.lib.validate import ValidationError
from shiftboard.rotation.store import RotationConfigStore
from shiftboard.storage.base import failed

SETTING_KEY = "bed_manager_data"


def stored_blob(storage):
    return json.loads(storage.settings[SETTING_KEY])


class TestLoad:
    """Reading the settings blob."""

    def test_defaults_when_missing(self, ctx):
        store = RotationConfigStore(ctx).load()
        assert len(store.items) == 10
        assert store.items[0].name == "1번 베드"
        assert store.items[9].id == 10
        assert store.config.interval_days == 7
        assert store.config.routine_weekday == 4
        assert store.config.display_columns == 5

    def test_reads_blob(self, ctx, storage):
        storage.settings[SETTING_KEY] = json.dumps({
            "beds": [{"id": 1, "name": "창가 베드", "lastChanged": "2026-10-18T10:00:00",
                      "lastChangedBy": ["a"]}],
            "config": {"count": 1, "interval": 3, "routineDay": 2, "cols": 1},
        })
        store = RotationConfigStore(ctx).load()
        assert store.items[0].name == "창가 베드"
        assert store.items[0].last_serviced_by == ["a"]
        assert store.config.interval_days == 3

    def test_corrupt_blob_falls_back(self, ctx, storage, caplog):
        storage.settings[SETTING_KEY] = "{not json"
        store = RotationConfigStore(ctx).load()
        assert len(store.items) == 10
        assert "Failed to parse bed_manager_data" in caplog.text

    def test_invalid_config_falls_back(self, ctx, storage, caplog):
        storage.settings[SETTING_KEY] = json.dumps({
            "beds": [], "config": {"count": 99, "interval": 7, "routineDay": 4, "cols": 5},
        })
        store = RotationConfigStore(ctx).load()
        assert store.config.pool_size == 10
        assert "Ignoring stored config" in caplog.text


class TestResize:
    """Pool resizing."""

    def test_grow_and_shrink_preserves_items(self, ctx, storage):
        """10 -> 12 -> 10 keeps items 1-10 untouched."""
        store = RotationConfigStore(ctx).load()
        store.rename(3, "창가 베드")
        store.items[4].last_serviced_at = "2026-10-15T09:00:00"

        store.resize(12)
        assert [i.id for i in store.items] == list(range(1, 13))
        assert store.items[10].name == "11번 베드"
        assert store.items[11].name == "12번 베드"

        store.resize(10)
        assert [i.id for i in store.items] == list(range(1, 11))
        assert store.items[2].name == "창가 베드"
        assert store.items[4].last_serviced_at == "2026-10-15T09:00:00"
        assert len(stored_blob(storage)["beds"]) == 10
        assert stored_blob(storage)["config"]["count"] == 10

    def test_idempotent(self, ctx):
        store = RotationConfigStore(ctx).load()
        store.resize(12)
        first = [(i.id, i.name) for i in store.items]
        store.resize(12)
        assert [(i.id, i.name) for i in store.items] == first

    @pytest.mark.parametrize("count", [0, 51, -3])
    def test_out_of_range_rejected(self, ctx, storage, count):
        store = RotationConfigStore(ctx).load()
        with pytest.raises(ValidationError):
            store.resize(count)
        assert SETTING_KEY not in storage.settings
        assert len(store.items) == 10

    def test_failed_save_keeps_items(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        storage.connected = False
        with pytest.raises(Exception):
            store.resize(12)
        assert len(store.items) == 10
        assert store.config.pool_size == 10


class TestRename:
    """Silent rename."""

    def test_rename_persists(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        assert store.rename(1, "  창가 베드 ")
        assert stored_blob(storage)["beds"][0]["name"] == "창가 베드"

    def test_empty_name_rejected(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        with pytest.raises(ValidationError):
            store.rename(1, "   ")
        assert store.items[0].name == "1번 베드"
        assert SETTING_KEY not in storage.settings

    def test_unknown_item(self, ctx):
        store = RotationConfigStore(ctx).load()
        with pytest.raises(ValidationError):
            store.rename(42, "x")

    def test_save_failure_is_logged_not_raised(self, ctx, storage, caplog):
        store = RotationConfigStore(ctx).load()
        storage.connected = False
        assert store.rename(1, "창가 베드") is False
        assert "Failed to save name of item 1" in caplog.text
        assert ctx.feedback.state == FeedbackState.IDLE
        assert store.items[0].name == "1번 베드"


class TestUpdateConfig:
    """Settings form."""

    def test_update_resizes_and_saves_once(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        outcome = store.update_config(pool_size=12, interval_days=5, routine_weekday=1, display_columns=4)

        assert outcome.success
        blob = stored_blob(storage)
        assert blob["config"] == {"count": 12, "interval": 5, "routineDay": 1, "cols": 4}
        assert len(blob["beds"]) == 12

    @pytest.mark.parametrize("field, value", [
        ("pool_size", 0), ("interval_days", 0), ("interval_days", 366),
        ("routine_weekday", 7), ("display_columns", 11),
    ])
    def test_rejects_out_of_range(self, ctx, storage, field, value):
        store = RotationConfigStore(ctx).load()
        values = dict(pool_size=10, interval_days=7, routine_weekday=4, display_columns=5)
        values[field] = value
        with pytest.raises(ValidationError):
            store.update_config(**values)
        assert SETTING_KEY not in storage.settings
        assert ctx.feedback.state == FeedbackState.IDLE

    def test_failed_save_restores_state(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        storage.connected = False
        outcome = store.update_config(pool_size=12, interval_days=5, routine_weekday=1, display_columns=4)
        assert not outcome.success
        assert len(store.items) == 10
        assert store.config.interval_days == 7


class TestRecordService:
    """Changing an item: structured write plus mirrors."""

    def routine_task(self, storage):
        task = Task(id="routine", title="베드 커버 정기 교체", status=TaskStatus.TODO,
                    description="- [ ] 1번 베드 (교체 대상)\n- [ ] 2번 베드",
                    created_at="2026-10-22T09:00:00")
        storage.insert_task(task.to_record())

    def test_updates_item_log_audit_and_checklist(self, ctx, storage):
        self.routine_task(storage)
        store = RotationConfigStore(ctx).load()
        outcome = store.record_service(1, ["staff-a"])

        assert outcome.success
        assert outcome.message == "교체 완료!"
        bed = stored_blob(storage)["beds"][0]
        assert bed["lastChanged"] == "2026-10-19T10:00:00"
        assert bed["lastChangedBy"] == ["staff-a"]

        logs = storage.logs["bed"]
        assert len(logs) == 1
        assert logs[0]["actionType"] == "CHANGE"
        assert logs[0]["itemId"] == 1
        assert logs[0]["performedBy"] == ["staff-a"]

        audit = [t for t in storage.tasks.values() if t["id"] != "routine"]
        assert len(audit) == 1
        assert audit[0]["title"] == "1번 베드 커버 교체"
        assert audit[0]["status"] == "완료"
        assert audit[0]["completedBy"] == ["staff-a"]

        line = storage.tasks["routine"]["description"].split("\n")[0]
        assert line == "- [x] 1번 베드 (교체 대상) (관리자탭 교체: 2026. 10. 19.)"

    def test_log_failure_reports_and_alerts(self, ctx, storage, alerts, monkeypatch):
        """Item write stands; the failed log is reported with an alert."""
        monkeypatch.setattr(storage, "append_log", lambda category, record: failed("log table down"))
        store = RotationConfigStore(ctx).load()
        outcome = store.record_service(2, ["staff-a"])

        assert not outcome.success
        assert isinstance(outcome.error, PartialSyncError)
        assert outcome.error.failures[0][0] == "log"
        assert stored_blob(storage)["beds"][1]["lastChangedBy"] == ["staff-a"]
        assert len(alerts) == 1

    def test_checklist_failure_reports_without_alert(self, ctx, storage, alerts, monkeypatch):
        self.routine_task(storage)
        monkeypatch.setattr(storage, "update_task", lambda task_id, fields: failed("conflict"))
        store = RotationConfigStore(ctx).load()
        outcome = store.record_service(1, ["staff-a"])

        assert not outcome.success
        assert [step for step, _ in outcome.error.failures] == ["checklist"]
        assert stored_blob(storage)["beds"][0]["lastChanged"] == "2026-10-19T10:00:00"
        assert alerts == []

    def test_disconnected_writes_nothing(self, ctx, storage, alerts):
        store = RotationConfigStore(ctx).load()
        storage.connected = False
        outcome = store.record_service(1, ["staff-a"])
        storage.connected = True

        assert not outcome.success
        assert store.items[0].last_serviced_at is None
        assert storage.logs["bed"] == []
        assert storage.tasks == {}
        assert alerts == ["DB Disconnected"]

    def test_unknown_item_rejected(self, ctx):
        store = RotationConfigStore(ctx).load()
        with pytest.raises(ValidationError):
            store.record_service(99, ["staff-a"])


class TestRecordServiceByName:
    """Reverse sync from a checked board line."""

    def test_matches_item(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        store.resize(12)
        item = store.record_service_by_name("11번 베드 (교체 대상)", ["staff-b"])

        assert item.id == 11
        assert stored_blob(storage)["beds"][10]["lastChangedBy"] == ["staff-b"]
        assert stored_blob(storage)["beds"][0]["lastChanged"] is None

    def test_unrelated_line_ignored(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        assert store.record_service_by_name("세탁기 필터 청소", ["staff-b"]) is None
        assert SETTING_KEY not in storage.settings
