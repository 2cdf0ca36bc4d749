"""Tests for the stats module."""

from datetime import datetime

import pytest

from shiftboard.lib.stats import (
    DashboardStats,
    append_log,
    fetch_dashboard_stats,
    fetch_logs,
)
from shiftboard.lib.validate import ValidationError
from shiftboard.storage import StorageError

START = datetime(2026, 10, 18)
END = datetime(2026, 10, 24, 23, 59, 59)


class TestAppendLog:
    """Writing activity records."""

    def test_record_shape(self, storage):
        result = append_log(storage, "bed", "CHANGE", ["a"], datetime(2026, 10, 19, 10, 0),
                            item_id=3, item_name="3번 베드")
        assert result.success
        record = storage.logs["bed"][0]
        assert record["id"] == result.data
        assert record["createdAt"] == "2026-10-19T10:00:00"
        assert record["itemName"] == "3번 베드"
        assert "note" not in record

    def test_unknown_category(self, storage):
        with pytest.raises(ValidationError):
            append_log(storage, "kitchen", "CHANGE", ["a"], datetime(2026, 10, 19))

    def test_fetch_logs_newest_first(self, storage):
        append_log(storage, "laundry", "WASH", ["a"], datetime(2026, 10, 19, 9))
        append_log(storage, "laundry", "DRY", ["b"], datetime(2026, 10, 20, 9))
        logs = fetch_logs(storage, "laundry", START, END)
        assert [log.action_type for log in logs] == ["DRY", "WASH"]


class TestDashboardStats:
    """Aggregation across categories."""

    @pytest.fixture
    def populated(self, storage):
        append_log(storage, "bed", "CHANGE", ["a", "b"], datetime(2026, 10, 19, 10))
        append_log(storage, "bed", "CHANGE", ["a"], datetime(2026, 10, 20, 10))
        append_log(storage, "laundry", "WASH", ["b"], datetime(2026, 10, 19, 15))
        append_log(storage, "pt_room", "CLEAN", ["c"], datetime(2026, 10, 10, 15))  # out of range
        return storage

    def test_counts(self, populated):
        stats = fetch_dashboard_stats(populated, START, END)
        assert stats.categories["bed"].count == 2
        assert stats.categories["laundry"].count == 1
        assert stats.categories["pt_room"].count == 0
        assert set(stats.categories) == {"pt_room", "shockwave", "bed", "laundry", "changing_room"}
        assert stats.total == 3

    def test_staff_performance(self, populated):
        stats = fetch_dashboard_stats(populated, START, END)
        assert stats.staff_performance == {"a": 2, "b": 2}

    def test_activity_by_date(self, populated):
        stats = fetch_dashboard_stats(populated, START, END)
        assert stats.activity_by_date == {"10. 19.": 2, "10. 20.": 1}

    def test_failed_category_contributes_nothing(self, populated, monkeypatch, caplog):
        real_query = populated.query_logs

        def flaky(category, start, end):
            if category == "laundry":
                raise StorageError("timeout")
            return real_query(category, start, end)

        monkeypatch.setattr(populated, "query_logs", flaky)
        stats = fetch_dashboard_stats(populated, START, END)

        assert stats.failed_categories == ["laundry"]
        assert stats.categories["laundry"].count == 0
        assert stats.categories["bed"].count == 2
        assert "Failed to fetch laundry logs" in caplog.text

    def test_empty_total(self):
        assert DashboardStats().total == 0
