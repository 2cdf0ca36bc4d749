"""Tests for shiftboard.rotation.generator module."""

from datetime import datetime, timedelta

from shiftboard.lib.feedback import FeedbackState
from shiftboard.lib.types import RotationItem, TaskStatus
from shiftboard.rotation.generator import (
    RoutineTaskGenerator,
    build_routine_draft,
    classify_items,
    next_routine_date,
)
from shiftboard.rotation.store import RotationConfigStore

NOW = datetime(2026, 10, 19, 10, 0, 0)  # Monday


class TestNextRoutineDate:
    """Routine weekday math (0=Sun)."""

    def test_later_this_week(self):
        assert next_routine_date(4, NOW) == datetime(2026, 10, 22, 9, 0)

    def test_today_counts(self):
        """Today's weekday returns today at 09:00, even after 09:00."""
        assert next_routine_date(1, NOW) == datetime(2026, 10, 19, 9, 0)

    def test_wraps_to_next_week(self):
        assert next_routine_date(0, NOW) == datetime(2026, 10, 25, 9, 0)
        assert next_routine_date(6, NOW) == datetime(2026, 10, 24, 9, 0)


class TestClassifyItems:
    """Rolling 48h window against now."""

    def test_split(self):
        items = [
            RotationItem(1, "1번 베드", "2026-10-18T10:00:00"),   # 24h ago
            RotationItem(2, "2번 베드", "2026-10-17T10:00:00"),   # exactly 48h
            RotationItem(3, "3번 베드", None),
            RotationItem(4, "4번 베드", "2026-10-20T10:00:00"),   # future
            RotationItem(5, "5번 베드", "broken"),
        ]
        result = classify_items(items, NOW)
        assert [i.id for i, _ in result.recently_serviced] == [1]
        assert [i.id for i in result.needs_service] == [2, 3, 4, 5]

    def test_custom_threshold(self):
        items = [RotationItem(1, "1번 베드", "2026-10-18T10:00:00")]
        result = classify_items(items, NOW, timedelta(hours=12))
        assert result.needs_service == items

    def test_window_differs_from_calendar_age(self):
        """Serviced 47h ago is 'recent' though its badge already says 2 days."""
        items = [RotationItem(1, "1번 베드", "2026-10-17T11:00:00")]
        result = classify_items(items, NOW)
        assert len(result.recently_serviced) == 1


class TestBuildRoutineDraft:
    """Task draft content."""

    def test_draft(self):
        items = [
            RotationItem(1, "1번 베드", "2026-10-18T10:00:00"),
            RotationItem(2, "2번 베드"),
        ]
        task = build_routine_draft(items, 4, NOW)

        assert task.title == "베드 커버 정기 교체 (10월 22일 목요일)"
        assert task.status == TaskStatus.TODO
        assert task.recurrence_type == "none"
        assert task.created_at == "2026-10-22T09:00:00"
        lines = task.description.split("\n")
        assert lines[0] == "정기 베드 커버 교체 업무입니다. (10월 22일 목요일)"
        assert "- [ ] 2번 베드" in lines
        assert "- [x] 1번 베드 (최근 교체됨: 2026. 10. 18.)" in lines
        assert lines.index("**교체 대상:**") < lines.index("- [ ] 2번 베드")

    def test_no_recent_section_when_empty(self):
        task = build_routine_draft([RotationItem(1, "1번 베드")], 4, NOW)
        assert "최근 교체 완료" not in task.description


class TestRoutineTaskGenerator:
    """Storing the generated task."""

    def test_generate_stores_task(self, ctx, storage):
        store = RotationConfigStore(ctx).load()
        outcome = RoutineTaskGenerator(ctx, store).generate()

        assert outcome.success
        assert outcome.message == "10월 22일 목요일 업무가 생성되었습니다."
        assert ctx.feedback.state == FeedbackState.SUCCESS
        assert len(storage.tasks) == 1
        stored = next(iter(storage.tasks.values()))
        assert stored["description"].count("- [ ]") == 10

    def test_failed_insert_leaves_no_task(self, ctx, storage, alerts):
        store = RotationConfigStore(ctx).load()
        storage.connected = False
        outcome = RoutineTaskGenerator(ctx, store).generate()
        storage.connected = True

        assert not outcome.success
        assert ctx.feedback.state == FeedbackState.ERROR
        assert storage.tasks == {}
        assert alerts == ["DB Disconnected"]

    def test_uses_configured_threshold(self, ctx, storage):
        ctx.config.recent_threshold_hours = 12
        store = RotationConfigStore(ctx).load()
        store.items[0].last_serviced_at = "2026-10-18T10:00:00"
        task = RoutineTaskGenerator(ctx, store).draft()
        assert "- [ ] 1번 베드" in task.description.split("\n")
