"""Tests for shiftboard.workflow.fsm module."""

import pytest
from transitions import MachineError

from shiftboard.lib.types import Task, TaskStatus
from shiftboard.storage import ConnectivityError, MemoryStorage
from shiftboard.workflow.fsm import (
    STATES,
    TRANSITIONS,
    TRIGGER_FOR,
    TaskFSM,
)


class TestFSMStates:
    """Tests for FSM state definitions."""

    def test_all_states_defined(self):
        """States are the stored status labels."""
        assert set(STATES) == {"할일", "진행중", "완료", "건너뜀"}

    def test_every_transition_uses_known_states(self):
        for t in TRANSITIONS:
            assert t["source"] in STATES
            assert t["dest"] in STATES

    def test_trigger_lookup(self):
        assert TRIGGER_FOR[("할일", "진행중")] == "start"
        assert TRIGGER_FOR[("진행중", "완료")] == "complete"
        assert TRIGGER_FOR[("완료", "진행중")] == "reopen"
        assert TRIGGER_FOR[("진행중", "할일")] == "stop"
        assert ("완료", "할일") not in TRIGGER_FOR

    def test_skipped_is_terminal(self):
        assert not any(t["source"] == "건너뜀" for t in TRANSITIONS)


class TestFSMBasic:
    """Basic FSM functionality tests."""

    @pytest.fixture
    def storage(self):
        return MemoryStorage()

    @pytest.fixture
    def task(self, storage):
        task = Task(id="t1", title="청소", created_at="2026-10-19T09:00:00")
        storage.insert_task(task.to_record())
        return task

    def test_initial_state_from_task(self, storage, task):
        fsm = TaskFSM(task, storage)
        assert fsm.state == "할일"

    def test_start_persists(self, storage, task):
        """start should write 진행중 and update the task."""
        fsm = TaskFSM(task, storage)
        fsm.start()
        assert fsm.state == "진행중"
        assert task.status == TaskStatus.IN_PROGRESS
        assert storage.tasks["t1"]["status"] == "진행중"

    def test_complete_writes_completed_by(self, storage, task):
        fsm = TaskFSM(task, storage)
        fsm.start()
        fsm.complete(completed_by=["a", "b"])
        assert storage.tasks["t1"]["status"] == "완료"
        assert storage.tasks["t1"]["completedBy"] == ["a", "b"]
        assert task.completed_by == ["a", "b"]

    def test_reopen_clears_completed_by(self, storage, task):
        fsm = TaskFSM(task, storage)
        fsm.complete(completed_by=["a"])
        fsm.reopen()
        assert storage.tasks["t1"]["completedBy"] == []
        assert task.completed_by == []

    def test_invalid_trigger_raises(self, storage, task):
        fsm = TaskFSM(task, storage)
        with pytest.raises(MachineError):
            fsm.reopen()
        assert fsm.state == "할일"

    def test_failed_write_keeps_state(self, storage, task):
        """The machine stays put when the status write fails."""
        fsm = TaskFSM(task, storage)
        storage.connected = False
        with pytest.raises(ConnectivityError):
            fsm.start()
        assert fsm.state == "할일"
        assert task.status == TaskStatus.TODO

    def test_available_triggers(self, storage, task):
        fsm = TaskFSM(task, storage)
        assert fsm.can("start")
        assert fsm.can("complete")
        assert fsm.can("skip")
        assert not fsm.can("reopen")

    def test_skip_from_done_keeps_completed_by(self, storage, task):
        fsm = TaskFSM(task, storage)
        fsm.complete(completed_by=["a"])
        fsm.skip()
        assert storage.tasks["t1"]["completedBy"] == ["a"]
        assert task.completed_by == ["a"]

    def test_transition_logged(self, storage, task, caplog):
        caplog.set_level("INFO")
        TaskFSM(task, storage).start()
        assert "[FSM] t1: 할일 -> 진행중 (start)" in caplog.text
