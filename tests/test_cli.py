"""Tests for the shiftboard command line."""

import json

import pytest

from shiftboard.cli import main


@pytest.fixture
def board(tmp_path):
    (tmp_path / "board.yaml").write_text("data_dir: data\n", encoding="utf-8")
    return tmp_path


def run(board, *argv):
    return main(["--dir", str(board), *argv])


def read(board, filename):
    return json.loads((board / "data" / filename).read_text(encoding="utf-8"))


def rotation_blob(board):
    return json.loads(read(board, "settings.json")["bed_manager_data"])


class TestRotationCommands:
    """generate / change / rename / config."""

    def test_config_show_defaults(self, board, capsys):
        assert run(board, "config") == 0
        out = capsys.readouterr().out
        assert "count:       10" in out
        assert "routine_day: 4" in out

    def test_config_update(self, board):
        assert run(board, "config", "--count", "12", "--cols", "4") == 0
        blob = rotation_blob(board)
        assert blob["config"]["count"] == 12
        assert blob["config"]["cols"] == 4
        assert len(blob["beds"]) == 12

    def test_config_out_of_range(self, board, capsys):
        assert run(board, "config", "--count", "51") == 1
        assert "ERROR" in capsys.readouterr().err

    def test_rename(self, board):
        assert run(board, "rename", "2", "창가 베드") == 0
        assert rotation_blob(board)["beds"][1]["name"] == "창가 베드"

    def test_generate_dry_run_stores_nothing(self, board, capsys):
        assert run(board, "generate", "--dry-run") == 0
        assert "베드 커버 정기 교체" in capsys.readouterr().out
        assert not (board / "data" / "tasks.json").exists()

    def test_generate(self, board):
        assert run(board, "generate") == 0
        tasks = read(board, "tasks.json")
        assert len(tasks) == 1
        assert tasks[0]["title"].startswith("베드 커버 정기 교체")

    def test_change_records_service(self, board):
        run(board, "staff", "add", "김간호")
        assert run(board, "change", "1", "--staff", "김간호") == 0
        staff_id = read(board, "staff.json")[0]["id"]
        assert rotation_blob(board)["beds"][0]["lastChangedBy"] == [staff_id]
        assert (board / "data" / "logs" / "bed.jsonl").exists()

    def test_change_unknown_staff(self, board, capsys):
        assert run(board, "change", "1", "--staff", "nobody") == 1
        assert "Staff 'nobody' not found" in capsys.readouterr().err

    def test_change_unknown_item(self, board):
        run(board, "staff", "add", "김간호")
        assert run(board, "change", "99", "--staff", "김간호") == 1

    def test_status(self, board, capsys):
        assert run(board, "status") == 0
        assert "교체 주기 7일" in capsys.readouterr().out

    def test_status_lists_overdue_items(self, board, capsys):
        run(board, "staff", "add", "김간호")
        run(board, "config", "--count", "3")
        run(board, "change", "2", "--staff", "김간호")
        capsys.readouterr()

        assert run(board, "status") == 0
        assert "우선 교체: 1번 베드, 3번 베드" in capsys.readouterr().out


class TestTaskCommands:
    """tasks list / move / complete / delete."""

    def test_move_and_complete(self, board):
        run(board, "staff", "add", "김간호")
        run(board, "generate")
        task_id = read(board, "tasks.json")[0]["id"]

        assert run(board, "tasks", "move", task_id[:8], "next") == 0
        assert read(board, "tasks.json")[0]["status"] == "진행중"

        assert run(board, "tasks", "move", task_id, "next") == 1
        assert read(board, "tasks.json")[0]["status"] == "진행중"

        assert run(board, "tasks", "move", task_id, "next", "--staff", "김간호") == 0
        assert read(board, "tasks.json")[0]["status"] == "완료"

    def test_unknown_task(self, board, capsys):
        assert run(board, "tasks", "delete", "nope") == 1
        assert "Task 'nope' not found" in capsys.readouterr().err

    def test_list(self, board, capsys):
        run(board, "generate")
        assert run(board, "tasks", "list") == 0
        assert "0/10" in capsys.readouterr().out


class TestStaffCommands:
    """staff add / remove."""

    def test_remove_needs_yes(self, board, capsys):
        run(board, "staff", "add", "김간호")
        assert run(board, "staff", "remove", "김간호") == 0
        assert "영구 삭제" in capsys.readouterr().out
        assert len(read(board, "staff.json")) == 1

        assert run(board, "staff", "remove", "김간호", "--yes") == 0
        assert read(board, "staff.json") == []

    def test_remove_with_history_deactivates(self, board):
        run(board, "staff", "add", "김간호")
        run(board, "generate")
        task_id = read(board, "tasks.json")[0]["id"]
        run(board, "tasks", "complete", task_id, "--staff", "김간호")

        assert run(board, "staff", "remove", "김간호", "--yes") == 0
        assert read(board, "staff.json")[0]["isActive"] is False


def test_dashboard(board, capsys):
    assert run(board, "dashboard", "--start", "2026-10-18", "--end", "2026-10-24") == 0
    assert "총 0건" in capsys.readouterr().out
