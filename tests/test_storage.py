"""Tests for the event log and snapshot cursor file repositories."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from focus_stack.domain.events import BacklogAdded, TaskCreated, TaskDone, TaskPivoted
from focus_stack.domain.models import QueueEntry, SnapshotCursor
from focus_stack.storage import Container, FileCursorRepository, FileEventRepository


@pytest.fixture
def events_path(tmp_path: Path) -> Path:
    return tmp_path / ".focus_stack" / "events.jsonl"


@pytest.fixture
def cursor_path(tmp_path: Path) -> Path:
    return tmp_path / ".focus_stack" / "stack.json"


class TestFileEventRepository:
    def test_missing_log_reads_empty(self, events_path: Path) -> None:
        repo = FileEventRepository(events_path)

        assert repo.read() == []
        assert not events_path.exists()

    def test_append_writes_one_line_per_event(self, events_path: Path) -> None:
        repo = FileEventRepository(events_path)
        repo.append(TaskCreated(id="T001", title="Parser", ts=1))
        repo.append(TaskDone(id="T001", ts=2))

        lines = events_path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first == {"e": "created", "id": "T001", "title": "Parser", "type": "main", "queued": False, "ts": 1}
        assert json.loads(lines[1]) == {"e": "done", "id": "T001", "ts": 2}

    def test_none_fields_are_omitted(self, events_path: Path) -> None:
        repo = FileEventRepository(events_path)
        repo.append(BacklogAdded(id="B001", title="Idea", ts=5))

        record = json.loads(events_path.read_text(encoding="utf-8").splitlines()[0])
        assert "detail" not in record
        assert record["e"] == "backlog_add"

    def test_read_round_trips_typed_events(self, events_path: Path) -> None:
        repo = FileEventRepository(events_path)
        created = TaskCreated(id="T001", title="Parser", queued=True, ts=10)
        pivoted = TaskPivoted(id="T001", reason="wrong layer", drop_queue=True, ts=11)
        repo.append(created)
        repo.append(pivoted)

        assert repo.read() == [created, pivoted]

    def test_malformed_line_is_skipped(self, events_path: Path) -> None:
        events_path.parent.mkdir(parents=True)
        events_path.write_text(
            '{"e": "created", "id": "T001", "title": "A", "ts": 1}\n'
            '{"e": "created", "id": "T0\n'
            '{"e": "done", "id": "T001", "ts": 3}\n',
            encoding="utf-8",
        )

        events = FileEventRepository(events_path).read()

        assert [type(event).__name__ for event in events] == ["TaskCreated", "TaskDone"]

    def test_append_after_torn_record_starts_new_line(self, events_path: Path) -> None:
        repo = FileEventRepository(events_path)
        repo.append(TaskCreated(id="T001", title="A", ts=1))
        with open(events_path, "a", encoding="utf-8") as handle:
            handle.write('{"e": "created", "id": "T0')

        repo.append(TaskCreated(id="T002", title="B", ts=3))

        assert [event.id for event in repo.read()] == ["T001", "T002"]
        assert events_path.read_text(encoding="utf-8").endswith("\n")

    def test_unknown_kinds_and_missing_fields_are_ignored(self, events_path: Path) -> None:
        events_path.parent.mkdir(parents=True)
        events_path.write_text(
            '{"e": "teleported", "id": "T001"}\n'
            '{"e": "done"}\n'
            '[1, 2, 3]\n'
            '\n'
            '{"e": "backlog_add", "id": "B001", "title": "Idea"}\n',
            encoding="utf-8",
        )
        events = FileEventRepository(events_path).read()

        assert len(events) == 1
        assert isinstance(events[0], BacklogAdded)
        assert events[0].ts == 0

    def test_wrong_field_shape_is_rejected(self, events_path: Path) -> None:
        events_path.parent.mkdir(parents=True)
        events_path.write_text(
            '{"e": "created", "id": "T001", "title": ["not", "text"], "ts": 1}\n'
            '{"e": "created", "id": "T002", "title": "ok", "ts": "yesterday"}\n'
            '{"e": "created", "id": "T003", "title": "ok", "queued": "false", "ts": 1}\n'
            '{"e": "pivoted", "id": "T003", "reason": "x", "drop_queue": 1, "ts": 2}\n'
            '{"e": "created", "id": "T004", "title": "ok", "ts": true}\n',
            encoding="utf-8",
        )

        assert FileEventRepository(events_path).read() == []


class TestFileCursorRepository:
    def test_missing_file_loads_zero_value(self, cursor_path: Path) -> None:
        repo = FileCursorRepository(cursor_path)

        assert repo.read() is None
        cursor = repo.load()
        assert cursor.next_id == 1
        assert cursor.backlog_next_id == 1
        assert cursor.active_stack == []
        assert cursor.active_task_id is None
        assert cursor.ready_tasks == []

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]", ""])
    def test_unparsable_file_loads_zero_value(self, cursor_path: Path, content: str) -> None:
        cursor_path.parent.mkdir(parents=True)
        cursor_path.write_text(content, encoding="utf-8")
        repo = FileCursorRepository(cursor_path)

        assert repo.read() is None
        assert repo.load() == SnapshotCursor()

    def test_save_then_load(self, cursor_path: Path) -> None:
        repo = FileCursorRepository(cursor_path)
        cursor = SnapshotCursor(
            next_id=4,
            backlog_next_id=2,
            active_stack=["T001", "T003"],
            ready_tasks=[QueueEntry("T002", "Later")],
        )
        cursor.sync_active()

        repo.save(cursor)

        assert repo.load() == cursor
        assert not cursor_path.with_suffix(".json.tmp").exists()

    def test_older_snapshot_fields_default(self, cursor_path: Path) -> None:
        cursor_path.parent.mkdir(parents=True)
        cursor_path.write_text(json.dumps({"next_id": 5, "active_stack": ["T002", "T004"]}), encoding="utf-8")

        cursor = FileCursorRepository(cursor_path).load()

        assert cursor.next_id == 5
        assert cursor.backlog_next_id == 1
        assert cursor.ready_tasks == []
        assert cursor.active_task_id == "T004"

    def test_bad_field_values_fall_back(self, cursor_path: Path) -> None:
        cursor_path.parent.mkdir(parents=True)
        cursor_path.write_text(
            json.dumps(
                {
                    "next_id": "seven",
                    "backlog_next_id": 0,
                    "active_stack": "T001",
                    "active_task_id": "T009",
                    "ready_tasks": [{"title": "no id"}, {"id": "T003", "title": "Queued"}],
                }
            ),
            encoding="utf-8",
        )

        cursor = FileCursorRepository(cursor_path).load()

        assert cursor.next_id == 1
        assert cursor.backlog_next_id == 1
        assert cursor.active_stack == []
        assert cursor.active_task_id is None
        assert cursor.ready_tasks == [QueueEntry("T003", "Queued")]


class TestContainer:
    def test_paths_live_under_state_dir(self, tmp_path: Path) -> None:
        container = Container(tmp_path)

        assert container.events.path == tmp_path.resolve() / ".focus_stack" / "events.jsonl"
        assert container.cursor.path == tmp_path.resolve() / ".focus_stack" / "stack.json"
        assert container.config == {}
        assert container.config_error is None

    def test_unusable_config_falls_back_to_defaults(self, tmp_path: Path) -> None:
        state_dir = tmp_path / ".focus_stack"
        state_dir.mkdir()
        (state_dir / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")

        container = Container(tmp_path)

        assert container.config == {}
        assert "expected object" in container.config_error
