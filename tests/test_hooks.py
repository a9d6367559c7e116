"""Tests for the host adapter that turns tool hooks into lifecycle calls."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from focus_stack.controller import LifecycleController
from focus_stack.domain.events import TaskCreated
from focus_stack.hooks import AfterToolPayload, HostAdapter
from focus_stack.storage import Container


@pytest.fixture
def adapter(tmp_path: Path) -> HostAdapter:
    return HostAdapter(tmp_path)


def _controller(project_dir: Path) -> LifecycleController:
    return LifecycleController(Container(project_dir))


class TestBeforeTool:
    def test_write_tool_on_idle_project_starts_task(self, adapter: HostAdapter, tmp_path: Path) -> None:
        outcome = adapter.before_tool({"tool": "edit", "sessionID": "s1"})

        assert outcome is not None and outcome.accepted
        assert outcome.started.title == "Untitled task"
        assert _controller(tmp_path).state() == "main"

    def test_session_title_is_used_and_clipped(self, tmp_path: Path) -> None:
        adapter = HostAdapter(tmp_path, resolve_title=lambda session_id: "  Refactor " + "x" * 100)

        outcome = adapter.before_tool({"tool_name": "Write", "session_id": "s1"})

        assert outcome.started.title.startswith("Refactor x")
        assert len(outcome.started.title) == 60

    def test_failing_title_lookup_uses_fallback(self, tmp_path: Path) -> None:
        def _lookup(session_id: str) -> Optional[str]:
            raise RuntimeError("host unavailable")

        outcome = HostAdapter(tmp_path, resolve_title=_lookup).before_tool({"tool": "edit", "sessionID": "s1"})

        assert outcome.started.title == "Untitled task"

    @pytest.mark.parametrize("tool", ["focus_start", "read", "grep"])
    def test_skipped_tools(self, adapter: HostAdapter, tmp_path: Path, tool: str) -> None:
        assert adapter.before_tool({"tool": tool}) is None
        assert not (tmp_path / ".focus_stack" / "events.jsonl").exists()

    def test_active_project_is_left_alone(self, adapter: HostAdapter, tmp_path: Path) -> None:
        _controller(tmp_path).start_main("Existing")

        assert adapter.before_tool({"tool": "edit"}) is None
        assert len(Container(tmp_path).events.read()) == 1

    def test_edit_after_pivot_starts_queued_task(self, adapter: HostAdapter, tmp_path: Path) -> None:
        controller = _controller(tmp_path)
        controller.plan(["A", "B"])
        controller.pivot_current("skip")

        outcome = adapter.before_tool({"tool": "edit"})

        assert outcome.activated.id == "T002"
        assert outcome.started is None

    def test_next_task_gets_a_fresh_id(self, adapter: HostAdapter, tmp_path: Path) -> None:
        controller = _controller(tmp_path)
        controller.start_main("A")
        controller.complete_current()

        outcome = adapter.before_tool({"tool": "edit"})

        assert outcome.started.id == "T002"

    def test_queued_task_is_activated(self, adapter: HostAdapter, tmp_path: Path) -> None:
        container = Container(tmp_path)
        container.events.append(TaskCreated(id="T001", title="Queued", queued=True, ts=1))

        outcome = adapter.before_tool({"tool": "edit"})

        assert outcome.activated.id == "T001"
        assert outcome.cursor.active_stack == ["T001"]

    @pytest.mark.parametrize("payload", [{}, {"tool": ["edit"]}, {"args": {}}])
    def test_bad_payload_is_ignored(self, adapter: HostAdapter, payload: dict) -> None:
        assert adapter.before_tool(payload) is None


class TestAfterTool:
    def test_commit_completes_task(self, adapter: HostAdapter, tmp_path: Path) -> None:
        _controller(tmp_path).plan(["A", "B"])

        outcome = adapter.after_tool({"tool": "bash", "args": {"command": "git add . && git commit -m 'A'"}})

        assert outcome.closed.id == "T001"
        assert outcome.activated.id == "T002"

    def test_claude_style_payload(self, adapter: HostAdapter, tmp_path: Path) -> None:
        _controller(tmp_path).start_main("A")

        outcome = adapter.after_tool(
            {"tool_name": "Bash", "tool_input": {"command": "git commit -am wip"}, "session_id": "abc"}
        )

        assert outcome.closed.id == "T001"
        assert _controller(tmp_path).state() == "idle"

    def test_non_commit_command_is_ignored(self, adapter: HostAdapter, tmp_path: Path) -> None:
        _controller(tmp_path).start_main("A")

        assert adapter.after_tool({"tool": "bash", "args": {"command": "git status"}}) is None
        assert _controller(tmp_path).state() == "main"

    def test_non_shell_tool_is_ignored(self, adapter: HostAdapter, tmp_path: Path) -> None:
        _controller(tmp_path).start_main("A")

        assert adapter.after_tool({"tool": "edit", "args": {"command": "git commit"}}) is None

    def test_commit_while_idle_is_a_no_op(self, adapter: HostAdapter, tmp_path: Path) -> None:
        outcome = adapter.after_tool({"tool": "bash", "args": {"command": "git commit -m x"}})

        assert outcome is not None and not outcome.accepted
        assert not (tmp_path / ".focus_stack" / "events.jsonl").exists()

    def test_command_text_keys(self) -> None:
        assert AfterToolPayload(tool="bash", args={"cmd": "git commit"}).command_text() == "git commit"
        assert AfterToolPayload(tool="bash", args={"command": 3}).command_text() == ""


class TestSessions:
    def test_session_dir_lookup_is_cached_per_adapter(self, tmp_path: Path) -> None:
        calls: list[str] = []
        other = tmp_path / "other"
        other.mkdir()

        def _lookup(session_id: str) -> Optional[Path]:
            calls.append(session_id)
            return other

        adapter = HostAdapter(tmp_path, resolve_session_dir=_lookup)

        assert adapter.session_dir("s1") == other.resolve()
        assert adapter.session_dir("s1") == other.resolve()
        assert calls == ["s1"]
        assert adapter.session_dir(None) == tmp_path.resolve()

        HostAdapter(tmp_path, resolve_session_dir=_lookup).session_dir("s1")
        assert calls == ["s1", "s1"]

    def test_failed_lookup_uses_default_dir(self, tmp_path: Path) -> None:
        def _lookup(session_id: str) -> Optional[Path]:
            raise OSError("no such session")

        assert HostAdapter(tmp_path, resolve_session_dir=_lookup).session_dir("s1") == tmp_path.resolve()

    def test_hooks_write_to_session_dir(self, tmp_path: Path) -> None:
        session_dir = tmp_path / "session"
        session_dir.mkdir()
        adapter = HostAdapter(tmp_path, resolve_session_dir=lambda session_id: session_dir)

        adapter.before_tool({"tool": "edit", "sessionID": "s1"})

        assert _controller(session_dir).state() == "main"
        assert _controller(tmp_path).state() == "idle"


class TestContextInjection:
    def test_system_prompt_idle(self, adapter: HostAdapter) -> None:
        text = adapter.system_prompt("s1")

        assert text is not None
        assert "No active task." in text

    def test_system_prompt_active(self, adapter: HostAdapter, tmp_path: Path) -> None:
        _controller(tmp_path).start_main("Parser")

        assert "Focus: Parser [T001]" in adapter.system_prompt()

    def test_compaction(self, adapter: HostAdapter, tmp_path: Path) -> None:
        assert adapter.compaction() is None

        _controller(tmp_path).start_main("Parser")

        assert adapter.compaction() == "Task stack:\n  [main] T001 Parser  <- current"
