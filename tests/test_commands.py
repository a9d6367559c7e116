"""Tests for the command surface reports."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from focus_stack.commands import FocusCommands


@pytest.fixture
def commands(tmp_path: Path) -> FocusCommands:
    return FocusCommands(tmp_path)


def test_init_records_project_summary(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text(json.dumps({"name": "shop", "description": "Web shop"}), encoding="utf-8")
    commands = FocusCommands(tmp_path)

    report = commands.init("payments rewrite")

    assert report.ok
    assert "Summary: shop Web shop; payments rewrite" in report.text
    assert "[project] shop Web shop; payments rewrite" in commands.context("short").text


def test_start_and_reject_second_start(commands: FocusCommands) -> None:
    assert commands.start("Parser").text == "Started [T001]: Parser"

    report = commands.start("Printer")

    assert not report.ok
    assert "Task [T001: Parser] is still in progress." in report.text
    assert 'start "Printer" again' in report.text


def test_start_lists_pending_backlog(commands: FocusCommands) -> None:
    commands.capture("Write docs")

    text = commands.start("Parser").text

    assert "Backlog has 1 item(s) to review:" in text
    assert "  B001: Write docs" in text


def test_plan_reports(commands: FocusCommands) -> None:
    text = commands.plan(["A", "B", "C"]).text
    assert text.startswith("Plan loaded (3 task(s)):")
    assert "  > T001: A" in text
    assert "  . T003: C" in text

    text = commands.plan(["D"]).text
    assert text.startswith("1 task(s) added to the queue:")
    assert "Main task still in progress: A" in text

    assert not commands.plan([]).ok


def test_sub_and_done_reports(commands: FocusCommands) -> None:
    assert not commands.sub("fix").ok
    commands.plan(["Main", "Next"])

    assert commands.sub("fix").text.startswith("Sub-task [T003] started: fix")
    assert commands.done().text == "Sub-task [fix] done.\nBack to: Main [T001]"

    text = commands.done().text
    assert "Next -> [T002] Next" in text
    assert "(last planned task)" in text

    assert "All planned tasks are done." in commands.done().text
    assert commands.done().text == "No task in progress."


def test_pivot_report(commands: FocusCommands) -> None:
    commands.plan(["A", "B", "C"])

    text = commands.pivot("wrong layer", drop_queue=True).text

    assert "[T001] A pivoted" in text
    assert "reason: wrong layer" in text
    assert "dropped 2 queued task(s)" in text
    assert "Start the new direction with start or plan." in text
    assert commands.pivot("").text == "A pivot needs a reason."


def test_pivot_keeps_plan_queued(commands: FocusCommands) -> None:
    commands.plan(["A", "B"])

    text = commands.pivot("rethink").text

    assert "1 planned task(s) still queued; the head starts on the next edit." in text
    assert "Start the new direction with start or plan." in text
    status = commands.status().text
    assert "No task in progress." in status
    assert "  T002: B" in status


def test_backlog_round(commands: FocusCommands) -> None:
    assert commands.backlog_list().text == "Backlog is empty."
    commands.capture("Cache results", detail="memoize lookups")
    commands.capture("Drop py2 code")

    listing = commands.backlog_list().text
    assert listing.splitlines()[0] == "Backlog (2 item(s)):"
    assert "       memoize lookups" in listing

    assert not commands.promote("B001").ok
    commands.start("Main")
    assert commands.promote("B001").text == "[B001] promoted to sub-task [T002]: Cache results"
    assert commands.promote("B001").text == "Backlog item B001 is already promoted; nothing to do."
    assert commands.dismiss("B002").text == "[B002] dismissed: Drop py2 code"
    assert commands.dismiss("B404").text == "Backlog item B404 not found."


def test_status(commands: FocusCommands) -> None:
    assert "No task in progress." in commands.status().text

    commands.plan(["A", "B"])
    commands.sub("a1")
    text = commands.status().text

    assert "Task stack:" in text
    assert "  [sub] T003 a1  <- current" in text
    assert "Queue (1):" in text


def test_history(commands: FocusCommands) -> None:
    assert commands.history().text == "No history yet."

    commands.plan(["A", "B", "C"])
    commands.done()
    commands.pivot("superseded")
    commands.capture("idea")
    text = commands.history().text

    assert "=== Finished ===" in text
    assert "  x T001  A" in text
    assert "  ~ T002  B  (pivot: superseded)" in text
    assert "=== In progress ===" not in text
    assert "=== Queue ===" in text
    assert "  . T003  C" in text
    assert "  - B001  idea" in text

    limited = commands.history(limit=1).text
    assert "T001  A" not in limited
    assert "T002  B" in limited

    for fallback in (0, -1):
        assert "  x T001  A" in commands.history(limit=fallback).text


def test_rebuild_and_context(commands: FocusCommands, tmp_path: Path) -> None:
    commands.plan(["A", "B"])
    (tmp_path / ".focus_stack" / "stack.json").unlink()

    text = commands.rebuild().text

    assert "stack: T001" in text
    assert "queued: 1" in text
    assert commands.context("resume").text == "Task stack:\n  [main] T001 A  <- current\nQueue: T002:B"
