"""Bounded context views injected into the agent's prompt.

``short_view`` is rendered on every turn, ``resume_view`` when the host
compacts the conversation. Both are pure functions of their inputs and drop
any line whose data is missing.
"""

from __future__ import annotations

from typing import Mapping, Optional

from .constants import (
    RESUME_VIEW_MAX_FRAMES,
    RESUME_VIEW_MAX_LINES,
    RESUME_VIEW_PROJECT_CHARS,
    SHORT_VIEW_MAX_LINES,
    SHORT_VIEW_PROJECT_CHARS,
)
from .domain.models import SnapshotCursor, Task
from .utils import clip


def _title(tasks: Mapping[str, Task], task_id: str) -> str:
    task = tasks.get(task_id)
    return task.title if task and task.title else task_id


def stack_frame_line(cursor: SnapshotCursor, tasks: Mapping[str, Task], position: int) -> str:
    task_id = cursor.active_stack[position]
    label = "[main]" if position == 0 else "[sub]"
    marker = "  <- current" if task_id == cursor.active_task_id else ""
    return f"  {label} {task_id} {_title(tasks, task_id)}{marker}"


def short_view(
    cursor: SnapshotCursor,
    tasks: Mapping[str, Task],
    project_summary: Optional[str] = None,
    pending_backlog: int = 0,
    rule: Optional[str] = None,
) -> str:
    lines: list[str] = []
    if rule:
        lines.extend(line for line in rule.splitlines() if line.strip())

    if cursor.active_task_id:
        main_id = cursor.active_stack[0]
        lines.append(f"Focus: {_title(tasks, main_id)} [{main_id}]")
        if cursor.depth > 1:
            current = cursor.active_task_id
            lines.append(
                f"Current: {_title(tasks, current)} [{current}] (sub-task; return to the main task after commit)"
            )
        if cursor.ready_tasks:
            lines.append(f"Queued: {len(cursor.ready_tasks)} task(s) waiting")
    else:
        if project_summary:
            lines.append(f"[project] {clip(project_summary, SHORT_VIEW_PROJECT_CHARS)}")
        if pending_backlog > 0:
            lines.append(f"Backlog: {pending_backlog} item(s) to review (see backlog)")
        lines.append("No active task. Plan the next piece of work and load it with plan.")

    return "\n".join(lines[:SHORT_VIEW_MAX_LINES])


def resume_view(
    cursor: SnapshotCursor,
    tasks: Mapping[str, Task],
    project_summary: Optional[str] = None,
    pending_backlog: int = 0,
) -> str:
    lines: list[str] = []
    if project_summary:
        lines.append(f"[project] {clip(project_summary, RESUME_VIEW_PROJECT_CHARS)}")

    if cursor.active_task_id:
        lines.append("Task stack:")
        for position in range(min(cursor.depth, RESUME_VIEW_MAX_FRAMES)):
            lines.append(stack_frame_line(cursor, tasks, position))

    if cursor.ready_tasks:
        queue = ", ".join(f"{entry.id}:{entry.title}" for entry in cursor.ready_tasks)
        lines.append(f"Queue: {queue}")

    if pending_backlog > 0:
        lines.append(f"Backlog: {pending_backlog} item(s) to review")

    return "\n".join(lines[:RESUME_VIEW_MAX_LINES])
