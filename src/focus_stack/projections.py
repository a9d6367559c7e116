"""Pure folds over the event log.

Every function here takes the full, ordered event sequence and rebuilds its
view from scratch; nothing is cached between calls. ``apply_event`` is the
single cursor reducer shared by replay and by the lifecycle controller, so a
cursor maintained live and one rebuilt from the log cannot drift apart.
"""

from __future__ import annotations

from typing import Iterable, Optional

from .constants import (
    BACKLOG_DISMISSED,
    BACKLOG_ID_PREFIX,
    BACKLOG_PROMOTED,
    TASK_ID_PREFIX,
    TASK_KIND_MAIN,
    TASK_KIND_SUB,
)
from .domain.events import (
    BacklogAdded,
    BacklogDismissed,
    BacklogPromoted,
    Event,
    ProjectContextSet,
    ResumeSet,
    SubTaskCreated,
    TaskActivated,
    TaskCreated,
    TaskDone,
    TaskPivoted,
)
from .domain.models import BacklogItem, QueueEntry, SnapshotCursor, Task
from .utils import parse_seq


def project_tasks(events: Iterable[Event]) -> dict[str, Task]:
    tasks: dict[str, Task] = {}
    for event in events:
        if isinstance(event, TaskCreated):
            kind = TASK_KIND_SUB if event.type == TASK_KIND_SUB else TASK_KIND_MAIN
            tasks[event.id] = Task(id=event.id, title=event.title, kind=kind)
        elif isinstance(event, SubTaskCreated):
            tasks[event.id] = Task(id=event.id, title=event.title, kind=TASK_KIND_SUB, parent=event.parent or None)
        elif isinstance(event, (TaskDone, TaskPivoted)):
            task = tasks.get(event.id)
            if task is None:
                continue
            task.done = True
            if isinstance(event, TaskPivoted):
                task.pivoted = True
                if event.reason:
                    task.pivot_reason = event.reason
        elif isinstance(event, ResumeSet):
            task = tasks.get(event.id)
            if task is not None:
                task.resume_prompt = event.prompt
    return tasks


def project_backlog(events: Iterable[Event]) -> dict[str, BacklogItem]:
    items: dict[str, BacklogItem] = {}
    for event in events:
        if isinstance(event, BacklogAdded):
            items[event.id] = BacklogItem(id=event.id, title=event.title, detail=event.detail)
        elif isinstance(event, BacklogPromoted):
            item = items.get(event.backlog_id)
            if item is not None and item.is_pending:
                item.status = BACKLOG_PROMOTED
                item.promoted_to = event.task_id
        elif isinstance(event, BacklogDismissed):
            item = items.get(event.backlog_id)
            if item is not None and item.is_pending:
                item.status = BACKLOG_DISMISSED
    return items


def latest_project_context(events: Iterable[Event]) -> Optional[str]:
    latest: Optional[str] = None
    for event in events:
        if isinstance(event, ProjectContextSet) and event.summary:
            latest = event.summary
    return latest


def _bump(counter: int, value: str, prefix: str) -> int:
    seq = parse_seq(value, prefix)
    return max(counter, seq + 1) if seq is not None else counter


def _remove_from_queue(cursor: SnapshotCursor, task_id: str) -> Optional[QueueEntry]:
    for idx, entry in enumerate(cursor.ready_tasks):
        if entry.id == task_id:
            return cursor.ready_tasks.pop(idx)
    return None


def apply_event(cursor: SnapshotCursor, event: Event) -> SnapshotCursor:
    """Fold one event into *cursor* in place and return it."""
    if isinstance(event, TaskCreated):
        cursor.next_id = _bump(cursor.next_id, event.id, TASK_ID_PREFIX)
        if event.queued:
            cursor.ready_tasks.append(QueueEntry(id=event.id, title=event.title))
        else:
            cursor.active_stack = [event.id]
    elif isinstance(event, SubTaskCreated):
        cursor.next_id = _bump(cursor.next_id, event.id, TASK_ID_PREFIX)
        cursor.active_stack.append(event.id)
    elif isinstance(event, (TaskDone, TaskPivoted)):
        if cursor.active_stack and cursor.active_stack[-1] == event.id:
            cursor.active_stack.pop()
        elif event.id in cursor.active_stack:
            cursor.active_stack.remove(event.id)
        _remove_from_queue(cursor, event.id)
        if isinstance(event, TaskPivoted) and event.drop_queue:
            cursor.ready_tasks.clear()
    elif isinstance(event, TaskActivated):
        _remove_from_queue(cursor, event.id)
        cursor.active_stack = [event.id]
    elif isinstance(event, BacklogAdded):
        cursor.backlog_next_id = _bump(cursor.backlog_next_id, event.id, BACKLOG_ID_PREFIX)
    cursor.sync_active()
    return cursor


def rebuild_cursor(events: Iterable[Event]) -> SnapshotCursor:
    cursor = SnapshotCursor()
    for event in events:
        apply_event(cursor, event)
    return cursor
