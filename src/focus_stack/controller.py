"""Lifecycle controller: the only writer of focus state.

Every operation loads the cursor, checks its preconditions, and then either
returns a rejected :class:`Outcome` without touching storage, or appends its
events in a fixed order and saves the cursor obtained by folding those same
events into it. The two automatic triggers (``auto_create`` and
``auto_complete``) never raise.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, Optional

from loguru import logger

from .constants import BACKLOG_ID_PREFIX, DEFAULT_FALLBACK_TITLE, TASK_ID_PREFIX
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
from .projections import (
    apply_event,
    latest_project_context,
    project_backlog,
    project_tasks,
    rebuild_cursor,
)
from .storage.container import Container
from .utils import format_id


FocusState = Literal["idle", "main", "sub"]

RejectionReason = Literal[
    "already_active",
    "empty_plan",
    "empty_title",
    "empty_reason",
    "no_active_task",
    "backlog_not_found",
    "backlog_not_pending",
]


def focus_state(cursor: SnapshotCursor) -> FocusState:
    if cursor.is_idle:
        return "idle"
    return "main" if cursor.depth == 1 else "sub"


@dataclass
class Outcome:
    """Result of one controller operation.

    Rejected outcomes carry a ``reason`` and wrote nothing. Accepted outcomes
    list the events appended, in order, and the cursor saved afterwards.
    """

    operation: str
    accepted: bool = True
    reason: Optional[RejectionReason] = None
    events: list[Event] = field(default_factory=list)
    cursor: Optional[SnapshotCursor] = None

    active: Optional[Task] = None
    closed: Optional[Task] = None
    resumed: Optional[Task] = None
    started: Optional[QueueEntry] = None
    activated: Optional[QueueEntry] = None
    queued: list[QueueEntry] = field(default_factory=list)
    dropped: list[QueueEntry] = field(default_factory=list)
    backlog: Optional[BacklogItem] = None

    @classmethod
    def rejected(cls, operation: str, reason: RejectionReason, **details) -> "Outcome":
        return cls(operation=operation, accepted=False, reason=reason, **details)

    @property
    def state(self) -> Optional[FocusState]:
        return focus_state(self.cursor) if self.cursor is not None else None


@dataclass
class FocusView:
    """Read-only picture of the project assembled from one pass over the log."""

    cursor: SnapshotCursor
    tasks: dict[str, Task]
    backlog: dict[str, BacklogItem]
    project_context: Optional[str]

    @property
    def pending_backlog(self) -> list[BacklogItem]:
        return [item for item in self.backlog.values() if item.is_pending]

    @property
    def active_task(self) -> Optional[Task]:
        if self.cursor.active_task_id is None:
            return None
        return self.tasks.get(self.cursor.active_task_id)


def _clean(text: Optional[str]) -> str:
    return (text or "").strip()


class LifecycleController:
    def __init__(self, container: Container) -> None:
        self.container = container

    # -- storage helpers ----------------------------------------------------

    def _read_events(self) -> list[Event]:
        return self.container.events.read()

    def _load_cursor(self, events: Optional[list[Event]] = None) -> SnapshotCursor:
        cursor = self.container.cursor.read()
        if cursor is not None:
            return cursor
        if events is None:
            events = self._read_events()
        if events:
            logger.info("Focus snapshot missing or unreadable; rebuilding from {} events", len(events))
        return rebuild_cursor(events)

    def _commit(self, cursor: SnapshotCursor, events: list[Event]) -> SnapshotCursor:
        for event in events:
            self.container.events.append(event)
            apply_event(cursor, event)
        self.container.cursor.save(cursor)
        return cursor

    @staticmethod
    def _task_id(cursor: SnapshotCursor, offset: int = 0) -> str:
        return format_id(TASK_ID_PREFIX, cursor.next_id + offset)

    # -- reads --------------------------------------------------------------

    def state(self) -> FocusState:
        return focus_state(self._load_cursor())

    def view(self) -> FocusView:
        events = self._read_events()
        return FocusView(
            cursor=self._load_cursor(events),
            tasks=project_tasks(events),
            backlog=project_backlog(events),
            project_context=latest_project_context(events),
        )

    # -- explicit operations ------------------------------------------------

    def start_main(self, title: str) -> Outcome:
        title = _clean(title)
        if not title:
            return Outcome.rejected("start", "empty_title")
        events = self._read_events()
        cursor = self._load_cursor(events)
        if not cursor.is_idle:
            active = project_tasks(events).get(cursor.active_task_id or "")
            return Outcome.rejected("start", "already_active", cursor=cursor, active=active)

        task_id = self._task_id(cursor)
        event = TaskCreated(id=task_id, title=title)
        cursor = self._commit(cursor, [event])
        logger.info("Started {}: {}", task_id, title)
        return Outcome("start", events=[event], cursor=cursor, started=QueueEntry(task_id, title))

    def plan(self, titles: list[str]) -> Outcome:
        cleaned = [_clean(t) for t in titles or []]
        cleaned = [t for t in cleaned if t]
        if not cleaned:
            return Outcome.rejected("plan", "empty_plan")
        events = self._read_events()
        cursor = self._load_cursor(events)
        was_idle = cursor.is_idle
        active = None if was_idle else project_tasks(events).get(cursor.active_task_id or "")

        new_events: list[Event] = []
        entries: list[QueueEntry] = []
        for offset, title in enumerate(cleaned):
            task_id = self._task_id(cursor, offset)
            queued = not (was_idle and offset == 0)
            new_events.append(TaskCreated(id=task_id, title=title, queued=queued))
            entries.append(QueueEntry(task_id, title))

        cursor = self._commit(cursor, new_events)
        started = entries[0] if was_idle else None
        queued = entries[1:] if was_idle else entries
        logger.info("Planned {} task(s); {} queued", len(entries), len(queued))
        return Outcome(
            "plan",
            events=new_events,
            cursor=cursor,
            active=active,
            started=started,
            queued=queued,
        )

    def push_sub(self, title: str) -> Outcome:
        return self._push("sub", title)

    def complete_current(self) -> Outcome:
        return self._complete("done")

    def pivot_current(
        self,
        reason: str,
        new_task: Optional[str] = None,
        drop_queue: bool = False,
    ) -> Outcome:
        reason = _clean(reason)
        if not reason:
            return Outcome.rejected("pivot", "empty_reason")
        if new_task is not None and not _clean(new_task):
            return Outcome.rejected("pivot", "empty_title")
        new_title = _clean(new_task) or None

        events = self._read_events()
        cursor = self._load_cursor(events)
        if cursor.is_idle:
            return Outcome.rejected("pivot", "no_active_task", cursor=cursor)

        tasks = project_tasks(events)
        top = cursor.active_stack[-1]
        remaining = cursor.active_stack[:-1]
        dropped = list(cursor.ready_tasks) if drop_queue else []

        new_events: list[Event] = [TaskPivoted(id=top, reason=reason, drop_queue=bool(drop_queue))]
        started = resumed = None
        if new_title:
            task_id = self._task_id(cursor)
            new_events.append(TaskCreated(id=task_id, title=new_title))
            started = QueueEntry(task_id, new_title)
        elif remaining:
            resumed = tasks.get(remaining[-1])

        cursor = self._commit(cursor, new_events)
        closed = tasks.get(top)
        if closed is not None:
            closed = replace(closed, done=True, pivoted=True, pivot_reason=reason)
        logger.info("Pivoted {} ({}); now {}", top, reason, cursor.active_task_id or "idle")
        return Outcome(
            "pivot",
            events=new_events,
            cursor=cursor,
            closed=closed,
            resumed=resumed,
            started=started,
            dropped=dropped,
        )

    def capture_backlog(self, title: str, detail: Optional[str] = None) -> Outcome:
        title = _clean(title)
        if not title:
            return Outcome.rejected("capture", "empty_title")
        cursor = self._load_cursor()
        backlog_id = format_id(BACKLOG_ID_PREFIX, cursor.backlog_next_id)
        event = BacklogAdded(id=backlog_id, title=title, detail=_clean(detail) or None)
        cursor = self._commit(cursor, [event])
        logger.info("Captured backlog item {}: {}", backlog_id, title)
        return Outcome(
            "capture",
            events=[event],
            cursor=cursor,
            backlog=BacklogItem(id=backlog_id, title=title, detail=event.detail),
        )

    def promote_backlog(self, backlog_id: str, title: Optional[str] = None) -> Outcome:
        return self._push("promote", title, backlog_id=_clean(backlog_id))

    def dismiss_backlog(self, backlog_id: str) -> Outcome:
        backlog_id = _clean(backlog_id)
        events = self._read_events()
        item = project_backlog(events).get(backlog_id)
        if item is None:
            return Outcome.rejected("dismiss", "backlog_not_found")
        if not item.is_pending:
            return Outcome.rejected("dismiss", "backlog_not_pending", backlog=item)
        cursor = self._load_cursor(events)
        event = BacklogDismissed(backlog_id=backlog_id)
        cursor = self._commit(cursor, [event])
        logger.info("Dismissed backlog item {}", backlog_id)
        return Outcome("dismiss", events=[event], cursor=cursor, backlog=replace(item, status="dismissed"))

    def record_project_context(self, summary: str, detail: Optional[str] = None) -> Outcome:
        events = self._read_events()
        cursor = self._load_cursor(events)
        event = ProjectContextSet(summary=summary, detail=detail or None)
        cursor = self._commit(cursor, [event])
        logger.info("Recorded project context: {}", summary)
        return Outcome("init", events=[event], cursor=cursor)

    def rebuild(self) -> Outcome:
        """Replay the whole log and overwrite the cursor with the result."""
        cursor = rebuild_cursor(self._read_events())
        self.container.cursor.save(cursor)
        logger.info("Rebuilt focus snapshot: stack={} queue={}", cursor.active_stack, len(cursor.ready_tasks))
        return Outcome("rebuild", cursor=cursor)

    # -- automatic triggers -------------------------------------------------

    def auto_create(self, fallback_title: str) -> Optional[Outcome]:
        """Give an idle project something to be working on. Never raises."""
        try:
            return self._auto_create(fallback_title)
        except Exception:
            logger.opt(exception=True).debug("auto_create failed; ignoring")
            return None

    def auto_complete(self) -> Optional[Outcome]:
        """Close the task in focus after a commit. Never raises."""
        try:
            return self._complete("auto_complete")
        except Exception:
            logger.opt(exception=True).debug("auto_complete failed; ignoring")
            return None

    # -- internals ----------------------------------------------------------

    def _auto_create(self, fallback_title: str) -> Outcome:
        events = self._read_events()
        cursor = self._load_cursor(events)
        if not cursor.is_idle:
            return Outcome.rejected("auto_create", "already_active", cursor=cursor)

        if cursor.ready_tasks:
            head = cursor.ready_tasks[0]
            activation = TaskActivated(id=head.id)
            cursor = self._commit(cursor, [activation])
            logger.info("Auto-advanced to {}: {}", head.id, head.title)
            return Outcome("auto_create", events=[activation], cursor=cursor, activated=head)

        title = _clean(fallback_title) or DEFAULT_FALLBACK_TITLE
        task_id = self._task_id(cursor)
        created = TaskCreated(id=task_id, title=title)
        cursor = self._commit(cursor, [created])
        logger.info("Auto-started {}: {}", task_id, title)
        return Outcome("auto_create", events=[created], cursor=cursor, started=QueueEntry(task_id, title))

    def _push(self, operation: str, title: Optional[str], backlog_id: Optional[str] = None) -> Outcome:
        title = _clean(title)
        if operation == "sub" and not title:
            return Outcome.rejected(operation, "empty_title")

        events = self._read_events()
        cursor = self._load_cursor(events)
        if cursor.is_idle:
            return Outcome.rejected(operation, "no_active_task", cursor=cursor)

        item: Optional[BacklogItem] = None
        if backlog_id is not None:
            item = project_backlog(events).get(backlog_id)
            if item is None:
                return Outcome.rejected(operation, "backlog_not_found", cursor=cursor)
            if not item.is_pending:
                return Outcome.rejected(operation, "backlog_not_pending", cursor=cursor, backlog=item)
            title = title or item.title

        tasks = project_tasks(events)
        parent_id = cursor.active_stack[-1]
        parent = tasks.get(parent_id)
        parent_title = parent.title if parent and parent.title else parent_id
        task_id = self._task_id(cursor)

        if item is not None:
            prompt = f"Sub-task [{title}] comes from backlog {item.id}; when it is done, resume: {parent_title}."
        else:
            prompt = f"Entering sub-task [{title}]; when it is done, resume: {parent_title}."
        new_events: list[Event] = [
            ResumeSet(id=parent_id, prompt=prompt),
            SubTaskCreated(id=task_id, parent=parent_id, title=title),
        ]
        if item is not None:
            new_events.append(BacklogPromoted(backlog_id=item.id, task_id=task_id))

        cursor = self._commit(cursor, new_events)
        logger.info("Pushed {} above {} (depth {})", task_id, parent_id, cursor.depth)
        return Outcome(
            operation,
            events=new_events,
            cursor=cursor,
            active=parent,
            started=QueueEntry(task_id, title),
            backlog=replace(item, status="promoted", promoted_to=task_id) if item else None,
        )

    def _complete(self, operation: str) -> Outcome:
        events = self._read_events()
        cursor = self._load_cursor(events)
        if cursor.is_idle:
            return Outcome.rejected(operation, "no_active_task", cursor=cursor)

        tasks = project_tasks(events)
        top = cursor.active_stack[-1]
        remaining = cursor.active_stack[:-1]

        new_events: list[Event] = [TaskDone(id=top)]
        resumed = activated = None
        if remaining:
            resumed = tasks.get(remaining[-1])
        elif cursor.ready_tasks:
            activated = cursor.ready_tasks[0]
            new_events.append(TaskActivated(id=activated.id))

        cursor = self._commit(cursor, new_events)
        closed = tasks.get(top)
        if closed is not None:
            closed = replace(closed, done=True)
        logger.info("Completed {}; now {}", top, cursor.active_task_id or "idle")
        return Outcome(
            operation,
            events=new_events,
            cursor=cursor,
            closed=closed,
            resumed=resumed,
            activated=activated,
        )
