"""Human-readable report text for the command surface."""

from __future__ import annotations

from typing import Optional, Sequence

from .constants import BACKLOG_PENDING, BACKLOG_PROMOTED, TASK_KIND_MAIN
from .controller import FocusView, Outcome
from .domain.models import BacklogItem
from .scanner import ProjectScan
from .summarizer import stack_frame_line


def _backlog_listing(items: Sequence[BacklogItem]) -> list[str]:
    return [f"  {item.id}: {item.title}" for item in items]


def render_rejection(outcome: Outcome, *, backlog_id: Optional[str] = None, title: Optional[str] = None) -> str:
    reason = outcome.reason
    if reason == "already_active":
        active = outcome.active
        label = f"{active.id}: {active.title}" if active else (outcome.cursor.active_task_id if outcome.cursor else "")
        lines = [f"Task [{label}] is still in progress.", "", "Finish it first:"]
        lines.append("  1. commit the current changes (closes the task automatically) or run done")
        lines.append(f"  2. then start \"{title}\" again" if title else "  2. then start the new task")
        return "\n".join(lines)
    if reason == "empty_plan":
        return "Plan is empty: pass at least one task title."
    if reason == "empty_title":
        return "A non-empty title is required."
    if reason == "empty_reason":
        return "A pivot needs a reason."
    if reason == "no_active_task":
        if outcome.operation == "promote":
            return "No task in progress. Start one with start or plan before promoting backlog items."
        if outcome.operation == "sub":
            return "No task in progress. Start a main task before opening a sub-task."
        return "No task in progress."
    if reason == "backlog_not_found":
        return f"Backlog item {backlog_id} not found."
    if reason == "backlog_not_pending":
        status = outcome.backlog.status if outcome.backlog else "closed"
        return f"Backlog item {backlog_id} is already {status}; nothing to do."
    return f"Rejected: {reason}"


def render_init(scan: ProjectScan, summary: str) -> str:
    lines = ["Project baseline recorded.", "", f"Summary: {summary}"]
    if scan.detail:
        lines.extend(["", "Scan details:"])
        lines.extend(f"  {line}" for line in scan.detail.splitlines())
    lines.extend(["", "This context is injected on every turn and at compaction.", "Run init again to refresh it."])
    return "\n".join(lines)


def render_start(outcome: Outcome, pending: Sequence[BacklogItem]) -> str:
    started = outcome.started
    lines = [f"Started [{started.id}]: {started.title}"] if started else ["Started."]
    if pending:
        lines.extend(["", f"Backlog has {len(pending)} item(s) to review:"])
        lines.extend(_backlog_listing(pending))
        lines.extend(["", "Promote the ones that belong in this task, or just start working."])
    return "\n".join(lines)


def render_plan(outcome: Outcome, pending: Sequence[BacklogItem]) -> str:
    if outcome.started is None:
        lines = [f"{len(outcome.queued)} task(s) added to the queue:"]
        lines.extend(f"  . {entry.id}: {entry.title}" for entry in outcome.queued)
        active = outcome.active
        current = active.title if active else (outcome.cursor.main_task_id if outcome.cursor else "")
        lines.extend(
            [
                "",
                f"Main task still in progress: {current}",
                "Finish it with done and the queue advances on its own.",
                "Do not run queued tasks as sub-tasks.",
            ]
        )
        return "\n".join(lines)

    total = 1 + len(outcome.queued)
    lines = [f"Plan loaded ({total} task(s)):", f"  > {outcome.started.id}: {outcome.started.title}"]
    lines.extend(f"  . {entry.id}: {entry.title}" for entry in outcome.queued)
    if pending:
        lines.extend(["", f"Backlog has {len(pending)} item(s) to review (see backlog)."])
    lines.extend(["", "Confirm to begin, or adjust the task titles first."])
    return "\n".join(lines)


def render_sub(outcome: Outcome) -> str:
    started = outcome.started
    return f"Sub-task [{started.id}] started: {started.title}\n\nCommit to return to the main task automatically."


def render_done(outcome: Outcome, pending: Sequence[BacklogItem]) -> str:
    closed = outcome.closed
    closed_id = closed.id if closed else "?"
    closed_title = closed.title if closed else ""

    if outcome.cursor is not None and outcome.cursor.active_stack and outcome.activated is None:
        parent = outcome.resumed
        if parent is not None:
            return f"Sub-task [{closed_title or closed_id}] done.\nBack to: {parent.title} [{parent.id}]"
        return f"[{closed_id}] done; back to [{outcome.cursor.active_task_id}]"

    if outcome.activated is not None:
        remaining = len(outcome.cursor.ready_tasks) if outcome.cursor else 0
        lines = [f"[{closed_id}] {closed_title} done.", "", f"Next -> [{outcome.activated.id}] {outcome.activated.title}"]
        lines.append(f"   ({remaining} more queued)" if remaining else "   (last planned task)")
        return "\n".join(lines)

    lines = [f"[{closed_id}] {closed_title} done.", "All planned tasks are done."]
    if pending:
        lines.extend(["", f"Backlog has {len(pending)} item(s) to review:"])
        lines.extend(_backlog_listing(pending))
    lines.extend(["", "Plan the next round and load it with plan."])
    return "\n".join(lines)


def render_pivot(outcome: Outcome) -> str:
    closed = outcome.closed
    reason = closed.pivot_reason if closed else ""
    lines = [
        f"[{closed.id if closed else '?'}] {closed.title if closed else ''} pivoted",
        f"   reason: {reason}",
    ]
    if outcome.dropped:
        lines.append(f"   dropped {len(outcome.dropped)} queued task(s)")

    if outcome.started is not None:
        lines.extend(["", f"New direction -> [{outcome.started.id}] {outcome.started.title}"])
        queued = len(outcome.cursor.ready_tasks) if outcome.cursor else 0
        if queued:
            lines.append(f"   ({queued} task(s) still queued)")
    elif outcome.resumed is not None:
        lines.extend(["", f"Back to: {outcome.resumed.title} [{outcome.resumed.id}]"])
    else:
        queued = len(outcome.cursor.ready_tasks) if outcome.cursor else 0
        lines.append("")
        if queued:
            lines.append(f"{queued} planned task(s) still queued; the head starts on the next edit.")
        lines.append("Start the new direction with start or plan.")
    return "\n".join(lines)


def render_capture(outcome: Outcome) -> str:
    item = outcome.backlog
    return (
        f"Captured to backlog: [{item.id}] {item.title}\n"
        "The current task continues; review the backlog when it is done."
    )


def render_promote(outcome: Outcome) -> str:
    item = outcome.backlog
    started = outcome.started
    return f"[{item.id}] promoted to sub-task [{started.id}]: {started.title}"


def render_dismiss(outcome: Outcome) -> str:
    item = outcome.backlog
    return f"[{item.id}] dismissed: {item.title}"


def render_status(view: FocusView) -> str:
    cursor = view.cursor
    pending = view.pending_backlog
    lines: list[str] = []
    if view.project_context:
        lines.append(f"[project] {view.project_context}")

    if cursor.active_task_id is None:
        lines.append("No task in progress.")
        if cursor.ready_tasks:
            lines.extend(["", f"{len(cursor.ready_tasks)} task(s) queued:"])
            lines.extend(f"  {entry.id}: {entry.title}" for entry in cursor.ready_tasks)
        if pending:
            lines.append(f"Backlog has {len(pending)} item(s) to review (see backlog).")
        lines.extend(["", "Plan the next round and load it with plan."])
        return "\n".join(lines)

    lines.append("Task stack:")
    lines.extend(stack_frame_line(cursor, view.tasks, position) for position in range(cursor.depth))
    if cursor.ready_tasks:
        lines.extend(["", f"Queue ({len(cursor.ready_tasks)}):"])
        lines.extend(f"  {entry.id}: {entry.title}" for entry in cursor.ready_tasks)
    if pending:
        lines.append(f"Backlog: {len(pending)} item(s) to review")
    return "\n".join(lines)


def render_backlog(items: Sequence[BacklogItem]) -> str:
    if not items:
        return "Backlog is empty."
    lines = [f"Backlog ({len(items)} item(s)):"]
    for item in items:
        lines.append(f"  {item.id}: {item.title}")
        if item.detail:
            lines.append(f"       {item.detail}")
    return "\n".join(lines)


def render_history(view: FocusView, limit: int) -> str:
    cursor = view.cursor
    lines: list[str] = []

    # Pivoted main tasks count as finished; they are marked with their reason.
    finished = [task for task in view.tasks.values() if task.done and task.kind == TASK_KIND_MAIN]
    finished = finished[-limit:] if limit > 0 else []
    if finished:
        lines.append("=== Finished ===")
        for task in finished:
            if task.pivoted:
                suffix = f"  (pivot: {task.pivot_reason})" if task.pivot_reason else "  (pivot)"
                lines.append(f"  ~ {task.id}  {task.title}{suffix}")
            else:
                lines.append(f"  x {task.id}  {task.title}")

    if cursor.active_task_id:
        lines.extend(["", "=== In progress ==="] if lines else ["=== In progress ==="])
        lines.extend(stack_frame_line(cursor, view.tasks, position) for position in range(cursor.depth))

    if cursor.ready_tasks:
        lines.extend(["", "=== Queue ==="] if lines else ["=== Queue ==="])
        lines.extend(f"  . {entry.id}  {entry.title}" for entry in cursor.ready_tasks)

    if view.backlog:
        lines.extend(["", "=== Backlog ==="] if lines else ["=== Backlog ==="])
        for item in view.backlog.values():
            if item.status == BACKLOG_PENDING:
                lines.append(f"  - {item.id}  {item.title}")
            elif item.status == BACKLOG_PROMOTED:
                lines.append(f"  + {item.id}  {item.title} -> {item.promoted_to}")
            else:
                lines.append(f"  x {item.id}  {item.title} (dismissed)")

    return "\n".join(lines) if lines else "No history yet."


def render_rebuild(outcome: Outcome) -> str:
    cursor = outcome.cursor
    stack = " > ".join(cursor.active_stack) if cursor and cursor.active_stack else "(empty)"
    queued = len(cursor.ready_tasks) if cursor else 0
    return f"Focus snapshot rebuilt from the event log.\n  stack: {stack}\n  queued: {queued}"
