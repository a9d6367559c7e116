"""Host-agnostic command surface.

Each command runs one controller operation (or a read) against a project
directory and returns a :class:`Report` whose text is meant for the agent.
Rejections are reports too; ``ok`` tells them apart.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import get_context_rule, get_history_limit
from .controller import LifecycleController
from .domain.models import BacklogItem
from .reports import (
    render_backlog,
    render_capture,
    render_dismiss,
    render_done,
    render_history,
    render_init,
    render_pivot,
    render_plan,
    render_promote,
    render_rebuild,
    render_rejection,
    render_start,
    render_status,
    render_sub,
)
from .scanner import scan_project
from .storage.container import Container
from .summarizer import resume_view, short_view


@dataclass(frozen=True)
class Report:
    text: str
    ok: bool = True

    def __str__(self) -> str:
        return self.text


class FocusCommands:
    def __init__(self, project_dir: Path) -> None:
        self.container = Container(Path(project_dir))
        self.controller = LifecycleController(self.container)

    def _pending(self) -> list[BacklogItem]:
        return self.controller.view().pending_backlog

    def init(self, extra: Optional[str] = None) -> Report:
        scan = scan_project(self.container.project_dir)
        extra = (extra or "").strip()
        summary = f"{scan.summary}; {extra}" if extra else scan.summary
        self.controller.record_project_context(summary, scan.detail)
        return Report(render_init(scan, summary))

    def start(self, title: str) -> Report:
        outcome = self.controller.start_main(title)
        if not outcome.accepted:
            return Report(render_rejection(outcome, title=title), ok=False)
        return Report(render_start(outcome, self._pending()))

    def plan(self, titles: list[str]) -> Report:
        outcome = self.controller.plan(titles)
        if not outcome.accepted:
            return Report(render_rejection(outcome), ok=False)
        return Report(render_plan(outcome, self._pending()))

    def sub(self, title: str) -> Report:
        outcome = self.controller.push_sub(title)
        if not outcome.accepted:
            return Report(render_rejection(outcome), ok=False)
        return Report(render_sub(outcome))

    def done(self) -> Report:
        outcome = self.controller.complete_current()
        if not outcome.accepted:
            return Report(render_rejection(outcome), ok=False)
        return Report(render_done(outcome, self._pending()))

    def pivot(self, reason: str, new_task: Optional[str] = None, drop_queue: bool = False) -> Report:
        outcome = self.controller.pivot_current(reason, new_task=new_task, drop_queue=drop_queue)
        if not outcome.accepted:
            return Report(render_rejection(outcome), ok=False)
        return Report(render_pivot(outcome))

    def status(self) -> Report:
        return Report(render_status(self.controller.view()))

    def capture(self, title: str, detail: Optional[str] = None) -> Report:
        outcome = self.controller.capture_backlog(title, detail)
        if not outcome.accepted:
            return Report(render_rejection(outcome), ok=False)
        return Report(render_capture(outcome))

    def backlog_list(self) -> Report:
        return Report(render_backlog(self._pending()))

    def promote(self, backlog_id: str, title: Optional[str] = None) -> Report:
        outcome = self.controller.promote_backlog(backlog_id, title)
        if not outcome.accepted:
            return Report(render_rejection(outcome, backlog_id=backlog_id), ok=False)
        return Report(render_promote(outcome))

    def dismiss(self, backlog_id: str) -> Report:
        outcome = self.controller.dismiss_backlog(backlog_id)
        if not outcome.accepted:
            return Report(render_rejection(outcome, backlog_id=backlog_id), ok=False)
        return Report(render_dismiss(outcome))

    def history(self, limit: Optional[int] = None) -> Report:
        if limit is None or limit < 1:
            limit = get_history_limit(self.container.config)
        return Report(render_history(self.controller.view(), limit))

    def rebuild(self) -> Report:
        return Report(render_rebuild(self.controller.rebuild()))

    def context(self, kind: str = "short") -> Report:
        view = self.controller.view()
        pending = len(view.pending_backlog)
        if kind == "resume":
            text = resume_view(view.cursor, view.tasks, view.project_context, pending)
        else:
            rule = get_context_rule(self.container.config)
            text = short_view(view.cursor, view.tasks, view.project_context, pending, rule=rule)
        return Report(text)
