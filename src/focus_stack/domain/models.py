from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Optional

from ..constants import BACKLOG_PENDING, TASK_KIND_MAIN


TaskKind = Literal["main", "sub"]
BacklogStatus = Literal["pending", "promoted", "dismissed"]


@dataclass
class Task:
    id: str
    title: str = ""
    kind: TaskKind = TASK_KIND_MAIN
    parent: Optional[str] = None
    done: bool = False
    pivoted: bool = False
    pivot_reason: Optional[str] = None
    resume_prompt: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return not self.done

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BacklogItem:
    id: str
    title: str = ""
    detail: Optional[str] = None
    status: BacklogStatus = BACKLOG_PENDING
    promoted_to: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == BACKLOG_PENDING

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class QueueEntry:
    id: str
    title: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if isinstance(item, (str, int)) and str(item)]


def _queue(value: Any) -> list[QueueEntry]:
    if not isinstance(value, list):
        return []
    out: list[QueueEntry] = []
    for item in value:
        if isinstance(item, dict) and item.get("id"):
            out.append(QueueEntry(id=str(item["id"]), title=str(item.get("title") or "")))
    return out


def _positive_int(value: Any, default: int = 1) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


@dataclass
class SnapshotCursor:
    """Cached focus state: id counters, the active stack and the ready queue.

    ``active_stack[0]`` is the main task and the last entry is the task in
    focus. ``active_task_id`` mirrors the top of the stack.
    """

    next_id: int = 1
    backlog_next_id: int = 1
    active_stack: list[str] = field(default_factory=list)
    active_task_id: Optional[str] = None
    ready_tasks: list[QueueEntry] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.active_stack)

    @property
    def is_idle(self) -> bool:
        return not self.active_stack

    @property
    def main_task_id(self) -> Optional[str]:
        return self.active_stack[0] if self.active_stack else None

    def sync_active(self) -> None:
        self.active_task_id = self.active_stack[-1] if self.active_stack else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "next_id": self.next_id,
            "backlog_next_id": self.backlog_next_id,
            "active_stack": list(self.active_stack),
            "active_task_id": self.active_task_id,
            "ready_tasks": [entry.to_dict() for entry in self.ready_tasks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SnapshotCursor":
        # Older snapshots predate backlog_next_id and ready_tasks; every field
        # falls back to its zero value on its own.
        cursor = cls(
            next_id=_positive_int(data.get("next_id")),
            backlog_next_id=_positive_int(data.get("backlog_next_id")),
            active_stack=_str_list(data.get("active_stack")),
            ready_tasks=_queue(data.get("ready_tasks")),
        )
        cursor.sync_active()
        return cursor
