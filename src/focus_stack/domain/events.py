"""Lifecycle events recorded in the append-only log.

Each event kind is its own frozen dataclass; ``Event`` is the union of all of
them. On disk an event is one JSON object whose ``e`` key names the kind and
whose remaining keys are the dataclass fields (``None`` values omitted).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, ClassVar, Optional, Union

from ..constants import TASK_KIND_MAIN
from ..utils import now_ms


class _EventBase:
    kind: ClassVar[str]
    required: ClassVar[tuple[str, ...]] = ("id",)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"e": self.kind}
        for key, value in asdict(self).items():  # type: ignore[call-overload]
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class TaskCreated(_EventBase):
    kind: ClassVar[str] = "created"

    id: str
    title: str = ""
    type: str = TASK_KIND_MAIN
    queued: bool = False
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class SubTaskCreated(_EventBase):
    kind: ClassVar[str] = "sub"

    id: str
    parent: str = ""
    title: str = ""
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class TaskDone(_EventBase):
    kind: ClassVar[str] = "done"

    id: str
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class TaskPivoted(_EventBase):
    kind: ClassVar[str] = "pivoted"

    id: str
    reason: Optional[str] = None
    drop_queue: bool = False
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class ResumeSet(_EventBase):
    kind: ClassVar[str] = "resume_set"

    id: str
    prompt: str = ""
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class TaskActivated(_EventBase):
    """A queued main task was taken off the ready queue and made active."""

    kind: ClassVar[str] = "activated"

    id: str
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class ProjectContextSet(_EventBase):
    kind: ClassVar[str] = "project_context"
    required: ClassVar[tuple[str, ...]] = ("summary",)

    summary: str
    detail: Optional[str] = None
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class BacklogAdded(_EventBase):
    kind: ClassVar[str] = "backlog_add"

    id: str
    title: str = ""
    detail: Optional[str] = None
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class BacklogPromoted(_EventBase):
    kind: ClassVar[str] = "backlog_promote"
    required: ClassVar[tuple[str, ...]] = ("backlog_id",)

    backlog_id: str
    task_id: Optional[str] = None
    ts: int = field(default_factory=now_ms)


@dataclass(frozen=True)
class BacklogDismissed(_EventBase):
    kind: ClassVar[str] = "backlog_dismiss"
    required: ClassVar[tuple[str, ...]] = ("backlog_id",)

    backlog_id: str
    ts: int = field(default_factory=now_ms)


Event = Union[
    TaskCreated,
    SubTaskCreated,
    TaskDone,
    TaskPivoted,
    ResumeSet,
    TaskActivated,
    ProjectContextSet,
    BacklogAdded,
    BacklogPromoted,
    BacklogDismissed,
]

EVENT_TYPES: dict[str, type] = {
    cls.kind: cls
    for cls in (
        TaskCreated,
        SubTaskCreated,
        TaskDone,
        TaskPivoted,
        ResumeSet,
        TaskActivated,
        ProjectContextSet,
        BacklogAdded,
        BacklogPromoted,
        BacklogDismissed,
    )
}

_COERCE = {"str": str, "Optional[str]": str, "bool": bool, "int": int}


def decode_event(raw: dict[str, Any]) -> Optional[Event]:
    """Build a typed event from a raw log record.

    Returns None for unknown kinds and for records missing a required field or
    holding a value of the wrong shape.
    """
    cls = EVENT_TYPES.get(raw.get("e"))  # type: ignore[arg-type]
    if cls is None:
        return None
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        value = raw.get(f.name)
        if value is None:
            continue
        caster = _COERCE.get(str(f.type))
        if caster is int and (isinstance(value, bool) or not isinstance(value, (int, float))):
            return None
        if caster is bool and not isinstance(value, bool):
            return None
        if caster is str and isinstance(value, (dict, list)):
            return None
        kwargs[f.name] = caster(value) if caster else value
    for name in cls.required:
        if not kwargs.get(name):
            return None
    kwargs.setdefault("ts", 0)
    return cls(**kwargs)
