from .events import (
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
    decode_event,
)
from .models import BacklogItem, QueueEntry, SnapshotCursor, Task

__all__ = [
    "Event",
    "TaskCreated",
    "SubTaskCreated",
    "TaskDone",
    "TaskPivoted",
    "ResumeSet",
    "TaskActivated",
    "ProjectContextSet",
    "BacklogAdded",
    "BacklogPromoted",
    "BacklogDismissed",
    "decode_event",
    "Task",
    "BacklogItem",
    "QueueEntry",
    "SnapshotCursor",
]
