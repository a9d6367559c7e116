from __future__ import annotations

from pathlib import Path
from typing import Optional

from loguru import logger

from ..domain.events import Event, decode_event
from ..domain.models import SnapshotCursor
from ..io_utils import _append_jsonl, _atomic_write_json, _iter_jsonl, _load_data_with_error
from .interfaces import CursorRepository, EventRepository


class FileEventRepository(EventRepository):
    """Append-only JSON Lines log.

    Each append is one newline-terminated write, so a torn write can only
    damage its own line; readers skip lines that do not decode.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, event: Event) -> Event:
        _append_jsonl(self._path, event.to_dict())
        return event

    def read(self) -> list[Event]:
        events: list[Event] = []
        for record in _iter_jsonl(self._path):
            event = decode_event(record)
            if event is None:
                logger.debug("Ignoring unusable event record: {}", record.get("e"))
                continue
            events.append(event)
        return events


class FileCursorRepository(CursorRepository):
    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> Optional[SnapshotCursor]:
        if not self._path.exists():
            return None
        data, err = _load_data_with_error(self._path, {})
        if err:
            logger.debug("Unusable focus snapshot ({}); treating as absent", err)
            return None
        return SnapshotCursor.from_dict(data)

    def load(self) -> SnapshotCursor:
        return self.read() or SnapshotCursor()

    def save(self, cursor: SnapshotCursor) -> SnapshotCursor:
        _atomic_write_json(self._path, cursor.to_dict())
        return cursor
