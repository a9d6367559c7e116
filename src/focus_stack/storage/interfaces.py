from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..domain.events import Event
from ..domain.models import SnapshotCursor


class EventRepository(ABC):
    @abstractmethod
    def append(self, event: Event) -> Event:
        raise NotImplementedError

    @abstractmethod
    def read(self) -> list[Event]:
        raise NotImplementedError


class CursorRepository(ABC):
    @abstractmethod
    def read(self) -> Optional[SnapshotCursor]:
        raise NotImplementedError

    @abstractmethod
    def load(self) -> SnapshotCursor:
        raise NotImplementedError

    @abstractmethod
    def save(self, cursor: SnapshotCursor) -> SnapshotCursor:
        raise NotImplementedError
