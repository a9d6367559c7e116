from .container import Container
from .file_repos import FileCursorRepository, FileEventRepository
from .interfaces import CursorRepository, EventRepository

__all__ = [
    "Container",
    "CursorRepository",
    "EventRepository",
    "FileCursorRepository",
    "FileEventRepository",
]
