from __future__ import annotations

from pathlib import Path

from loguru import logger

from ..config import load_focus_config
from ..constants import CURSOR_FILE, EVENTS_FILE, STATE_DIR_NAME
from .file_repos import FileCursorRepository, FileEventRepository


class Container:
    def __init__(self, project_dir: Path) -> None:
        self.project_dir = Path(project_dir).resolve()
        self.state_root = self.project_dir / STATE_DIR_NAME

        self.events = FileEventRepository(self.state_root / EVENTS_FILE)
        self.cursor = FileCursorRepository(self.state_root / CURSOR_FILE)
        self.config, self.config_error = load_focus_config(self.project_dir)
        if self.config_error:
            logger.debug("Ignoring unusable focus config ({}); using defaults", self.config_error)
