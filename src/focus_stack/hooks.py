"""Host adapter: turns hook callbacks into controller calls and context text.

Every entry point here is best-effort. A malformed payload, an unreachable
session lookup or a storage error is logged at DEBUG and swallowed so the
host's own tool call or prompt assembly always proceeds.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .config import get_commit_pattern, get_context_rule, get_fallback_title
from .constants import SESSION_TITLE_MAX_CHARS
from .controller import LifecycleController, Outcome
from .storage.container import Container
from .summarizer import resume_view, short_view
from .tools import ToolClassifier
from .utils import clip

SessionDirResolver = Callable[[str], Optional[Path]]
TitleResolver = Callable[[str], Optional[str]]


class SessionPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    session_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("session_id", "sessionID"),
    )


class BeforeToolPayload(SessionPayload):
    tool: str = Field(validation_alias=AliasChoices("tool", "tool_name"))


class AfterToolPayload(BeforeToolPayload):
    args: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("args", "tool_input"),
    )

    def command_text(self) -> str:
        for key in ("command", "cmd", "input"):
            value = self.args.get(key)
            if isinstance(value, str):
                return value
        return ""


class HostAdapter:
    """Bridge between a host's hook surface and one or more project directories.

    Parameters
    ----------
    default_dir:
        Project directory used when a session cannot be resolved.
    resolve_session_dir:
        Optional lookup from session id to that session's working directory.
        Successful lookups are cached on this adapter for its lifetime.
    resolve_title:
        Optional lookup from session id to a human title (session name or the
        latest user message) used when a task has to be started implicitly.
    """

    def __init__(
        self,
        default_dir: Path,
        *,
        resolve_session_dir: Optional[SessionDirResolver] = None,
        resolve_title: Optional[TitleResolver] = None,
    ) -> None:
        self.default_dir = Path(default_dir).resolve()
        self._resolve_session_dir = resolve_session_dir
        self._resolve_title = resolve_title
        self._session_dirs: dict[str, Path] = {}

    # -- session helpers ----------------------------------------------------

    def session_dir(self, session_id: Optional[str]) -> Path:
        if not session_id or self._resolve_session_dir is None:
            return self.default_dir
        cached = self._session_dirs.get(session_id)
        if cached is not None:
            return cached
        try:
            resolved = self._resolve_session_dir(session_id)
        except Exception:
            logger.opt(exception=True).debug("Session lookup failed for {}", session_id)
            return self.default_dir
        directory = Path(resolved).resolve() if resolved else self.default_dir
        self._session_dirs[session_id] = directory
        return directory

    def session_title(self, session_id: Optional[str], fallback: str) -> str:
        if session_id and self._resolve_title is not None:
            try:
                title = (self._resolve_title(session_id) or "").strip()
            except Exception:
                logger.opt(exception=True).debug("Title lookup failed for {}", session_id)
                title = ""
            if title:
                return clip(title, SESSION_TITLE_MAX_CHARS)
        return fallback

    # -- tool hooks ---------------------------------------------------------

    def before_tool(self, payload: BeforeToolPayload | dict[str, Any]) -> Optional[Outcome]:
        """Start (or dequeue) a task when a write tool runs with nothing in focus."""
        try:
            data = BeforeToolPayload.model_validate(payload)
            container = Container(self.session_dir(data.session_id))
            classifier = ToolClassifier.from_config(container.config)
            if classifier.is_own(data.tool) or not classifier.is_write(data.tool):
                return None
            controller = LifecycleController(container)
            if controller.state() != "idle":
                return None
            title = self.session_title(data.session_id, get_fallback_title(container.config))
            return controller.auto_create(title)
        except Exception:
            logger.opt(exception=True).debug("before_tool hook failed; ignoring")
            return None

    def after_tool(self, payload: AfterToolPayload | dict[str, Any]) -> Optional[Outcome]:
        """Complete the task in focus when a shell tool ran a commit command."""
        try:
            data = AfterToolPayload.model_validate(payload)
            container = Container(self.session_dir(data.session_id))
            classifier = ToolClassifier.from_config(container.config)
            if not classifier.is_shell(data.tool):
                return None
            if not get_commit_pattern(container.config).search(data.command_text()):
                return None
            return LifecycleController(container).auto_complete()
        except Exception:
            logger.opt(exception=True).debug("after_tool hook failed; ignoring")
            return None

    # -- context injection --------------------------------------------------

    def system_prompt(self, session_id: Optional[str] = None) -> Optional[str]:
        try:
            container = Container(self.session_dir(session_id))
            view = LifecycleController(container).view()
            text = short_view(
                view.cursor,
                view.tasks,
                view.project_context,
                len(view.pending_backlog),
                rule=get_context_rule(container.config),
            )
            return text or None
        except Exception:
            logger.opt(exception=True).debug("system prompt context failed; ignoring")
            return None

    def compaction(self, session_id: Optional[str] = None) -> Optional[str]:
        try:
            container = Container(self.session_dir(session_id))
            view = LifecycleController(container).view()
            text = resume_view(view.cursor, view.tasks, view.project_context, len(view.pending_backlog))
            return text or None
        except Exception:
            logger.opt(exception=True).debug("compaction context failed; ignoring")
            return None
