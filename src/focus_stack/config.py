"""Load optional focus-stack configuration from `.focus_stack/config.yaml`."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from .constants import (
    CONFIG_FILE,
    DEFAULT_COMMIT_PATTERN,
    DEFAULT_CONTEXT_RULE,
    DEFAULT_FALLBACK_TITLE,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_OWN_TOOL_PREFIX,
    DEFAULT_SHELL_TOOL_PATTERNS,
    DEFAULT_WRITE_TOOL_PATTERNS,
    STATE_DIR_NAME,
)
from .io_utils import _load_data_with_error


def load_focus_config(project_dir: Path) -> tuple[dict[str, Any], str | None]:
    """Load the optional config file.

    Args:
        project_dir: Project root directory.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    path = Path(project_dir).resolve() / STATE_DIR_NAME / CONFIG_FILE
    data, err = _load_data_with_error(path, {})
    if err:
        return {}, err
    return data, None


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _patterns(raw: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return default
    cleaned = tuple(str(item).strip().lower() for item in raw if isinstance(item, str) and item.strip())
    return cleaned or default


def get_write_tool_patterns(config: dict[str, Any]) -> tuple[str, ...]:
    """Substrings that mark a tool name as one that changes the workspace."""
    return _patterns(_get_nested(config, "hooks", "write_tool_patterns"), DEFAULT_WRITE_TOOL_PATTERNS)


def get_shell_tool_patterns(config: dict[str, Any]) -> tuple[str, ...]:
    """Substrings that mark a tool name as shell-like."""
    return _patterns(_get_nested(config, "hooks", "shell_tool_patterns"), DEFAULT_SHELL_TOOL_PATTERNS)


def get_commit_pattern(config: dict[str, Any]) -> re.Pattern[str]:
    """Compile the commit-detection regex, falling back to the default when invalid."""
    raw = _get_nested(config, "hooks", "commit_pattern")
    if isinstance(raw, str) and raw.strip():
        try:
            return re.compile(raw)
        except re.error:
            pass
    return re.compile(DEFAULT_COMMIT_PATTERN)


def get_own_tool_prefix(config: dict[str, Any]) -> str:
    raw = _get_nested(config, "hooks", "own_tool_prefix")
    return raw if isinstance(raw, str) and raw else DEFAULT_OWN_TOOL_PREFIX


def get_fallback_title(config: dict[str, Any]) -> str:
    raw = _get_nested(config, "hooks", "fallback_title")
    return raw.strip() if isinstance(raw, str) and raw.strip() else DEFAULT_FALLBACK_TITLE


def get_context_rule(config: dict[str, Any]) -> str:
    """The working rule line opening the short context view.

    An explicit empty string disables the line.
    """
    raw = _get_nested(config, "context", "rule")
    if isinstance(raw, str):
        return raw.strip()
    return DEFAULT_CONTEXT_RULE


def get_history_limit(config: dict[str, Any]) -> int:
    raw = _get_nested(config, "history", "limit")
    if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
        return raw
    return DEFAULT_HISTORY_LIMIT
