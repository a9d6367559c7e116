"""Classify host tool names as workspace-writing or shell-like."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .config import get_own_tool_prefix, get_shell_tool_patterns, get_write_tool_patterns
from .constants import DEFAULT_OWN_TOOL_PREFIX, DEFAULT_SHELL_TOOL_PATTERNS, DEFAULT_WRITE_TOOL_PATTERNS


@dataclass(frozen=True)
class ToolClassifier:
    write_patterns: tuple[str, ...] = DEFAULT_WRITE_TOOL_PATTERNS
    shell_patterns: tuple[str, ...] = DEFAULT_SHELL_TOOL_PATTERNS
    own_prefix: str = DEFAULT_OWN_TOOL_PREFIX

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "ToolClassifier":
        return cls(
            write_patterns=get_write_tool_patterns(config),
            shell_patterns=get_shell_tool_patterns(config),
            own_prefix=get_own_tool_prefix(config),
        )

    def is_own(self, name: str) -> bool:
        return bool(self.own_prefix) and name.startswith(self.own_prefix)

    def is_write(self, name: str) -> bool:
        lowered = name.lower()
        return any(pattern in lowered for pattern in self.write_patterns)

    def is_shell(self, name: str) -> bool:
        lowered = name.lower()
        return any(pattern in lowered for pattern in self.shell_patterns)
