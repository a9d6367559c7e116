"""Provide utility helpers for timestamps and sequential identifiers."""

from __future__ import annotations

import time
from typing import Optional

from .constants import ID_PAD_WIDTH


def now_ms() -> int:
    return int(time.time() * 1000)


def format_id(prefix: str, seq: int) -> str:
    """Render a sequential id such as ``T007`` or ``B012``."""
    return f"{prefix}{str(seq).zfill(ID_PAD_WIDTH)}"


def parse_seq(value: Optional[str], prefix: str) -> Optional[int]:
    """Return the numeric part of an id with *prefix*, or None if it does not match."""
    if not value or not isinstance(value, str) or not value.startswith(prefix):
        return None
    digits = value[len(prefix):]
    if not digits.isdigit():
        return None
    return int(digits)


def clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]
