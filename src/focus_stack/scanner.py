"""Heuristic project scan used to seed the one-line project summary."""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .constants import PROJECT_SUMMARY_MAX_CHARS

FRAMEWORKS = ("next", "react", "vue", "svelte", "express", "fastify", "hono")

ENTRY_FILES = (
    "src/index.ts",
    "src/main.ts",
    "src/app.ts",
    "src/index.tsx",
    "app/page.tsx",
    "pages/index.tsx",
    "src/main.py",
    "main.py",
    "app.py",
    "main.go",
    "cmd/main.go",
    "src/main.rs",
    "src/lib.rs",
)

README_NAMES = ("README.md", "README.rst", "README.txt", "README")
AGENT_NOTES = ("CLAUDE.md", "AGENTS.md")

_GO_MODULE_RE = re.compile(r"^module\s+(\S+)", re.M)
_HEADING_RE = re.compile(r"^#+.*$", re.M)
_IMAGE_RE = re.compile(r"!\[.*?\]\(.*?\)")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n+")


@dataclass(frozen=True)
class ProjectScan:
    summary: str
    detail: str = ""


def _read(path: Path, max_chars: int) -> Optional[str]:
    try:
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8", errors="replace").strip()[:max_chars]
    except OSError:
        return None


def _package_json_facts(directory: Path) -> list[str]:
    raw = _read(directory / "package.json", 4000)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return []
    if not isinstance(data, dict):
        return []
    facts = [str(data[key]) for key in ("name", "description") if data.get(key)]
    deps: dict[str, Any] = {}
    for key in ("dependencies", "devDependencies"):
        if isinstance(data.get(key), dict):
            deps.update(data[key])
    found = [name for name in FRAMEWORKS if name in deps or f"@{name}/core" in deps]
    if found:
        facts.append(f"({', '.join(found)})")
    return facts


def _toml_facts(path: Path, table: str) -> list[str]:
    raw = _read(path, 20000)
    if not raw:
        return []
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return []
    section = data.get(table)
    if not isinstance(section, dict):
        return []
    return [str(section[key]) for key in ("name", "description") if section.get(key)]


def _go_facts(directory: Path) -> list[str]:
    raw = _read(directory / "go.mod", 400)
    match = _GO_MODULE_RE.search(raw or "")
    return [match.group(1)] if match else []


def _first_paragraph(text: str, *, strip_headings: bool) -> Optional[str]:
    if strip_headings:
        text = _HEADING_RE.sub("", text)
    text = _IMAGE_RE.sub("", text)
    for chunk in _PARAGRAPH_SPLIT_RE.split(text):
        para = " ".join(chunk.split())
        if len(para) > 20 and not para.startswith("```") and not para.startswith("#"):
            return para
    return None


def scan_project(directory: Path) -> ProjectScan:
    """Inspect manifests, README, agent notes and entry files under *directory*."""
    directory = Path(directory)
    facts: list[str] = []
    facts.extend(_package_json_facts(directory))
    facts.extend(_toml_facts(directory / "pyproject.toml", "project"))
    facts.extend(_go_facts(directory))
    facts.extend(_toml_facts(directory / "Cargo.toml", "package"))

    detail: list[str] = []
    for name in README_NAMES:
        content = _read(directory / name, 800)
        if not content:
            continue
        para = _first_paragraph(content, strip_headings=True)
        if para:
            detail.append(f"README: {para[:200]}")
        break

    for name in AGENT_NOTES:
        content = _read(directory / name, 500)
        para = _first_paragraph(content, strip_headings=False) if content else None
        if para:
            detail.append(f"{name}: {para[:150]}")

    entries = [entry for entry in ENTRY_FILES if (directory / entry).is_file()]
    if entries:
        detail.append(f"Entry points: {', '.join(entries[:3])}")

    summary = " ".join(fact for fact in facts if fact)[:PROJECT_SUMMARY_MAX_CHARS].strip()
    return ProjectScan(summary=summary or directory.resolve().name, detail="\n".join(detail))
