"""Filesystem primitives behind the exploration tools.

These functions raise on failure (``OSError``, ``re.error``); the
:class:`~bba.tools.executor.ToolExecutor` turns every exception into a
failed :class:`~bba.tools.models.ToolOutcome`.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel

from bba.errors import InvalidTargetError

IGNORED_ENTRIES = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        "coverage",
        "__pycache__",
        "venv",
        "target",
    }
)

TEXT_EXTENSIONS = frozenset(
    {
        ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".json", ".md", ".txt", ".rst",
        ".css", ".scss", ".html", ".yml", ".yaml", ".toml", ".ini", ".cfg",
        ".py", ".pyi", ".rs", ".go", ".java", ".kt", ".rb", ".php", ".c", ".h",
        ".cpp", ".hpp", ".cs", ".swift", ".sh", ".sql", ".xml",
    }
)


class FileInfo(BaseModel):
    """A single entry produced by :func:`list_directory`."""

    name: str
    path: str
    type: str
    size: int | None = None


class GrepMatch(BaseModel):
    """A single line matched by :func:`grep_search`."""

    file: str
    line: int
    content: str
    match: str


def should_ignore(name: str) -> bool:
    return name.startswith(".") or name in IGNORED_ENTRIES


def is_text_file(path: Path) -> bool:
    return path.suffix.lower() in TEXT_EXTENSIONS


def list_directory(target: Path, max_depth: int = 3, _depth: int = 0) -> list[FileInfo]:
    """Recursively list *target*, skipping dotfiles and build directories."""
    if _depth >= max_depth:
        return []

    try:
        entries = sorted(target.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        raise OSError(f"Failed to list directory {target}: {exc.strerror or exc}") from exc

    results: list[FileInfo] = []
    for entry in entries:
        if should_ignore(entry.name):
            continue
        if entry.is_dir():
            results.append(FileInfo(name=entry.name, path=str(entry), type="directory"))
            results.extend(list_directory(entry, max_depth, _depth + 1))
        elif entry.is_file():
            results.append(
                FileInfo(name=entry.name, path=str(entry), type="file", size=entry.stat().st_size)
            )
    return results


def read_file_content(path: Path, start_line: int | None = None, end_line: int | None = None) -> str:
    """Return the file with ``N| `` line-number prefixes (1-indexed)."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise OSError(f"Failed to read file {path}: {exc}") from exc

    lines = text.split("\n")
    if start_line is None and end_line is None:
        start = 0
        selected = lines
    else:
        start = max(0, (start_line or 1) - 1)
        end = min(len(lines), end_line) if end_line else len(lines)
        selected = lines[start:end]

    return "\n".join(f"{start + i + 1}| {line}" for i, line in enumerate(selected))


def _search_file(path: Path, regex: re.Pattern[str], results: list[GrepMatch], limit: int) -> None:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return
    for number, line in enumerate(text.split("\n"), start=1):
        if len(results) >= limit:
            return
        m = regex.search(line)
        if m:
            results.append(GrepMatch(file=str(path), line=number, content=line.strip(), match=m.group(0)))


def _walk(directory: Path, regex: re.Pattern[str], results: list[GrepMatch], limit: int) -> None:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        return
    for entry in entries:
        if len(results) >= limit:
            return
        if should_ignore(entry.name):
            continue
        if entry.is_dir():
            _walk(entry, regex, results, limit)
        elif entry.is_file() and is_text_file(entry):
            _search_file(entry, regex, results, limit)


def grep_search(pattern: str, target: Path, max_results: int = 50) -> list[GrepMatch]:
    """Case-insensitive regex search over text files below *target*.

    Stops as soon as *max_results* matches have been collected.

    Raises:
        re.error: If *pattern* is not a valid regular expression.
        FileNotFoundError: If *target* does not exist.
    """
    regex = re.compile(pattern, re.IGNORECASE)
    if not target.exists():
        raise FileNotFoundError(f"No such file or directory: {target}")

    results: list[GrepMatch] = []
    if target.is_file():
        _search_file(target, regex, results, max_results)
    else:
        _walk(target, regex, results, max_results)
    return results


def validate_path(target: Path) -> None:
    """Raise :class:`InvalidTargetError` unless *target* is an accessible file or directory."""
    if not target.exists():
        raise InvalidTargetError(str(target), "Path does not exist")
    if not (target.is_dir() or target.is_file()):
        raise InvalidTargetError(str(target), "Path is not a file or directory")
