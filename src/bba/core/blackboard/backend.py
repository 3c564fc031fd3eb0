"""Blackboard persistence backends.

:class:`BlackboardBackend` defines the async storage protocol.
:class:`FileBackend` stores one JSON file per blackboard id in a sessions
directory and supports the single cross-run lookup: "most recent session
for this target path".
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from bba.core.blackboard.blackboard import Blackboard
from bba.core.blackboard.models import SessionInfo

logger = logging.getLogger(__name__)

DEFAULT_SESSIONS_DIR = Path.home() / ".blackboard-agent" / "sessions"


class BlackboardBackend(Protocol):
    """Async persistence protocol for :class:`Blackboard` instances."""

    async def load(self, board_id: str) -> Blackboard | None:
        """Load a board by ID, or return ``None`` if it does not exist."""
        ...

    async def save(self, board: Blackboard) -> None:
        """Persist the board under its own ID (upsert semantics)."""
        ...

    async def delete(self, board_id: str) -> bool:
        """Remove a board by ID; return ``True`` if something was removed."""
        ...

    async def exists(self, board_id: str) -> bool:
        """Return ``True`` if a board with the given ID is persisted."""
        ...

    async def find_by_target(self, target_path: str) -> Blackboard | None:
        """Return the most recently updated board for *target_path*."""
        ...

    async def list(self) -> list[SessionInfo]:
        """Return all persisted sessions, most recently updated first."""
        ...


class FileBackend:
    """Directory-of-JSON-files :class:`BlackboardBackend` implementation.

    Files that cannot be read or parsed are logged and treated as absent.
    """

    def __init__(self, sessions_dir: Path | str | None = None) -> None:
        self.sessions_dir = Path(sessions_dir) if sessions_dir else DEFAULT_SESSIONS_DIR

    def _path(self, board_id: str) -> Path:
        return self.sessions_dir / f"{board_id}.json"

    def _ensure_dir(self) -> None:
        if not self.sessions_dir.exists():
            self.sessions_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created sessions directory %s", self.sessions_dir)

    async def save(self, board: Blackboard) -> None:
        self._ensure_dir()
        self._path(board.id).write_bytes(board.snapshot())
        logger.info(
            "Session saved: %s (target=%s, tokens=%d)",
            board.id,
            board.target_path,
            board.get_total_tokens(),
        )

    async def load(self, board_id: str) -> Blackboard | None:
        path = self._path(board_id)
        if not path.exists():
            return None
        try:
            board = Blackboard.from_json(path.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.error("Failed to load session %s: %s", board_id, exc)
            return None
        logger.info("Session loaded: %s (target=%s)", board_id, board.target_path)
        return board

    async def delete(self, board_id: str) -> bool:
        path = self._path(board_id)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Session deleted: %s", board_id)
        return True

    async def exists(self, board_id: str) -> bool:
        return self._path(board_id).exists()

    async def _load_all(self) -> list[Blackboard]:
        if not self.sessions_dir.exists():
            return []
        boards: list[Blackboard] = []
        for path in sorted(self.sessions_dir.glob("*.json")):
            board = await self.load(path.stem)
            if board is not None:
                boards.append(board)
        return boards

    async def find_by_target(self, target_path: str) -> Blackboard | None:
        candidates = [b for b in await self._load_all() if b.target_path == target_path]
        if not candidates:
            return None
        return max(candidates, key=lambda b: b.updated_at)

    async def list(self) -> list[SessionInfo]:
        sessions = [
            SessionInfo(
                id=b.id,
                target_path=b.target_path,
                created_at=b.created_at,
                updated_at=b.updated_at,
                total_tokens=b.get_total_tokens(),
            )
            for b in await self._load_all()
        ]
        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        return sessions
