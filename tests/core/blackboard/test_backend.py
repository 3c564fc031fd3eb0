"""Tests for the FileBackend session store."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from bba.core.blackboard.backend import FileBackend
from bba.core.blackboard.blackboard import Blackboard

if TYPE_CHECKING:
    from pathlib import Path


def _board(target: str, content: str, age_minutes: int = 0) -> Blackboard:
    board = Blackboard(target)
    board.update_section("overview", content)
    board.updated_at = datetime(2025, 1, 1, 12, 0, tzinfo=UTC) - timedelta(minutes=age_minutes)
    return board


class TestFileBackend:
    async def test_load_missing_returns_none(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        assert await backend.load("nonexistent") is None

    async def test_save_and_load(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path / "sessions")
        board = _board("/proj", "saved")
        await backend.save(board)

        assert (tmp_path / "sessions" / f"{board.id}.json").exists()
        loaded = await backend.load(board.id)
        assert loaded is not None
        assert loaded.get_section("overview") == "saved"
        assert loaded.target_path == "/proj"

    async def test_save_overwrites(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        board = _board("/proj", "v1")
        await backend.save(board)
        board.update_section("overview", "v2", replace=True)
        await backend.save(board)

        loaded = await backend.load(board.id)
        assert loaded is not None
        assert loaded.get_section("overview") == "v2"

    async def test_exists_and_delete(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        board = _board("/proj", "x")
        await backend.save(board)

        assert await backend.exists(board.id) is True
        assert await backend.delete(board.id) is True
        assert await backend.exists(board.id) is False
        assert await backend.delete(board.id) is False

    async def test_find_by_target_picks_most_recent(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        old = _board("/proj", "old", age_minutes=30)
        new = _board("/proj", "new", age_minutes=5)
        other = _board("/elsewhere", "other", age_minutes=0)
        for board in (old, new, other):
            await backend.save(board)

        found = await backend.find_by_target("/proj")
        assert found is not None
        assert found.id == new.id
        assert await backend.find_by_target("/missing") is None

    async def test_list_newest_first(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        boards = [_board(f"/p{i}", "x", age_minutes=i * 10) for i in range(3)]
        for board in reversed(boards):
            await backend.save(board)

        sessions = await backend.list()
        assert [s.id for s in sessions] == [b.id for b in boards]
        assert sessions[0].total_tokens == 1

    async def test_list_without_directory(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path / "never-created")
        assert await backend.list() == []

    async def test_unreadable_files_are_skipped(self, tmp_path: Path) -> None:
        backend = FileBackend(tmp_path)
        good = _board("/proj", "ok")
        await backend.save(good)
        (tmp_path / "broken.json").write_text("{not json")

        sessions = await backend.list()
        assert [s.id for s in sessions] == [good.id]
        assert await backend.load("broken") is None
