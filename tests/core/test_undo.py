"""Tests for single-step undo."""

import os
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import EngineOpener
from fileward.config import EngineSettings
from fileward.core.engine import FileEngine
from fileward.core.errors import ActionLogError
from fileward.routes.schemas import ActionStatus, ActionType


@pytest.mark.asyncio
async def test_delete_then_undo_restores_entry(
    root: Path, open_engine: EngineOpener
) -> None:
    path = root / "report.pdf"
    path.write_bytes(b"%PDF-1.7 content")
    os.utime(path, (1_650_000_000, 1_650_000_000))
    before = path.stat()

    async with open_engine() as engine:
        deleted = await engine.soft_delete([path])
        assert deleted.success
        assert not path.exists()

        result = await engine.undo_last_action()

    assert result.success
    assert result.action == ActionType.DELETE
    assert result.items_restored == 1
    after = path.stat()
    assert path.name == "report.pdf"
    assert after.st_size == before.st_size
    assert after.st_mtime == before.st_mtime


@pytest.mark.asyncio
async def test_second_undo_changes_nothing(
    root: Path, open_engine: EngineOpener
) -> None:
    (root / "a.txt").write_text("a", encoding="utf-8")

    async with open_engine() as engine:
        await engine.rename_path(root / "a.txt", "b.txt")
        first = await engine.undo_last_action()
        snapshot = sorted(p.name for p in root.iterdir())
        second = await engine.undo_last_action()
        logs_after = await engine.get_recent_logs(100)

    assert first.items_restored == 1
    assert (root / "a.txt").exists()
    assert second.success is False
    assert second.items_restored == 0
    assert second.action is None
    assert sorted(p.name for p in root.iterdir()) == snapshot
    # The second call writes nothing
    assert sum(1 for e in logs_after if e.action == ActionType.UNDO) == 1


@pytest.mark.asyncio
async def test_undo_never_reaches_past_the_latest_batch(
    root: Path, open_engine: EngineOpener
) -> None:
    async with open_engine() as engine:
        await engine.make_dir(root, "first")
        await engine.make_dir(root, "second")
        await engine.undo_last_action()
        again = await engine.undo_last_action()

    assert not (root / "second").exists()
    assert (root / "first").is_dir()
    assert again.items_restored == 0


@pytest.mark.asyncio
async def test_undo_move_batch(root: Path, open_engine: EngineOpener) -> None:
    dest = root / "dest"
    dest.mkdir()
    for name in ("a.txt", "b.txt"):
        (root / name).write_text(name, encoding="utf-8")

    async with open_engine() as engine:
        await engine.move_paths([root / "a.txt", root / "b.txt"], dest)
        result = await engine.undo_last_action()

    assert result.action == ActionType.MOVE
    assert result.items_restored == 2
    assert (root / "a.txt").exists() and (root / "b.txt").exists()
    assert list(dest.iterdir()) == []


@pytest.mark.asyncio
async def test_undo_skips_failed_items(root: Path, open_engine: EngineOpener) -> None:
    dest = root / "dest"
    dest.mkdir()
    (root / "a.txt").write_text("mine", encoding="utf-8")
    (root / "b.txt").write_text("mine", encoding="utf-8")
    (dest / "b.txt").write_text("theirs", encoding="utf-8")

    async with open_engine() as engine:
        moved = await engine.move_paths([root / "a.txt", root / "b.txt"], dest)
        result = await engine.undo_last_action()

    assert moved.failed == 1
    assert result.items_restored == 1
    assert (root / "a.txt").exists()
    assert (dest / "b.txt").read_text(encoding="utf-8") == "theirs"
    assert (root / "b.txt").read_text(encoding="utf-8") == "mine"


@pytest.mark.asyncio
async def test_non_empty_created_dir_is_a_conflict(
    root: Path, open_engine: EngineOpener
) -> None:
    async with open_engine() as engine:
        await engine.make_dir(root, "made")
        (root / "made" / "later.txt").write_text("x", encoding="utf-8")

        result = await engine.undo_last_action()
        logs = await engine.get_recent_logs(1)

    assert result.success is False
    assert result.action == ActionType.CREATE_DIR
    assert result.items_restored == 0
    assert "not empty" in (result.message or "")
    assert (root / "made" / "later.txt").exists()
    assert logs[0].action == ActionType.UNDO
    assert logs[0].status == ActionStatus.ERROR


@pytest.mark.asyncio
async def test_occupied_original_is_reported(
    root: Path, open_engine: EngineOpener
) -> None:
    path = root / "notes.txt"
    path.write_text("old", encoding="utf-8")

    async with open_engine() as engine:
        await engine.soft_delete([path])
        path.write_text("newer", encoding="utf-8")
        result = await engine.undo_last_action()
        trash = await engine.list_trash()

    assert result.items_restored == 0
    assert path.read_text(encoding="utf-8") == "newer"
    assert [record.original_path for record in trash] == [str(path)]


@pytest.mark.asyncio
async def test_undo_entries_reference_reversed_batch(
    root: Path, open_engine: EngineOpener
) -> None:
    (root / "x.txt").write_text("x", encoding="utf-8")

    async with open_engine() as engine:
        deleted = await engine.soft_delete([root / "x.txt"])
        await engine.undo_last_action()
        (latest,) = await engine.get_recent_logs(1)

    assert latest.action == ActionType.UNDO
    assert latest.status == ActionStatus.SUCCESS
    assert latest.undo_of == deleted.batch_id
    assert latest.batch_id != deleted.batch_id
    assert latest.message == "undo DELETE"


@pytest.mark.asyncio
async def test_nothing_to_undo_on_empty_log(open_engine: EngineOpener) -> None:
    async with open_engine() as engine:
        result = await engine.undo_last_action()

    assert result.success is False
    assert result.action is None
    assert result.message == "nothing to undo"


@pytest.mark.asyncio
async def test_unlogged_reversal_is_reapplied(
    root: Path, open_engine: EngineOpener
) -> None:
    (root / "a.txt").write_text("a", encoding="utf-8")

    async with open_engine() as engine:
        await engine.rename_path(root / "a.txt", "b.txt")
        with patch.object(
            engine.action_log,
            "append",
            AsyncMock(side_effect=ActionLogError("database is locked")),
        ):
            result = await engine.undo_last_action()

    assert result.items_restored == 0
    assert (root / "b.txt").exists()
    assert not (root / "a.txt").exists()


@pytest.mark.asyncio
async def test_unlogged_restore_is_trashed_again(
    root: Path, open_engine: EngineOpener
) -> None:
    path = root / "a.txt"
    path.write_text("a", encoding="utf-8")

    async with open_engine() as engine:
        await engine.soft_delete([path])
        with patch.object(
            engine.action_log,
            "append",
            AsyncMock(side_effect=ActionLogError("database is locked")),
        ):
            failed = await engine.undo_last_action()
        still_deleted = not path.exists()
        retried = await engine.undo_last_action()
        logs = await engine.get_recent_logs(10)

    assert failed.items_restored == 0
    assert still_deleted
    assert retried.items_restored == 1
    assert path.read_text(encoding="utf-8") == "a"
    assert [(e.action, e.status) for e in logs] == [
        (ActionType.UNDO, ActionStatus.SUCCESS),
        (ActionType.DELETE, ActionStatus.SUCCESS),
    ]


@pytest.mark.asyncio
async def test_unlogged_directory_removal_is_recreated(
    root: Path, open_engine: EngineOpener
) -> None:
    async with open_engine() as engine:
        await engine.make_dir(root, "Projects")
        with patch.object(
            engine.action_log,
            "append",
            AsyncMock(side_effect=ActionLogError("database is locked")),
        ):
            failed = await engine.undo_last_action()
        recreated = (root / "Projects").is_dir()
        retried = await engine.undo_last_action()

    assert failed.items_restored == 0
    assert recreated
    assert retried.items_restored == 1
    assert not (root / "Projects").exists()


@pytest.mark.asyncio
async def test_nothing_to_undo_is_logged_with_its_code(
    settings: EngineSettings,
) -> None:
    logger = MagicMock()

    async with FileEngine(settings, logger=logger) as engine:
        await engine.undo_last_action()

    logger.info.assert_called_with(
        "undo.nothing", code="NOTHING_TO_UNDO", reason="nothing to undo"
    )
