"""Engine facade exposing the fileward command surface.

FileEngine owns the shared state (allowed roots, action log, trash,
persisted settings) and wires the batch executor, undo controller and
search together. Every public coroutine corresponds to one command of the
command surface; blocking filesystem calls are pushed to worker threads.
"""

from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import anyio
import structlog

from fileward.config import EngineSettings
from fileward.core.constants import DEFAULT_FAVORITE_DIRS, DEFAULT_LOG_LIMIT
from fileward.core.errors import IOFailure, error_for_code
from fileward.core.executor import BatchContext, BatchExecutor
from fileward.core.scanner import iter_matches, list_directory, search, stat_entry
from fileward.core.undo import UndoController
from fileward.fs.guard import RootGuard
from fileward.fs.paths import normalize_path
from fileward.fs.trash import TrashManager
from fileward.routes.schemas import (
    ActionLogEntry,
    ActionType,
    BatchResult,
    DirResult,
    FileEntry,
    FileStat,
    LogEntryInput,
    RenameResult,
    TrashRecord,
    UndoResult,
)
from fileward.store.action_log import ActionLog
from fileward.store.database import Database
from fileward.store.settings import SettingsStore

__all__ = ["FileEngine"]


class FileEngine:
    """Root-guarded file operations with trash, action log and undo.

    Usage::

        async with FileEngine(EngineSettings(data_dir=state_dir)) as engine:
            await engine.set_allowed_roots(["/home/me/docs"])
            result = await engine.soft_delete(["/home/me/docs/old.txt"])
            await engine.undo_last_action()
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        logger: Any = None,
    ) -> None:
        """Initialize the engine.

        Args:
            settings: Storage locations (defaults to EngineSettings.from_env())
            logger: Optional structlog logger instance
        """
        self.settings = settings or EngineSettings.from_env()
        self._logger = logger or structlog.get_logger(__name__)

        self._database = Database(self.settings.db_path)
        self.action_log = ActionLog(self._database)
        self.settings_store = SettingsStore(self._database)

        trash_dir = normalize_path(self.settings.trash_dir)
        self.trash = TrashManager(trash_dir)
        self.guard = RootGuard(
            excluded=[trash_dir, normalize_path(self.settings.data_dir)]
        )
        self.executor = BatchExecutor(
            self.guard, self.trash, self.action_log, logger=self._logger
        )
        self.undo = UndoController(self.action_log, self.trash, logger=self._logger)

    async def open(self) -> FileEngine:
        """Open the database and load the persisted allowed roots.

        Roots from the settings are used only when none were ever persisted.
        """
        await self._database.connection()
        roots = await self.settings_store.get_roots()
        if roots is None and self.settings.roots:
            initial = [str(normalize_path(root)) for root in self.settings.roots]
            self.guard.set_roots(initial)
            await self.settings_store.set_roots(initial)
        else:
            self.guard.set_roots(roots or [])
        await anyio.to_thread.run_sync(self.trash.ensure_layout)
        return self

    async def close(self) -> None:
        """Close the database connection."""
        await self._database.close()

    async def __aenter__(self) -> FileEngine:
        return await self.open()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Read-only commands
    # ------------------------------------------------------------------

    async def list_dir(self, path: str | Path) -> list[FileEntry]:
        """List the immediate children of ``path``."""
        directory = self.guard.check_readable(path)
        return await anyio.to_thread.run_sync(list_directory, directory)

    async def stat_path(self, path: str | Path) -> FileStat:
        """Describe a single path, including creation time and permissions."""
        target = self.guard.check_readable(path)
        return await anyio.to_thread.run_sync(stat_entry, target)

    async def search(self, current_path: str | Path, query: str) -> list[FileEntry]:
        """Find entries below ``current_path`` whose name contains ``query``."""
        root = self.guard.check_readable(current_path)
        return await anyio.to_thread.run_sync(search, root, query)

    def iter_search(self, current_path: str | Path, query: str) -> Iterator[FileEntry]:
        """Lazy, blocking variant of search() for synchronous consumers."""
        root = self.guard.check_readable(current_path)
        return iter_matches(root, query)

    # ------------------------------------------------------------------
    # Mutating commands
    # ------------------------------------------------------------------

    async def make_dir(self, base: str | Path, name: str) -> DirResult:
        """Create folder ``name`` inside ``base``.

        Raises:
            FileWardError: InvalidName/RootViolation before any I/O, or the
                item's NotFound/Collision/IOFailure after it was logged
        """
        result = await self.executor.execute(
            ActionType.CREATE_DIR, [base], BatchContext(name=name)
        )
        target = normalize_path(base) / name
        self._raise_for_item(result)
        return DirResult(success=True, path=str(target))

    async def rename_path(self, src: str | Path, new_name: str) -> RenameResult:
        """Rename ``src`` to ``new_name`` within its parent directory.

        Raises:
            FileWardError: InvalidName/RootViolation before any I/O, or the
                item's NotFound/Collision/IOFailure after it was logged
        """
        result = await self.executor.execute(
            ActionType.RENAME, [src], BatchContext(name=new_name)
        )
        old_path = normalize_path(src)
        self._raise_for_item(result)
        return RenameResult(
            success=True,
            old_path=str(old_path),
            new_path=str(old_path.parent / new_name),
        )

    async def move_paths(
        self, src_paths: Sequence[str | Path], dest_dir: str | Path
    ) -> BatchResult:
        """Move every source into ``dest_dir``, continuing past failures."""
        return await self.executor.execute(
            ActionType.MOVE, src_paths, BatchContext(dest_dir=dest_dir)
        )

    async def soft_delete(self, paths: Sequence[str | Path]) -> BatchResult:
        """Move every path into the trash, continuing past failures."""
        return await self.executor.execute(ActionType.DELETE, paths)

    async def undo_last_action(self) -> UndoResult:
        """Reverse the most recent batch that has not been undone yet."""
        return await self.undo.undo_last()

    @staticmethod
    def _raise_for_item(result: BatchResult) -> None:
        item = result.results[0]
        if not item.success:
            message = item.message or "operation failed"
            raise error_for_code(item.code, message, item.path)

    # ------------------------------------------------------------------
    # Settings, favorites and logs
    # ------------------------------------------------------------------

    async def set_allowed_roots(self, roots: Sequence[str | Path]) -> None:
        """Replace the allowed roots and persist them.

        Raises:
            IOFailure: If the new roots cannot be persisted; the previous
                roots then stay in effect
        """
        normalized = [str(normalize_path(root)) for root in roots]
        try:
            await self.settings_store.set_roots(normalized)
        except sqlite3.Error as e:
            raise IOFailure(f"failed to persist allowed roots: {e}") from e
        self.guard.set_roots(normalized)
        self._logger.info("roots.replaced", roots=normalized)

    async def get_allowed_roots(self) -> list[str]:
        """Return the allowed roots currently in effect."""
        return [str(root) for root in self.guard.roots]

    async def get_favorites(self) -> list[str]:
        """Return saved favorites, or the existing well-known user folders."""
        saved = await self.settings_store.get_favorites()
        if saved is not None:
            return saved

        home = Path.home()
        candidates = [home / name for name in DEFAULT_FAVORITE_DIRS] + [home]
        return [str(path) for path in candidates if path.is_dir()]

    async def set_favorites(self, paths: Sequence[str | Path]) -> None:
        """Replace the favorites list."""
        await self.settings_store.set_favorites([str(normalize_path(p)) for p in paths])

    async def get_recent_logs(
        self, limit: int = DEFAULT_LOG_LIMIT
    ) -> list[ActionLogEntry]:
        """Return up to ``limit`` action log entries, most recent first."""
        return await self.action_log.recent(limit)

    async def db_log(self, entry: LogEntryInput | dict[str, Any]) -> int:
        """Append an externally produced entry to the action log.

        Entries without a batch id get a fresh one.

        Returns:
            The id assigned to the entry
        """
        if not isinstance(entry, LogEntryInput):
            entry = LogEntryInput.model_validate(entry)
        if entry.batch_id is None:
            entry = entry.model_copy(update={"batch_id": str(uuid.uuid4())})
        return await self.action_log.append(entry)

    async def list_trash(self) -> list[TrashRecord]:
        """Return the records of items currently in the trash."""
        return await anyio.to_thread.run_sync(self.trash.list_records)
