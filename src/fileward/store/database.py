"""Shared async SQLite connection for the action log and settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiosqlite

from fileward.store.migrations import ensure_connection_migrated
from fileward.store.paths import resolve_db_path

__all__ = ["Database"]


class Database:
    """The single aiosqlite connection behind ActionLog and SettingsStore.

    The connection is opened on first use and migrated before it is handed
    out, so callers always see the ``action_logs`` and ``settings`` tables.
    Rows come back as ``aiosqlite.Row`` for access by column name.
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        """Initialize the handle; nothing is opened yet.

        Args:
            db_path: Database file or ":memory:"; see resolve_db_path() for
                the default location
        """
        self.db_path = resolve_db_path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def connection(self) -> aiosqlite.Connection:
        """Return the open connection, opening and migrating it first."""
        if self._db is None:
            db = await aiosqlite.connect(self.db_path)
            db.row_factory = aiosqlite.Row
            await ensure_connection_migrated(db)
            self._db = db
        return self._db

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> Database:
        await self.connection()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
