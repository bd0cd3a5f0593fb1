"""Append-only action log backed by SQLite."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime

import aiosqlite

from fileward.core.errors import ActionLogError
from fileward.routes.schemas import (
    ActionLogEntry,
    ActionStatus,
    ActionType,
    LogEntryInput,
)
from fileward.store.database import Database

__all__ = ["ActionLog", "UndoCandidate"]

_COLUMNS = (
    "id, timestamp, action, src_path, dst_path, status, message, batch_id, undo_of"
)


@dataclass
class UndoCandidate:
    """The most recent reversible batch and whether it was already undone."""

    batch_id: str
    entries: list[ActionLogEntry] = field(default_factory=list)
    consumed: bool = False

    @property
    def successful_entries(self) -> list[ActionLogEntry]:
        """Entries that changed the filesystem and can be reversed."""
        return [e for e in self.entries if e.status == ActionStatus.SUCCESS]


def _row_to_entry(row: aiosqlite.Row) -> ActionLogEntry:
    return ActionLogEntry(
        id=row["id"],
        timestamp=datetime.fromisoformat(row["timestamp"]),
        action=ActionType(row["action"]),
        src_path=row["src_path"],
        dst_path=row["dst_path"],
        status=ActionStatus(row["status"]),
        message=row["message"],
        batch_id=row["batch_id"],
        undo_of=row["undo_of"],
    )


class ActionLog:
    """Durable, append-only record of every item-level outcome.

    Entries are inserted and committed one at a time; the table rejects
    UPDATE and DELETE at the database level.
    """

    def __init__(self, database: Database) -> None:
        """Initialize the log on top of a shared database handle."""

        self._database = database

    async def append(self, entry: LogEntryInput) -> int:
        """Persist one entry and return its assigned id.

        Raises:
            ActionLogError: If the entry could not be written and committed
        """

        try:
            db = await self._database.connection()
            cursor = await db.execute(
                """
                INSERT INTO action_logs
                (timestamp, action, src_path, dst_path, status, message,
                 batch_id, undo_of)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.timestamp.isoformat(),
                    entry.action.value,
                    entry.src_path,
                    entry.dst_path,
                    entry.status.value,
                    entry.message,
                    entry.batch_id,
                    entry.undo_of,
                ),
            )
            await db.commit()
        except (sqlite3.Error, ValueError) as exc:
            raise ActionLogError(f"failed to persist action log entry: {exc}") from exc

        entry_id = cursor.lastrowid
        await cursor.close()
        if entry_id is None:
            raise ActionLogError("database did not assign an id to the entry")
        return entry_id

    async def recent(self, limit: int) -> list[ActionLogEntry]:
        """Return up to ``limit`` entries, most recent first."""

        if limit <= 0:
            return []

        db = await self._database.connection()
        async with db.execute(
            f"SELECT {_COLUMNS} FROM action_logs ORDER BY id DESC LIMIT ?",
            (limit,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_entry(row) for row in rows]

    async def batch(self, batch_id: str) -> list[ActionLogEntry]:
        """Return every entry of one batch in insertion order."""

        db = await self._database.connection()
        async with db.execute(
            f"SELECT {_COLUMNS} FROM action_logs WHERE batch_id = ? ORDER BY id ASC",
            (batch_id,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_entry(row) for row in rows]

    async def last_undoable_batch(self) -> UndoCandidate | None:
        """Find the most recent non-UNDO batch that changed something.

        Batches in which every item failed are skipped, since there is
        nothing to reverse. The returned candidate reports whether an UNDO
        batch already targeted it.
        """

        db = await self._database.connection()
        async with db.execute(
            """
            SELECT batch_id FROM action_logs
            WHERE action != ? AND status = ? AND batch_id IS NOT NULL
            ORDER BY id DESC
            LIMIT 1
            """,
            (ActionType.UNDO.value, ActionStatus.SUCCESS.value),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        batch_id: str = row["batch_id"]
        async with db.execute(
            "SELECT 1 FROM action_logs WHERE action = ? AND undo_of = ? LIMIT 1",
            (ActionType.UNDO.value, batch_id),
        ) as cursor:
            consumed = await cursor.fetchone() is not None

        entries = [
            entry
            for entry in await self.batch(batch_id)
            if entry.action != ActionType.UNDO
        ]
        return UndoCandidate(batch_id=batch_id, entries=entries, consumed=consumed)
