"""Persisted engine settings: allowed roots and favorites."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, cast

from fileward.store.database import Database

__all__ = ["SettingsStore"]

ROOTS_KEY = "allowed_roots"
FAVORITES_KEY = "favorites"


class SettingsStore:
    """Key/value settings stored as JSON in the ``settings`` table."""

    def __init__(self, database: Database) -> None:
        self._database = database

    async def get(self, key: str) -> Any | None:
        """Return the decoded value for ``key`` or None if never set."""

        db = await self._database.connection()
        async with db.execute(
            "SELECT value FROM settings WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return json.loads(row["value"])

    async def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

        db = await self._database.connection()
        await db.execute(
            """
            INSERT OR REPLACE INTO settings (key, value, updated_at)
            VALUES (?, ?, ?)
            """,
            (key, json.dumps(value), datetime.now(UTC).isoformat()),
        )
        await db.commit()

    async def get_roots(self) -> list[str] | None:
        """Persisted allowed roots, or None if they were never saved."""

        value = await self.get(ROOTS_KEY)
        return cast(list[str], value) if value is not None else None

    async def set_roots(self, roots: list[str]) -> None:
        await self.set(ROOTS_KEY, roots)

    async def get_favorites(self) -> list[str] | None:
        """Persisted favorites, or None if they were never saved."""

        value = await self.get(FAVORITES_KEY)
        return cast(list[str], value) if value is not None else None

    async def set_favorites(self, favorites: list[str]) -> None:
        await self.set(FAVORITES_KEY, favorites)
