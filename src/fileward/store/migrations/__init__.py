"""Schema migrations for the fileward database.

The SQL files in this package build the engine's schema:

    0001_action_log.sql  append-only ``action_logs`` table, its indexes and
                         the triggers rejecting UPDATE and DELETE
    0002_settings.sql    ``settings`` key/value table (allowed roots,
                         favorites)

Files are named ``<version>_<description>.sql`` and run once each in version
order. Applied names are recorded in the ``migrations`` table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from importlib import resources
from pathlib import Path

import aiosqlite
import structlog

from fileward.store.paths import resolve_db_path

__all__ = [
    "MigrationFile",
    "apply_migrations",
    "ensure_connection_migrated",
    "get_migration_files",
]

logger = structlog.get_logger(__name__)

_NAME_PATTERN = re.compile(r"^(?P<version>\d{4})_[a-z0-9_]+\.sql$")

_BOOKKEEPING_SQL = """
CREATE TABLE IF NOT EXISTS migrations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    applied_at TEXT NOT NULL
)
"""


@dataclass(frozen=True)
class MigrationFile:
    """One bundled schema step."""

    name: str
    sql: str

    @property
    def version(self) -> int:
        match = _NAME_PATTERN.match(self.name)
        if match is None:
            raise ValueError(f"badly named migration: {self.name}")
        return int(match.group("version"))


def get_migration_files() -> list[MigrationFile]:
    """Load the bundled ``.sql`` files, ordered by version.

    Raises:
        ValueError: If a file is badly named or two files share a version
    """
    migrations = [
        MigrationFile(name=entry.name, sql=entry.read_text(encoding="utf-8"))
        for entry in resources.files(__name__).iterdir()
        if entry.name.endswith(".sql")
    ]
    migrations.sort(key=lambda migration: migration.version)

    versions = [migration.version for migration in migrations]
    if len(set(versions)) != len(versions):
        raise ValueError(f"duplicate migration versions: {versions}")
    return migrations


async def _applied_names(connection: aiosqlite.Connection) -> set[str]:
    await connection.execute(_BOOKKEEPING_SQL)
    await connection.commit()
    async with connection.execute("SELECT name FROM migrations") as cursor:
        return {row[0] for row in await cursor.fetchall()}


async def ensure_connection_migrated(connection: aiosqlite.Connection) -> list[str]:
    """Bring an open connection's schema up to date.

    Each pending file runs as a script followed by its bookkeeping row, so a
    file that fails part-way is retried on the next open.

    Returns:
        Names of the migrations applied by this call, in order
    """
    done = await _applied_names(connection)
    pending = [m for m in get_migration_files() if m.name not in done]

    for migration in pending:
        await connection.executescript(migration.sql)
        await connection.execute(
            "INSERT INTO migrations (name, applied_at) VALUES (?, ?)",
            (migration.name, datetime.now(UTC).isoformat()),
        )
        await connection.commit()
        logger.debug("db.migrated", migration=migration.name)

    return [migration.name for migration in pending]


async def apply_migrations(db_path: str | Path) -> list[str]:
    """Open the database at ``db_path``, migrate it and close it again."""
    async with aiosqlite.connect(resolve_db_path(db_path)) as connection:
        return await ensure_connection_migrated(connection)
