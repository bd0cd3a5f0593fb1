"""Database location handling."""

from __future__ import annotations

from pathlib import Path

from fileward.config import EngineSettings

__all__ = ["MEMORY_DB", "resolve_db_path"]

MEMORY_DB = ":memory:"


def resolve_db_path(db_path: str | Path | None = None) -> str:
    """Turn a configured database location into a path sqlite can open.

    Without an explicit ``db_path`` the location comes from
    EngineSettings.from_env() (``FILEWARD_DB_PATH`` or ``FILEWARD_HOME``).
    The parent directory of an on-disk database is created.

    Args:
        db_path: File path, or ``":memory:"`` for a private in-memory database

    Returns:
        ``":memory:"`` or an absolute file path
    """
    if db_path is None:
        db_path = EngineSettings.from_env().db_path
    if str(db_path) == MEMORY_DB:
        return MEMORY_DB

    location = Path(db_path).expanduser().absolute()
    location.parent.mkdir(parents=True, exist_ok=True)
    return str(location)
