"""Persistent state: SQLite database, action log and settings."""

from fileward.store.action_log import ActionLog, UndoCandidate
from fileward.store.database import Database
from fileward.store.settings import SettingsStore

__all__ = ["ActionLog", "Database", "SettingsStore", "UndoCandidate"]
