"""Engine configuration.

Settings come from explicit arguments or from environment variables:

    FILEWARD_HOME       data directory (default ``~/.fileward``)
    FILEWARD_DB_PATH    SQLite database (default ``<home>/fileward.db``)
    FILEWARD_TRASH_DIR  trash area (default ``<home>/trash``)
    FILEWARD_ROOTS      initial allowed roots, ``os.pathsep`` separated
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = ["EngineSettings"]

DEFAULT_HOME = Path("~/.fileward")


class EngineSettings(BaseModel):
    """Locations of the engine's persistent state.

    Attributes:
        data_dir: Directory holding the database and, by default, the trash
        db_path: SQLite database path or ":memory:"
        trash_dir: Trash area; never inside an allowed root's guarded space
        roots: Allowed roots applied when none were persisted yet
    """

    model_config = ConfigDict(frozen=True)

    data_dir: Path = DEFAULT_HOME
    db_path: str
    trash_dir: Path
    roots: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        """Derive the database and trash locations from the data directory."""
        if not isinstance(data, dict):
            return data
        values = dict(data)
        data_dir = Path(values.get("data_dir") or DEFAULT_HOME).expanduser()
        values["data_dir"] = data_dir
        if values.get("db_path") is None:
            values["db_path"] = str(data_dir / "fileward.db")
        elif str(values["db_path"]) != ":memory:":
            values["db_path"] = str(Path(values["db_path"]).expanduser())
        if values.get("trash_dir") is None:
            values["trash_dir"] = data_dir / "trash"
        else:
            values["trash_dir"] = Path(values["trash_dir"]).expanduser()
        return values

    @classmethod
    def from_env(
        cls, env: Mapping[str, str] | None = None, **overrides: object
    ) -> EngineSettings:
        """Build settings from environment variables.

        Args:
            env: Environment mapping (defaults to ``os.environ``)
            overrides: Explicit values taking precedence over the environment
        """
        source = os.environ if env is None else env
        values: dict[str, object] = {}

        if source.get("FILEWARD_HOME"):
            values["data_dir"] = Path(source["FILEWARD_HOME"])
        if source.get("FILEWARD_DB_PATH"):
            values["db_path"] = source["FILEWARD_DB_PATH"]
        if source.get("FILEWARD_TRASH_DIR"):
            values["trash_dir"] = Path(source["FILEWARD_TRASH_DIR"])
        if source.get("FILEWARD_ROOTS"):
            values["roots"] = [
                root for root in source["FILEWARD_ROOTS"].split(os.pathsep) if root
            ]

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
