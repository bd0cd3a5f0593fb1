"""Pydantic schemas for the fileward command surface.

These schemas define the data structures exchanged with callers:
- FileEntry / FileStat: listing, stat and search records
- ActionLogEntry: one row of the append-only action log
- DirResult / RenameResult / BatchResult / UndoResult: operation outcomes
- TrashRecord: restore metadata kept by the trash manager

All schemas use Pydantic v2 for validation and serialization. Field names
match the wire format except ``is_dir``, which serializes as ``isDir``.
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ActionType(str, Enum):
    """Mutation kinds recorded in the action log."""

    CREATE_DIR = "CREATE_DIR"
    RENAME = "RENAME"
    MOVE = "MOVE"
    DELETE = "DELETE"
    UNDO = "UNDO"


class ActionStatus(str, Enum):
    """Outcome of a single logged item."""

    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


#: Actions the batch executor accepts (UNDO is written only by the undo controller)
BATCH_ACTIONS: frozenset[ActionType] = frozenset(
    {ActionType.CREATE_DIR, ActionType.RENAME, ActionType.MOVE, ActionType.DELETE}
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FileEntry(BaseModel):
    """A listing record for a file or directory.

    Attributes:
        name: Base name of the entry
        path: Absolute path
        is_dir: True for directories (serialized as ``isDir``)
        size: Size in bytes, 0 for directories
        modified: Last modification time (UTC)
        ext: Extension without the leading dot, files only
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    path: str
    is_dir: bool = Field(alias="isDir")
    size: int = 0
    modified: datetime
    ext: str | None = None


class FileStat(FileEntry):
    """A FileEntry with creation time and a permission string."""

    created: datetime
    permissions: str | None = None


class ActionLogEntry(BaseModel):
    """One immutable row of the action log.

    Attributes:
        id: Monotonic identifier assigned on insert
        timestamp: Time the outcome was recorded (UTC)
        action: Mutation kind
        src_path: Source path of the item, when the action has one
        dst_path: Destination path of the item, when the action has one
        status: SUCCESS or ERROR
        message: Optional diagnostic
        batch_id: Identifier shared by every entry of one user action
        undo_of: On UNDO entries, the batch being reversed
    """

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: datetime
    action: ActionType
    src_path: str | None = None
    dst_path: str | None = None
    status: ActionStatus
    message: str | None = None
    batch_id: str | None = None
    undo_of: str | None = None


class LogEntryInput(BaseModel):
    """An action log entry before it is assigned an id (``db_log`` input)."""

    timestamp: datetime = Field(default_factory=_utcnow)
    action: ActionType
    src_path: str | None = None
    dst_path: str | None = None
    status: ActionStatus
    message: str | None = None
    batch_id: str | None = None
    undo_of: str | None = None


class DirResult(BaseModel):
    """Outcome of ``make_dir``."""

    success: bool
    path: str
    message: str | None = None


class RenameResult(BaseModel):
    """Outcome of ``rename_path``."""

    success: bool
    old_path: str
    new_path: str
    message: str | None = None


class BatchItemResult(BaseModel):
    """Outcome of one item inside a batch.

    Attributes:
        path: Source path as given by the caller
        success: True if the item was applied and logged
        message: Failure description
        code: Error code of the failure (see ``fileward.core.errors``)
    """

    path: str
    success: bool
    message: str | None = None
    code: str | None = None


class BatchResult(BaseModel):
    """Aggregate outcome of one batch executor run."""

    success: bool
    processed: int
    failed: int
    batch_id: str
    results: list[BatchItemResult] = Field(default_factory=list)

    @classmethod
    def from_items(cls, batch_id: str, results: list[BatchItemResult]) -> "BatchResult":
        """Fold per-item results into the aggregate counts."""
        processed = sum(1 for item in results if item.success)
        failed = len(results) - processed
        return cls(
            success=failed == 0,
            processed=processed,
            failed=failed,
            batch_id=batch_id,
            results=results,
        )


class UndoResult(BaseModel):
    """Outcome of ``undo_last_action``.

    ``action`` is the action type that was reversed, or None when nothing
    was available to undo.
    """

    success: bool
    action: ActionType | None = None
    items_restored: int = 0
    message: str | None = None


class TrashRecord(BaseModel):
    """Restore metadata for one soft-deleted item.

    Attributes:
        original_path: Absolute path the item was deleted from
        staged_path: Absolute path of the item inside the trash area
        staged_name: Collision-free name used inside the trash area
        deleted_at: Time of the soft delete (UTC)
        is_dir: True if the staged item is a directory
    """

    model_config = ConfigDict(frozen=True)

    original_path: str
    staged_path: str
    staged_name: str
    deleted_at: datetime = Field(default_factory=_utcnow)
    is_dir: bool = False

    @field_validator("staged_name")
    @classmethod
    def validate_staged_name(cls, v: str) -> str:
        """Ensure the staged name is a single path segment."""
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError("staged_name must be a single path segment")
        return v
