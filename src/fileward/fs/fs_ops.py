"""Per-item filesystem operations.

Each function performs one item of a batch (or of an undo) and reports the
result as an ItemOutcome instead of raising, so the caller can log every
outcome and keep going with sibling items. These functions block and are
meant to run in a worker thread.
"""

import os
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from fileward.core.errors import (
    Collision,
    FileWardError,
    InvalidPath,
    NotFound,
    RestoreConflict,
    from_os_error,
)
from fileward.fs.paths import ensure_parent_dir, is_within, move_path, path_exists
from fileward.fs.trash import TrashManager
from fileward.routes.schemas import TrashRecord
from fileward.utils.debug import debug


@dataclass
class ItemOutcome:
    """Result of a single filesystem operation."""

    src: Path | None
    dst: Path | None
    status: Literal["applied", "failed"]
    error: FileWardError | None = None
    record: TrashRecord | None = None

    @property
    def ok(self) -> bool:
        """True if the operation was applied."""
        return self.status == "applied"

    @property
    def reason(self) -> str | None:
        """Failure message, if any."""
        return self.error.message if self.error is not None else None


def _attempt(
    src: Path | None,
    dst: Path | None,
    operation: Callable[[], TrashRecord | None],
) -> ItemOutcome:
    """Run ``operation`` and fold any failure into an ItemOutcome."""
    try:
        record = operation()
    except FileWardError as e:
        return ItemOutcome(src=src, dst=dst, status="failed", error=e)
    except OSError as e:
        failed_path = src if src is not None else dst
        return ItemOutcome(
            src=src,
            dst=dst,
            status="failed",
            error=from_os_error(e, path=str(failed_path)),
        )
    return ItemOutcome(src=src, dst=dst, status="applied", record=record)


def _require_directory(path: Path) -> None:
    if not path_exists(path):
        raise NotFound(f"{path} does not exist", path=str(path))
    if not path.is_dir():
        raise InvalidPath(f"{path} is not a directory", path=str(path))


def _is_same_entry(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def _case_change_rename(src: Path, dst: Path) -> None:
    """Rename through a temporary name so case-insensitive filesystems see a change."""
    temp_path = src.with_name(f"{src.name}.tmpcase_{uuid.uuid4().hex[:8]}")
    src.rename(temp_path)
    try:
        temp_path.rename(dst)
    except OSError:
        temp_path.rename(src)
        raise
    debug(f"Case change rename: {src} -> {temp_path} -> {dst}")


def _rename_no_clobber(src: Path, dst: Path) -> None:
    if path_exists(dst):
        if src.name != dst.name and _is_same_entry(src, dst):
            _case_change_rename(src, dst)
            return
        raise Collision(f"{dst.name} already exists in {dst.parent}", path=str(dst))
    move_path(src, dst)


def create_dir(parent: Path, name: str) -> ItemOutcome:
    """Create directory ``name`` inside ``parent``.

    Args:
        parent: Normalized existing parent directory
        name: Validated folder name

    Returns:
        ItemOutcome with ``dst`` set to the new directory
    """
    target = parent / name

    def run() -> None:
        _require_directory(parent)
        if path_exists(target):
            raise Collision(f"{name} already exists in {parent}", path=str(target))
        target.mkdir()
        debug(f"Created directory: {target}")

    return _attempt(None, target, run)


def rename_item(src: Path, new_name: str) -> ItemOutcome:
    """Rename ``src`` to ``new_name`` within the same parent.

    Args:
        src: Normalized source path
        new_name: Validated new name

    Returns:
        ItemOutcome with ``src`` and ``dst`` set
    """
    dst = src.parent / new_name

    def run() -> None:
        if not path_exists(src):
            raise NotFound(f"{src} does not exist", path=str(src))
        if dst == src:
            raise Collision(f"{src.name} already has that name", path=str(dst))
        _rename_no_clobber(src, dst)
        debug(f"Renamed: {src} -> {dst}")

    return _attempt(src, dst, run)


def move_item(src: Path, dest_dir: Path) -> ItemOutcome:
    """Move ``src`` into ``dest_dir`` keeping its name.

    Conflicts are rejected: an existing same-named entry in the destination
    fails the item and leaves both entries untouched.

    Args:
        src: Normalized source path
        dest_dir: Normalized destination directory

    Returns:
        ItemOutcome with ``dst`` set to the full destination path
    """
    dst = dest_dir / src.name

    def run() -> None:
        if not path_exists(src):
            raise NotFound(f"{src} does not exist", path=str(src))
        _require_directory(dest_dir)
        if src.is_dir() and not src.is_symlink() and is_within(dest_dir, src):
            raise InvalidPath(
                f"cannot move {src.name} into itself", path=str(dest_dir)
            )
        if path_exists(dst):
            raise Collision(
                f"{src.name} already exists in {dest_dir}", path=str(dst)
            )
        move_path(src, dst)

    return _attempt(src, dst, run)


def trash_item(src: Path, trash: TrashManager) -> ItemOutcome:
    """Soft-delete ``src`` into the trash.

    Returns:
        ItemOutcome with ``dst`` set to the staged path and ``record`` set
    """
    outcome = _attempt(src, None, lambda: trash.stage(src))
    if outcome.record is not None:
        outcome.dst = Path(outcome.record.staged_path)
    return outcome


def move_back(current: Path, original: Path) -> ItemOutcome:
    """Return an item from ``current`` to ``original`` (undo of rename or move).

    Returns:
        ItemOutcome with ``src`` = current location, ``dst`` = restored path
    """

    def run() -> None:
        if not path_exists(current):
            raise NotFound(f"{current} no longer exists", path=str(current))
        if path_exists(original) and not (
            current.name != original.name and _is_same_entry(current, original)
        ):
            raise RestoreConflict(
                f"cannot restore: {original} is occupied", path=str(original)
            )
        ensure_parent_dir(original)
        try:
            _rename_no_clobber(current, original)
        except (Collision, FileExistsError) as e:
            raise RestoreConflict(
                f"cannot restore: {original} is occupied", path=str(original)
            ) from e

    return _attempt(current, original, run)


def remove_empty_dir(path: Path) -> ItemOutcome:
    """Remove a directory only if it is still empty (undo of create)."""

    def run() -> None:
        if not path_exists(path):
            raise NotFound(f"{path} no longer exists", path=str(path))
        if not path.is_dir() or path.is_symlink():
            raise RestoreConflict(f"{path} is no longer a directory", path=str(path))
        if any(path.iterdir()):
            raise RestoreConflict(
                f"cannot remove {path}: directory is not empty", path=str(path)
            )
        path.rmdir()
        debug(f"Removed directory: {path}")

    return _attempt(path, None, run)


def restore_item(record: TrashRecord, trash: TrashManager) -> ItemOutcome:
    """Restore a trashed item to its original path (undo of delete)."""

    def run() -> None:
        trash.restore(record)

    return _attempt(Path(record.staged_path), Path(record.original_path), run)


def reverse_item(
    action: str,
    src: str | None,
    dst: str | None,
    trash: TrashManager,
) -> ItemOutcome:
    """Apply the structural inverse of one logged item.

    Args:
        action: Original action (CREATE_DIR, RENAME, MOVE or DELETE)
        src: Logged source path
        dst: Logged destination path (staged path for DELETE)
        trash: Trash manager holding deleted items

    Returns:
        ItemOutcome of the reversal
    """
    src_path = Path(src) if src else None
    dst_path = Path(dst) if dst else None

    if action == "CREATE_DIR" and dst_path is not None:
        return remove_empty_dir(dst_path)

    if action in ("RENAME", "MOVE") and src_path is not None and dst_path is not None:
        return move_back(dst_path, src_path)

    if action == "DELETE":
        record = trash.find(dst_path) if dst_path is not None else None
        if record is None and src_path is not None:
            record = trash.find_by_original(src_path)
        if record is None:
            return ItemOutcome(
                src=dst_path,
                dst=src_path,
                status="failed",
                error=NotFound(
                    f"no trash record for {src or dst}", path=src or dst
                ),
            )
        return restore_item(record, trash)

    return ItemOutcome(
        src=src_path,
        dst=dst_path,
        status="failed",
        error=InvalidPath(f"cannot reverse {action}: missing path information"),
    )


def reapply_item(
    action: str,
    src: str | None,
    dst: str | None,
    trash: TrashManager,
) -> ItemOutcome:
    """Redo one logged item after its reversal could not be recorded.

    Args:
        action: Original action (CREATE_DIR, RENAME, MOVE or DELETE)
        src: Logged source path
        dst: Logged destination path (staged path for DELETE)
        trash: Trash manager receiving re-deleted items

    Returns:
        ItemOutcome of the redo; for DELETE ``dst`` is the new staged path
    """
    src_path = Path(src) if src else None
    dst_path = Path(dst) if dst else None

    if action == "CREATE_DIR" and dst_path is not None:
        return create_dir(dst_path.parent, dst_path.name)

    if action in ("RENAME", "MOVE") and src_path is not None and dst_path is not None:
        return move_back(src_path, dst_path)

    if action == "DELETE" and src_path is not None:
        return trash_item(src_path, trash)

    return ItemOutcome(
        src=src_path,
        dst=dst_path,
        status="failed",
        error=InvalidPath(f"cannot redo {action}: missing path information"),
    )
