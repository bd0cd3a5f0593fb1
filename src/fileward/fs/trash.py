"""Trash manager for recoverable soft deletes.

Layout of the trash area::

    <trash>/files/<staged name>         the staged file or directory
    <trash>/info/<staged name>.json     its TrashRecord

The staged name is the item's base name, disambiguated with a `` (n)``
counter when taken. A name is reserved by exclusively creating its sidecar,
so two deletes can never claim the same slot and a retry simply moves on
to the next counter.
"""

from __future__ import annotations

import json
import os
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from fileward.core.constants import (
    MAX_TRASH_NAME_ATTEMPTS,
    TRASH_FILES_DIR,
    TRASH_INFO_DIR,
    TRASH_INFO_SUFFIX,
)
from fileward.core.errors import IOFailure, NotFound, RestoreConflict
from fileward.fs.paths import ensure_parent_dir, move_path, path_exists
from fileward.routes.schemas import TrashRecord
from fileward.utils.debug import debug

__all__ = ["TrashManager"]


def candidate_name(name: str, attempt: int, *, is_dir: bool = False) -> str:
    """Return the staged name to try for a given collision counter.

    ``report.pdf`` becomes ``report (1).pdf``, ``report (2).pdf``, ...;
    directories and extension-less names get the counter appended.
    """
    if attempt == 0:
        return name
    path = Path(name)
    if is_dir or not path.suffix:
        return f"{name} ({attempt})"
    return f"{path.stem} ({attempt}){path.suffix}"


class TrashManager:
    """Stages soft-deleted items and restores them on undo."""

    def __init__(self, trash_root: Path) -> None:
        """Initialize the trash manager.

        Args:
            trash_root: Directory holding the trash area; created on demand
        """
        self.trash_root = trash_root
        self.files_dir = trash_root / TRASH_FILES_DIR
        self.info_dir = trash_root / TRASH_INFO_DIR

    def ensure_layout(self) -> None:
        """Create the trash directories if they are missing."""
        self.files_dir.mkdir(parents=True, exist_ok=True)
        self.info_dir.mkdir(parents=True, exist_ok=True)

    def _info_path(self, staged_name: str) -> Path:
        return self.info_dir / f"{staged_name}{TRASH_INFO_SUFFIX}"

    def _reserve(self, name: str, *, is_dir: bool) -> tuple[str, int]:
        """Reserve a free staged name.

        Returns:
            Tuple of the staged name and an open descriptor on its sidecar
        """
        for attempt in range(MAX_TRASH_NAME_ATTEMPTS):
            staged_name = candidate_name(name, attempt, is_dir=is_dir)
            info_path = self._info_path(staged_name)
            try:
                fd = os.open(info_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            except FileExistsError:
                continue

            if path_exists(self.files_dir / staged_name):
                # Orphaned staged item without a sidecar; leave it alone
                os.close(fd)
                info_path.unlink()
                continue

            return staged_name, fd

        raise IOFailure(f"no free trash name for {name}")

    def stage(self, path: Path) -> TrashRecord:
        """Move ``path`` into the trash and record how to restore it.

        Args:
            path: Normalized absolute path of an existing item

        Returns:
            The TrashRecord written for the item

        Raises:
            NotFound: If the path does not exist
            OSError: If the move or the sidecar write fails
        """
        if not path_exists(path):
            raise NotFound(f"{path} does not exist", path=str(path))

        self.ensure_layout()
        is_dir = path.is_dir() and not path.is_symlink()
        staged_name, fd = self._reserve(path.name, is_dir=is_dir)
        staged_path = self.files_dir / staged_name
        info_path = self._info_path(staged_name)

        try:
            move_path(path, staged_path)
        except OSError:
            os.close(fd)
            info_path.unlink()
            raise

        record = TrashRecord(
            original_path=str(path),
            staged_path=str(staged_path),
            staged_name=staged_name,
            deleted_at=datetime.now(UTC),
            is_dir=is_dir,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(record.model_dump_json())
                handle.flush()
                os.fsync(handle.fileno())
        except OSError:
            # Without a record the item could never be restored; put it back
            move_path(staged_path, path)
            info_path.unlink(missing_ok=True)
            raise

        debug(f"Staged {path} as {staged_path}")
        return record

    def restore(self, record: TrashRecord) -> Path:
        """Move a staged item back to its original path.

        Args:
            record: Record returned by stage() or load()

        Returns:
            The restored path

        Raises:
            NotFound: If the staged item is no longer in the trash
            RestoreConflict: If the original path is occupied
            OSError: If the move fails
        """
        original = Path(record.original_path)
        staged = Path(record.staged_path)

        if not path_exists(staged):
            raise NotFound(
                f"{record.staged_name} is no longer in the trash", path=str(staged)
            )
        if path_exists(original):
            raise RestoreConflict(
                f"cannot restore: {original} is occupied", path=str(original)
            )

        ensure_parent_dir(original)
        try:
            move_path(staged, original)
        except FileExistsError as exc:
            raise RestoreConflict(
                f"cannot restore: {original} is occupied", path=str(original)
            ) from exc

        self._info_path(record.staged_name).unlink(missing_ok=True)
        debug(f"Restored {staged} to {original}")
        return original

    def load(self, staged_name: str) -> TrashRecord | None:
        """Read the record for a staged name, or None if there is none."""
        info_path = self._info_path(staged_name)
        try:
            data = json.loads(info_path.read_text(encoding="utf-8"))
            return TrashRecord.model_validate(data)
        except FileNotFoundError:
            return None
        except (ValueError, ValidationError) as exc:
            debug(f"Unreadable trash record {info_path}: {exc}")
            return None

    def find(self, staged_path: str | Path) -> TrashRecord | None:
        """Look up the record of an item by its staged path."""
        staged = Path(staged_path)
        if staged.parent != self.files_dir:
            return None
        return self.load(staged.name)

    def list_records(self) -> list[TrashRecord]:
        """Return every readable record, most recently deleted first."""
        if not self.info_dir.exists():
            return []

        records: list[TrashRecord] = []
        for info_path in self.info_dir.iterdir():
            if not info_path.name.endswith(TRASH_INFO_SUFFIX):
                continue
            record = self.load(info_path.name[: -len(TRASH_INFO_SUFFIX)])
            if record is not None:
                records.append(record)

        records.sort(key=lambda r: r.deleted_at, reverse=True)
        return records

    def find_by_original(self, original_path: str | Path) -> TrashRecord | None:
        """Return the most recent record deleted from ``original_path``."""
        target = str(original_path)
        for record in self.list_records():
            if record.original_path == target:
                return record
        return None
