"""Path utilities for filesystem operations.

This module provides path normalization, containment checks, entry
metadata and the low-level move primitive shared by the executor, the
trash manager and the undo controller.
"""

import errno
import os
import shutil
import stat
from datetime import UTC, datetime
from pathlib import Path

from fileward.routes.schemas import FileEntry, FileStat
from fileward.utils.debug import debug


def normalize_path(path: str | Path) -> Path:
    """Normalize a path for comparison and storage.

    Backslash separators become ``/``, the path is made absolute, ``.`` and
    ``..`` segments are collapsed and the parent directory is resolved
    through symlinks. The final segment is kept literally so that a
    symlink refers to itself rather than to its target.

    Args:
        path: Path to normalize

    Returns:
        Normalized absolute path
    """
    raw = os.fspath(path).replace("\\", "/")
    collapsed = os.path.normpath(os.path.abspath(raw))
    parent, name = os.path.split(collapsed)
    if not name:
        # Filesystem root
        return Path(collapsed)
    return Path(os.path.realpath(parent)) / name


def resolve_root(path: str | Path) -> Path:
    """Normalize a root or excluded area, following every symlink.

    Unlike normalize_path() the final segment is resolved too, so a root
    given as a symlink contains the paths reached through it.
    """
    raw = os.fspath(path).replace("\\", "/")
    return Path(os.path.realpath(os.path.abspath(raw)))


def is_within(path: Path, root: Path) -> bool:
    """Check whether ``path`` equals ``root`` or lies beneath it.

    Both arguments must already be normalized.
    """
    return path == root or root in path.parents


def path_exists(path: Path) -> bool:
    """Return True if anything, including a dangling symlink, is at ``path``."""
    return os.path.lexists(path)


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=UTC)


def _stat(path: Path) -> os.stat_result:
    try:
        return path.stat()
    except FileNotFoundError:
        # Dangling symlink: describe the link itself
        return path.lstat()


def entry_from_path(path: Path) -> FileEntry:
    """Build a FileEntry for an existing path.

    Args:
        path: Path to describe

    Returns:
        FileEntry with size 0 for directories

    Raises:
        OSError: If the path cannot be stat'ed
    """
    st = _stat(path)
    is_dir = stat.S_ISDIR(st.st_mode)
    ext = path.suffix[1:] if (not is_dir and path.suffix) else None
    return FileEntry(
        name=path.name,
        path=str(path),
        is_dir=is_dir,
        size=0 if is_dir else st.st_size,
        modified=_timestamp(st.st_mtime),
        ext=ext,
    )


def stat_from_path(path: Path) -> FileStat:
    """Build a FileStat (entry plus creation time and permissions).

    Creation time uses ``st_birthtime`` where the platform provides it and
    falls back to ``st_ctime``.
    """
    st = _stat(path)
    is_dir = stat.S_ISDIR(st.st_mode)
    created = getattr(st, "st_birthtime", None) or st.st_ctime
    return FileStat(
        name=path.name,
        path=str(path),
        is_dir=is_dir,
        size=0 if is_dir else st.st_size,
        modified=_timestamp(st.st_mtime),
        ext=path.suffix[1:] if (not is_dir and path.suffix) else None,
        created=_timestamp(created),
        permissions=stat.filemode(st.st_mode),
    )


def ensure_parent_dir(path: Path) -> None:
    """Ensure parent directory exists for a path.

    Raises:
        OSError: If parent directory cannot be created
    """
    parent = path.parent
    if not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)


def move_path(src: Path, dst: Path) -> None:
    """Move ``src`` to ``dst`` without overwriting.

    Tries an atomic rename first. When source and destination live on
    different devices the item is copied with metadata and the source is
    removed afterwards; a partial copy is cleaned up on failure.

    Args:
        src: Existing source path
        dst: Destination path, which must not exist

    Raises:
        FileExistsError: If ``dst`` already exists
        OSError: If the move fails
    """
    if path_exists(dst):
        raise FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(dst))

    try:
        os.rename(src, dst)
        debug(f"Direct rename: {src} -> {dst}")
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    # Cross-device move: copy + remove
    try:
        if src.is_dir() and not src.is_symlink():
            shutil.copytree(src, dst, symlinks=True)
        else:
            shutil.copy2(src, dst, follow_symlinks=False)
    except OSError:
        _remove_partial(dst)
        raise

    if src.is_dir() and not src.is_symlink():
        shutil.rmtree(src)
    else:
        src.unlink()
    debug(f"Cross-device move: {src} -> {dst}")


def _remove_partial(path: Path) -> None:
    if not path_exists(path):
        return
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as cleanup_error:
        debug(f"Failed to clean up partial copy {path}: {cleanup_error}")
