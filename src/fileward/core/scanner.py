"""Directory listing, single-path stat and recursive name search.

These functions are read-only: they never mutate the filesystem and never
write to the action log.
"""

import os
from collections.abc import Iterator
from pathlib import Path

from fileward.core.errors import InvalidPath, NotFound, from_os_error
from fileward.fs.paths import entry_from_path, path_exists, stat_from_path
from fileward.fs.validators import is_hidden
from fileward.routes.schemas import FileEntry, FileStat
from fileward.utils.debug import debug


def list_directory(path: Path, *, include_hidden: bool = True) -> list[FileEntry]:
    """List the immediate children of a directory.

    Args:
        path: Normalized directory path
        include_hidden: Whether to include dot-files

    Returns:
        FileEntry list, directories first, then by case-insensitive name

    Raises:
        NotFound: If the path does not exist
        InvalidPath: If the path is not a directory
    """
    if not path_exists(path):
        raise NotFound(f"{path} does not exist", path=str(path))
    if not path.is_dir():
        raise InvalidPath(f"{path} is not a directory", path=str(path))

    entries: list[FileEntry] = []
    for child in path.iterdir():
        if not include_hidden and is_hidden(child.name):
            continue
        try:
            entries.append(entry_from_path(child))
        except OSError as e:
            # Removed or unreadable between iterdir() and stat()
            debug(f"Skipping {child}: {e}")

    entries.sort(key=lambda entry: (not entry.is_dir, entry.name.lower()))
    return entries


def iter_matches(root: Path, query: str) -> Iterator[FileEntry]:
    """Recursively yield entries under ``root`` whose name contains ``query``.

    Matching is case-insensitive. The scan is lazy and restartable: every
    call walks the tree again. Symlinked directories are not descended into
    and unreadable directories are skipped.

    Args:
        root: Normalized directory to search
        query: Substring to look for in entry names

    Yields:
        FileEntry for every match, parents before their children

    Raises:
        NotFound: If ``root`` does not exist
        InvalidPath: If ``root`` is not a directory
    """
    if not path_exists(root):
        raise NotFound(f"{root} does not exist", path=str(root))
    if not root.is_dir():
        raise InvalidPath(f"{root} is not a directory", path=str(root))

    needle = query.casefold()
    if not needle:
        return

    pending: list[Path] = [root]
    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as it:
                children = sorted(it, key=lambda e: e.name.lower())
        except OSError as e:
            debug(f"Cannot scan {directory}: {e}")
            continue

        subdirs: list[Path] = []
        for child in children:
            child_path = Path(child.path)
            if needle in child.name.casefold():
                try:
                    yield entry_from_path(child_path)
                except OSError as e:
                    debug(f"Skipping {child_path}: {e}")
            try:
                if child.is_dir(follow_symlinks=False):
                    subdirs.append(child_path)
            except OSError:
                continue

        # Depth-first, visiting subdirectories in name order
        pending.extend(reversed(subdirs))


def search(root: Path, query: str, *, limit: int | None = None) -> list[FileEntry]:
    """Collect the results of iter_matches, optionally capped at ``limit``."""
    results: list[FileEntry] = []
    for entry in iter_matches(root, query):
        results.append(entry)
        if limit is not None and len(results) >= limit:
            break
    return results


def stat_entry(path: Path) -> FileStat:
    """Describe a single path.

    Raises:
        NotFound: If nothing exists at ``path``
        IOFailure: If the path cannot be stat'ed
    """
    try:
        return stat_from_path(path)
    except OSError as e:
        raise from_os_error(e, path=str(path)) from e
