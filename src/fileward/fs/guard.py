"""Root containment guard.

Every mutating engine operation passes its paths through a RootGuard before
touching the filesystem. A path is allowed when, after normalization, it is
equal to or below one of the configured roots and not inside an excluded
area (the engine's own data directory and trash).
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from pathlib import Path

from fileward.core.errors import RootViolation
from fileward.fs.paths import is_within, normalize_path, resolve_root

__all__ = ["RootGuard", "is_allowed"]


def is_allowed(path: str | Path, roots: Iterable[str | Path]) -> bool:
    """Check whether ``path`` resolves inside at least one of ``roots``.

    Args:
        path: Path to check (relative paths resolve against the CWD)
        roots: Allowed root directories (symlinks are followed)

    Returns:
        True if the normalized path equals or descends from a root
    """
    target = normalize_path(path)
    return any(
        target == normalize_path(root) or is_within(target, resolve_root(root))
        for root in roots
    )


class RootGuard:
    """Holds the process-wide allow-list of roots.

    The root set is an immutable tuple replaced wholesale under a lock, so a
    check always sees either the old or the new set in full.
    """

    def __init__(
        self,
        roots: Iterable[str | Path] = (),
        *,
        excluded: Iterable[str | Path] = (),
    ) -> None:
        """Initialize the guard.

        Args:
            roots: Initial allowed roots
            excluded: Areas that are never allowed, even beneath a root
        """
        self._lock = threading.Lock()
        # Resolved roots plus every spelling of each root, swapped as one
        self._state: tuple[tuple[Path, ...], frozenset[Path]] = ((), frozenset())
        self._excluded: tuple[Path, ...] = tuple(resolve_root(p) for p in excluded)
        self.set_roots(roots)

    @property
    def roots(self) -> tuple[Path, ...]:
        """Current allowed roots."""
        return self._state[0]

    @property
    def has_roots(self) -> bool:
        """True if at least one root is configured."""
        return bool(self._state[0])

    def set_roots(self, roots: Iterable[str | Path]) -> tuple[Path, ...]:
        """Replace the allowed roots.

        Roots are resolved through symlinks. Duplicates are dropped; order
        of first appearance is kept.

        Returns:
            The normalized root tuple now in effect
        """
        normalized: list[Path] = []
        entries: set[Path] = set()
        for root in roots:
            entries.add(normalize_path(root))
            candidate = resolve_root(root)
            if candidate not in normalized:
                normalized.append(candidate)
        state = (tuple(normalized), frozenset(entries) | frozenset(normalized))
        with self._lock:
            self._state = state
        return state[0]

    def is_root(self, path: str | Path) -> bool:
        """Return True if ``path`` names an allowed root, directly or via a link."""
        return normalize_path(path) in self._state[1]

    def is_allowed(self, path: str | Path) -> bool:
        """Return True if ``path`` is inside a root and outside every exclusion."""
        target = normalize_path(path)
        roots, entries = self._state
        if any(is_within(target, area) for area in self._excluded):
            return False
        return target in entries or any(is_within(target, root) for root in roots)

    def check(self, path: str | Path) -> Path:
        """Validate ``path`` and return its normalized form.

        Raises:
            RootViolation: If no roots are configured or the path is outside
                all of them
        """
        if not self._state[0]:
            raise RootViolation("no allowed roots are configured", path=str(path))
        if not self.is_allowed(path):
            raise RootViolation(
                f"access to {path} is not allowed", path=str(path)
            )
        return normalize_path(path)

    def check_readable(self, path: str | Path) -> Path:
        """Validate ``path`` for a read-only operation.

        Reads are unrestricted while no roots are configured.
        """
        if not self._state[0]:
            return normalize_path(path)
        return self.check(path)
