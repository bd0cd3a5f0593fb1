"""Pytest configuration and fixtures for fileward tests."""

from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from pathlib import Path

import pytest

from fileward.config import EngineSettings
from fileward.core.engine import FileEngine

EngineOpener = Callable[..., AbstractAsyncContextManager[FileEngine]]


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An allowed root directory (symlinks resolved so paths compare equal)."""
    path = tmp_path.resolve() / "root"
    path.mkdir()
    return path


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Engine state directory (database and trash), outside the root."""
    return tmp_path.resolve() / "state"


@pytest.fixture
def settings(data_dir: Path) -> EngineSettings:
    return EngineSettings(data_dir=data_dir)


@pytest.fixture
def open_engine(settings: EngineSettings, root: Path) -> EngineOpener:
    """Factory opening a FileEngine with ``root`` (or ``roots``) allowed.

    Usage::

        async with open_engine() as engine:
            ...
    """

    @asynccontextmanager
    async def _open(
        roots: Sequence[str | Path] | None = None,
    ) -> AsyncIterator[FileEngine]:
        async with FileEngine(settings) as engine:
            await engine.set_allowed_roots([root] if roots is None else roots)
            yield engine

    return _open


@pytest.fixture
def sample_tree(root: Path) -> Path:
    """A small tree used by listing and search tests.

    root/
        Docs/
            Report.pdf
            notes.txt
            archive/
                old_report.txt
        photo.JPG
        .hidden
    """
    docs = root / "Docs"
    (docs / "archive").mkdir(parents=True)
    (docs / "Report.pdf").write_bytes(b"%PDF-1.4")
    (docs / "notes.txt").write_text("notes", encoding="utf-8")
    (docs / "archive" / "old_report.txt").write_text("old", encoding="utf-8")
    (root / "photo.JPG").write_bytes(b"\xff\xd8\xff")
    (root / ".hidden").write_text("", encoding="utf-8")
    return root
