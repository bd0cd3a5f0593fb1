"""Tests for the root containment guard."""

import threading
from pathlib import Path

import pytest

from fileward.core.errors import RootViolation
from fileward.fs.guard import RootGuard, is_allowed


class TestIsAllowed:
    def test_root_itself_and_descendants(self, root: Path) -> None:
        assert is_allowed(root, [root])
        assert is_allowed(root / "a" / "b.txt", [root])

    def test_outside_every_root(self, root: Path, tmp_path: Path) -> None:
        assert not is_allowed(tmp_path.resolve() / "other", [root])
        assert not is_allowed("/", [root])

    def test_dot_dot_escape_is_rejected(self, root: Path) -> None:
        assert not is_allowed(f"{root}/sub/../../escape.txt", [root])
        assert is_allowed(f"{root}/sub/../kept.txt", [root])

    def test_backslash_separators(self, root: Path) -> None:
        raw = str(root).replace("/", "\\") + "\\sub\\file.txt"
        assert is_allowed(raw, [root])

    def test_sibling_with_common_prefix(self, root: Path) -> None:
        sibling = root.parent / f"{root.name}2" / "file.txt"
        assert not is_allowed(sibling, [root])

    def test_symlink_escape_is_rejected(self, root: Path, tmp_path: Path) -> None:
        outside = tmp_path.resolve() / "outside"
        outside.mkdir()
        (root / "escape").symlink_to(outside, target_is_directory=True)

        assert not is_allowed(root / "escape" / "secret.txt", [root])

    def test_symlink_itself_is_inside(self, root: Path, tmp_path: Path) -> None:
        outside = tmp_path.resolve() / "outside"
        outside.mkdir()
        link = root / "escape"
        link.symlink_to(outside, target_is_directory=True)

        assert is_allowed(link, [root])

    def test_symlinked_root_contains_its_targets(self, tmp_path: Path) -> None:
        real = tmp_path.resolve() / "real"
        real.mkdir()
        link = tmp_path.resolve() / "docs"
        link.symlink_to(real, target_is_directory=True)

        assert is_allowed(link / "a.txt", [link])
        assert is_allowed(real / "a.txt", [link])
        assert not is_allowed(tmp_path.resolve() / "a.txt", [link])

    def test_no_roots(self, root: Path) -> None:
        assert not is_allowed(root, [])

    def test_any_of_several_roots(self, tmp_path: Path) -> None:
        first = tmp_path.resolve() / "one"
        second = tmp_path.resolve() / "two"
        assert is_allowed(second / "x", [first, second])


class TestRootGuard:
    def test_check_returns_normalized_path(self, root: Path) -> None:
        guard = RootGuard([root])
        assert guard.check(f"{root}/a/../b.txt") == root / "b.txt"

    def test_check_without_roots(self, root: Path) -> None:
        guard = RootGuard()

        with pytest.raises(RootViolation, match="no allowed roots"):
            guard.check(root / "file.txt")

    def test_check_outside_root(self, root: Path, tmp_path: Path) -> None:
        guard = RootGuard([root])

        with pytest.raises(RootViolation) as exc_info:
            guard.check(tmp_path.resolve() / "elsewhere")

        assert exc_info.value.code == "ROOT_VIOLATION"

    def test_excluded_area_inside_root(self, root: Path) -> None:
        trash = root / ".trash"
        guard = RootGuard([root], excluded=[trash])

        assert guard.is_allowed(root / "kept.txt")
        assert not guard.is_allowed(trash / "files" / "x.txt")
        with pytest.raises(RootViolation):
            guard.check(trash)

    def test_set_roots_replaces_and_dedupes(self, root: Path, tmp_path: Path) -> None:
        other = tmp_path.resolve() / "other"
        guard = RootGuard([root])

        result = guard.set_roots([other, f"{other}/.", other])

        assert result == (other,)
        assert guard.roots == (other,)
        assert not guard.is_allowed(root / "a")

    def test_symlinked_root(self, tmp_path: Path) -> None:
        real = tmp_path.resolve() / "real"
        real.mkdir()
        link = tmp_path.resolve() / "docs"
        link.symlink_to(real, target_is_directory=True)
        guard = RootGuard([link])

        assert guard.roots == (real,)
        assert guard.check(link / "a.txt") == real / "a.txt"
        assert guard.check(link) == link
        assert guard.is_root(link)
        assert guard.is_root(real)
        assert not guard.is_root(link / "a.txt")

    def test_set_roots_empty_disables_mutation_checks(self, root: Path) -> None:
        guard = RootGuard([root])
        guard.set_roots([])

        assert not guard.has_roots
        with pytest.raises(RootViolation):
            guard.check(root)

    def test_check_readable_is_unrestricted_without_roots(self, tmp_path: Path) -> None:
        guard = RootGuard()
        anywhere = tmp_path.resolve() / "anywhere"

        assert guard.check_readable(anywhere) == anywhere

    def test_check_readable_is_guarded_with_roots(
        self, root: Path, tmp_path: Path
    ) -> None:
        guard = RootGuard([root])

        with pytest.raises(RootViolation):
            guard.check_readable(tmp_path.resolve() / "anywhere")

    def test_concurrent_replacement_is_never_partial(self, tmp_path: Path) -> None:
        base = tmp_path.resolve()
        set_a = [base / "a1", base / "a2"]
        set_b = [base / "b1", base / "b2", base / "b3"]
        guard = RootGuard(set_a)
        seen: list[tuple[Path, ...]] = []

        def writer() -> None:
            for i in range(200):
                guard.set_roots(set_a if i % 2 else set_b)

        def reader() -> None:
            for _ in range(200):
                seen.append(guard.roots)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(snapshot in (tuple(set_a), tuple(set_b)) for snapshot in seen)
