"""Tests for the debug utility module.

The debug utility provides a single entrypoint for step-by-step traces that
can be toggled via the FILEWARD_DEBUG environment variable.
"""

import importlib
from collections.abc import Iterator

import pytest

from fileward.utils import debug as debug_module


@pytest.fixture
def reload_debug(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    """Yield monkeypatch; reload the module afterwards with a clean environment."""
    yield monkeypatch
    monkeypatch.delenv("FILEWARD_DEBUG", raising=False)
    importlib.reload(debug_module)


def test_debug_disabled_by_default(
    reload_debug: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    reload_debug.delenv("FILEWARD_DEBUG", raising=False)
    importlib.reload(debug_module)

    debug_module.debug("This should not print")

    captured = capsys.readouterr()
    assert captured.err == ""
    assert captured.out == ""


@pytest.mark.parametrize("value", ["1", "true", "YES"])
def test_debug_enabled_when_env_var_set(
    value: str,
    reload_debug: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    reload_debug.setenv("FILEWARD_DEBUG", value)
    importlib.reload(debug_module)

    debug_module.debug("Test message")

    assert capsys.readouterr().err == "[DEBUG] Test message\n"


def test_debug_ignores_other_values(
    reload_debug: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    reload_debug.setenv("FILEWARD_DEBUG", "0")
    importlib.reload(debug_module)

    debug_module.debug({"key": "value"})

    assert capsys.readouterr().err == ""
