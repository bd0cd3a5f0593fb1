"""Command router mapping wire commands onto a FileEngine.

Commands are addressed by their wire name (``list_dir``, ``soft_delete``,
...) with a dict of arguments. Argument names follow the wire format
(``newName``, ``srcPaths``, ``destDir``, ``currentPath``); the snake_case
spellings are accepted as well. Results are returned JSON-ready, and engine
failures come back as ``{"error": {"code": ..., "message": ...}}`` instead of
being raised.

Example::

    await dispatch(engine, "move_paths", {"srcPaths": [a, b], "destDir": d})
"""

from __future__ import annotations

import re
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import structlog
from pydantic import BaseModel

from fileward.core.constants import DEFAULT_LOG_LIMIT
from fileward.core.engine import FileEngine
from fileward.core.errors import FileWardError, InvalidPath, UnknownCommand

__all__ = ["COMMANDS", "dispatch", "to_wire"]

logger = structlog.get_logger(__name__)

Handler = Callable[[FileEngine, "_Args"], Awaitable[Any]]


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class _Args:
    """Argument accessor accepting camelCase and snake_case names."""

    def __init__(self, raw: Mapping[str, Any] | None) -> None:
        self._raw = dict(raw or {})

    def get(self, name: str, default: Any = None) -> Any:
        if name in self._raw:
            return self._raw[name]
        return self._raw.get(_snake_case(name), default)

    def require(self, name: str) -> Any:
        value = self.get(name)
        if value is None:
            raise InvalidPath(f"missing argument: {name}")
        return value

    def paths(self, name: str) -> list[str]:
        value = self.require(name)
        if isinstance(value, str):
            return [value]
        return [str(item) for item in value]


async def _list_dir(engine: FileEngine, args: _Args) -> Any:
    return await engine.list_dir(args.require("path"))


async def _stat_path(engine: FileEngine, args: _Args) -> Any:
    return await engine.stat_path(args.require("path"))


async def _make_dir(engine: FileEngine, args: _Args) -> Any:
    return await engine.make_dir(args.require("base"), args.get("name", ""))


async def _rename_path(engine: FileEngine, args: _Args) -> Any:
    return await engine.rename_path(args.require("src"), args.get("newName", ""))


async def _move_paths(engine: FileEngine, args: _Args) -> Any:
    return await engine.move_paths(args.paths("srcPaths"), args.require("destDir"))


async def _soft_delete(engine: FileEngine, args: _Args) -> Any:
    return await engine.soft_delete(args.paths("paths"))


async def _undo_last_action(engine: FileEngine, args: _Args) -> Any:
    return await engine.undo_last_action()


async def _search(engine: FileEngine, args: _Args) -> Any:
    return await engine.search(args.require("currentPath"), args.get("query", ""))


async def _get_favorites(engine: FileEngine, args: _Args) -> Any:
    return await engine.get_favorites()


async def _set_favorites(engine: FileEngine, args: _Args) -> Any:
    await engine.set_favorites(args.get("paths") or [])
    return None


async def _set_allowed_roots(engine: FileEngine, args: _Args) -> Any:
    await engine.set_allowed_roots(args.get("roots") or [])
    return None


async def _get_allowed_roots(engine: FileEngine, args: _Args) -> Any:
    return await engine.get_allowed_roots()


async def _get_recent_logs(engine: FileEngine, args: _Args) -> Any:
    return await engine.get_recent_logs(int(args.get("limit", DEFAULT_LOG_LIMIT)))


async def _db_log(engine: FileEngine, args: _Args) -> Any:
    return await engine.db_log(args.require("entry"))


async def _list_trash(engine: FileEngine, args: _Args) -> Any:
    return await engine.list_trash()


COMMANDS: dict[str, Handler] = {
    "list_dir": _list_dir,
    "stat_path": _stat_path,
    "make_dir": _make_dir,
    "rename_path": _rename_path,
    "move_paths": _move_paths,
    "soft_delete": _soft_delete,
    "undo_last_action": _undo_last_action,
    "search": _search,
    "get_favorites": _get_favorites,
    "set_favorites": _set_favorites,
    "set_allowed_roots": _set_allowed_roots,
    "get_allowed_roots": _get_allowed_roots,
    "get_recent_logs": _get_recent_logs,
    "db_log": _db_log,
    "list_trash": _list_trash,
}


def to_wire(value: Any) -> Any:
    """Convert engine results into JSON-ready data (``isDir`` aliases applied)."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list | tuple):
        return [to_wire(item) for item in value]
    return value


async def dispatch(
    engine: FileEngine,
    command: str,
    args: Mapping[str, Any] | None = None,
) -> Any:
    """Run one command against ``engine``.

    Args:
        engine: An opened FileEngine
        command: Wire command name
        args: Command arguments

    Returns:
        JSON-ready result, or ``{"error": {...}}`` if the engine rejected
        the request

    Raises:
        UnknownCommand: If ``command`` is not a known command name
    """
    handler = COMMANDS.get(command)
    if handler is None:
        raise UnknownCommand(f"unknown command: {command}")

    try:
        result = await handler(engine, _Args(args))
    except FileWardError as exc:
        logger.info("command.failed", command=command, code=exc.code)
        return {"error": exc.to_dict()}
    return to_wire(result)
