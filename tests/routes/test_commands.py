"""Tests for the command router."""

import json
from pathlib import Path

import pytest
from jsonschema import validate

from conftest import EngineOpener
from fileward.core.errors import UnknownCommand
from fileward.routes.commands import COMMANDS, dispatch

SCHEMA = json.loads(
    (Path(__file__).resolve().parents[2] / "schemas" / "command_results.schema.json")
    .read_text(encoding="utf-8")
)


def _schema_for(name: str) -> dict:
    return {"$ref": f"#/$defs/{name}", "$defs": SCHEMA["$defs"]}


def test_command_names_match_wire_format() -> None:
    assert {
        "list_dir",
        "make_dir",
        "rename_path",
        "move_paths",
        "soft_delete",
        "undo_last_action",
        "search",
        "get_favorites",
        "set_allowed_roots",
        "get_recent_logs",
        "db_log",
        "stat_path",
    } <= set(COMMANDS)


@pytest.mark.asyncio
async def test_list_dir_uses_is_dir_alias(
    sample_tree: Path, open_engine: EngineOpener
) -> None:
    async with open_engine() as engine:
        entries = await dispatch(engine, "list_dir", {"path": str(sample_tree)})

    assert entries[0]["name"] == "Docs"
    assert entries[0]["isDir"] is True
    for entry in entries:
        validate(instance=entry, schema=_schema_for("FileEntry"))


@pytest.mark.asyncio
async def test_camel_and_snake_case_arguments(
    root: Path, open_engine: EngineOpener
) -> None:
    (root / "a.txt").write_text("a", encoding="utf-8")
    (root / "b.txt").write_text("b", encoding="utf-8")
    (root / "dest").mkdir()

    async with open_engine() as engine:
        renamed = await dispatch(
            engine, "rename_path", {"src": str(root / "a.txt"), "newName": "c.txt"}
        )
        moved = await dispatch(
            engine,
            "move_paths",
            {"src_paths": [str(root / "b.txt")], "dest_dir": str(root / "dest")},
        )

    assert renamed == {
        "success": True,
        "old_path": str(root / "a.txt"),
        "new_path": str(root / "c.txt"),
        "message": None,
    }
    validate(instance=moved, schema=_schema_for("BatchResult"))
    assert moved["processed"] == 1
    assert (root / "dest" / "b.txt").exists()


@pytest.mark.asyncio
async def test_delete_undo_and_logs(root: Path, open_engine: EngineOpener) -> None:
    (root / "x.txt").write_text("x", encoding="utf-8")

    async with open_engine() as engine:
        deleted = await dispatch(
            engine, "soft_delete", {"paths": [str(root / "x.txt")]}
        )
        undone = await dispatch(engine, "undo_last_action")
        logs = await dispatch(engine, "get_recent_logs", {"limit": 5})

    validate(instance=deleted, schema=_schema_for("BatchResult"))
    validate(instance=undone, schema=_schema_for("UndoResult"))
    assert undone["action"] == "DELETE"
    assert undone["items_restored"] == 1
    assert [entry["action"] for entry in logs] == ["UNDO", "DELETE"]
    for entry in logs:
        validate(instance=entry, schema=_schema_for("ActionLogEntry"))


@pytest.mark.asyncio
async def test_errors_are_returned_not_raised(
    root: Path, open_engine: EngineOpener
) -> None:
    async with open_engine() as engine:
        invalid = await dispatch(
            engine, "make_dir", {"base": str(root), "name": "a:b"}
        )
        missing = await dispatch(engine, "list_dir", {"path": str(root / "nope")})
        no_args = await dispatch(engine, "soft_delete", {})

    assert invalid["error"]["code"] == "INVALID_NAME"
    assert missing["error"]["code"] == "NOT_FOUND"
    assert no_args["error"]["code"] == "INVALID_PATH"
    for payload in (invalid, missing, no_args):
        validate(instance=payload, schema=_schema_for("Error"))


@pytest.mark.asyncio
async def test_roots_favorites_and_db_log(
    root: Path, tmp_path: Path, open_engine: EngineOpener
) -> None:
    other = tmp_path.resolve() / "other"

    async with open_engine() as engine:
        replaced = await dispatch(
            engine, "set_allowed_roots", {"roots": [str(other)]}
        )
        roots = await dispatch(engine, "get_allowed_roots")
        await dispatch(engine, "set_favorites", {"paths": [str(root)]})
        favorites = await dispatch(engine, "get_favorites")
        entry_id = await dispatch(
            engine,
            "db_log",
            {"entry": {"action": "MOVE", "status": "SUCCESS", "src_path": "/a"}},
        )

    assert replaced is None
    assert roots == [str(other)]
    assert favorites == [str(root)]
    assert isinstance(entry_id, int)


@pytest.mark.asyncio
async def test_search_command(sample_tree: Path, open_engine: EngineOpener) -> None:
    async with open_engine() as engine:
        matches = await dispatch(
            engine, "search", {"currentPath": str(sample_tree), "query": "report"}
        )

    assert sorted(m["name"] for m in matches) == ["Report.pdf", "old_report.txt"]


@pytest.mark.asyncio
async def test_unknown_command(open_engine: EngineOpener) -> None:
    async with open_engine() as engine:
        with pytest.raises(UnknownCommand):
            await dispatch(engine, "format_disk", {})
