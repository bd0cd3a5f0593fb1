"""File commands: listing, stat, search and the mutating operations."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

from rich.table import Table

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")

from fileward.cli.common import (
    echo_json,
    fail,
    make_console,
    report_batch,
    run_engine,
)
from fileward.routes.schemas import FileEntry

PathArgument = Annotated[Path, typer.Argument(help="Path to operate on.")]
PathsArgument = Annotated[list[Path], typer.Argument(help="One or more paths.")]
NameArgument = Annotated[str, typer.Argument(help="New file or folder name.")]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit JSON instead of human-readable output."),
]


def _format_size(entry: FileEntry) -> str:
    return "" if entry.is_dir else str(entry.size)


def list_dir(
    ctx: typer.Context, path: PathArgument, json_output: JsonFlag = False
) -> None:
    """List the contents of a directory."""

    entries = run_engine(ctx, lambda engine: engine.list_dir(path))
    if json_output:
        echo_json(entries)
        return

    table = Table(title=str(path))
    table.add_column("Name", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    for entry in entries:
        table.add_row(
            entry.name,
            "dir" if entry.is_dir else (entry.ext or "file"),
            _format_size(entry),
            entry.modified.strftime("%Y-%m-%d %H:%M"),
        )
    make_console().print(table)


def stat_path(
    ctx: typer.Context, path: PathArgument, json_output: JsonFlag = False
) -> None:
    """Show metadata of a single file or directory."""

    info = run_engine(ctx, lambda engine: engine.stat_path(path))
    if json_output:
        echo_json(info)
        return

    typer.echo(f"path:        {info.path}")
    typer.echo(f"type:        {'directory' if info.is_dir else 'file'}")
    typer.echo(f"size:        {info.size}")
    typer.echo(f"modified:    {info.modified.isoformat()}")
    typer.echo(f"created:     {info.created.isoformat()}")
    typer.echo(f"permissions: {info.permissions or '-'}")


def make_dir(ctx: typer.Context, base: PathArgument, name: NameArgument) -> None:
    """Create folder NAME inside BASE."""

    result = run_engine(ctx, lambda engine: engine.make_dir(base, name))
    typer.secho(f"Created {result.path}", fg=typer.colors.GREEN)


def rename_path(ctx: typer.Context, src: PathArgument, new_name: NameArgument) -> None:
    """Rename SRC to NEW_NAME in the same directory."""

    result = run_engine(ctx, lambda engine: engine.rename_path(src, new_name))
    typer.secho(
        f"Renamed {result.old_path} -> {result.new_path}", fg=typer.colors.GREEN
    )


def move_paths(
    ctx: typer.Context,
    paths: PathsArgument,
    dest: Annotated[
        Path, typer.Option("--to", "-t", help="Destination directory.")
    ],
) -> None:
    """Move one or more items into a destination directory."""

    result = run_engine(ctx, lambda engine: engine.move_paths(paths, dest))
    report_batch(result, "Moved")


def soft_delete(ctx: typer.Context, paths: PathsArgument) -> None:
    """Move one or more items to the trash."""

    result = run_engine(ctx, lambda engine: engine.soft_delete(paths))
    report_batch(result, "Trashed")


def undo(ctx: typer.Context) -> None:
    """Undo the most recent operation."""

    result = run_engine(ctx, lambda engine: engine.undo_last_action())
    if not result.success:
        fail(result.message or "nothing to undo")
    typer.secho(
        f"Undid {result.action.value if result.action else 'action'}: {result.message}",
        fg=typer.colors.GREEN,
    )


def search(
    ctx: typer.Context,
    root: PathArgument,
    query: Annotated[str, typer.Argument(help="Case-insensitive name fragment.")],
    json_output: JsonFlag = False,
) -> None:
    """Recursively search ROOT for names containing QUERY."""

    matches = run_engine(ctx, lambda engine: engine.search(root, query))
    if json_output:
        echo_json(matches)
        return
    for entry in matches:
        typer.echo(f"{entry.path}/" if entry.is_dir else entry.path)
