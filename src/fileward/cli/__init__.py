"""CLI entrypoints for fileward."""

from __future__ import annotations

import importlib
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from fileward.cli import files, history, settings
from fileward.cli.common import CliState
from fileward.cli.db import app as db_app
from fileward.utils.logging import configure_logging

__all__ = ["app", "db_app", "main"]

app: TyperType = typer.Typer(
    help="Root-guarded file operations with trash and undo.",
    no_args_is_help=True,
)

DbPathOption = Annotated[
    Path | None,
    typer.Option("--db-path", help="Override the database location."),
]
DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", help="Override the data directory (database, trash)."),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log engine events to stderr."),
]


@app.callback()
def configure(
    ctx: typer.Context,
    db_path: DbPathOption = None,
    data_dir: DataDirOption = None,
    verbose: VerboseFlag = False,
) -> None:
    """Apply the global options."""

    configure_logging("INFO" if verbose else "WARNING")
    ctx.obj = CliState(db_path=db_path, data_dir=data_dir)


app.command("ls")(files.list_dir)
app.command("stat")(files.stat_path)
app.command("mkdir")(files.make_dir)
app.command("rename")(files.rename_path)
app.command("mv")(files.move_paths)
app.command("rm")(files.soft_delete)
app.command("undo")(files.undo)
app.command("search")(files.search)
app.command("logs")(history.show_logs)
app.command("trash")(history.show_trash)
app.command("favorites")(settings.favorites)
app.add_typer(settings.roots_app, name="roots")
app.add_typer(db_app, name="db")


def main(args: Sequence[str] | None = None) -> None:
    app(args=args)
