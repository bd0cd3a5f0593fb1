"""CLI commands for database management."""

from __future__ import annotations

import asyncio
import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from fileward.cli.common import get_state
from fileward.store.migrations import apply_migrations
from fileward.store.paths import resolve_db_path

app: TyperType = typer.Typer(help="Manage the fileward database.")

DbPathOption = Annotated[
    Path | None,
    typer.Option(
        "--db-path",
        help="Optional override for the database location.",
    ),
]


def migrate(ctx: typer.Context, db_path: DbPathOption = None) -> None:
    """Apply migrations to ensure the schema is up-to-date."""

    resolved_path = resolve_db_path(db_path or get_state(ctx).settings().db_path)
    applied = asyncio.run(apply_migrations(resolved_path))
    typer.secho(
        f"Migrations applied to {resolved_path} ({len(applied)} new)",
        fg=typer.colors.GREEN,
    )


app.command("migrate")(migrate)
