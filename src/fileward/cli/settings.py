"""Allowed roots and favorites."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from fileward.cli.common import echo_json, run_engine

roots_app: TyperType = typer.Typer(help="Show or replace the allowed roots.")


def show_roots(ctx: typer.Context) -> None:
    """Print the allowed roots, one per line."""

    roots = run_engine(ctx, lambda engine: engine.get_allowed_roots())
    if not roots:
        typer.secho(
            "No allowed roots configured; mutating commands are disabled.",
            fg=typer.colors.YELLOW,
        )
        return
    for root in roots:
        typer.echo(root)


def set_roots(
    ctx: typer.Context,
    roots: Annotated[
        list[Path] | None,
        typer.Argument(help="New allowed roots; none clears the list."),
    ] = None,
) -> None:
    """Replace the allowed roots."""

    new_roots = list(roots or [])
    run_engine(ctx, lambda engine: engine.set_allowed_roots(new_roots))
    typer.secho(f"{len(new_roots)} allowed root(s) saved.", fg=typer.colors.GREEN)


def favorites(
    ctx: typer.Context,
    json_output: Annotated[
        bool, typer.Option("--json", help="Emit JSON instead of plain lines.")
    ] = False,
) -> None:
    """Print the favorite locations."""

    paths = run_engine(ctx, lambda engine: engine.get_favorites())
    if json_output:
        echo_json(paths)
        return
    for path in paths:
        typer.echo(path)


roots_app.command("show")(show_roots)
roots_app.command("set")(set_roots)
