"""Shared CLI plumbing: global options, engine lifecycle and output helpers."""

from __future__ import annotations

import asyncio
import importlib
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from rich.console import Console

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")

from fileward.config import EngineSettings
from fileward.core.engine import FileEngine
from fileward.core.errors import FileWardError
from fileward.routes.commands import to_wire
from fileward.routes.schemas import BatchResult

T = TypeVar("T")


def make_console() -> Console:
    """Console bound to the current stdout; honours $COLUMNS."""
    return Console(highlight=False)


@dataclass(frozen=True)
class CliState:
    """Values of the global options, stored on the typer context."""

    db_path: Path | None = None
    data_dir: Path | None = None

    def settings(self) -> EngineSettings:
        return EngineSettings.from_env(
            data_dir=self.data_dir,
            db_path=str(self.db_path) if self.db_path is not None else None,
        )


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.find_object(CliState)
    return state if state is not None else CliState()


def fail(message: str) -> None:
    """Print ``message`` in red and exit with status 1."""
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def run_engine(
    ctx: typer.Context,
    operation: Callable[[FileEngine], Awaitable[T]],
) -> T:
    """Open an engine for the current options, run ``operation`` and close it.

    Engine errors are printed with their code and turn into exit status 1.
    """

    async def runner() -> T:
        async with FileEngine(get_state(ctx).settings()) as engine:
            return await operation(engine)

    try:
        return asyncio.run(runner())
    except FileWardError as exc:
        typer.secho(f"{exc.code}: {exc.message}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc


def echo_json(value: Any) -> None:
    typer.echo(json.dumps(to_wire(value), indent=2, sort_keys=True))


def report_batch(result: BatchResult, verb: str) -> None:
    """Print a batch summary; exits with status 1 if any item failed."""
    for item in result.results:
        if not item.success:
            typer.secho(
                f"{item.path}: {item.code}: {item.message}",
                err=True,
                fg=typer.colors.RED,
            )

    typer.secho(
        f"{verb} {result.processed} item(s), {result.failed} failed "
        f"(batch {result.batch_id})",
        fg=typer.colors.GREEN if result.success else typer.colors.YELLOW,
    )
    if not result.success:
        raise typer.Exit(code=1)
