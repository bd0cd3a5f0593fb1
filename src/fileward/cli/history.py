"""Read-only views of the action log and the trash."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Annotated

from rich.table import Table

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")

from fileward.cli.common import echo_json, make_console, run_engine
from fileward.core.constants import DEFAULT_LOG_LIMIT
from fileward.routes.schemas import ActionStatus

JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit JSON instead of a table."),
]


def show_logs(
    ctx: typer.Context,
    limit: Annotated[
        int, typer.Option("--limit", "-n", help="Number of entries to show.")
    ] = DEFAULT_LOG_LIMIT,
    json_output: JsonFlag = False,
) -> None:
    """Show the most recent action log entries."""

    entries = run_engine(ctx, lambda engine: engine.get_recent_logs(limit))
    if json_output:
        echo_json(entries)
        return

    table = Table(title="Action log")
    table.add_column("ID", justify="right", no_wrap=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("Action", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Source")
    table.add_column("Destination")
    table.add_column("Message")
    for entry in entries:
        status_style = "green" if entry.status == ActionStatus.SUCCESS else "red"
        table.add_row(
            str(entry.id),
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            entry.action.value,
            f"[{status_style}]{entry.status.value}[/{status_style}]",
            entry.src_path or "",
            entry.dst_path or "",
            entry.message or "",
        )
    make_console().print(table)


def show_trash(ctx: typer.Context, json_output: JsonFlag = False) -> None:
    """List the items currently in the trash."""

    records = run_engine(ctx, lambda engine: engine.list_trash())
    if json_output:
        echo_json(records)
        return

    if not records:
        typer.echo("Trash is empty.")
        return

    table = Table(title="Trash")
    table.add_column("Name", no_wrap=True)
    table.add_column("Deleted", no_wrap=True)
    table.add_column("Original path")
    for record in records:
        table.add_row(
            record.staged_name + ("/" if record.is_dir else ""),
            record.deleted_at.strftime("%Y-%m-%d %H:%M:%S"),
            record.original_path,
        )
    make_console().print(table)
