"""Batch executor for create, rename, move and delete operations.

One call to :meth:`BatchExecutor.execute` is one user action: it gets a
fresh ``batch_id``, processes its items sequentially in input order, logs
every item outcome under that id and folds the outcomes into a
BatchResult. A failing item never aborts its siblings.
"""

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio
import structlog

from fileward.core.errors import ActionLogError, InvalidPath, RootViolation
from fileward.fs.fs_ops import (
    ItemOutcome,
    create_dir,
    move_item,
    rename_item,
    reverse_item,
    trash_item,
)
from fileward.fs.guard import RootGuard
from fileward.fs.trash import TrashManager
from fileward.fs.validators import validate_name
from fileward.routes.schemas import (
    BATCH_ACTIONS,
    ActionStatus,
    ActionType,
    BatchItemResult,
    BatchResult,
    LogEntryInput,
)
from fileward.store.action_log import ActionLog


@dataclass(frozen=True)
class BatchContext:
    """Per-action parameters of a batch.

    Attributes:
        name: New folder name (CREATE_DIR) or new name (RENAME)
        dest_dir: Destination directory (MOVE)
    """

    name: str | None = None
    dest_dir: str | Path | None = None


class BatchExecutor:
    """Applies one logical operation to one or more paths.

    Root and name checks run before any filesystem access and raise for the
    whole batch; everything that happens per item is captured in the
    returned BatchResult and in the action log.
    """

    def __init__(
        self,
        guard: RootGuard,
        trash: TrashManager,
        action_log: ActionLog,
        logger: Any = None,
    ) -> None:
        """Initialize the executor.

        Args:
            guard: Root guard checked before any I/O
            trash: Trash manager used for DELETE
            action_log: Log receiving one entry per item outcome
            logger: Optional structlog logger instance
        """
        self._guard = guard
        self._trash = trash
        self._log = action_log
        self._logger = logger or structlog.get_logger(__name__)

    async def execute(
        self,
        action: ActionType | str,
        items: Sequence[str | Path],
        context: BatchContext | None = None,
    ) -> BatchResult:
        """Run one batch.

        Args:
            action: CREATE_DIR, RENAME, MOVE or DELETE
            items: Source paths (the parent directory for CREATE_DIR)
            context: New name or destination directory

        Returns:
            BatchResult tagged with the batch's id

        Raises:
            InvalidName: If the new name is invalid (CREATE_DIR, RENAME)
            RootViolation: If no roots are configured or a batch-level path
                (parent, destination) is outside them
            InvalidPath: If the item list does not fit the action
            ValueError: If ``action`` is not a batch action
        """
        action = ActionType(action)
        if action not in BATCH_ACTIONS:
            raise ValueError(f"{action.value} cannot be executed as a batch")
        context = context or BatchContext()

        paths = list(items)
        if not paths:
            raise InvalidPath("no paths were given")
        if action in (ActionType.CREATE_DIR, ActionType.RENAME) and len(paths) != 1:
            raise InvalidPath(f"{action.value} takes exactly one path")
        if not self._guard.has_roots:
            raise RootViolation("no allowed roots are configured")

        steps = self._prepare(action, paths, context)

        batch_id = str(uuid.uuid4())
        bound_logger = self._logger.bind(batch_id=batch_id, action=action.value)
        bound_logger.info("batch.start", total_items=len(paths))

        results: list[BatchItemResult] = []
        for raw_path, step in zip(paths, steps, strict=True):
            if isinstance(step, RootViolation):
                # Rejected before any I/O: reported, never logged
                results.append(_item_result(raw_path, None, step))
                bound_logger.warning(
                    "batch.item", path=str(raw_path), status="rejected", code=step.code
                )
                continue

            with anyio.CancelScope(shield=True):
                outcome = await anyio.to_thread.run_sync(step)
                outcome = await self._record(action, batch_id, outcome, bound_logger)

            results.append(_item_result(raw_path, outcome, outcome.error))
            bound_logger.info(
                "batch.item",
                src=str(outcome.src) if outcome.src else None,
                dst=str(outcome.dst) if outcome.dst else None,
                status=outcome.status,
                reason=outcome.reason,
            )

        result = BatchResult.from_items(batch_id, results)
        bound_logger.info(
            "batch.summary",
            total_items=len(paths),
            processed=result.processed,
            failed=result.failed,
        )
        return result

    def _prepare(
        self,
        action: ActionType,
        paths: list[str | Path],
        context: BatchContext,
    ) -> list[Callable[[], ItemOutcome] | RootViolation]:
        """Run the pre-I/O checks and build one step per item."""
        if action == ActionType.CREATE_DIR:
            name = validate_name(context.name or "")
            parent = self._guard.check(paths[0])
            self._guard.check(parent / name)
            return [lambda: create_dir(parent, name)]

        if action == ActionType.RENAME:
            new_name = validate_name(context.name or "")
            src = self._guard.check(paths[0])
            self._guard.check(src.parent / new_name)
            return [lambda: rename_item(src, new_name)]

        if action == ActionType.MOVE:
            if context.dest_dir is None:
                raise InvalidPath("MOVE requires a destination directory")
            dest_dir = self._guard.check(context.dest_dir)
            return [
                self._per_item(p, lambda src: move_item(src, dest_dir)) for p in paths
            ]

        return [
            self._per_item(p, lambda src: trash_item(src, self._trash)) for p in paths
        ]

    def _per_item(
        self,
        raw_path: str | Path,
        operation: Callable[[Path], ItemOutcome],
    ) -> Callable[[], ItemOutcome] | RootViolation:
        try:
            src = self._guard.check(raw_path)
        except RootViolation as e:
            return e
        if self._guard.is_root(src):
            return RootViolation(
                f"{src} is an allowed root and cannot be moved or deleted",
                path=str(src),
            )
        return lambda: operation(src)

    async def _record(
        self,
        action: ActionType,
        batch_id: str,
        outcome: ItemOutcome,
        bound_logger: Any,
    ) -> ItemOutcome:
        """Append the outcome to the action log.

        An applied item whose entry cannot be persisted is reversed and
        reported as failed.
        """
        entry = LogEntryInput(
            action=action,
            src_path=str(outcome.src) if outcome.src else None,
            dst_path=str(outcome.dst) if outcome.dst else None,
            status=ActionStatus.SUCCESS if outcome.ok else ActionStatus.ERROR,
            message=outcome.reason,
            batch_id=batch_id,
        )
        try:
            await self._log.append(entry)
        except ActionLogError as e:
            bound_logger.error("batch.log_failed", error=e.message)
            message = e.message
            if outcome.ok:
                reverted = await anyio.to_thread.run_sync(
                    lambda: reverse_item(
                        action.value, entry.src_path, entry.dst_path, self._trash
                    )
                )
                if reverted.ok:
                    message = f"{e.message}; the change was reverted"
                else:
                    message = f"{e.message}; the change could not be reverted"
                    bound_logger.error(
                        "batch.compensation_failed",
                        src=entry.src_path,
                        dst=entry.dst_path,
                        reason=reverted.reason,
                    )
            return ItemOutcome(
                src=outcome.src,
                dst=outcome.dst,
                status="failed",
                error=ActionLogError(
                    message,
                    path=entry.src_path or entry.dst_path,
                ),
            )
        return outcome


def _item_result(
    raw_path: str | Path,
    outcome: ItemOutcome | None,
    error: Any,
) -> BatchItemResult:
    if outcome is not None and outcome.ok:
        return BatchItemResult(path=str(raw_path), success=True)
    return BatchItemResult(
        path=str(raw_path),
        success=False,
        message=error.message if error is not None else None,
        code=error.code if error is not None else None,
    )
