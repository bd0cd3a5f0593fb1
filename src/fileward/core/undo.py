"""Single-step undo of the most recent batch.

The controller reads the action log, picks the most recent batch that
changed something and applies the structural inverse of each of its
successful items, newest first. Every attempt is logged as an UNDO entry
pointing back at the reversed batch, which is what stops the same batch
from being undone twice.
"""

import uuid
from collections import Counter
from typing import Any

import anyio
import structlog

from fileward.core.errors import ActionLogError, NothingToUndo
from fileward.fs.fs_ops import ItemOutcome, reapply_item, reverse_item
from fileward.fs.trash import TrashManager
from fileward.routes.schemas import (
    ActionLogEntry,
    ActionStatus,
    ActionType,
    LogEntryInput,
    UndoResult,
)
from fileward.store.action_log import ActionLog


class UndoController:
    """Reverses the most recent eligible batch in the action log."""

    def __init__(
        self,
        action_log: ActionLog,
        trash: TrashManager,
        logger: Any = None,
    ) -> None:
        """Initialize the controller.

        Args:
            action_log: Log to read batches from and append UNDO entries to
            trash: Trash manager used to restore deleted items
            logger: Optional structlog logger instance
        """
        self._log = action_log
        self._trash = trash
        self._logger = logger or structlog.get_logger(__name__)

    async def undo_last(self) -> UndoResult:
        """Undo the most recent batch, if it has not been undone already.

        Returns:
            UndoResult; ``success`` is True iff at least one item was restored
        """
        candidate = await self._log.last_undoable_batch()
        if candidate is None or candidate.consumed:
            reason = NothingToUndo("nothing to undo")
            self._logger.info("undo.nothing", code=reason.code, reason=reason.message)
            return UndoResult(success=False, items_restored=0, message=reason.message)

        entries = candidate.successful_entries
        action = _dominant_action(entries)
        undo_batch_id = str(uuid.uuid4())
        bound_logger = self._logger.bind(
            batch_id=undo_batch_id,
            undo_of=candidate.batch_id,
            action=action.value,
        )

        restored = 0
        failures: list[str] = []
        for entry in reversed(entries):
            with anyio.CancelScope(shield=True):
                outcome = await anyio.to_thread.run_sync(
                    lambda e=entry: reverse_item(
                        e.action.value, e.src_path, e.dst_path, self._trash
                    )
                )
                outcome = await self._record(
                    entry, outcome, undo_batch_id, candidate.batch_id, bound_logger
                )

            bound_logger.info(
                "undo.item",
                original_action=entry.action.value,
                src=str(outcome.src) if outcome.src else None,
                dst=str(outcome.dst) if outcome.dst else None,
                status=outcome.status,
                reason=outcome.reason,
            )
            if outcome.ok:
                restored += 1
            elif outcome.reason:
                failures.append(outcome.reason)

        bound_logger.info(
            "undo.summary",
            total_items=len(entries),
            items_restored=restored,
            failed=len(failures),
        )
        return UndoResult(
            success=restored > 0,
            action=action,
            items_restored=restored,
            message=_summary(restored, len(entries), failures),
        )

    async def _record(
        self,
        original: ActionLogEntry,
        outcome: ItemOutcome,
        undo_batch_id: str,
        target_batch_id: str,
        bound_logger: Any,
    ) -> ItemOutcome:
        """Log one reversal attempt as an UNDO entry.

        A reversal that cannot be logged is re-applied so the filesystem
        stays consistent with the log, and is counted as not restored.
        """
        detail = f"undo {original.action.value}"
        if outcome.reason:
            detail = f"{detail}: {outcome.reason}"
        entry = LogEntryInput(
            action=ActionType.UNDO,
            src_path=str(outcome.src) if outcome.src else None,
            dst_path=str(outcome.dst) if outcome.dst else None,
            status=ActionStatus.SUCCESS if outcome.ok else ActionStatus.ERROR,
            message=detail,
            batch_id=undo_batch_id,
            undo_of=target_batch_id,
        )
        try:
            await self._log.append(entry)
        except ActionLogError as e:
            bound_logger.error("undo.log_failed", error=e.message)
            if outcome.ok:
                redone = await anyio.to_thread.run_sync(
                    lambda: reapply_item(
                        original.action.value,
                        original.src_path,
                        original.dst_path,
                        self._trash,
                    )
                )
                if not redone.ok:
                    bound_logger.error(
                        "undo.redo_failed",
                        original_action=original.action.value,
                        src=original.src_path,
                        dst=original.dst_path,
                        reason=redone.reason,
                    )
            return ItemOutcome(
                src=outcome.src, dst=outcome.dst, status="failed", error=e
            )
        return outcome


def _dominant_action(entries: list[ActionLogEntry]) -> ActionType:
    """Action type of the batch; the most frequent one for mixed batches."""
    counts = Counter(entry.action for entry in entries)
    return counts.most_common(1)[0][0]


def _summary(restored: int, total: int, failures: list[str]) -> str:
    message = f"restored {restored} of {total} item(s)"
    if failures:
        message += f"; {len(failures)} failed: {failures[0]}"
    return message
