"""Filesystem layer: path handling, root guard, name validation, trash and
the per-item operation primitives used by the batch executor.
"""

from fileward.fs.fs_ops import ItemOutcome, create_dir, move_item, rename_item
from fileward.fs.guard import RootGuard, is_allowed
from fileward.fs.paths import normalize_path
from fileward.fs.trash import TrashManager
from fileward.fs.validators import is_valid_name, validate_name

__all__ = [
    "ItemOutcome",
    "RootGuard",
    "TrashManager",
    "create_dir",
    "is_allowed",
    "is_valid_name",
    "move_item",
    "normalize_path",
    "rename_item",
    "validate_name",
]
