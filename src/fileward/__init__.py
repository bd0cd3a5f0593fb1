"""fileward: a root-guarded file-operation engine with trash and undo."""

__version__ = "0.1.0"
