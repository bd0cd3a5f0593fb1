"""Custom exceptions for fileward.

Every failure the engine can report is a subclass of FileWardError with a
stable ``code``. The same codes appear in per-item batch results and in the
``{"code", "message"}`` payloads returned over the command surface.
"""

from typing import Any


class FileWardError(Exception):
    """Base exception for all fileward errors.

    Attributes:
        code: Stable machine-readable error code
        path: Optional path the error refers to
    """

    code = "UNKNOWN_ERROR"

    def __init__(self, message: str, path: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description
            path: Path the error refers to (optional)
        """
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for command responses.

        Returns:
            Dictionary with ``code`` and ``message`` keys
        """
        result: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.path is not None:
            result["path"] = self.path
        return result

    def __repr__(self) -> str:
        """Return repr string for debugging."""
        return f"{type(self).__name__}(message={self.message!r}, path={self.path!r})"


class InvalidName(FileWardError):
    """Raised when a file or folder name is empty or contains reserved characters."""

    code = "INVALID_NAME"


class InvalidPath(FileWardError):
    """Raised when a path cannot be used for the requested operation.

    Examples are listing something that is not a directory, or moving a
    directory into its own subtree.
    """

    code = "INVALID_PATH"


class RootViolation(FileWardError):
    """Raised when a path resolves outside every allowed root."""

    code = "ROOT_VIOLATION"


class NotFound(FileWardError):
    """Raised when a source path does not exist."""

    code = "NOT_FOUND"


class Collision(FileWardError):
    """Raised when the target of a create, rename or move already exists."""

    code = "COLLISION"


AlreadyExists = Collision


class IOFailure(FileWardError):
    """Raised when the operating system rejects a filesystem call.

    Covers disk full, cross-device failures, locked files and OS-level
    permission errors.
    """

    code = "IO_FAILURE"


class NothingToUndo(FileWardError):
    """Reason reported when the action log has no batch eligible for undo."""

    code = "NOTHING_TO_UNDO"


class RestoreConflict(FileWardError):
    """Raised when an undo target is occupied or has changed since the action."""

    code = "RESTORE_CONFLICT"


class ActionLogError(FileWardError):
    """Raised when an action log entry cannot be persisted."""

    code = "LOG_WRITE_FAILED"


class UnknownCommand(FileWardError):
    """Raised when the command router receives an unsupported command name."""

    code = "UNKNOWN_COMMAND"


_ERRORS_BY_CODE: dict[str, type[FileWardError]] = {
    cls.code: cls
    for cls in (
        InvalidName,
        InvalidPath,
        RootViolation,
        NotFound,
        Collision,
        IOFailure,
        NothingToUndo,
        RestoreConflict,
        ActionLogError,
        UnknownCommand,
    )
}


def error_for_code(
    code: str | None, message: str, path: str | None = None
) -> FileWardError:
    """Rebuild a typed exception from an error code.

    Args:
        code: Error code as stored in a batch item result
        message: Message to attach
        path: Path the error refers to (optional)

    Returns:
        Instance of the matching FileWardError subclass, or the base class
        when the code is unknown
    """
    cls = _ERRORS_BY_CODE.get(code or "", FileWardError)
    return cls(message, path=path)


def from_os_error(exc: OSError, path: str | None = None) -> FileWardError:
    """Translate an OSError into the fileward taxonomy.

    Args:
        exc: Error raised by the operating system
        path: Path involved in the failing call (optional)

    Returns:
        NotFound, Collision or IOFailure
    """
    detail = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError):
        return NotFound(f"not found: {detail}", path=path)
    if isinstance(exc, FileExistsError):
        return Collision(f"already exists: {detail}", path=path)
    return IOFailure(f"I/O error: {detail}", path=path)
