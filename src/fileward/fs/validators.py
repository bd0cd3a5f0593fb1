"""File and folder name validation."""

import unicodedata

from fileward.core.constants import (
    PATH_SEPARATORS,
    RESERVED_CHARACTERS,
    RESERVED_DEVICE_NAMES,
)
from fileward.core.errors import InvalidName


def validate_name(name: str) -> str:
    """Validate a single path segment used for create and rename.

    Args:
        name: Proposed file or folder name

    Returns:
        The name, unchanged

    Raises:
        InvalidName: If the name is empty, whitespace-only, contains a
            reserved or control character, is a reserved device name, or
            ends with a dot or space
    """
    if not name or not name.strip():
        raise InvalidName("name cannot be empty")

    if name in (".", ".."):
        raise InvalidName(f"'{name}' is not a valid name")

    for ch in RESERVED_CHARACTERS + PATH_SEPARATORS:
        if ch in name:
            raise InvalidName(f"name cannot contain '{ch}'")

    if any(unicodedata.category(ch) == "Cc" for ch in name):
        raise InvalidName("name cannot contain control characters")

    base_name = name.split(".", 1)[0].upper()
    if base_name in RESERVED_DEVICE_NAMES:
        raise InvalidName(f"'{name}' is a reserved name")

    if name.endswith((".", " ")):
        raise InvalidName("name cannot end with a dot or space")

    return name


def is_valid_name(name: str) -> bool:
    """Return True if ``name`` passes validate_name."""
    try:
        validate_name(name)
    except InvalidName:
        return False
    return True


def is_hidden(name: str) -> bool:
    """Return True for dot-files."""
    return name.startswith(".")
