"""
Volume name validation.

A volume name becomes the suffix of both its mount point and its metadata
path, so it must be a single, non-traversing path component.
"""

import os

from obsdisk.errors import InvalidInputError


def validate_volume_name(value: str, field_name: str = "name") -> str:
    """
    Validate a user-supplied volume name and return it trimmed.

    Rules:
    - Must not be empty or whitespace only
    - Must not be an absolute path
    - Must not contain a path separator
    - Must not be '.' or '..'

    Raises:
        InvalidInputError: If the name is unsafe.
    """
    name = (value or "").strip()
    if not name:
        raise InvalidInputError(field_name, f"{field_name} cannot be empty")

    if os.path.isabs(name) or name.startswith("\\"):
        raise InvalidInputError(field_name, "Absolute paths are not allowed")

    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in name for sep in separators):
        raise InvalidInputError(field_name, "must be a single path component")

    if name in (".", ".."):
        raise InvalidInputError(field_name, "Path traversal ('..') is not allowed")

    return name
