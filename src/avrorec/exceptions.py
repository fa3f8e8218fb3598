"""Exception hierarchy for avrorec.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from AvrorecError for easy catching of any avrorec-specific error.
"""

from __future__ import annotations


class AvrorecError(Exception):
    """Base exception for all avrorec errors."""

    pass


class InvalidSchema(AvrorecError):
    """Raised when a record schema is malformed.

    Detected when the schema is loaded; the schema instance is unusable.

    Examples:
        - Two fields in one record share a name
        - Unknown type tag (including unions, arrays and maps)
        - A record references itself while still being defined
        - Invalid or redefined name
    """

    pass


class SchemaMismatch(AvrorecError):
    """Raised when a value does not conform to its schema.

    Detected per record and recoverable by the caller (skip the record and
    continue with the next one).

    Examples:
        - A declared field is missing from the value
        - The value carries a field the schema does not declare
        - Type mismatch at any nesting level
        - Integer out of range for ``int``/``long``

    Attributes:
        path: Dotted field path where the mismatch was found ("" for the root)
    """

    def __init__(self, message: str, path: str = "") -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class ContainerError(AvrorecError):
    """Raised when an object container file cannot be written.

    Examples:
        - Unknown compression codec
        - Appending to a closed writer
        - User metadata using the reserved ``avro.`` prefix
    """

    pass
