"""Exception hierarchy for escapeforge.

Validation errors are split between structural (shape, types, bounds) and
semantic (well-typed but logically incoherent documents) so callers and
tests can tell the two apart.
"""
from __future__ import annotations
from typing import Optional


class EscapeForgeError(Exception):
    """Base class for every error raised by the package."""
    pass


class ValidationError(EscapeForgeError):
    """A room document failed validation.

    Args:
        message: Human readable reason
        path: JSON path of the offending value (e.g. "$.room.objects[0].area.x")
    """

    def __init__(self, message: str, path: str = "$"):
        super().__init__(f"{path}: {message}")
        self.reason = message
        self.path = path


class StructuralValidationError(ValidationError):
    pass


class MissingFieldError(StructuralValidationError):
    pass


class OutOfRangeError(StructuralValidationError):
    pass


class EmptyCollectionError(StructuralValidationError):
    pass


class UnknownEnumValueError(StructuralValidationError):
    pass


class InvalidTypeError(StructuralValidationError):
    pass


class SemanticValidationError(ValidationError):
    pass


class DanglingFlagError(SemanticValidationError):
    """A flag is referenced by a condition or effect but missing from initialState."""

    def __init__(self, flags, path: str = "$.initialState"):
        self.flags = sorted(flags)
        super().__init__(f"flags referenced but not declared: {', '.join(self.flags)}", path)


class DuplicateObjectIdError(SemanticValidationError):
    pass


class ConflictingEffectError(SemanticValidationError):
    pass


class UnparseableReplyError(EscapeForgeError):
    """The text generator's reply could not be read as the expected JSON envelope."""

    def __init__(self, message: str, raw: Optional[str] = None):
        super().__init__(message)
        self.raw = raw


class ExternalCallFailure(EscapeForgeError):
    """A provider (text, image, video) or the store failed."""
    pass


class StorageError(ExternalCallFailure):
    """Exception raised for store read/write operations."""
    pass


class InteractionError(EscapeForgeError):
    """Invalid player action inside a room session."""
    pass
