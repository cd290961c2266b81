"""
Custom exception classes for candidkit.

Provides structured error handling for the three producers (field metadata,
value resolution and display codecs). Construction problems are raised once
when a tree is built; shape mismatches are raised when a concrete value is
walked against a type.
"""

from typing import Any, Dict, Optional


class CandidkitException(Exception):
    """Base exception class for all candidkit exceptions."""

    pass


class ConstructionError(CandidkitException):
    """
    Raised when a type tree is malformed and no metadata or codec can be built.

    Typical causes:
    - A variant with zero options
    - Duplicate record keys or variant tags
    - A recursive type whose target was never filled in

    Example:
        >>> raise ConstructionError(
        ...     reason="Variant has no options",
        ...     details={"path": "[0].status"}
        ... )
    """

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        self.reason = reason
        self.details = details or {}
        message = f"{reason}"
        if self.details:
            message += f" - {self.details}"
        super().__init__(message)


class UnknownOptionError(ConstructionError, KeyError):
    """Raised when a variant field is asked for a tag it does not declare."""

    def __init__(self, tag: str, options: Optional[list] = None):
        self.tag = tag
        super().__init__(
            reason=f"Unknown variant option: {tag}",
            details={"options": list(options or [])},
        )

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0] if self.args else ""


class ShapeMismatchError(CandidkitException):
    """
    Raised when a concrete value does not match the expected type shape.

    Carries the offending path together with the expected and the actual
    shape so callers can decide how to render a fallback.
    """

    def __init__(self, path: str, expected: str, actual: str, reason: Optional[str] = None):
        self.path = path
        self.expected = expected
        self.actual = actual
        self.reason = reason
        where = path or "<root>"
        message = f"Shape mismatch at {where}: expected {expected}, got {actual}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


def describe_value(value: Any) -> str:
    """Short shape description of a value for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "text"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"bytes[{len(value)}]"
    if isinstance(value, dict):
        keys = ", ".join(str(k) for k in list(value)[:4])
        return f"object{{{keys}}}"
    if isinstance(value, (list, tuple)):
        return f"array[{len(value)}]"
    return type(value).__name__
