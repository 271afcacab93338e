"""Failure taxonomy for the external AI and shopping boundaries.

These never reach API callers directly: the clients convert them into local
fallback values and the orchestrator reports them through its ``error`` field.
An empty result set is not an error and has no exception type.
"""

from __future__ import annotations


class StyleSearchError(Exception):
    """Base class. ``retryable`` is informational; nothing here retries."""

    retryable: bool = False

    def __init__(self, message: str, *, retryable: bool | None = None) -> None:
        super().__init__(message)
        if retryable is not None:
            self.retryable = retryable


class TransportFailure(StyleSearchError):
    """Network error, timeout, or a non-2xx response from a backend."""

    retryable = True


class SessionCreationError(TransportFailure):
    """The conversation handshake with the AI backend failed."""


class SchemaViolation(StyleSearchError):
    """A backend answered, but not in the expected structured shape."""

    retryable = False
