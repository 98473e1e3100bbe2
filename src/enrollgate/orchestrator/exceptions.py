"""Exceptions for the validation orchestrator.

These are system errors: they mean the request could not be evaluated at
all, as opposed to violations, which are returned as data.
"""

from enrollgate.repository.exceptions import StorageUnavailableError


class EngineError(Exception):
    """Base exception for engine errors."""

    pass


class MalformedIdentifierError(EngineError):
    """Student or course identifier is not a non-empty string."""

    pass


class EmptyCourseListError(EngineError):
    """Enrollment request names no courses."""

    pass


__all__ = [
    "EmptyCourseListError",
    "EngineError",
    "MalformedIdentifierError",
    "StorageUnavailableError",
]
