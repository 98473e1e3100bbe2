"""Custom exceptions for the repository layer."""


class RepositoryError(Exception):
    """Base exception for repository errors."""


class StorageUnavailableError(RepositoryError):
    """The backing store could not be reached or failed mid-operation."""


class SeatUnavailableError(RepositoryError):
    """Conditional insert found the course full at commit time."""

    def __init__(self, course_id: str, capacity: int, current: int) -> None:
        super().__init__(
            f"Course '{course_id}' is full at commit time ({current}/{capacity} seats taken)"
        )
        self.course_id = course_id
        self.capacity = capacity
        self.current = current


class EnrollmentExistsError(RepositoryError):
    """An active enrollment for this student and course already exists."""

    def __init__(self, course_id: str) -> None:
        super().__init__(f"Active enrollment in course '{course_id}' already exists")
        self.course_id = course_id


class RecordNotFoundError(RepositoryError):
    """Record with given ID does not exist."""


class RecordExistsError(RepositoryError):
    """Record violates a uniqueness constraint."""


class InvalidRecordError(RepositoryError):
    """Record values violate a data-model invariant."""
