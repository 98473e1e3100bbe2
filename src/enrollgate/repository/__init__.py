"""Repository - Storage contract for the validation engine."""

from enrollgate.repository.exceptions import (
    EnrollmentExistsError,
    InvalidRecordError,
    RecordExistsError,
    RecordNotFoundError,
    RepositoryError,
    SeatUnavailableError,
    StorageUnavailableError,
)
from enrollgate.repository.models import (
    CourseRecord,
    EnrollmentRecord,
    EnrollmentStatus,
    PrerequisiteEdge,
    StudentRecord,
)
from enrollgate.repository.protocol import Repository, RepositoryTransaction

__all__ = [
    "CourseRecord",
    "EnrollmentExistsError",
    "EnrollmentRecord",
    "EnrollmentStatus",
    "InvalidRecordError",
    "PrerequisiteEdge",
    "RecordExistsError",
    "RecordNotFoundError",
    "Repository",
    "RepositoryError",
    "RepositoryTransaction",
    "SeatUnavailableError",
    "StorageUnavailableError",
    "StudentRecord",
]
