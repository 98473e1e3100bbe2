"""Read models returned by the repository.

These are plain values detached from any storage session, so the
validation checkers never touch the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003 - used at runtime by dataclass
from enum import StrEnum


class EnrollmentStatus(StrEnum):
    """Enrollment status enum."""

    ACTIVE = "active"
    COMPLETED = "completed"
    WITHDRAWN = "withdrawn"


@dataclass(frozen=True)
class StudentRecord:
    """A student and the institution that owns them."""

    id: str
    institution_id: str
    name: str = ""


@dataclass(frozen=True)
class CourseRecord:
    """A course as seen by the validation engine.

    Attributes:
        id: The course's unique ID.
        institution_id: Owning institution.
        credits: Credit weight (1-6).
        capacity: Maximum active enrollments, None for unlimited.
        code: Human-readable course code.
        name: Course title.
    """

    id: str
    institution_id: str
    credits: int
    capacity: int | None
    code: str = ""
    name: str = ""


@dataclass(frozen=True)
class PrerequisiteEdge:
    """`course_id` requires `prerequisite_id`.

    `minimum_grade` is advisory metadata; it is never compared against the
    student's earned grade.
    """

    course_id: str
    prerequisite_id: str
    is_mandatory: bool = True
    minimum_grade: str | None = None


@dataclass(frozen=True)
class EnrollmentRecord:
    """One enrollment of a student in a course."""

    id: str
    student_id: str
    course_id: str
    status: EnrollmentStatus
    grade: str | None = None
    enrolled_at: datetime | None = None
    completed_at: datetime | None = None
