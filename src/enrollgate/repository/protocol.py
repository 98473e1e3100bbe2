"""Repository interface consumed by the validation orchestrator."""

from __future__ import annotations

from collections.abc import Sequence  # noqa: TC003
from contextlib import AbstractContextManager  # noqa: TC003
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from enrollgate.policy import Policy
    from enrollgate.repository.models import (
        CourseRecord,
        EnrollmentRecord,
        PrerequisiteEdge,
        StudentRecord,
    )
    from enrollgate.timemodel import TimeSlot


class RepositoryTransaction(Protocol):
    """Reads and writes bound to one storage transaction.

    All reads accept id lists so the orchestrator never loops row by row.
    Leaving the transaction context without calling commit() rolls back.
    """

    def get_student(self, student_id: str) -> StudentRecord | None:
        """Student by ID, or None."""
        ...

    def get_courses(self, course_ids: Sequence[str]) -> list[CourseRecord]:
        """Existing courses among the given IDs (missing IDs are omitted)."""
        ...

    def get_slots(self, course_ids: Sequence[str]) -> list[TimeSlot]:
        """All weekly slots of the given courses."""
        ...

    def get_active_enrollments(self, student_id: str) -> list[EnrollmentRecord]:
        """The student's enrollments with status active."""
        ...

    def get_completed_courses(self, student_id: str) -> set[str]:
        """IDs of courses the student has completed."""
        ...

    def get_prerequisites(self, course_ids: Sequence[str]) -> list[PrerequisiteEdge]:
        """Prerequisite edges whose dependent course is in course_ids."""
        ...

    def get_policy(self, institution_id: str) -> Policy | None:
        """Explicit policy for the institution, or None."""
        ...

    def count_active_enrollments(self, course_ids: Sequence[str]) -> dict[str, int]:
        """Active enrollment count per course ID (0 when none)."""
        ...

    def insert_enrollments(
        self, student_id: str, course_ids: Sequence[str]
    ) -> list[EnrollmentRecord]:
        """Insert one active enrollment per course, each only if a seat is free.

        Raises:
            SeatUnavailableError: If a course is full at insert time.
            EnrollmentExistsError: If an active enrollment already exists.
        """
        ...

    def commit(self) -> None:
        """Commit the transaction."""
        ...


class Repository(Protocol):
    """Source of transactional handles."""

    def transaction(self, write: bool = False) -> AbstractContextManager[RepositoryTransaction]:
        """Open a transaction.

        Args:
            write: Whether the transaction will insert. Write transactions
                   serialize against each other for their whole duration.
        """
        ...
