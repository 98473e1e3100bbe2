"""SqlRepository - SQLAlchemy implementation of the repository contract."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import String, func, insert, literal, or_, select
from sqlalchemy.exc import DBAPIError, IntegrityError

from enrollgate.logging import sanitize_for_log
from enrollgate.repository import (
    CourseRecord,
    EnrollmentExistsError,
    EnrollmentRecord,
    EnrollmentStatus,
    PrerequisiteEdge,
    SeatUnavailableError,
    StorageUnavailableError,
    StudentRecord,
)
from enrollgate.state_store.models import (
    Course,
    CourseTimeSlot,
    Enrollment,
    InstitutionPolicy,
    Prerequisite,
    Student,
    generate_uuid,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, ScalarSelect
    from sqlalchemy.orm import Session

    from enrollgate.policy import Policy
    from enrollgate.state_store.database import Database
    from enrollgate.timemodel import TimeSlot

logger = logging.getLogger(__name__)

ACTIVE = EnrollmentStatus.ACTIVE.value


def _active_count(course_column: ColumnElement[str]) -> ScalarSelect[int]:
    """Scalar subquery counting active enrollments of `course_column`."""
    return (
        select(func.count(Enrollment.id))
        .where(Enrollment.course_id == course_column, Enrollment.status == ACTIVE)
        .scalar_subquery()
    )


class SqlTransaction:
    """Repository reads and writes bound to one SQLAlchemy session."""

    def __init__(self, session: Session, write: bool = False) -> None:
        self._session = session
        self._write = write

    def get_student(self, student_id: str) -> StudentRecord | None:
        student = self._session.get(Student, student_id)
        return student.to_record() if student is not None else None

    def get_courses(self, course_ids: Sequence[str]) -> list[CourseRecord]:
        if not course_ids:
            return []
        stmt = select(Course).where(Course.id.in_(course_ids))
        if self._write:
            stmt = stmt.with_for_update()
        return [course.to_record() for course in self._session.scalars(stmt)]

    def get_slots(self, course_ids: Sequence[str]) -> list[TimeSlot]:
        if not course_ids:
            return []
        stmt = (
            select(CourseTimeSlot)
            .where(CourseTimeSlot.course_id.in_(course_ids))
            .order_by(CourseTimeSlot.course_id, CourseTimeSlot.start_minute)
        )
        return [row.to_slot() for row in self._session.scalars(stmt)]

    def get_active_enrollments(self, student_id: str) -> list[EnrollmentRecord]:
        stmt = (
            select(Enrollment)
            .where(Enrollment.student_id == student_id, Enrollment.status == ACTIVE)
            .order_by(Enrollment.enrolled_at)
        )
        return [enrollment.to_record() for enrollment in self._session.scalars(stmt)]

    def get_completed_courses(self, student_id: str) -> set[str]:
        stmt = select(Enrollment.course_id).where(
            Enrollment.student_id == student_id,
            Enrollment.status == EnrollmentStatus.COMPLETED.value,
        )
        return set(self._session.scalars(stmt))

    def get_prerequisites(self, course_ids: Sequence[str]) -> list[PrerequisiteEdge]:
        if not course_ids:
            return []
        stmt = (
            select(Prerequisite)
            .where(Prerequisite.course_id.in_(course_ids))
            .order_by(Prerequisite.course_id, Prerequisite.position)
        )
        return [edge.to_edge() for edge in self._session.scalars(stmt)]

    def get_policy(self, institution_id: str) -> Policy | None:
        row = self._session.get(InstitutionPolicy, institution_id)
        return row.to_policy() if row is not None else None

    def count_active_enrollments(self, course_ids: Sequence[str]) -> dict[str, int]:
        counts = dict.fromkeys(course_ids, 0)
        if not course_ids:
            return counts
        stmt = (
            select(Enrollment.course_id, func.count(Enrollment.id))
            .where(Enrollment.course_id.in_(course_ids), Enrollment.status == ACTIVE)
            .group_by(Enrollment.course_id)
        )
        for course_id, count in self._session.execute(stmt):
            counts[course_id] = count
        return counts

    def insert_enrollments(
        self, student_id: str, course_ids: Sequence[str]
    ) -> list[EnrollmentRecord]:
        """Insert one active enrollment per course, each only if a seat is free.

        Each row is written by INSERT ... SELECT guarded on the live active
        count, so a seat taken since validation makes the insert match zero
        rows.

        Raises:
            SeatUnavailableError: If a course is full at insert time.
            EnrollmentExistsError: If an active enrollment already exists.
        """
        new_ids: list[str] = []
        for course_id in course_ids:
            enrollment_id = generate_uuid()
            source = select(
                literal(enrollment_id, String(36)),
                literal(student_id, String(36)),
                Course.id,
                literal(ACTIVE, String(20)),
            ).where(
                Course.id == course_id,
                or_(Course.capacity.is_(None), _active_count(Course.id) < Course.capacity),
            )
            stmt = insert(Enrollment).from_select(
                ["id", "student_id", "course_id", "status"], source
            )
            try:
                result = self._session.execute(stmt)
            except IntegrityError as e:
                raise EnrollmentExistsError(course_id) from e

            if result.rowcount == 0:
                course = self._session.get(Course, course_id)
                capacity = course.capacity if course is not None and course.capacity else 0
                current = self._session.scalar(
                    select(func.count(Enrollment.id)).where(
                        Enrollment.course_id == course_id, Enrollment.status == ACTIVE
                    )
                )
                raise SeatUnavailableError(course_id, capacity, current or 0)
            new_ids.append(enrollment_id)

        rows = {
            row.id: row
            for row in self._session.scalars(select(Enrollment).where(Enrollment.id.in_(new_ids)))
        }
        return [rows[enrollment_id].to_record() for enrollment_id in new_ids]

    def commit(self) -> None:
        self._session.commit()


class SqlRepository:
    """Repository backed by a State Store database."""

    def __init__(self, database: Database) -> None:
        """Initialize the repository.

        Args:
            database: Connection manager providing sessions.
        """
        self._db = database

    @contextmanager
    def transaction(self, write: bool = False) -> Iterator[SqlTransaction]:
        """Open a transaction; it rolls back unless committed.

        Raises:
            StorageUnavailableError: If the database fails during the transaction.
        """
        session = self._db.get_session(write=write)
        try:
            yield SqlTransaction(session, write=write)
        except DBAPIError as e:
            message = sanitize_for_log(str(e.orig))
            logger.error("Database error: %s", message)
            raise StorageUnavailableError(f"Storage unavailable: {message}") from e
        finally:
            session.close()
