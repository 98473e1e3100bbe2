"""CatalogStore - Administrative operations on institutions, courses and enrollments."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from enrollgate.repository import (
    EnrollmentStatus,
    InvalidRecordError,
    RecordExistsError,
    RecordNotFoundError,
)
from enrollgate.state_store.database import Database
from enrollgate.state_store.models import (
    Course,
    CourseTimeSlot,
    Enrollment,
    Institution,
    InstitutionPolicy,
    Prerequisite,
    Student,
)
from enrollgate.state_store.repository import SqlRepository
from enrollgate.timemodel import TimeModelError, TimeSlot, overlaps

if TYPE_CHECKING:
    from enrollgate.policy import Policy
    from enrollgate.timemodel import DayOfWeek

logger = logging.getLogger(__name__)

CREDITS_BOUNDS = (1, 6)
CAPACITY_BOUNDS = (1, 200)


class CatalogStore:
    """Main API for administrative State Store operations.

    Creates institutions, students, courses, time slots and prerequisites,
    and moves enrollments out of the active state. Enrollments themselves
    are only created through the validation orchestrator, via `repository`.
    Every write session takes the SQLite write lock on its first statement,
    so administrative writes queue behind a running enroll instead of
    failing on a stale snapshot.
    """

    def __init__(self, db_path: str = "enrollgate.db", busy_timeout: float = 30.0) -> None:
        """Initialize the store with a SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds to wait for a competing write lock
        """
        self._db = Database(db_path, busy_timeout=busy_timeout)
        self._db.create_tables()
        self.repository = SqlRepository(self._db)

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Institution Operations ---

    def create_institution(
        self, name: str, policy: Policy | None = None, id: str | None = None
    ) -> Institution:
        """Create a new institution.

        Args:
            name: Institution name
            policy: Explicit enrollment policy; defaults apply when omitted
            id: Optional fixed ID

        Returns:
            Created Institution object

        Raises:
            RecordExistsError: If an institution with the same ID exists
        """
        session = self._db.get_session(write=True)
        try:
            institution = Institution(name=name, id=id)
            session.add(institution)
            if policy is not None:
                session.add(InstitutionPolicy(institution_id=institution.id, policy=policy))
            session.commit()
            session.refresh(institution)
            logger.info("Created institution %s (%s)", institution.id, name)
            return institution
        except IntegrityError as e:
            session.rollback()
            raise RecordExistsError(f"Institution '{institution.id}' already exists") from e
        finally:
            session.close()

    def get_institution(self, institution_id: str) -> Institution:
        """Get institution by ID.

        Raises:
            RecordNotFoundError: If institution doesn't exist
        """
        session = self._db.get_session()
        try:
            institution = session.get(Institution, institution_id)
            if institution is None:
                raise RecordNotFoundError(f"Institution with id '{institution_id}' not found")
            return institution
        finally:
            session.close()

    def set_policy(self, institution_id: str, policy: Policy) -> Policy:
        """Create or replace an institution's policy.

        Raises:
            RecordNotFoundError: If institution doesn't exist
        """
        session = self._db.get_session(write=True)
        try:
            if session.get(Institution, institution_id) is None:
                raise RecordNotFoundError(f"Institution with id '{institution_id}' not found")

            row = session.get(InstitutionPolicy, institution_id)
            if row is None:
                session.add(InstitutionPolicy(institution_id=institution_id, policy=policy))
            else:
                row.apply(policy)
            session.commit()
            logger.info("Policy updated for institution %s: %s", institution_id, policy)
            return policy
        finally:
            session.close()

    def get_policy(self, institution_id: str) -> Policy | None:
        """Explicit policy of an institution, or None when defaults apply."""
        session = self._db.get_session()
        try:
            row = session.get(InstitutionPolicy, institution_id)
            return row.to_policy() if row is not None else None
        finally:
            session.close()

    # --- Student Operations ---

    def create_student(self, institution_id: str, name: str, id: str | None = None) -> Student:
        """Create a new student.

        Args:
            institution_id: Owning institution; fixed for the student's lifetime
            name: Student name
            id: Optional fixed ID

        Returns:
            Created Student object

        Raises:
            RecordNotFoundError: If institution doesn't exist
            RecordExistsError: If a student with the same ID exists
        """
        session = self._db.get_session(write=True)
        try:
            if session.get(Institution, institution_id) is None:
                raise RecordNotFoundError(f"Institution with id '{institution_id}' not found")
            student = Student(institution_id=institution_id, name=name, id=id)
            session.add(student)
            session.commit()
            session.refresh(student)
            return student
        except IntegrityError as e:
            session.rollback()
            raise RecordExistsError(f"Student '{student.id}' already exists") from e
        finally:
            session.close()

    # --- Course Operations ---

    def create_course(
        self,
        institution_id: str,
        code: str,
        name: str,
        credits: int,
        capacity: int | None = None,
        id: str | None = None,
    ) -> Course:
        """Create a new course.

        Args:
            institution_id: Owning institution
            code: Course code, unique within the institution
            name: Course title
            credits: Credit weight (1-6)
            capacity: Seat limit (1-200), None for unlimited
            id: Optional fixed ID

        Returns:
            Created Course object

        Raises:
            InvalidRecordError: If credits or capacity are out of range
            RecordNotFoundError: If institution doesn't exist
            RecordExistsError: If the code is already used in the institution
        """
        low, high = CREDITS_BOUNDS
        if not low <= credits <= high:
            raise InvalidRecordError(f"Credits must be {low}-{high}, got {credits}")
        low, high = CAPACITY_BOUNDS
        if capacity is not None and not low <= capacity <= high:
            raise InvalidRecordError(f"Capacity must be {low}-{high}, got {capacity}")

        session = self._db.get_session(write=True)
        try:
            if session.get(Institution, institution_id) is None:
                raise RecordNotFoundError(f"Institution with id '{institution_id}' not found")
            course = Course(
                institution_id=institution_id,
                code=code,
                name=name,
                credits=credits,
                capacity=capacity,
                id=id,
            )
            session.add(course)
            session.commit()
            session.refresh(course)
            return course
        except IntegrityError as e:
            session.rollback()
            raise RecordExistsError(
                f"Course with code '{code}' already exists in institution '{institution_id}'"
            ) from e
        finally:
            session.close()

    def add_time_slot(
        self,
        course_id: str,
        day: DayOfWeek | str,
        start: str,
        end: str,
        overnight: bool | None = None,
    ) -> TimeSlot:
        """Add a weekly meeting to a course.

        Args:
            course_id: The course's unique ID
            day: Day the meeting starts on
            start: Start time, "HH:MM"
            end: End time, "HH:MM"; earlier than start for an overnight slot
            overnight: Overnight flag, inferred from start/end when None

        Returns:
            The stored TimeSlot

        Raises:
            InvalidRecordError: If the slot is malformed or overlaps another
                slot of the same course
            RecordNotFoundError: If course doesn't exist
            RecordExistsError: If the course already meets at exactly this time
        """
        try:
            slot = TimeSlot.from_clock(course_id, day, start, end, overnight=overnight)
        except (TimeModelError, ValueError) as e:
            raise InvalidRecordError(str(e)) from e

        session = self._db.get_session(write=True)
        try:
            if session.get(Course, course_id) is None:
                raise RecordNotFoundError(f"Course with id '{course_id}' not found")

            stmt = select(CourseTimeSlot).where(CourseTimeSlot.course_id == course_id)
            for existing in (row.to_slot() for row in session.scalars(stmt)):
                if (existing.day, existing.start, existing.end) == (slot.day, slot.start, slot.end):
                    raise RecordExistsError(f"Course '{course_id}' already meets {slot}")
                if overlaps(existing, slot):
                    raise InvalidRecordError(
                        f"Slot {slot} overlaps {existing} of course '{course_id}'"
                    )

            row = CourseTimeSlot(slot)
            session.add(row)
            session.commit()
            return row.to_slot()
        finally:
            session.close()

    def add_prerequisite(
        self,
        course_id: str,
        prerequisite_id: str,
        is_mandatory: bool = True,
        minimum_grade: str | None = None,
    ) -> Prerequisite:
        """Record that `course_id` requires `prerequisite_id`.

        Raises:
            InvalidRecordError: If a course would require itself
            RecordNotFoundError: If either course doesn't exist
            RecordExistsError: If the edge already exists
        """
        if course_id == prerequisite_id:
            raise InvalidRecordError(f"Course '{course_id}' cannot be its own prerequisite")

        session = self._db.get_session(write=True)
        try:
            for cid in (course_id, prerequisite_id):
                if session.get(Course, cid) is None:
                    raise RecordNotFoundError(f"Course with id '{cid}' not found")
            position = session.scalar(
                select(func.count(Prerequisite.id)).where(Prerequisite.course_id == course_id)
            )
            edge = Prerequisite(
                course_id=course_id,
                prerequisite_id=prerequisite_id,
                is_mandatory=is_mandatory,
                minimum_grade=minimum_grade,
                position=position or 0,
            )
            session.add(edge)
            session.commit()
            session.refresh(edge)
            return edge
        except IntegrityError as e:
            session.rollback()
            raise RecordExistsError(
                f"Course '{course_id}' already requires '{prerequisite_id}'"
            ) from e
        finally:
            session.close()

    # --- Enrollment Operations ---

    def get_enrollment(self, enrollment_id: str) -> Enrollment:
        """Get enrollment by ID.

        Raises:
            RecordNotFoundError: If enrollment doesn't exist
        """
        session = self._db.get_session()
        try:
            enrollment = session.get(Enrollment, enrollment_id)
            if enrollment is None:
                raise RecordNotFoundError(f"Enrollment with id '{enrollment_id}' not found")
            return enrollment
        finally:
            session.close()

    def list_enrollments(
        self, student_id: str, status: EnrollmentStatus | None = None
    ) -> list[Enrollment]:
        """List a student's enrollments, oldest first, optionally by status."""
        session = self._db.get_session()
        try:
            stmt = select(Enrollment).where(Enrollment.student_id == student_id)
            if status is not None:
                stmt = stmt.where(Enrollment.status == status.value)
            stmt = stmt.order_by(Enrollment.enrolled_at, Enrollment.id)
            return list(session.scalars(stmt).all())
        finally:
            session.close()

    def complete_enrollment(self, enrollment_id: str, grade: str | None = None) -> Enrollment:
        """Mark an active enrollment as completed, freeing its seat.

        Raises:
            RecordNotFoundError: If enrollment doesn't exist
            InvalidRecordError: If the enrollment is not active
        """
        return self._close_enrollment(enrollment_id, EnrollmentStatus.COMPLETED, grade)

    def withdraw_enrollment(self, enrollment_id: str) -> Enrollment:
        """Withdraw from an active enrollment, freeing its seat.

        Raises:
            RecordNotFoundError: If enrollment doesn't exist
            InvalidRecordError: If the enrollment is not active
        """
        return self._close_enrollment(enrollment_id, EnrollmentStatus.WITHDRAWN, None)

    def _close_enrollment(
        self, enrollment_id: str, status: EnrollmentStatus, grade: str | None
    ) -> Enrollment:
        session = self._db.get_session(write=True)
        try:
            enrollment = session.get(Enrollment, enrollment_id)
            if enrollment is None:
                raise RecordNotFoundError(f"Enrollment with id '{enrollment_id}' not found")
            if enrollment.enrollment_status != EnrollmentStatus.ACTIVE:
                raise InvalidRecordError(
                    f"Enrollment '{enrollment_id}' is {enrollment.status}, not active"
                )

            enrollment.status = status.value
            if status == EnrollmentStatus.COMPLETED:
                enrollment.grade = grade
                enrollment.completed_at = datetime.now(UTC)
            session.commit()
            logger.info("Enrollment %s moved to %s", enrollment_id, status)
            return enrollment
        finally:
            session.close()
