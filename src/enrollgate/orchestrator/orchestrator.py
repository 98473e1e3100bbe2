"""ValidationOrchestrator - Enrollment validation and atomic commit."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from enrollgate.logging import truncate_output
from enrollgate.orchestrator.exceptions import (
    EmptyCourseListError,
    MalformedIdentifierError,
    StorageUnavailableError,
)
from enrollgate.orchestrator.models import EnrollmentOutcome, OrchestratorState
from enrollgate.policy import PolicyResolver
from enrollgate.repository import EnrollmentExistsError, SeatUnavailableError
from enrollgate.validation import (
    CapacityExceeded,
    CollegeMismatch,
    ConflictDetector,
    DuplicateEnrollment,
    NotFound,
    check_capacity,
    check_course_count,
    check_credit_hours,
    check_overnight,
    check_prerequisites,
    check_weekend,
)

if TYPE_CHECKING:
    from enrollgate.repository import Repository, RepositoryTransaction
    from enrollgate.validation import Violation

logger = logging.getLogger(__name__)


def _summarize(violations: Sequence[Violation]) -> str:
    return truncate_output("; ".join(v.message for v in violations), max_length=500)


class ValidationOrchestrator:
    """Decides whether a proposed set of enrollments is admissible.

    Every check runs on every request and the violations are concatenated
    in a fixed order, so a rejected request lists all of its problems at
    once. The enroll path validates and inserts inside one write
    transaction; a lost seat race rolls the whole request back.
    """

    def __init__(
        self,
        repository: Repository,
        policy_resolver: PolicyResolver | None = None,
        conflict_detector: ConflictDetector | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            repository: Storage providing transactional handles.
            policy_resolver: Resolver for institution policies.
            conflict_detector: Schedule analyzer.
        """
        self.repository = repository
        self.policy_resolver = policy_resolver or PolicyResolver()
        self.conflict_detector = conflict_detector or ConflictDetector()

    def validate(self, student_id: str, course_ids: Sequence[str]) -> list[Violation]:
        """Dry-run validation; never writes.

        Args:
            student_id: The student's unique ID.
            course_ids: Proposed course IDs.

        Returns:
            All violations, empty when the request is admissible.

        Raises:
            MalformedIdentifierError: If an ID is not a non-empty string.
            EmptyCourseListError: If no course is proposed.
            StorageUnavailableError: If storage fails.
        """
        course_ids = _normalize_request(student_id, course_ids)
        state = self._transition(student_id, None, OrchestratorState.COLLECTING)

        try:
            with self.repository.transaction() as tx:
                violations = self._evaluate(tx, student_id, course_ids, state)
        except StorageUnavailableError:
            logger.exception("Storage failure while validating for student %s", student_id)
            raise

        if violations:
            self._transition(student_id, OrchestratorState.VALIDATING, OrchestratorState.REJECTED)
        return violations

    def enroll(self, student_id: str, course_ids: Sequence[str]) -> EnrollmentOutcome:
        """Validate and, when admissible, enroll the student in every course.

        The request is all-or-nothing: either one active enrollment per
        course is committed or none is.

        Args:
            student_id: The student's unique ID.
            course_ids: Course IDs to enroll in.

        Returns:
            EnrollmentOutcome with the committed records or the violations.

        Raises:
            MalformedIdentifierError: If an ID is not a non-empty string.
            EmptyCourseListError: If no course is proposed.
            StorageUnavailableError: If storage fails.
        """
        course_ids = _normalize_request(student_id, course_ids)
        state = self._transition(student_id, None, OrchestratorState.COLLECTING)

        try:
            with self.repository.transaction(write=True) as tx:
                violations = self._evaluate(tx, student_id, course_ids, state)
                state = OrchestratorState.VALIDATING

                if violations:
                    state = self._transition(student_id, state, OrchestratorState.REJECTED)
                    return EnrollmentOutcome(state=state, violations=violations)

                state = self._transition(student_id, state, OrchestratorState.COMMITTING)
                try:
                    records = tx.insert_enrollments(student_id, course_ids)
                    tx.commit()
                except SeatUnavailableError as e:
                    logger.warning("Seat race lost for student %s: %s", student_id, e)
                    state = self._transition(student_id, state, OrchestratorState.ABORTED)
                    return EnrollmentOutcome(
                        state=state,
                        violations=[
                            CapacityExceeded(
                                course_id=e.course_id, capacity=e.capacity, current=e.current
                            )
                        ],
                    )
                except EnrollmentExistsError as e:
                    logger.warning("Duplicate detected at insert for student %s: %s", student_id, e)
                    state = self._transition(student_id, state, OrchestratorState.ABORTED)
                    return EnrollmentOutcome(
                        state=state,
                        violations=[DuplicateEnrollment(course_id=e.course_id)],
                    )
        except StorageUnavailableError:
            logger.exception("Storage failure while enrolling student %s", student_id)
            raise

        state = self._transition(student_id, state, OrchestratorState.COMMITTED)
        logger.info(
            "Enrolled student %s in %d course(s): %s",
            student_id,
            len(records),
            ", ".join(course_ids),
        )
        return EnrollmentOutcome(state=state, enrollments=records)

    def _evaluate(
        self,
        tx: RepositoryTransaction,
        student_id: str,
        course_ids: list[str],
        state: OrchestratorState,
    ) -> list[Violation]:
        """Load everything the checkers need and run all of them."""
        student = tx.get_student(student_id)
        self._transition(student_id, state, OrchestratorState.VALIDATING)
        if student is None:
            logger.info("Student %s not found", student_id)
            return [NotFound(entity="student", id=student_id)]

        active_ids = list(
            dict.fromkeys(record.course_id for record in tx.get_active_enrollments(student_id))
        )
        active_set = set(active_ids)

        courses = {course.id: course for course in tx.get_courses([*course_ids, *active_ids])}
        proposed = [courses[course_id] for course_id in course_ids if course_id in courses]
        active_courses = [courses[course_id] for course_id in active_ids if course_id in courses]

        # Courses already actively enrolled only yield DuplicateEnrollment.
        candidates = [course for course in proposed if course.id not in active_set]
        candidate_ids = [course.id for course in candidates]
        candidate_set = set(candidate_ids)

        policy = self.policy_resolver.resolve(tx, student.institution_id)
        slots = tx.get_slots([*candidate_ids, *active_ids])
        proposed_slots = [slot for slot in slots if slot.course_id in candidate_set]
        existing_slots = [slot for slot in slots if slot.course_id in active_set]
        completed = tx.get_completed_courses(student_id)
        edges = tx.get_prerequisites(candidate_ids)
        counts = tx.count_active_enrollments(candidate_ids)

        violations: list[Violation] = []
        violations.extend(
            NotFound(entity="course", id=course_id)
            for course_id in course_ids
            if course_id not in courses
        )
        violations.extend(
            CollegeMismatch(course_id=course.id)
            for course in proposed
            if course.institution_id != student.institution_id
        )
        violations.extend(
            DuplicateEnrollment(course_id=course.id)
            for course in proposed
            if course.id in active_set
        )
        violations.extend(check_prerequisites(candidate_ids, edges, completed))
        violations.extend(check_capacity(candidates, counts))
        violations.extend(check_credit_hours(active_courses, candidates, policy))
        violations.extend(check_course_count(len(active_ids), len(candidates), policy))
        violations.extend(check_overnight(candidate_ids, proposed_slots, policy))
        violations.extend(check_weekend(candidate_ids, proposed_slots, policy))
        violations.extend(self.conflict_detector.detect(existing_slots, proposed_slots, policy))

        if violations:
            logger.info(
                "Student %s: %d violation(s): %s",
                student_id,
                len(violations),
                _summarize(violations),
            )
        return violations

    def _transition(
        self,
        student_id: str,
        from_state: OrchestratorState | None,
        to_state: OrchestratorState,
    ) -> OrchestratorState:
        if from_state is None:
            logger.info("Request for student %s: %s", student_id, to_state)
        else:
            logger.info("Request for student %s: %s -> %s", student_id, from_state, to_state)
        return to_state


def _normalize_request(student_id: object, course_ids: object) -> list[str]:
    """Check identifiers and collapse duplicate course IDs, keeping first occurrence.

    Raises:
        MalformedIdentifierError: If an ID is not a non-empty string.
        EmptyCourseListError: If no course is proposed.
    """
    if not isinstance(student_id, str) or not student_id.strip():
        raise MalformedIdentifierError(f"Invalid student ID: {student_id!r}")
    if isinstance(course_ids, str | bytes) or not isinstance(course_ids, Sequence):
        raise MalformedIdentifierError("Course IDs must be a list of strings")
    for course_id in course_ids:
        if not isinstance(course_id, str) or not course_id.strip():
            raise MalformedIdentifierError(f"Invalid course ID: {course_id!r}")
    if not course_ids:
        raise EmptyCourseListError("At least one course must be proposed")
    return list(dict.fromkeys(course_ids))
