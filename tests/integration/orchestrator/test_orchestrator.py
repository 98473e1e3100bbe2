"""End-to-end tests for ValidationOrchestrator on a SQLite file."""

import tempfile
import threading
from collections.abc import Generator
from pathlib import Path

import pytest

from enrollgate.orchestrator import EnrollmentOutcome, OrchestratorState, ValidationOrchestrator
from enrollgate.policy import Policy
from enrollgate.repository import EnrollmentStatus
from enrollgate.state_store import CatalogStore
from enrollgate.validation import (
    BufferTimeViolation,
    CapacityExceeded,
    CreditHourLimitExceeded,
    DuplicateEnrollment,
    OvernightNotAllowed,
    PrerequisiteMissing,
    TimetableConflict,
    ViolationKind,
)


@pytest.fixture
def store() -> Generator[CatalogStore, None, None]:
    with tempfile.TemporaryDirectory() as tmpdir:
        catalog = CatalogStore(str(Path(tmpdir) / "engine.db"))
        catalog.create_institution("North", id="north")
        catalog.create_student("north", "Ada", id="ada")
        catalog.create_student("north", "Grace", id="grace")
        yield catalog
        catalog.close()


@pytest.fixture
def orchestrator(store: CatalogStore) -> ValidationOrchestrator:
    return ValidationOrchestrator(store.repository)


def _course(
    store: CatalogStore,
    course_id: str,
    day: str,
    start: str,
    end: str,
    credits: int = 3,
    capacity: int | None = None,
) -> str:
    store.create_course("north", course_id.upper(), course_id, credits, capacity, id=course_id)
    store.add_time_slot(course_id, day, start, end)
    return course_id


@pytest.mark.integration
class TestEnrollFlow:
    """Tests for the validate-then-commit flow."""

    def test_admissible_request_commits(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00")
        _course(store, "art", "MONDAY", "10:30", "11:30")

        outcome = orchestrator.enroll("ada", ["math", "art"])

        assert outcome.state == OrchestratorState.COMMITTED
        assert [e.course_id for e in outcome.enrollments] == ["math", "art"]
        active = store.list_enrollments("ada", status=EnrollmentStatus.ACTIVE)
        assert {e.course_id for e in active} == {"math", "art"}

    def test_rejected_request_writes_nothing(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00")
        _course(store, "art", "MONDAY", "09:30", "10:30")

        outcome = orchestrator.enroll("ada", ["math", "art"])

        assert outcome.state == OrchestratorState.REJECTED
        assert outcome.violations == [
            TimetableConflict(course_a="math", course_b="art", day="MONDAY")
        ]
        assert store.list_enrollments("ada") == []

    def test_conflict_with_existing_enrollment(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "TUESDAY", "09:00", "10:00")
        _course(store, "art", "TUESDAY", "10:05", "11:00")
        assert orchestrator.enroll("ada", ["math"]).committed

        violations = orchestrator.validate("ada", ["art"])

        assert violations == [
            BufferTimeViolation(course_a="math", course_b="art", day="TUESDAY", gap_minutes=5)
        ]

    def test_second_enroll_is_duplicate(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00")
        orchestrator.enroll("ada", ["math"])

        outcome = orchestrator.enroll("ada", ["math"])

        assert outcome.violations == [DuplicateEnrollment(course_id="math")]

    def test_validate_is_idempotent_and_read_only(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00", capacity=1)

        first = orchestrator.validate("ada", ["math"])
        second = orchestrator.validate("ada", ["math"])

        assert first == second == []
        assert store.list_enrollments("ada") == []

    def test_full_course_rejected_before_insert(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00", capacity=1)
        orchestrator.enroll("grace", ["math"])

        outcome = orchestrator.enroll("ada", ["math"])

        assert outcome.state == OrchestratorState.REJECTED
        assert outcome.violations == [CapacityExceeded(course_id="math", capacity=1, current=1)]

    def test_one_full_course_blocks_the_whole_request(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00")
        _course(store, "art", "TUESDAY", "09:00", "10:00", capacity=1)
        assert orchestrator.enroll("grace", ["art"]).committed

        outcome = orchestrator.enroll("ada", ["math", "art"])

        assert outcome.state == OrchestratorState.REJECTED
        assert outcome.enrollments == []
        assert outcome.violations == [CapacityExceeded(course_id="art", capacity=1, current=1)]
        assert store.list_enrollments("ada") == []


@pytest.mark.integration
class TestLifecycle:
    """Tests that depend on enrollments leaving the active state."""

    def test_prerequisite_satisfied_after_completion(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "intro", "MONDAY", "09:00", "10:00")
        _course(store, "advanced", "WEDNESDAY", "09:00", "10:00")
        store.add_prerequisite("advanced", "intro")

        assert orchestrator.validate("ada", ["advanced"]) == [
            PrerequisiteMissing(course_id="advanced", missing_ids=("intro",))
        ]

        [enrollment] = orchestrator.enroll("ada", ["intro"]).enrollments
        store.complete_enrollment(enrollment.id, grade="B")

        assert orchestrator.validate("ada", ["advanced"]) == []

    def test_missing_prerequisites_listed_in_order_added(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "capstone", "FRIDAY", "09:00", "10:00")
        required = [f"req{i}" for i in range(8)]
        for course_id in required:
            store.create_course("north", course_id.upper(), course_id, 1, id=course_id)
            store.add_prerequisite("capstone", course_id)

        assert orchestrator.validate("ada", ["capstone"]) == [
            PrerequisiteMissing(course_id="capstone", missing_ids=tuple(required))
        ]

    def test_active_prerequisite_does_not_count(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "intro", "MONDAY", "09:00", "10:00")
        _course(store, "advanced", "WEDNESDAY", "09:00", "10:00")
        store.add_prerequisite("advanced", "intro")
        orchestrator.enroll("ada", ["intro"])

        violations = orchestrator.validate("ada", ["advanced"])

        assert [v.kind for v in violations] == [ViolationKind.PREREQUISITE_MISSING]

    def test_retake_after_withdrawal(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00", capacity=1)
        [enrollment] = orchestrator.enroll("ada", ["math"]).enrollments
        store.withdraw_enrollment(enrollment.id)

        outcome = orchestrator.enroll("ada", ["math"])

        assert outcome.committed
        assert len(store.list_enrollments("ada")) == 2

    def test_withdrawal_frees_seat_for_others(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00", capacity=1)
        [enrollment] = orchestrator.enroll("ada", ["math"]).enrollments
        store.withdraw_enrollment(enrollment.id)

        assert orchestrator.enroll("grace", ["math"]).committed


@pytest.mark.integration
class TestPolicies:
    """Tests for institution policy resolution end to end."""

    def test_default_policy_rejects_overnight(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        store.create_course("north", "ASTRO", "Astronomy", 3, id="astro")
        store.add_time_slot("astro", "THURSDAY", "22:00", "01:00")

        assert orchestrator.validate("ada", ["astro"]) == [OvernightNotAllowed(course_id="astro")]

    def test_explicit_policy_allows_overnight(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        store.set_policy("north", Policy(allow_overnight_classes=True))
        store.create_course("north", "ASTRO", "Astronomy", 3, id="astro")
        store.add_time_slot("astro", "THURSDAY", "22:00", "01:00")

        assert orchestrator.validate("ada", ["astro"]) == []

    def test_explicit_credit_cap(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        store.set_policy("north", Policy(credit_hour_cap=6))
        _course(store, "a", "MONDAY", "08:00", "09:00", credits=4)
        _course(store, "b", "TUESDAY", "08:00", "09:00", credits=4)
        orchestrator.enroll("ada", ["a"])

        assert orchestrator.validate("ada", ["b"]) == [CreditHourLimitExceeded(total=8, cap=6)]


@pytest.mark.integration
class TestConcurrency:
    """Tests for competing writers."""

    def test_last_seat_goes_to_exactly_one_student(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00", capacity=1)
        barrier = threading.Barrier(2)
        outcomes: dict[str, EnrollmentOutcome] = {}
        errors: list[BaseException] = []

        def enroll(student_id: str) -> None:
            barrier.wait()
            try:
                outcomes[student_id] = orchestrator.enroll(student_id, ["math"])
            except Exception as e:  # noqa: BLE001 - surfaced by the assertion below
                errors.append(e)

        threads = [threading.Thread(target=enroll, args=(sid,)) for sid in ("ada", "grace")]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert errors == []
        committed = [o for o in outcomes.values() if o.committed]
        rejected = [o for o in outcomes.values() if not o.committed]
        assert len(committed) == 1
        assert len(rejected) == 1
        assert [v.kind for v in rejected[0].violations] == [ViolationKind.CAPACITY_EXCEEDED]

        with store.repository.transaction() as tx:
            assert tx.count_active_enrollments(["math"]) == {"math": 1}

    def test_many_students_never_oversubscribe(
        self, store: CatalogStore, orchestrator: ValidationOrchestrator
    ) -> None:
        _course(store, "math", "MONDAY", "09:00", "10:00", capacity=3)
        student_ids = [f"s{i}" for i in range(8)]
        for student_id in student_ids:
            store.create_student("north", student_id, id=student_id)

        results: list[bool] = []
        lock = threading.Lock()

        def enroll(student_id: str) -> None:
            outcome = orchestrator.enroll(student_id, ["math"])
            with lock:
                results.append(outcome.committed)

        threads = [threading.Thread(target=enroll, args=(sid,)) for sid in student_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert results.count(True) == 3
        assert results.count(False) == 5
