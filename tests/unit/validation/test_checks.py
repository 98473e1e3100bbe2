"""Unit tests for prerequisite, capacity and policy-limit checks."""

import pytest

from enrollgate.policy import Policy
from enrollgate.repository import CourseRecord, PrerequisiteEdge
from enrollgate.timemodel import DayOfWeek, TimeSlot
from enrollgate.validation import (
    CapacityExceeded,
    CourseCountLimitExceeded,
    CreditHourLimitExceeded,
    OvernightNotAllowed,
    PrerequisiteMissing,
    WeekendNotAllowed,
    check_capacity,
    check_course_count,
    check_credit_hours,
    check_overnight,
    check_prerequisites,
    check_weekend,
)


def course(course_id: str, credits: int = 3, capacity: int | None = 30) -> CourseRecord:
    return CourseRecord(id=course_id, institution_id="inst", credits=credits, capacity=capacity)


@pytest.mark.unit
class TestPrerequisites:
    """Tests for check_prerequisites."""

    def test_satisfied(self) -> None:
        edges = [PrerequisiteEdge("CS201", "CS101")]
        assert check_prerequisites(["CS201"], edges, {"CS101"}) == []

    def test_single_missing(self) -> None:
        """One mandatory prerequisite not completed yields one violation."""
        edges = [PrerequisiteEdge("CS201", "CS101")]

        violations = check_prerequisites(["CS201"], edges, set())

        assert violations == [PrerequisiteMissing("CS201", ("CS101",))]

    def test_missing_ids_in_edge_order(self) -> None:
        edges = [
            PrerequisiteEdge("CS301", "MATH200"),
            PrerequisiteEdge("CS301", "CS201"),
            PrerequisiteEdge("CS301", "CS101"),
        ]

        violations = check_prerequisites(["CS301"], edges, {"CS201"})

        assert violations == [PrerequisiteMissing("CS301", ("MATH200", "CS101"))]

    def test_optional_edges_ignored(self) -> None:
        edges = [PrerequisiteEdge("CS201", "CS101", is_mandatory=False)]
        assert check_prerequisites(["CS201"], edges, set()) == []

    def test_minimum_grade_not_compared(self) -> None:
        """Completion with any grade satisfies the edge."""
        edges = [PrerequisiteEdge("CS201", "CS101", minimum_grade="A")]
        assert check_prerequisites(["CS201"], edges, {"CS101"}) == []

    def test_one_violation_per_course_in_request_order(self) -> None:
        edges = [PrerequisiteEdge("B", "X"), PrerequisiteEdge("A", "Y")]

        violations = check_prerequisites(["A", "B"], edges, set())

        assert [v.course_id for v in violations] == ["A", "B"]


@pytest.mark.unit
class TestCapacity:
    """Tests for check_capacity."""

    def test_free_seat(self) -> None:
        assert check_capacity([course("A", capacity=30)], {"A": 29}) == []

    def test_full(self) -> None:
        violations = check_capacity([course("A", capacity=30)], {"A": 30})
        assert violations == [CapacityExceeded("A", 30, 30)]

    def test_unlimited_capacity(self) -> None:
        assert check_capacity([course("A", capacity=None)], {"A": 500}) == []

    def test_missing_count_means_empty(self) -> None:
        assert check_capacity([course("A", capacity=1)], {}) == []


@pytest.mark.unit
class TestCreditHours:
    """Tests for check_credit_hours."""

    def test_at_cap(self) -> None:
        policy = Policy(credit_hour_cap=9)
        active = [course("A", credits=3), course("B", credits=3)]
        assert check_credit_hours(active, [course("C", credits=3)], policy) == []

    def test_over_cap(self) -> None:
        policy = Policy(credit_hour_cap=9)
        active = [course("A", credits=4), course("B", credits=3)]

        violations = check_credit_hours(active, [course("C", credits=3)], policy)

        assert violations == [CreditHourLimitExceeded(total=10, cap=9)]


@pytest.mark.unit
class TestCourseCount:
    """Tests for check_course_count."""

    def test_at_cap(self) -> None:
        assert check_course_count(5, 1, Policy(course_count_cap=6)) == []

    def test_over_cap(self) -> None:
        violations = check_course_count(5, 2, Policy(course_count_cap=6))
        assert violations == [CourseCountLimitExceeded(total=7, cap=6)]


@pytest.mark.unit
class TestOvernightPermission:
    """Tests for check_overnight."""

    def test_disallowed(self) -> None:
        slots = [
            TimeSlot.from_clock("A", DayOfWeek.MONDAY, "09:00", "10:00"),
            TimeSlot.from_clock("B", DayOfWeek.MONDAY, "22:00", "01:00"),
            TimeSlot.from_clock("B", DayOfWeek.WEDNESDAY, "22:00", "01:00"),
        ]

        violations = check_overnight(["A", "B"], slots, Policy())

        assert violations == [OvernightNotAllowed("B")]

    def test_allowed(self) -> None:
        slots = [TimeSlot.from_clock("B", DayOfWeek.MONDAY, "22:00", "01:00")]
        assert check_overnight(["B"], slots, Policy(allow_overnight_classes=True)) == []


@pytest.mark.unit
class TestWeekendPermission:
    """Tests for check_weekend."""

    def test_allowed_by_default(self) -> None:
        slots = [TimeSlot.from_clock("A", DayOfWeek.SATURDAY, "09:00", "10:00")]
        assert check_weekend(["A"], slots, Policy()) == []

    def test_disallowed(self) -> None:
        policy = Policy(allow_weekend_classes=False)
        slots = [
            TimeSlot.from_clock("A", DayOfWeek.SATURDAY, "09:00", "10:00"),
            TimeSlot.from_clock("B", DayOfWeek.FRIDAY, "09:00", "10:00"),
        ]

        assert check_weekend(["A", "B"], slots, policy) == [WeekendNotAllowed("A")]

    def test_friday_overnight_reaches_saturday(self) -> None:
        policy = Policy(allow_weekend_classes=False, allow_overnight_classes=True)
        slots = [TimeSlot.from_clock("A", DayOfWeek.FRIDAY, "22:00", "01:00")]

        assert check_weekend(["A"], slots, policy) == [WeekendNotAllowed("A")]
