"""Unit tests for violation variants."""

import pytest

from enrollgate.timemodel import DayOfWeek
from enrollgate.validation import (
    BufferTimeViolation,
    CapacityExceeded,
    DailyHourLimitExceeded,
    NotFound,
    PrerequisiteMissing,
    TimetableConflict,
    ViolationKind,
)


@pytest.mark.unit
class TestViolationKinds:
    """Tests for the kind tag of each variant."""

    def test_kind_is_class_level(self) -> None:
        assert NotFound("student", "s1").kind == ViolationKind.NOT_FOUND
        assert CapacityExceeded("c1", 10, 10).kind == ViolationKind.CAPACITY_EXCEEDED

    def test_kind_values_are_snake_case(self) -> None:
        assert ViolationKind.TIMETABLE_CONFLICT.value == "timetable_conflict"
        assert len(ViolationKind) == 12

    def test_violations_are_values(self) -> None:
        """Equal fields mean equal violations."""
        assert NotFound("course", "c1") == NotFound("course", "c1")
        assert NotFound("course", "c1") != NotFound("student", "c1")


@pytest.mark.unit
class TestViolationMessages:
    """Tests for human-readable messages."""

    def test_not_found(self) -> None:
        assert NotFound("student", "s1").message == "Student 's1' not found"

    def test_prerequisite_missing(self) -> None:
        message = PrerequisiteMissing("CS201", ("CS101", "MATH100")).message
        assert "CS101, MATH100" in message

    def test_timetable_conflict_names_day(self) -> None:
        message = TimetableConflict("A", "B", DayOfWeek.SATURDAY).message
        assert "SATURDAY" in message

    def test_daily_hours(self) -> None:
        message = DailyHourLimitExceeded(DayOfWeek.MONDAY, 9.0, 8).message
        assert "9.0 hours" in message
        assert "maximum: 8" in message


@pytest.mark.unit
class TestViolationDetails:
    """Tests for Violation.details."""

    def test_details_are_field_values(self) -> None:
        details = BufferTimeViolation("A", "B", DayOfWeek.MONDAY, 14).details()
        assert details == {
            "course_a": "A",
            "course_b": "B",
            "day": DayOfWeek.MONDAY,
            "gap_minutes": 14,
        }

    def test_tuples_become_lists(self) -> None:
        details = PrerequisiteMissing("CS201", ("CS101",)).details()
        assert details["missing_ids"] == ["CS101"]
