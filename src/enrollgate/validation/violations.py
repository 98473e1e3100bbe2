"""Violation variants reported by the validation engine.

Violations are data, not exceptions: every checker returns a list of them
and the orchestrator concatenates the lists in a fixed order.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import StrEnum
from typing import Any, ClassVar

from enrollgate.timemodel import DayOfWeek  # noqa: TC001 - dataclass field type


class ViolationKind(StrEnum):
    """Violation kind enum."""

    NOT_FOUND = "not_found"
    COLLEGE_MISMATCH = "college_mismatch"
    DUPLICATE_ENROLLMENT = "duplicate_enrollment"
    PREREQUISITE_MISSING = "prerequisite_missing"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    CREDIT_HOUR_LIMIT_EXCEEDED = "credit_hour_limit_exceeded"
    COURSE_COUNT_LIMIT_EXCEEDED = "course_count_limit_exceeded"
    OVERNIGHT_NOT_ALLOWED = "overnight_not_allowed"
    WEEKEND_NOT_ALLOWED = "weekend_not_allowed"
    TIMETABLE_CONFLICT = "timetable_conflict"
    BUFFER_TIME_VIOLATION = "buffer_time_violation"
    DAILY_HOUR_LIMIT_EXCEEDED = "daily_hour_limit_exceeded"


@dataclass(frozen=True)
class Violation:
    """Base class for all violations."""

    kind: ClassVar[ViolationKind]

    @property
    def message(self) -> str:
        raise NotImplementedError

    def details(self) -> dict[str, Any]:
        """Field values as plain JSON-friendly data."""
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = list(value) if isinstance(value, tuple) else value
        return result


@dataclass(frozen=True)
class NotFound(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.NOT_FOUND

    entity: str
    id: str

    @property
    def message(self) -> str:
        return f"{self.entity.capitalize()} '{self.id}' not found"


@dataclass(frozen=True)
class CollegeMismatch(Violation):
    """Course belongs to a different institution than the student."""

    kind: ClassVar[ViolationKind] = ViolationKind.COLLEGE_MISMATCH

    course_id: str

    @property
    def message(self) -> str:
        return f"Course '{self.course_id}' belongs to a different institution than the student"


@dataclass(frozen=True)
class DuplicateEnrollment(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.DUPLICATE_ENROLLMENT

    course_id: str

    @property
    def message(self) -> str:
        return f"Student is already enrolled in course '{self.course_id}'"


@dataclass(frozen=True)
class PrerequisiteMissing(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.PREREQUISITE_MISSING

    course_id: str
    missing_ids: tuple[str, ...]

    @property
    def message(self) -> str:
        missing = ", ".join(self.missing_ids)
        return f"Course '{self.course_id}' requires completion of: {missing}"


@dataclass(frozen=True)
class CapacityExceeded(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.CAPACITY_EXCEEDED

    course_id: str
    capacity: int
    current: int

    @property
    def message(self) -> str:
        return (
            f"Course '{self.course_id}' is at full capacity "
            f"({self.current}/{self.capacity} students)"
        )


@dataclass(frozen=True)
class CreditHourLimitExceeded(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.CREDIT_HOUR_LIMIT_EXCEEDED

    total: int
    cap: int

    @property
    def message(self) -> str:
        return f"Credit hours limit exceeded: {self.total} total (maximum: {self.cap})"


@dataclass(frozen=True)
class CourseCountLimitExceeded(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.COURSE_COUNT_LIMIT_EXCEEDED

    total: int
    cap: int

    @property
    def message(self) -> str:
        return f"Maximum courses exceeded: {self.total} total (maximum: {self.cap})"


@dataclass(frozen=True)
class OvernightNotAllowed(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.OVERNIGHT_NOT_ALLOWED

    course_id: str

    @property
    def message(self) -> str:
        return f"Course '{self.course_id}' has overnight classes, which are not allowed"


@dataclass(frozen=True)
class WeekendNotAllowed(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.WEEKEND_NOT_ALLOWED

    course_id: str

    @property
    def message(self) -> str:
        return f"Course '{self.course_id}' meets on a weekend, which is not allowed"


@dataclass(frozen=True)
class TimetableConflict(Violation):
    """Two courses meet at the same time on `day`."""

    kind: ClassVar[ViolationKind] = ViolationKind.TIMETABLE_CONFLICT

    course_a: str
    course_b: str
    day: DayOfWeek

    @property
    def message(self) -> str:
        return f"Course '{self.course_a}' conflicts with course '{self.course_b}' on {self.day}"


@dataclass(frozen=True)
class BufferTimeViolation(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.BUFFER_TIME_VIOLATION

    course_a: str
    course_b: str
    day: DayOfWeek
    gap_minutes: int

    @property
    def message(self) -> str:
        return (
            f"Insufficient buffer on {self.day}: only {self.gap_minutes} minutes between "
            f"course '{self.course_a}' and course '{self.course_b}'"
        )


@dataclass(frozen=True)
class DailyHourLimitExceeded(Violation):
    kind: ClassVar[ViolationKind] = ViolationKind.DAILY_HOUR_LIMIT_EXCEEDED

    day: DayOfWeek
    total: float
    cap: int

    @property
    def message(self) -> str:
        return f"Daily hours exceeded on {self.day}: {self.total:.1f} hours (maximum: {self.cap})"
