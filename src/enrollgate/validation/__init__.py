"""Validation - Independent checkers producing violation lists."""

from enrollgate.validation.capacity import check_capacity
from enrollgate.validation.conflicts import ConflictDetector
from enrollgate.validation.limits import (
    check_course_count,
    check_credit_hours,
    check_overnight,
    check_weekend,
)
from enrollgate.validation.prerequisites import check_prerequisites
from enrollgate.validation.violations import (
    BufferTimeViolation,
    CapacityExceeded,
    CollegeMismatch,
    CourseCountLimitExceeded,
    CreditHourLimitExceeded,
    DailyHourLimitExceeded,
    DuplicateEnrollment,
    NotFound,
    OvernightNotAllowed,
    PrerequisiteMissing,
    TimetableConflict,
    Violation,
    ViolationKind,
    WeekendNotAllowed,
)

__all__ = [
    "BufferTimeViolation",
    "CapacityExceeded",
    "CollegeMismatch",
    "ConflictDetector",
    "CourseCountLimitExceeded",
    "CreditHourLimitExceeded",
    "DailyHourLimitExceeded",
    "DuplicateEnrollment",
    "NotFound",
    "OvernightNotAllowed",
    "PrerequisiteMissing",
    "TimetableConflict",
    "Violation",
    "ViolationKind",
    "WeekendNotAllowed",
    "check_capacity",
    "check_course_count",
    "check_credit_hours",
    "check_overnight",
    "check_prerequisites",
    "check_weekend",
]
