"""Seat availability checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from enrollgate.validation.violations import CapacityExceeded

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from enrollgate.repository import CourseRecord


def check_capacity(
    courses: Iterable[CourseRecord], active_counts: Mapping[str, int]
) -> list[CapacityExceeded]:
    """Report proposed courses that have no free seat.

    Courses without a capacity are unlimited. Only active enrollments
    occupy a seat, so `active_counts` must come from the same transaction
    that will perform the insert.
    """
    violations: list[CapacityExceeded] = []
    for course in courses:
        if course.capacity is None:
            continue
        current = active_counts.get(course.id, 0)
        if current >= course.capacity:
            violations.append(
                CapacityExceeded(course_id=course.id, capacity=course.capacity, current=current)
            )
    return violations
