"""Load and permission limits taken from the institution policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from enrollgate.validation.violations import (
    CourseCountLimitExceeded,
    CreditHourLimitExceeded,
    OvernightNotAllowed,
    WeekendNotAllowed,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from enrollgate.policy import Policy
    from enrollgate.repository import CourseRecord
    from enrollgate.timemodel import TimeSlot


def check_credit_hours(
    active: Sequence[CourseRecord], proposed: Sequence[CourseRecord], policy: Policy
) -> list[CreditHourLimitExceeded]:
    """Active plus proposed credits must not exceed the credit-hour cap."""
    total = sum(course.credits for course in active) + sum(course.credits for course in proposed)
    if total > policy.credit_hour_cap:
        return [CreditHourLimitExceeded(total=total, cap=policy.credit_hour_cap)]
    return []


def check_course_count(
    active_count: int, proposed_count: int, policy: Policy
) -> list[CourseCountLimitExceeded]:
    total = active_count + proposed_count
    if total > policy.course_count_cap:
        return [CourseCountLimitExceeded(total=total, cap=policy.course_count_cap)]
    return []


def _courses_with(
    course_ids: Sequence[str], slots: Sequence[TimeSlot], predicate
) -> list[str]:
    flagged = {slot.course_id for slot in slots if predicate(slot)}
    return [course_id for course_id in course_ids if course_id in flagged]


def check_overnight(
    course_ids: Sequence[str], slots: Sequence[TimeSlot], policy: Policy
) -> list[OvernightNotAllowed]:
    """Proposed courses with an overnight slot, when the policy forbids them."""
    if policy.allow_overnight_classes:
        return []
    return [
        OvernightNotAllowed(course_id=course_id)
        for course_id in _courses_with(course_ids, slots, lambda slot: slot.overnight)
    ]


def check_weekend(
    course_ids: Sequence[str], slots: Sequence[TimeSlot], policy: Policy
) -> list[WeekendNotAllowed]:
    """Proposed courses meeting on Saturday or Sunday, when the policy forbids it.

    A slot counts as a weekend meeting when it starts on a weekend day or
    its overnight portion runs into one.
    """
    if policy.allow_weekend_classes:
        return []
    return [
        WeekendNotAllowed(course_id=course_id)
        for course_id in _courses_with(
            course_ids,
            slots,
            lambda slot: any(portion.day.is_weekend for portion in slot.portions()),
        )
    ]
