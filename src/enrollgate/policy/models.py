"""Per-institution enrollment policy."""

from __future__ import annotations

from dataclasses import dataclass

from enrollgate.policy.exceptions import InvalidPolicyError

# Bounds are inclusive.
CREDIT_HOUR_CAP_BOUNDS = (1, 30)
DAILY_HOUR_CAP_BOUNDS = (0, 16)
BUFFER_MINUTES_BOUNDS = (0, 60)
COURSE_COUNT_CAP_BOUNDS = (1, 10)


@dataclass(frozen=True)
class Policy:
    """Enrollment limits governing validation for one institution.

    Attributes:
        credit_hour_cap: Maximum active + proposed credit hours.
        daily_hour_cap: Maximum scheduled hours on any single day.
        buffer_minutes: Minimum gap between consecutive classes on a day.
        course_count_cap: Maximum active + proposed courses.
        allow_overnight_classes: Whether slots crossing midnight are permitted.
        allow_weekend_classes: Whether Saturday/Sunday slots are permitted.
    """

    credit_hour_cap: int = 18
    daily_hour_cap: int = 8
    buffer_minutes: int = 15
    course_count_cap: int = 6
    allow_overnight_classes: bool = False
    allow_weekend_classes: bool = True

    def __post_init__(self) -> None:
        _check_bounds("credit_hour_cap", self.credit_hour_cap, CREDIT_HOUR_CAP_BOUNDS)
        _check_bounds("daily_hour_cap", self.daily_hour_cap, DAILY_HOUR_CAP_BOUNDS)
        _check_bounds("buffer_minutes", self.buffer_minutes, BUFFER_MINUTES_BOUNDS)
        _check_bounds("course_count_cap", self.course_count_cap, COURSE_COUNT_CAP_BOUNDS)


def _check_bounds(name: str, value: int, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPolicyError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise InvalidPolicyError(f"{name}={value} is outside {low}-{high}")


DEFAULT_POLICY = Policy()
