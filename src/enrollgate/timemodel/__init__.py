"""Time Model - Weekly recurring time slots with midnight-crossing support."""

from enrollgate.timemodel.exceptions import (
    InvalidClockError,
    InvalidTimeSlotError,
    TimeModelError,
)
from enrollgate.timemodel.models import (
    MAX_SLOT_MINUTES,
    MIN_SLOT_MINUTES,
    MINUTES_PER_DAY,
    DayOfWeek,
    Portion,
    TimeSlot,
    crosses_into,
    duration,
    format_clock,
    overlap_day,
    overlap_windows,
    overlaps,
    parse_clock,
)

__all__ = [
    "MAX_SLOT_MINUTES",
    "MINUTES_PER_DAY",
    "MIN_SLOT_MINUTES",
    "DayOfWeek",
    "InvalidClockError",
    "InvalidTimeSlotError",
    "Portion",
    "TimeModelError",
    "TimeSlot",
    "crosses_into",
    "duration",
    "format_clock",
    "overlap_day",
    "overlap_windows",
    "overlaps",
    "parse_clock",
]
