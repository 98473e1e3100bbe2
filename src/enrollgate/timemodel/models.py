"""Weekly recurring time slots.

Times are minutes since midnight (0-1439). An overnight slot starts on its
own day and ends on the next calendar day, so it is decomposed into an
evening portion (day, start -> 1440) and a morning portion
(next day, 0 -> end). Every overlap and per-day computation works on
portions, which keeps midnight handling in this module only.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from enrollgate.timemodel.exceptions import InvalidClockError, InvalidTimeSlotError

MINUTES_PER_DAY = 24 * 60
MIN_SLOT_MINUTES = 30
MAX_SLOT_MINUTES = 240

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


class DayOfWeek(StrEnum):
    """Day of the week, in calendar order starting Monday."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @property
    def position(self) -> int:
        """Position in the week, Monday = 0."""
        return _DAY_ORDER.index(self)

    @property
    def is_weekend(self) -> bool:
        return self in (DayOfWeek.SATURDAY, DayOfWeek.SUNDAY)

    def next(self) -> DayOfWeek:
        """The following day in the seven-day cycle (Sunday wraps to Monday)."""
        return _DAY_ORDER[(self.position + 1) % len(_DAY_ORDER)]


_DAY_ORDER: list[DayOfWeek] = list(DayOfWeek)


def parse_clock(value: str) -> int:
    """Convert an "HH:MM" (or "HH:MM:SS") string to minutes since midnight.

    Raises:
        InvalidClockError: If the string is malformed or out of range.
    """
    match = _CLOCK_PATTERN.match(value.strip())
    if match is None:
        raise InvalidClockError(f"Invalid clock time '{value}', expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidClockError(f"Clock time '{value}' is out of range")
    return hours * 60 + minutes


def format_clock(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise InvalidClockError(f"Minute value {minutes} is out of range")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass(frozen=True)
class Portion:
    """The part of a slot that falls on one calendar day.

    Attributes:
        day: Calendar day of this portion.
        start: Start minute, inclusive.
        end: End minute, exclusive (1440 for an evening portion).
    """

    day: DayOfWeek
    start: int
    end: int

    def overlaps(self, other: Portion) -> bool:
        """Half-open overlap on the same calendar day."""
        return self.day == other.day and self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class TimeSlot:
    """A weekly recurring meeting of a course.

    Attributes:
        course_id: Course this slot belongs to.
        day: Day the meeting starts on.
        start: Start minute (0-1439).
        end: End minute (0-1439); earlier than start when overnight.
        overnight: Whether the meeting crosses midnight.
        id: Storage identifier, if persisted.
    """

    course_id: str
    day: DayOfWeek
    start: int
    end: int
    overnight: bool = False
    id: str | None = None

    def __post_init__(self) -> None:
        for value in (self.start, self.end):
            if not 0 <= value < MINUTES_PER_DAY:
                raise InvalidTimeSlotError(f"Minute value {value} is outside 00:00-23:59")
        if self.start == self.end:
            raise InvalidTimeSlotError("Start and end time must differ")
        if self.overnight and self.start < self.end:
            raise InvalidTimeSlotError("Overnight slot must start later than it ends")
        if not self.overnight and self.end < self.start:
            raise InvalidTimeSlotError("Regular slot must end after it starts")
        minutes = duration(self)
        if not MIN_SLOT_MINUTES <= minutes <= MAX_SLOT_MINUTES:
            raise InvalidTimeSlotError(
                f"Slot lasts {minutes} minutes, allowed "
                f"{MIN_SLOT_MINUTES}-{MAX_SLOT_MINUTES}"
            )

    @classmethod
    def from_clock(
        cls,
        course_id: str,
        day: DayOfWeek | str,
        start: str,
        end: str,
        overnight: bool | None = None,
        id: str | None = None,
    ) -> TimeSlot:
        """Build a slot from "HH:MM" strings.

        When `overnight` is None it is inferred from end < start.
        """
        start_minutes = parse_clock(start)
        end_minutes = parse_clock(end)
        if overnight is None:
            overnight = end_minutes < start_minutes
        return cls(
            course_id=course_id,
            day=DayOfWeek(day),
            start=start_minutes,
            end=end_minutes,
            overnight=overnight,
            id=id,
        )

    def portions(self) -> list[Portion]:
        """Evening/morning decomposition; a regular slot is a single portion."""
        if not self.overnight:
            return [Portion(self.day, self.start, self.end)]
        return [
            Portion(self.day, self.start, MINUTES_PER_DAY),
            Portion(self.day.next(), 0, self.end),
        ]

    def __str__(self) -> str:
        return f"{self.day} {format_clock(self.start)}-{format_clock(self.end)}"


def duration(slot: TimeSlot) -> int:
    """Length of a slot in minutes, accounting for midnight crossing."""
    if slot.overnight:
        return (MINUTES_PER_DAY - slot.start) + slot.end
    return slot.end - slot.start


def crosses_into(slot: TimeSlot) -> DayOfWeek | None:
    """The day an overnight slot's morning portion falls on, else None."""
    if not slot.overnight:
        return None
    return slot.day.next()


def overlap_windows(a: TimeSlot, b: TimeSlot) -> list[Portion]:
    """Shared stretches of two slots, one per overlapping pair of portions.

    Two overnight slots starting the same evening share time on two
    calendar days, so they yield two windows.
    """
    windows = []
    for portion_a in a.portions():
        for portion_b in b.portions():
            if portion_a.overlaps(portion_b):
                windows.append(
                    Portion(
                        portion_a.day,
                        max(portion_a.start, portion_b.start),
                        min(portion_a.end, portion_b.end),
                    )
                )
    return windows


def overlap_day(a: TimeSlot, b: TimeSlot) -> DayOfWeek | None:
    """First calendar day on which two slots overlap, or None.

    Covers same-day overlap (including evening portions of overnight slots)
    and cross-day overlap where a morning portion spills into the other
    slot's day.
    """
    windows = overlap_windows(a, b)
    return windows[0].day if windows else None


def overlaps(a: TimeSlot, b: TimeSlot) -> bool:
    """Whether two slots share any minute of the week."""
    return bool(overlap_windows(a, b))
