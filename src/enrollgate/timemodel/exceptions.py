"""Custom exceptions for the Time Model."""


class TimeModelError(Exception):
    """Base exception for Time Model errors."""


class InvalidClockError(TimeModelError):
    """Clock string or minute value is outside 00:00-23:59."""


class InvalidTimeSlotError(TimeModelError):
    """Time slot violates a start/end, overnight or duration invariant."""
