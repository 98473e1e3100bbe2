"""ConflictDetector - Timetable, buffer-time and daily-load analysis."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING

from enrollgate.timemodel import DayOfWeek, TimeSlot, duration, overlap_windows
from enrollgate.validation.violations import (
    BufferTimeViolation,
    DailyHourLimitExceeded,
    TimetableConflict,
    Violation,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from enrollgate.policy import Policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    """A slot tagged with whether it comes from the proposed course set."""

    slot: TimeSlot
    proposed: bool

    @property
    def course_id(self) -> str:
        return self.slot.course_id


def _sort_key(entry: _Entry) -> tuple[int, int, int, str]:
    slot = entry.slot
    return (slot.day.position, slot.start, slot.end, slot.course_id)


def _reportable(first: _Entry, second: _Entry) -> bool:
    """Pairs of already-admitted slots, or of one course's own slots, are skipped."""
    if first.course_id == second.course_id:
        return False
    return first.proposed or second.proposed


class ConflictDetector:
    """Analyzes a student's active slots together with proposed slots.

    Checks, in output order:
    - Same-day and cross-day (overnight spill-over) overlaps
    - Minimum buffer between consecutive regular classes on a day
    - Total scheduled hours per day
    """

    def detect(
        self,
        existing: Sequence[TimeSlot],
        proposed: Sequence[TimeSlot],
        policy: Policy,
    ) -> list[Violation]:
        """Run every schedule check.

        Args:
            existing: Slots of the student's active enrollments.
            proposed: Slots of the courses being requested.
            policy: Policy in force for the student's institution.

        Returns:
            Timetable conflicts, then buffer violations, then daily-hour
            violations.
        """
        entries = sorted(
            [_Entry(slot, proposed=False) for slot in existing]
            + [_Entry(slot, proposed=True) for slot in proposed],
            key=_sort_key,
        )

        violations: list[Violation] = []
        violations.extend(self.find_conflicts(entries))
        violations.extend(self.check_buffers(entries, policy.buffer_minutes))
        violations.extend(self.check_daily_hours(entries, policy.daily_hour_cap))

        if violations:
            logger.debug("Schedule analysis found %d violation(s)", len(violations))
        return violations

    def find_conflicts(self, entries: Sequence[_Entry]) -> list[TimetableConflict]:
        """Overlapping slots, one violation per course pair and calendar day."""
        hits: dict[tuple[frozenset[str], DayOfWeek], tuple[int, TimetableConflict]] = {}

        for i, first in enumerate(entries):
            for second in entries[i + 1 :]:
                if not _reportable(first, second):
                    continue
                for window in overlap_windows(first.slot, second.slot):
                    key = (frozenset((first.course_id, second.course_id)), window.day)
                    if key in hits:
                        continue
                    hits[key] = (
                        window.start,
                        TimetableConflict(
                            course_a=first.course_id,
                            course_b=second.course_id,
                            day=window.day,
                        ),
                    )

        ordered = sorted(hits.values(), key=lambda hit: (hit[1].day.position, hit[0]))
        return [conflict for _, conflict in ordered]

    def check_buffers(
        self, entries: Iterable[_Entry], buffer_minutes: int
    ) -> list[BufferTimeViolation]:
        """Gaps shorter than `buffer_minutes` between consecutive regular classes.

        Each class is compared with the latest-ending class before it on the
        same day. Overlaps (negative gaps) are left to find_conflicts().
        """
        by_day: dict[DayOfWeek, list[_Entry]] = defaultdict(list)
        for entry in entries:
            if not entry.slot.overnight:
                by_day[entry.slot.day].append(entry)

        violations: list[BufferTimeViolation] = []
        for day in DayOfWeek:
            day_entries = sorted(by_day.get(day, []), key=_sort_key)
            latest: _Entry | None = None
            for entry in day_entries:
                if latest is not None and _reportable(latest, entry):
                    gap = entry.slot.start - latest.slot.end
                    if 0 <= gap < buffer_minutes:
                        violations.append(
                            BufferTimeViolation(
                                course_a=latest.course_id,
                                course_b=entry.course_id,
                                day=day,
                                gap_minutes=gap,
                            )
                        )
                if latest is None or entry.slot.end > latest.slot.end:
                    latest = entry
        return violations

    def check_daily_hours(
        self, entries: Iterable[_Entry], daily_hour_cap: int
    ) -> list[DailyHourLimitExceeded]:
        """Days whose total scheduled time exceeds the cap.

        Overnight slots count in full toward the day they start on. Only days
        carrying a proposed slot are reported.
        """
        minutes_by_day: dict[DayOfWeek, int] = defaultdict(int)
        proposed_days: set[DayOfWeek] = set()
        for entry in entries:
            minutes_by_day[entry.slot.day] += duration(entry.slot)
            if entry.proposed:
                proposed_days.add(entry.slot.day)

        violations: list[DailyHourLimitExceeded] = []
        for day in DayOfWeek:
            total_minutes = minutes_by_day.get(day, 0)
            if day in proposed_days and total_minutes > daily_hour_cap * 60:
                violations.append(
                    DailyHourLimitExceeded(
                        day=day,
                        total=round(total_minutes / 60, 2),
                        cap=daily_hour_cap,
                    )
                )
        return violations
