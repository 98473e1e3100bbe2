"""Prerequisite resolution against a student's completed courses."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from enrollgate.validation.violations import PrerequisiteMissing

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from enrollgate.repository import PrerequisiteEdge


def check_prerequisites(
    course_ids: Sequence[str],
    edges: Iterable[PrerequisiteEdge],
    completed: set[str],
) -> list[PrerequisiteMissing]:
    """Find proposed courses whose mandatory prerequisites are not completed.

    Optional edges never produce a violation. `minimum_grade` is not
    compared; completing the prerequisite with any grade satisfies it.

    Args:
        course_ids: Proposed course IDs, in request order.
        edges: Prerequisite edges of the proposed courses.
        completed: IDs of courses the student has completed.

    Returns:
        One violation per course with unmet prerequisites, missing IDs in
        edge order.
    """
    missing_by_course: dict[str, list[str]] = defaultdict(list)
    for edge in edges:
        if not edge.is_mandatory or edge.prerequisite_id in completed:
            continue
        missing = missing_by_course[edge.course_id]
        if edge.prerequisite_id not in missing:
            missing.append(edge.prerequisite_id)

    return [
        PrerequisiteMissing(course_id=course_id, missing_ids=tuple(missing_by_course[course_id]))
        for course_id in course_ids
        if missing_by_course.get(course_id)
    ]
