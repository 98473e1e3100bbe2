"""Data models for the validation orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from enrollgate.repository import EnrollmentRecord
    from enrollgate.validation import Violation


class OrchestratorState(StrEnum):
    """Orchestrator state enum."""

    COLLECTING = "collecting"
    VALIDATING = "validating"
    REJECTED = "rejected"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class EnrollmentOutcome:
    """Result of an enroll request.

    Attributes:
        state: Final state; COMMITTED, REJECTED or ABORTED.
        enrollments: Records created when committed, otherwise empty.
        violations: Reasons the request was refused, otherwise empty.
    """

    state: OrchestratorState
    enrollments: list[EnrollmentRecord] = field(default_factory=list)
    violations: list[Violation] = field(default_factory=list)

    @property
    def committed(self) -> bool:
        return self.state == OrchestratorState.COMMITTED
