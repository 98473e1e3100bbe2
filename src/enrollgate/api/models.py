"""Pydantic models for REST API."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from enrollgate.orchestrator import EnrollmentOutcome
from enrollgate.repository import EnrollmentRecord
from enrollgate.validation import Violation

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Request models


class EnrollmentRequest(BaseModel):
    """Request model for validating or committing enrollments.

    Only types are checked here; blank identifiers and an empty course list
    are rejected by the engine.
    """

    student_id: str
    course_ids: list[str] = Field(default_factory=list)


# Response models


class ViolationResponse(BaseModel):
    """Response model for a single violation."""

    kind: str
    message: str
    details: dict[str, Any]


def violation_to_response(violation: Violation) -> ViolationResponse:
    """Convert a Violation to ViolationResponse."""
    return ViolationResponse(
        kind=violation.kind.value,
        message=violation.message,
        details=violation.details(),
    )


class ValidationReport(BaseModel):
    """Response model for a dry-run validation."""

    admissible: bool
    violations: list[ViolationResponse]


class EnrollmentResponse(BaseModel):
    """Response model for a committed enrollment."""

    id: str
    student_id: str
    course_id: str
    status: str
    enrolled_at: datetime | None


def enrollment_to_response(record: EnrollmentRecord) -> EnrollmentResponse:
    """Convert an EnrollmentRecord to EnrollmentResponse."""
    return EnrollmentResponse(
        id=record.id,
        student_id=record.student_id,
        course_id=record.course_id,
        status=record.status.value,
        enrolled_at=record.enrolled_at,
    )


class EnrollmentResult(BaseModel):
    """Response model for an enroll request."""

    state: str
    enrollments: list[EnrollmentResponse]
    violations: list[ViolationResponse]


def outcome_to_result(outcome: EnrollmentOutcome) -> EnrollmentResult:
    """Convert an EnrollmentOutcome to EnrollmentResult."""
    return EnrollmentResult(
        state=outcome.state.value,
        enrollments=[enrollment_to_response(r) for r in outcome.enrollments],
        violations=[violation_to_response(v) for v in outcome.violations],
    )
