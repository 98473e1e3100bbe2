"""Enrollment validation and commit endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from enrollgate.api.dependencies import EngineDep
from enrollgate.api.models import (
    APIResponse,
    EnrollmentRequest,
    EnrollmentResult,
    ValidationReport,
    outcome_to_result,
    violation_to_response,
)

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post("/validate", response_model=APIResponse[ValidationReport])
def validate_enrollments(
    request: EnrollmentRequest, engine: EngineDep
) -> APIResponse[ValidationReport]:
    """Check a proposed enrollment set without writing anything."""
    violations = engine.validate(request.student_id, request.course_ids)
    return APIResponse(
        data=ValidationReport(
            admissible=not violations,
            violations=[violation_to_response(v) for v in violations],
        )
    )


@router.post(
    "",
    response_model=APIResponse[EnrollmentResult],
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_409_CONFLICT: {"model": APIResponse[EnrollmentResult]}},
)
def create_enrollments(
    request: EnrollmentRequest, engine: EngineDep
) -> APIResponse[EnrollmentResult] | JSONResponse:
    """Enroll a student in every requested course, or in none."""
    outcome = engine.enroll(request.student_id, request.course_ids)
    result = outcome_to_result(outcome)
    if not outcome.committed:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=APIResponse[EnrollmentResult](
                data=result, error="Enrollment rejected"
            ).model_dump(mode="json"),
        )
    return APIResponse(data=result)
