"""REST API for Enrollgate."""

from enrollgate.api.app import app, create_app
from enrollgate.api.models import (
    APIResponse,
    EnrollmentRequest,
    EnrollmentResult,
    ValidationReport,
    ViolationResponse,
)

__all__ = [
    "APIResponse",
    "EnrollmentRequest",
    "EnrollmentResult",
    "ValidationReport",
    "ViolationResponse",
    "app",
    "create_app",
]
