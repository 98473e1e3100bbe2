"""Orchestrator - Validation pipeline and atomic enrollment commit."""

from enrollgate.orchestrator.exceptions import (
    EmptyCourseListError,
    EngineError,
    MalformedIdentifierError,
    StorageUnavailableError,
)
from enrollgate.orchestrator.models import EnrollmentOutcome, OrchestratorState
from enrollgate.orchestrator.orchestrator import ValidationOrchestrator

__all__ = [
    "EmptyCourseListError",
    "EngineError",
    "EnrollmentOutcome",
    "MalformedIdentifierError",
    "OrchestratorState",
    "StorageUnavailableError",
    "ValidationOrchestrator",
]
