"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import TYPE_CHECKING, Annotated, Protocol

from fastapi import Depends

from enrollgate.orchestrator import ValidationOrchestrator
from enrollgate.state_store import CatalogStore

if TYPE_CHECKING:
    from collections.abc import Sequence

    from enrollgate.orchestrator import EnrollmentOutcome
    from enrollgate.validation import Violation


class Engine(Protocol):
    """Interface for the validation engine."""

    def validate(self, student_id: str, course_ids: Sequence[str]) -> list[Violation]:
        """Dry-run validation."""
        ...

    def enroll(self, student_id: str, course_ids: Sequence[str]) -> EnrollmentOutcome:
        """Validate and commit."""
        ...


# Global CatalogStore instance (initialized on app startup)
_catalog_store: CatalogStore | None = None


def init_catalog_store(db_path: str = "enrollgate.db", busy_timeout: float = 30.0) -> CatalogStore:
    """Initialize the global CatalogStore instance."""
    global _catalog_store  # noqa: PLW0603
    _catalog_store = CatalogStore(db_path, busy_timeout=busy_timeout)
    return _catalog_store


def close_catalog_store() -> None:
    """Close the global CatalogStore instance."""
    global _catalog_store  # noqa: PLW0603
    if _catalog_store is not None:
        _catalog_store.close()
        _catalog_store = None


# Global engine instance (initialized on app startup)
_engine: Engine | None = None


def init_engine(engine: Engine | None = None) -> Engine:
    """Initialize the global engine, by default on the global CatalogStore."""
    global _engine  # noqa: PLW0603
    if engine is None:
        if _catalog_store is None:
            raise RuntimeError("CatalogStore not initialized. Call init_catalog_store() first.")
        engine = ValidationOrchestrator(_catalog_store.repository)
    _engine = engine
    return _engine


def close_engine() -> None:
    """Close the global engine instance."""
    global _engine  # noqa: PLW0603
    _engine = None


def get_engine() -> Generator[Engine, None, None]:
    """Dependency that provides the engine instance."""
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine() first.")
    yield _engine


# Type alias for dependency injection
EngineDep = Annotated[Engine, Depends(get_engine)]
