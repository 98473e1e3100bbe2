"""FastAPI application setup."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from enrollgate import __version__
from enrollgate.api.dependencies import (
    close_catalog_store,
    close_engine,
    init_catalog_store,
    init_engine,
)
from enrollgate.api.models import APIResponse
from enrollgate.api.routes import enrollments
from enrollgate.config import load_config
from enrollgate.logging import setup_logging
from enrollgate.orchestrator import EngineError, StorageUnavailableError

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from enrollgate.config import EngineConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    config: EngineConfig = app.state.config or load_config()

    # Startup
    setup_logging(
        log_dir=config.logging.dir,
        level=config.logging.level,
        console=config.logging.console,
    )
    init_catalog_store(config.database.path, busy_timeout=config.database.busy_timeout)
    init_engine()
    logger.info("Enrollgate API started (database=%s)", config.database.path)

    yield
    # Shutdown
    close_engine()
    close_catalog_store()


def create_app(config: EngineConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Engine configuration. Loaded with load_config() at startup
                when omitted.
    """
    app = FastAPI(
        title="Enrollgate API",
        description="Enrollment policy and schedule-conflict validation",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.config = config

    # Exception handlers
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=APIResponse[None](
                data=None, error=f"Invalid request: {exc.errors()}"
            ).model_dump(),
        )

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(
        _request: Request, _exc: StorageUnavailableError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=APIResponse[None](data=None, error="Storage unavailable").model_dump(),
        )

    @app.exception_handler(EngineError)
    async def engine_error_handler(_request: Request, exc: EngineError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    # Include routers
    app.include_router(enrollments.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
