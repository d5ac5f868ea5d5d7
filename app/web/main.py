"""
Genesis Comps Job API
FastAPI start/poll wrapper around the scraping pipeline
"""
import os
import traceback
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.web.routers import jobs
from genesis_comps.services.automation import GenesisAutomation
from genesis_comps.services.job_registry import JobRegistry, JobRunner
from genesis_comps.settings import GenesisSettings
from genesis_comps.utils.logging_config import setup_default_logging

# Configure loguru
setup_default_logging()


def automation_factory_for(settings: GenesisSettings) -> Callable[[], JobRunner]:
    """A fresh automation (and so a fresh browser) per job."""
    return lambda: GenesisAutomation(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Genesis Comps API starting up...")
    if app.state.automation_factory is None:
        # Missing credentials abort startup
        app.state.automation_factory = automation_factory_for(GenesisSettings.from_env())
    for endpoint in jobs.ENDPOINTS:
        logger.info(f"  {endpoint}")
    yield
    logger.info("Genesis Comps API shutting down...")


# =============================================================================
# Error Handlers
# =============================================================================

def _generate_error_id() -> str:
    """Generate a short error ID for tracking."""
    return str(uuid.uuid4())[:8].upper()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """JSON body for every HTTP error; 404 lists the available endpoints."""
    error_id = _generate_error_id()

    if exc.status_code >= 400:
        log_fn = logger.warning if exc.status_code < 500 else logger.error
        log_fn(f"HTTP {exc.status_code} [ID: {error_id}]: {exc.detail} - {request.method} {request.url}")

    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={
                "success": False,
                "error": "Endpoint not found",
                "availableEndpoints": jobs.ENDPOINTS,
                "error_id": error_id,
                "path": str(request.url.path),
            },
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": "http_error",
            "status_code": exc.status_code,
            "message": exc.detail,
            "error_id": error_id,
            "path": str(request.url.path),
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with detailed logging."""
    error_id = _generate_error_id()

    tb = traceback.format_exc()
    logger.error(
        f"Unhandled exception [ID: {error_id}]\n"
        f"Request: {request.method} {request.url}\n"
        f"Exception: {type(exc).__name__}: {exc}\n"
        f"Traceback:\n{tb}"
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "message": str(exc),
            "error_id": error_id,
            "path": str(request.url.path),
        },
    )


def create_app(
    registry: Optional[JobRegistry] = None,
    automation_factory: Optional[Callable[[], JobRunner]] = None,
) -> FastAPI:
    app = FastAPI(
        title="Genesis Comps",
        description="Propelio Genesis comparable-sales scraper",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.registry = registry or JobRegistry()
    app.state.automation_factory = automation_factory

    app.include_router(jobs.router)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.web.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "3000")),
    )
