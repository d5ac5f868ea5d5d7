from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from genesis_comps.services.job_registry import JobRegistry, run_job
from genesis_comps.utils.time import iso_timestamp

router = APIRouter(tags=["jobs"])

ENDPOINTS = [
    "GET /",
    "GET /health",
    "GET /scrap?location=<location>",
    "GET /status",
    "GET /results",
    "DELETE /results",
]


def _registry(request: Request) -> JobRegistry:
    return request.app.state.registry


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Readiness probe."""
    return "service up"


@router.get("/health")
async def health(request: Request):
    automation = _registry(request).snapshot()
    return {
        "status": "OK",
        "timestamp": iso_timestamp(),
        "automation": {
            "isRunning": automation["isRunning"],
            "currentJob": automation["currentJob"],
        },
    }


@router.get("/scrap")
async def scrap(request: Request, background_tasks: BackgroundTasks, location: Optional[str] = None):
    """Start a scraping job for ``location`` in the background."""
    location = (location or "").strip()
    if not location:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Location parameter is required. Use /scrap?location=Texas",
            },
        )

    registry = _registry(request)
    job = registry.try_acquire(location)
    if job is None:
        logger.warning(f"Rejected job for {location!r}: automation already running")
        return JSONResponse(
            status_code=409,
            content={
                "success": False,
                "error": "Automation is already running. Please wait for completion.",
                "currentJob": registry.snapshot()["currentJob"],
            },
        )

    background_tasks.add_task(run_job, registry, job, request.app.state.automation_factory)
    return {
        "success": True,
        "message": "Automation started successfully",
        "jobId": job.id,
        "location": location,
        "status": "running",
    }


@router.get("/status")
async def status(request: Request):
    return {"automation": _registry(request).snapshot(), "timestamp": iso_timestamp()}


@router.get("/results")
async def results(request: Request):
    items = _registry(request).snapshot()["results"]
    return {"results": items, "count": len(items), "timestamp": iso_timestamp()}


@router.delete("/results")
async def clear_results(request: Request):
    _registry(request).clear_results()
    return {"success": True, "message": "Results cleared successfully"}
