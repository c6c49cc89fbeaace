"""
QuickNotes Backend — Health Check Routes
==========================================

What:  GET /health for monitoring probes and GET / as a liveness banner.
How:   /health pings the configured note store (SELECT 1 for the database
       backend, a no-op for the memory backend).

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from quicknotes import __version__
from quicknotes.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", summary="Service banner")
async def root() -> dict:
    return {"message": "QuickNotes API is running"}


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    store = request.app.state.note_store
    backend = getattr(store, "backend", type(store).__name__)

    store_status = "ok"
    overall = "healthy"
    try:
        await store.ping()
    except Exception as e:
        store_status = "unreachable"
        overall = "unhealthy"
        logger.warning("Health check: store unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        store=f"{backend}:{store_status}",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
