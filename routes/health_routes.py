"""
Health check endpoint.

GET /health checks token store connectivity.
Rules:
- Store reachable → "healthy" (200)
- Store failure → "unhealthy" (503), tokens can be neither issued nor verified.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger, should_sample

router = APIRouter(tags=["health"])

log = get_logger(__name__)


@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    store = request.app.state.token_manager.store
    try:
        ok = await store.ping()
    except Exception as e:
        log.error("health_store_ping_failed", error=str(e), error_type=type(e).__name__)
        ok = False

    if ok:
        checks["token_store"] = "ok"
    else:
        checks["token_store"] = "error"
        overall = "unhealthy"

    if should_sample("health_check"):
        log.info("health_check", status=overall)

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
