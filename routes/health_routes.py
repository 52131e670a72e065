"""
Health check endpoint.

GET /health — checks MongoDB connectivity and the click recorder.
Rules:
- MongoDB failure → "unhealthy" (503); no link can resolve without it.
- Recorder not running → "degraded" (200); redirects still work, clicks are lost.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def health_check(request: Request) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    try:
        db = request.app.state.db
        await db.client.admin.command("ping")
        checks["mongodb"] = "ok"
    except Exception:
        checks["mongodb"] = "error"
        overall = "unhealthy"

    recorder = getattr(request.app.state, "recorder", None)
    if recorder is None:
        checks["recorder"] = "not_configured"
    elif recorder.running:
        checks["recorder"] = "ok"
    else:
        checks["recorder"] = "stopped"

    if checks["recorder"] != "ok" and overall == "healthy":
        overall = "degraded"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content=HealthResponse(status=overall, checks=checks).model_dump(),
    )
