"""
ParcelBD Backend — Status & Health Check Routes
================================================

What:  GET / (plain-text liveness string) and GET /health (dependency probe).
Who:   Browsers and uptime checks hit `/`; Docker health checks and load
       balancers hit `/health`.

Status levels (/health):
    - healthy:   database reachable and payment gateway configured
    - degraded:  database reachable, payment key missing
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from parcelbd import __version__
from parcelbd.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Server status string")
async def root() -> str:
    return "ParcelBD Server is running..."


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(request: Request):
    """Runs SELECT 1 against the database and checks the gateway configuration."""
    db_status = "connected"
    gateway_status = "configured"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not request.app.state.payment_gateway.is_configured():
        gateway_status = "not_configured"
        if overall != "unhealthy":
            overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        payment_gateway=gateway_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
