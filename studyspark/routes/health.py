"""
StudySpark Backend — Health Check Route
=========================================

What:  GET /health for monitoring and load balancer health checks.
How:   Asks the storage backend and the LLM provider for a lightweight check.

    Status levels:
    - healthy:   storage and LLM reachable
    - degraded:  LLM unreachable (CRUD still works, AI endpoints will fail)
    - unhealthy: storage unreachable
"""

import logging
import time

from fastapi import APIRouter, Request

from studyspark import __version__
from studyspark.schemas.base import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request) -> HealthResponse:
    storage = request.app.state.storage
    ai_gateway = request.app.state.ai_gateway

    overall = "healthy"
    storage_status = "connected" if await storage.health_check() else "disconnected"
    if storage_status != "connected":
        overall = "unhealthy"

    try:
        llm_ok = await ai_gateway.llm.health_check()
    except Exception as e:
        logger.warning("Health check: LLM provider unreachable: %s", str(e))
        llm_ok = False
    llm_status = "available" if llm_ok else "unavailable"
    if not llm_ok and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        storage=storage.backend_name,
        storage_status=storage_status,
        llm=llm_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
