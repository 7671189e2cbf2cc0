"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from canvaspartner import __version__
from canvaspartner.api.dependencies import (
    CanvasStoreDep,
    MessageStoreDep,
    SessionStoreDep,
    get_postgres_pool,
)
from canvaspartner.api.models.health import ComponentHealth, HealthResponse
from canvaspartner.config import get_settings
from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _store_health(store: object, name: str) -> ComponentHealth:
    if store is None:
        return ComponentHealth(name=name, status="unhealthy", message="Store not initialized")
    return ComponentHealth(name=name, status="healthy")


async def _database_health() -> ComponentHealth:
    start = time.perf_counter()
    try:
        pool = await get_postgres_pool()
        healthy = await pool.health_check()
    except Exception as e:  # noqa: BLE001
        return ComponentHealth(
            name="postgres",
            status="unhealthy",
            latency_ms=(time.perf_counter() - start) * 1000,
            message=str(e),
        )
    return ComponentHealth(
        name="postgres",
        status="healthy" if healthy else "unhealthy",
        latency_ms=(time.perf_counter() - start) * 1000,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(
    session_store: SessionStoreDep,
    message_store: MessageStoreDep,
    canvas_store: CanvasStoreDep,
) -> HealthResponse:
    """Report overall service health and the health of each store."""
    components = [
        _store_health(session_store, "session_store"),
        _store_health(message_store, "message_store"),
        _store_health(canvas_store, "canvas_store"),
    ]
    if get_settings().storage.backend == "postgres":
        components.append(await _database_health())

    overall_status: Literal["healthy", "degraded", "unhealthy"] = "healthy"
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall_status = "degraded"

    logger.debug("health_check_completed", status=overall_status)
    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


async def get_metrics() -> Response:
    """Prometheus metrics in text format.

    Mounted by register_routes at the configured metrics path.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
