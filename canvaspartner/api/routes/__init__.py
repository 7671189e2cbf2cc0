"""API route registration."""

from fastapi import APIRouter, FastAPI

from canvaspartner.config import get_settings
from canvaspartner.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/v1")

    from canvaspartner.api.routes.canvases import router as canvases_router
    from canvaspartner.api.routes.chat import router as chat_router
    from canvaspartner.api.routes.sessions import router as sessions_router

    router.include_router(chat_router, tags=["Chat"])
    router.include_router(sessions_router, tags=["Sessions"])
    router.include_router(canvases_router, tags=["Canvases"])

    logger.debug("v1_router_created", routes=["chat", "sessions", "canvases"])
    return router


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(create_v1_router())

    # Health and metrics live at root level
    from canvaspartner.api.routes.health import get_metrics
    from canvaspartner.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    metrics = get_settings().observability.metrics
    if metrics.enabled:
        app.add_api_route(metrics.path, get_metrics, methods=["GET"], tags=["Health"])

    logger.info("routes_registered", metrics_enabled=metrics.enabled)
