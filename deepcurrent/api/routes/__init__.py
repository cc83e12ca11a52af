"""API route registration."""

from fastapi import APIRouter, FastAPI

from deepcurrent.config.models.observability import MetricsConfig
from deepcurrent.observability.logging import get_logger

logger = get_logger(__name__)


def create_v1_router() -> APIRouter:
    """Create the v1 API router with all routes."""
    router = APIRouter(prefix="/v1")

    from deepcurrent.api.routes.research import router as research_router

    router.include_router(research_router, tags=["Research"])
    return router


def register_routes(app: FastAPI, metrics: MetricsConfig | None = None) -> None:
    """Register all routes with the FastAPI application.

    Args:
        app: FastAPI application instance
        metrics: Prometheus endpoint settings; exposed at /metrics when None
    """
    app.include_router(create_v1_router())

    from deepcurrent.api.routes.health import get_metrics
    from deepcurrent.api.routes.health import router as health_router

    app.include_router(health_router, tags=["Health"])

    metrics = metrics or MetricsConfig()
    if metrics.enabled:
        app.add_api_route(metrics.path, get_metrics, methods=["GET"], tags=["Health"])

    logger.info("routes_registered", metrics_path=metrics.path if metrics.enabled else None)
