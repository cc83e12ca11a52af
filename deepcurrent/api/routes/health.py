"""Health check and metrics endpoints."""

import time
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from deepcurrent import __version__
from deepcurrent.api.dependencies import (
    AnalysisQueueDep,
    EpisodeStoreDep,
    StrategyStoreDep,
    get_postgres_pool,
)
from deepcurrent.api.models.health import ComponentHealth, HealthResponse
from deepcurrent.config import get_settings
from deepcurrent.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


async def _check_database() -> ComponentHealth:
    start = time.perf_counter()
    try:
        pool = await get_postgres_pool()
        healthy = await pool.health_check()
    except Exception as e:
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
    episode_store: EpisodeStoreDep,
    strategy_store: StrategyStoreDep,
    analysis_queue: AnalysisQueueDep,
) -> HealthResponse:
    """Check service health status.

    Args:
        episode_store: Episode store
        strategy_store: Strategy store
        analysis_queue: Post-episode analysis queue

    Returns:
        HealthResponse with status and component health
    """
    components = [
        ComponentHealth(name="episode_store", status="healthy", message=type(episode_store).__name__),
        ComponentHealth(name="strategy_store", status="healthy", message=type(strategy_store).__name__),
        ComponentHealth(
            name="analysis_queue",
            status="healthy" if analysis_queue.is_running else "degraded",
            message=f"{analysis_queue.pending} pending",
        ),
    ]
    if get_settings().storage.backend == "postgres":
        components.append(await _check_database())

    overall_status: Literal["healthy", "degraded", "unhealthy"]
    if any(c.status == "unhealthy" for c in components):
        overall_status = "unhealthy"
    elif any(c.status == "degraded" for c in components):
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    logger.debug("health_check_completed", status=overall_status)
    return HealthResponse(
        status=overall_status,
        version=__version__,
        components=components,
        timestamp=datetime.now(UTC),
    )


async def get_metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
