"""Research episode and strategy evolution endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from deepcurrent.api.dependencies import EpisodeControllerDep, EvolutionLogStoreDep, SettingsDep
from deepcurrent.api.exceptions import (
    InvalidRequestError,
    StorageUnavailableError,
    TopicNotFoundError,
)
from deepcurrent.api.models.research import AskRequest, EvolutionResponse
from deepcurrent.db.errors import StoreError
from deepcurrent.episodes import errors as episode_errors
from deepcurrent.observability.logging import get_logger
from deepcurrent.streaming.sse import SSE_HEADERS, SSE_MEDIA_TYPE, sse_stream

logger = get_logger(__name__)

router = APIRouter()


@router.post("/topics/{topic_id}/ask/stream")
async def ask_stream(
    topic_id: UUID,
    body: AskRequest,
    controller: EpisodeControllerDep,
) -> StreamingResponse:
    """Run a research episode and stream its progress as Server-Sent Events.

    Request errors (empty query, unknown topic) are returned as JSON
    errors before the stream opens. Once streaming, failures arrive as
    an ``error`` event.

    Args:
        topic_id: Topic to research
        body: Research question
        controller: Episode controller

    Returns:
        text/event-stream response of ``data: <json>`` frames

    Raises:
        InvalidRequestError: If the query is empty
        TopicNotFoundError: If the topic does not exist
        StorageUnavailableError: If a store fails before streaming
    """
    try:
        run = await controller.start_episode(topic_id, body.query)
    except episode_errors.EpisodeValidationError as e:
        raise InvalidRequestError(e.message) from e
    except episode_errors.TopicNotFoundError as e:
        raise TopicNotFoundError(e.message) from e
    except episode_errors.PersistenceError as e:
        raise StorageUnavailableError(e.message) from e

    logger.info(
        "episode_stream_opened",
        topic_id=str(topic_id),
        episode_id=str(run.episode.id),
    )
    return StreamingResponse(
        sse_stream(run.events()),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )


@router.get("/topics/{topic_id}/evolutions", response_model=list[EvolutionResponse])
async def list_evolutions(
    topic_id: UUID,
    evolution_log: EvolutionLogStoreDep,
    settings: SettingsDep,
    recent: bool = Query(default=False, description="Only the most recent evolutions"),
) -> list[EvolutionResponse]:
    """List strategy evolutions for a topic, newest first.

    Unknown topics return an empty list.

    Args:
        topic_id: Topic whose evolutions to list
        evolution_log: Evolution log store
        settings: Application settings
        recent: Cap the list to the configured recent limit

    Returns:
        Evolutions with the config diff that produced each one
    """
    limit = settings.evolution.recent_limit if recent else None
    try:
        entries = await evolution_log.list_for_topic(topic_id, limit=limit)
    except StoreError as e:
        raise StorageUnavailableError(f"Failed to load evolutions: {e.message}") from e
    return [EvolutionResponse.from_entry(entry) for entry in entries]
