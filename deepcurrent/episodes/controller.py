"""Episode controller.

Runs a research episode: snapshots the active strategy, drives the agent,
translates its chunks into stream events, persists the result note and
the episode outcome, then hands the episode to post-episode analysis.

Episode start (validation, topic lookup, episode creation) is separate
from the stream so that request errors surface before any event is sent.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from typing import Protocol
from uuid import UUID

from deepcurrent.agent.base import AgentRuntimeContext, ResearchAgent
from deepcurrent.agent.prompt import build_research_prompt
from deepcurrent.db.errors import StoreError
from deepcurrent.episodes.errors import (
    AgentExecutionError,
    EpisodeError,
    EpisodeValidationError,
    PersistenceError,
    TopicNotFoundError,
)
from deepcurrent.episodes.models import Episode, EpisodeOutcome, EpisodeStatus
from deepcurrent.episodes.store import EpisodeStore
from deepcurrent.notes.models import Note
from deepcurrent.notes.store import NoteStore
from deepcurrent.observability.logging import get_logger
from deepcurrent.observability.metrics import (
    ACTIVE_EPISODES,
    EPISODE_COUNT,
    EPISODE_LATENCY,
    STREAM_EVENTS,
)
from deepcurrent.strategy.models import DEFAULT_STRATEGY_CONFIG, StrategyConfig
from deepcurrent.strategy.store import StrategyStore
from deepcurrent.streaming.channel import EventChannel
from deepcurrent.streaming.events import (
    CompleteEvent,
    EpisodeCreatedEvent,
    ErrorEvent,
    NoteCreatedEvent,
    StatusEvent,
    StreamEvent,
)
from deepcurrent.streaming.translator import EventStreamTranslator
from deepcurrent.topics.store import TopicStore

logger = get_logger(__name__)

CLIENT_DISCONNECTED_MESSAGE = "Episode cancelled: client disconnected"
NOTE_TYPE = "research"
# Version recorded when a topic has no strategy and the default config is used
DEFAULT_STRATEGY_VERSION = 0


class AnalysisSubmitter(Protocol):
    """Receives completed episodes for post-episode analysis."""

    def submit(self, episode_id: UUID) -> None: ...


def note_title(query: str, max_length: int = 60) -> str:
    """Note title for a query, truncated with an ellipsis."""
    if len(query) > max_length:
        return f"Research: {query[:max_length]}..."
    return f"Research: {query}"


class EpisodeController:
    """Starts and runs research episodes."""

    def __init__(
        self,
        topic_store: TopicStore,
        strategy_store: StrategyStore,
        episode_store: EpisodeStore,
        note_store: NoteStore,
        agent: ResearchAgent,
        analysis_queue: AnalysisSubmitter | None = None,
        stream_buffer_size: int | None = None,
        note_title_max_length: int = 60,
    ) -> None:
        self._topic_store = topic_store
        self._strategy_store = strategy_store
        self._episode_store = episode_store
        self._note_store = note_store
        self._agent = agent
        self._analysis_queue = analysis_queue
        self._stream_buffer_size = stream_buffer_size
        self._note_title_max_length = note_title_max_length

    async def start_episode(self, topic_id: UUID, query: str) -> "EpisodeRun":
        """Validate the request and create a pending episode.

        Args:
            topic_id: Topic to research
            query: User research question

        Returns:
            A run whose ``events()`` streams the episode

        Raises:
            EpisodeValidationError: If the query is empty
            TopicNotFoundError: If the topic does not exist
            PersistenceError: If a store fails
        """
        if not query or not query.strip():
            raise EpisodeValidationError("Query is required")

        try:
            topic = await self._topic_store.get(topic_id)
            if topic is None:
                raise TopicNotFoundError(topic_id)
            strategy = await self._strategy_store.get_active(topic_id)
        except StoreError as e:
            raise PersistenceError(f"Failed to load topic strategy: {e.message}") from e

        if strategy is None:
            config, version = DEFAULT_STRATEGY_CONFIG, DEFAULT_STRATEGY_VERSION
        else:
            config, version = strategy.config, strategy.version

        episode = Episode(topic_id=topic_id, query=query, strategy_version=version)
        try:
            episode = await self._episode_store.create(episode)
        except StoreError as e:
            raise PersistenceError(f"Failed to create episode: {e.message}") from e

        logger.info(
            "episode_created",
            episode_id=str(episode.id),
            topic_id=str(topic_id),
            strategy_version=version,
            default_strategy=strategy is None,
        )
        return EpisodeRun(self, episode, config, using_default=strategy is None)

    async def run_episode(self, topic_id: UUID, query: str) -> AsyncIterator[StreamEvent]:
        """Start an episode and stream its events."""
        run = await self.start_episode(topic_id, query)
        async for event in run.events():
            yield event


class EpisodeRun:
    """A started episode whose events have not been consumed yet."""

    def __init__(
        self,
        controller: EpisodeController,
        episode: Episode,
        config: StrategyConfig,
        using_default: bool = False,
    ) -> None:
        self._controller = controller
        self._episode = episode
        self._config = config
        self._using_default = using_default

    @property
    def episode(self) -> Episode:
        return self._episode

    @property
    def config(self) -> StrategyConfig:
        return self._config

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Stream the episode.

        The episode runs in its own producer task. If the consumer stops
        iterating before the terminal event, the producer is cancelled and
        the episode is marked failed.
        """
        channel: EventChannel[StreamEvent] = EventChannel(
            self._controller._stream_buffer_size
        )
        producer = asyncio.create_task(
            self._produce(channel), name=f"episode-{self._episode.id}"
        )
        try:
            async for event in channel:
                yield event
            await producer
        finally:
            if not producer.done():
                producer.cancel()
                try:
                    await producer
                except asyncio.CancelledError:
                    pass

    async def _produce(self, channel: EventChannel[StreamEvent]) -> None:
        episode = self._episode
        log = logger.bind(episode_id=str(episode.id), topic_id=str(episode.topic_id))
        started = time.perf_counter()
        ACTIVE_EPISODES.inc()
        status = EpisodeStatus.FAILED
        try:
            try:
                await self._send(channel, EpisodeCreatedEvent(episode_id=episode.id))
                await self._execute(channel)
                status = EpisodeStatus.COMPLETED
            except asyncio.CancelledError:
                log.warning("episode_cancelled")
                await self._mark_failed(CLIENT_DISCONNECTED_MESSAGE)
                raise
            except Exception as e:
                message = e.message if isinstance(e, EpisodeError) else str(e) or "Unknown error"
                log.error(
                    "episode_failed", error=message, error_type=type(e).__name__, exc_info=True
                )
                await self._mark_failed(message)
                await self._send(channel, ErrorEvent(error=message))
        finally:
            ACTIVE_EPISODES.dec()
            EPISODE_COUNT.labels(status=status.value).inc()
            EPISODE_LATENCY.labels(status=status.value).observe(time.perf_counter() - started)
            await channel.close()

        if status == EpisodeStatus.COMPLETED:
            self._submit_analysis()

    async def _execute(self, channel: EventChannel[StreamEvent]) -> None:
        controller = self._controller
        episode = self._episode
        config = self._config
        version = episode.strategy_version

        if self._using_default:
            message = "Using default strategy"
        else:
            message = f"Using strategy v{version}"
        await self._send(
            channel,
            StatusEvent(
                status="initializing",
                message=message,
                details={"strategyVersion": version},
            ),
        )

        self._episode = await self._update(EpisodeStatus.RUNNING)
        logger.info("episode_started", episode_id=str(episode.id), strategy_version=version)
        await self._send(
            channel, StatusEvent(status="searching", message="Starting research...")
        )

        translator = EventStreamTranslator()
        prompt = build_research_prompt(episode.query, config, version)
        context = AgentRuntimeContext.from_strategy(
            config,
            strategy_version=version,
            topic_id=episode.topic_id,
            episode_id=episode.id,
            query=episode.query,
        )
        try:
            stream = controller._agent.stream(prompt, context)
        except Exception as e:
            raise AgentExecutionError(f"Research agent failed: {e}") from e
        try:
            while True:
                try:
                    chunk = await anext(stream)
                except StopAsyncIteration:
                    break
                except Exception as e:
                    raise AgentExecutionError(f"Research agent failed: {e}") from e
                for event in translator.translate(chunk):
                    await self._send(channel, event)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        await self._send(channel, StatusEvent(status="saving", message="Creating note..."))
        note = Note(
            topic_id=episode.topic_id,
            title=note_title(episode.query, controller._note_title_max_length),
            content=translator.content,
            type=NOTE_TYPE,
        )
        try:
            note = await controller._note_store.create(note)
        except StoreError as e:
            raise PersistenceError(f"Failed to save research note: {e.message}") from e
        await self._send(channel, NoteCreatedEvent(note_id=note.id, note_title=note.title))

        self._episode = await self._update(
            EpisodeStatus.COMPLETED,
            EpisodeOutcome(
                result_note_id=note.id,
                sources_returned=translator.sources_returned,
                followup_count=translator.followup_count,
                tool_usage=translator.tool_usage,
                senso_search_used=translator.senso_search_used,
                senso_generate_used=translator.senso_generate_used,
            ),
        )
        logger.info(
            "episode_completed",
            episode_id=str(episode.id),
            note_id=str(note.id),
            sources_returned=len(translator.sources_returned),
            followup_count=translator.followup_count,
        )
        await self._send(channel, CompleteEvent(episode_id=episode.id, note_id=note.id))

    async def _update(
        self, status: EpisodeStatus, outcome: EpisodeOutcome | None = None
    ) -> Episode:
        try:
            return await self._controller._episode_store.update_status(
                self._episode.id, status, outcome
            )
        except StoreError as e:
            raise PersistenceError(
                f"Failed to mark episode {status.value}: {e.message}"
            ) from e

    async def _mark_failed(self, message: str) -> None:
        try:
            self._episode = await self._controller._episode_store.update_status(
                self._episode.id,
                EpisodeStatus.FAILED,
                EpisodeOutcome(error_message=message),
            )
        except StoreError as e:
            logger.error(
                "episode_mark_failed_error",
                episode_id=str(self._episode.id),
                error=e.message,
            )

    async def _send(self, channel: EventChannel[StreamEvent], event: StreamEvent) -> None:
        await channel.send(event)
        STREAM_EVENTS.labels(event_type=event.type).inc()

    def _submit_analysis(self) -> None:
        queue = self._controller._analysis_queue
        if queue is None:
            return
        try:
            queue.submit(self._episode.id)
        except Exception as e:
            # Analysis is detached from the episode; a full or broken queue is only logged
            logger.error(
                "analysis_submit_failed", episode_id=str(self._episode.id), error=str(e)
            )
