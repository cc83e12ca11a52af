"""Dependency injection for API routes.

Provides FastAPI dependencies for stores, the episode controller and the
evolution machinery. The storage backend is chosen from settings; every
dependency can be overridden for testing.
"""

from typing import Annotated

from fastapi import Depends

from deepcurrent.agent import ResearchAgent, create_research_agent
from deepcurrent.config import Settings, get_settings
from deepcurrent.db.errors import ConnectionError as StoreConnectionError
from deepcurrent.db.pool import PostgresPool
from deepcurrent.episodes.controller import EpisodeController
from deepcurrent.episodes.store import EpisodeStore
from deepcurrent.episodes.stores import InMemoryEpisodeStore, PostgresEpisodeStore
from deepcurrent.evolution.service import StrategyEvolutionService
from deepcurrent.evolution.store import EvolutionLogStore
from deepcurrent.evolution.stores import InMemoryEvolutionLogStore, PostgresEvolutionLogStore
from deepcurrent.jobs.analysis import AnalysisQueue
from deepcurrent.notes.store import NoteStore
from deepcurrent.notes.stores import InMemoryNoteStore, PostgresNoteStore
from deepcurrent.observability.logging import get_logger
from deepcurrent.strategy.store import StrategyStore
from deepcurrent.strategy.stores import InMemoryStrategyStore, PostgresStrategyStore
from deepcurrent.topics.store import TopicStore
from deepcurrent.topics.stores import InMemoryTopicStore, PostgresTopicStore

logger = get_logger(__name__)

# Connection pool - shared across stores
_postgres_pool: PostgresPool | None = None
_postgres_unavailable = False

# Store and service instances - created once and reused
_topic_store: TopicStore | None = None
_note_store: NoteStore | None = None
_strategy_store: StrategyStore | None = None
_episode_store: EpisodeStore | None = None
_evolution_log_store: EvolutionLogStore | None = None
_research_agent: ResearchAgent | None = None
_evolution_service: StrategyEvolutionService | None = None
_analysis_queue: AnalysisQueue | None = None
_episode_controller: EpisodeController | None = None


async def _postgres_pool_or_none() -> PostgresPool | None:
    """Pool for the postgres backend, or None when stores should live in memory.

    When the database cannot be reached on first use every store falls
    back to its in-memory implementation for the life of the process.
    """
    global _postgres_unavailable
    if get_settings().storage.backend != "postgres" or _postgres_unavailable:
        return None
    try:
        return await get_postgres_pool()
    except StoreConnectionError as e:
        logger.warning("postgres_unavailable_using_inmemory", error=e.message)
        _postgres_unavailable = True
        return None


async def get_postgres_pool() -> PostgresPool:
    """Get the shared PostgreSQL connection pool.

    Creates and connects the pool on first access.

    Returns:
        Connected PostgresPool instance
    """
    global _postgres_pool
    if _postgres_pool is None:
        pool = PostgresPool(get_settings().storage.postgres)
        await pool.connect()
        _postgres_pool = pool
    return _postgres_pool


async def get_topic_store() -> TopicStore:
    """Get the TopicStore instance."""
    global _topic_store
    if _topic_store is None:
        pool = await _postgres_pool_or_none()
        _topic_store = PostgresTopicStore(pool) if pool else InMemoryTopicStore()
        logger.info("topic_store_initialized", store_type=type(_topic_store).__name__)
    return _topic_store


async def get_note_store() -> NoteStore:
    """Get the NoteStore instance."""
    global _note_store
    if _note_store is None:
        pool = await _postgres_pool_or_none()
        _note_store = PostgresNoteStore(pool) if pool else InMemoryNoteStore()
        logger.info("note_store_initialized", store_type=type(_note_store).__name__)
    return _note_store


async def get_strategy_store() -> StrategyStore:
    """Get the StrategyStore instance."""
    global _strategy_store
    if _strategy_store is None:
        pool = await _postgres_pool_or_none()
        _strategy_store = PostgresStrategyStore(pool) if pool else InMemoryStrategyStore()
        logger.info("strategy_store_initialized", store_type=type(_strategy_store).__name__)
    return _strategy_store


async def get_episode_store() -> EpisodeStore:
    """Get the EpisodeStore instance."""
    global _episode_store
    if _episode_store is None:
        pool = await _postgres_pool_or_none()
        _episode_store = PostgresEpisodeStore(pool) if pool else InMemoryEpisodeStore()
        logger.info("episode_store_initialized", store_type=type(_episode_store).__name__)
    return _episode_store


async def get_evolution_log_store() -> EvolutionLogStore:
    """Get the EvolutionLogStore instance."""
    global _evolution_log_store
    if _evolution_log_store is None:
        pool = await _postgres_pool_or_none()
        _evolution_log_store = (
            PostgresEvolutionLogStore(pool) if pool else InMemoryEvolutionLogStore()
        )
        logger.info(
            "evolution_log_store_initialized",
            store_type=type(_evolution_log_store).__name__,
        )
    return _evolution_log_store


def get_research_agent() -> ResearchAgent:
    """Get the ResearchAgent configured in settings.research.agent."""
    global _research_agent
    if _research_agent is None:
        _research_agent = create_research_agent(get_settings().research.agent)
        logger.info("research_agent_initialized", provider=_research_agent.provider_name)
    return _research_agent


async def get_evolution_service() -> StrategyEvolutionService:
    """Get the StrategyEvolutionService instance."""
    global _evolution_service
    if _evolution_service is None:
        settings = get_settings()
        _evolution_service = StrategyEvolutionService(
            episode_store=await get_episode_store(),
            strategy_store=await get_strategy_store(),
            evolution_log=await get_evolution_log_store(),
            min_episodes=settings.evolution.min_episodes,
            candidate_rollout_percentage=settings.evolution.candidate_rollout_percentage,
        )
    return _evolution_service


async def get_analysis_queue() -> AnalysisQueue:
    """Get the post-episode AnalysisQueue.

    Workers are started by the application lifespan.
    """
    global _analysis_queue
    if _analysis_queue is None:
        config = get_settings().evolution.analysis
        _analysis_queue = AnalysisQueue(
            await get_evolution_service(),
            workers=config.workers,
            max_recent_failures=config.max_recent_failures,
            shutdown_timeout_seconds=config.shutdown_timeout_seconds,
        )
    return _analysis_queue


async def get_episode_controller() -> EpisodeController:
    """Get the EpisodeController instance."""
    global _episode_controller
    if _episode_controller is None:
        settings = get_settings()
        _episode_controller = EpisodeController(
            topic_store=await get_topic_store(),
            strategy_store=await get_strategy_store(),
            episode_store=await get_episode_store(),
            note_store=await get_note_store(),
            agent=get_research_agent(),
            analysis_queue=await get_analysis_queue(),
            stream_buffer_size=settings.research.stream_buffer_size,
            note_title_max_length=settings.research.note_title_max_length,
        )
        logger.info("episode_controller_initialized")
    return _episode_controller


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
TopicStoreDep = Annotated[TopicStore, Depends(get_topic_store)]
StrategyStoreDep = Annotated[StrategyStore, Depends(get_strategy_store)]
EpisodeStoreDep = Annotated[EpisodeStore, Depends(get_episode_store)]
EvolutionLogStoreDep = Annotated[EvolutionLogStore, Depends(get_evolution_log_store)]
AnalysisQueueDep = Annotated[AnalysisQueue, Depends(get_analysis_queue)]
EpisodeControllerDep = Annotated[EpisodeController, Depends(get_episode_controller)]


async def reset_dependencies() -> None:
    """Reset all cached dependencies.

    Used for testing and shutdown. Closes connections before resetting.
    """
    global _topic_store, _note_store, _strategy_store, _episode_store
    global _evolution_log_store, _research_agent, _evolution_service
    global _analysis_queue, _episode_controller, _postgres_pool, _postgres_unavailable

    if _analysis_queue is not None:
        await _analysis_queue.stop()

    if _postgres_pool is not None:
        await _postgres_pool.close()
        _postgres_pool = None

    _topic_store = None
    _note_store = None
    _strategy_store = None
    _episode_store = None
    _evolution_log_store = None
    _research_agent = None
    _evolution_service = None
    _analysis_queue = None
    _episode_controller = None
    _postgres_unavailable = False
    get_settings.cache_clear()
