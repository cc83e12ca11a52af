"""In-process post-episode analysis queue.

Completed episodes are submitted without blocking the stream that
produced them. Worker tasks run the evolution service for each episode.
Delivery is at-most-once: items still queued at shutdown or lost in a
crash are not retried. Failures never reach the submitter; they are
logged, counted and kept in a bounded list for inspection.
"""

import asyncio
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from deepcurrent.evolution.service import StrategyEvolutionService
from deepcurrent.observability.logging import get_logger
from deepcurrent.observability.metrics import ANALYSIS_FAILURES, ANALYSIS_QUEUE_DEPTH

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnalysisFailure:
    """A post-episode analysis run that raised."""

    episode_id: UUID
    error_type: str
    message: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class AnalysisQueue:
    """Queue of episodes awaiting post-episode analysis."""

    def __init__(
        self,
        service: StrategyEvolutionService,
        workers: int = 1,
        max_recent_failures: int = 100,
        shutdown_timeout_seconds: float = 5.0,
    ) -> None:
        """Initialize the queue.

        Args:
            service: Evolution service run for each episode
            workers: Number of concurrent worker tasks
            max_recent_failures: Failures kept for inspection
            shutdown_timeout_seconds: Time allowed to drain on stop
        """
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._service = service
        self._workers = workers
        self._shutdown_timeout_seconds = shutdown_timeout_seconds
        self._queue: asyncio.Queue[UUID] = asyncio.Queue()
        self._tasks: list[asyncio.Task[None]] = []
        self._failures: deque[AnalysisFailure] = deque(maxlen=max_recent_failures)

    @property
    def is_running(self) -> bool:
        return bool(self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def recent_failures(self) -> list[AnalysisFailure]:
        """Most recent failures, oldest first."""
        return list(self._failures)

    async def start(self) -> None:
        """Start worker tasks. Idempotent."""
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(n), name=f"analysis-worker-{n}")
            for n in range(self._workers)
        ]
        logger.info("analysis_queue_started", workers=self._workers)

    async def stop(self) -> None:
        """Drain the queue within the shutdown timeout, then cancel workers."""
        if not self._tasks:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self._shutdown_timeout_seconds)
        except TimeoutError:
            logger.warning("analysis_queue_drain_timeout", dropped=self._queue.qsize())

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("analysis_queue_stopped")

    def submit(self, episode_id: UUID) -> None:
        """Enqueue an episode for analysis without waiting."""
        self._queue.put_nowait(episode_id)
        ANALYSIS_QUEUE_DEPTH.set(self._queue.qsize())
        logger.debug("analysis_submitted", episode_id=str(episode_id))

    async def join(self) -> None:
        """Wait until every submitted episode has been processed."""
        await self._queue.join()

    async def _worker(self, index: int) -> None:
        while True:
            episode_id = await self._queue.get()
            ANALYSIS_QUEUE_DEPTH.set(self._queue.qsize())
            try:
                await self._service.run_post_episode_analysis(episode_id)
            except Exception as e:
                self._record_failure(episode_id, e)
            finally:
                self._queue.task_done()

    def _record_failure(self, episode_id: UUID, error: Exception) -> None:
        error_type = type(error).__name__
        self._failures.append(
            AnalysisFailure(episode_id=episode_id, error_type=error_type, message=str(error))
        )
        ANALYSIS_FAILURES.labels(error_type=error_type).inc()
        logger.error(
            "post_episode_analysis_failed",
            episode_id=str(episode_id),
            error_type=error_type,
            error=str(error),
            exc_info=True,
        )
