"""Tests for the post-episode analysis queue."""

import asyncio
from uuid import UUID, uuid4

import pytest

from deepcurrent.jobs.analysis import AnalysisQueue


class FakeService:
    """Stands in for StrategyEvolutionService."""

    def __init__(self, fail_for: set[UUID] | None = None, delay: float = 0.0) -> None:
        self.processed: list[UUID] = []
        self._fail_for = fail_for or set()
        self._delay = delay

    async def run_post_episode_analysis(self, episode_id: UUID) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)
        if episode_id in self._fail_for:
            raise RuntimeError("evolution exploded")
        self.processed.append(episode_id)


@pytest.fixture
async def queue_factory():
    queues: list[AnalysisQueue] = []

    async def _make(service: FakeService, **kwargs) -> AnalysisQueue:
        queue = AnalysisQueue(service, **kwargs)  # type: ignore[arg-type]
        await queue.start()
        queues.append(queue)
        return queue

    yield _make
    for queue in queues:
        await queue.stop()


class TestAnalysisQueue:
    """Tests for AnalysisQueue."""

    async def test_processes_submitted_episodes(self, queue_factory) -> None:
        service = FakeService()
        queue = await queue_factory(service)
        ids = [uuid4() for _ in range(3)]

        for episode_id in ids:
            queue.submit(episode_id)
        await queue.join()

        assert service.processed == ids
        assert queue.pending == 0

    async def test_failure_is_recorded_and_worker_continues(self, queue_factory) -> None:
        bad, good = uuid4(), uuid4()
        service = FakeService(fail_for={bad})
        queue = await queue_factory(service)

        queue.submit(bad)
        queue.submit(good)
        await queue.join()

        assert service.processed == [good]
        failures = queue.recent_failures
        assert len(failures) == 1
        assert failures[0].episode_id == bad
        assert failures[0].error_type == "RuntimeError"
        assert failures[0].message == "evolution exploded"

    async def test_recent_failures_bounded(self, queue_factory) -> None:
        ids = [uuid4() for _ in range(5)]
        queue = await queue_factory(FakeService(fail_for=set(ids)), max_recent_failures=2)

        for episode_id in ids:
            queue.submit(episode_id)
        await queue.join()

        assert [f.episode_id for f in queue.recent_failures] == ids[-2:]

    async def test_submit_does_not_block(self, queue_factory) -> None:
        queue = await queue_factory(FakeService(delay=0.05))

        queue.submit(uuid4())
        queue.submit(uuid4())

        assert queue.pending >= 1

    async def test_start_is_idempotent_and_stop_cancels(self) -> None:
        queue = AnalysisQueue(FakeService(), workers=2)  # type: ignore[arg-type]
        await queue.start()
        await queue.start()
        assert queue.is_running

        await queue.stop()
        assert not queue.is_running

    async def test_stop_drains_pending_work(self) -> None:
        service = FakeService(delay=0.01)
        queue = AnalysisQueue(service)  # type: ignore[arg-type]
        await queue.start()
        episode_id = uuid4()
        queue.submit(episode_id)

        await queue.stop()

        assert service.processed == [episode_id]

    async def test_stop_times_out_on_slow_work(self) -> None:
        service = FakeService(delay=10.0)
        queue = AnalysisQueue(service, shutdown_timeout_seconds=0.05)  # type: ignore[arg-type]
        await queue.start()
        queue.submit(uuid4())

        await queue.stop()

        assert not queue.is_running
        assert service.processed == []

    def test_workers_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            AnalysisQueue(FakeService(), workers=0)  # type: ignore[arg-type]
