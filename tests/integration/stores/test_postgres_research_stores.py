"""Integration tests for the PostgreSQL research stores.

Runs against a real database with the alembic schema applied.
"""

import asyncio
from uuid import uuid4

import pytest
import pytest_asyncio

from deepcurrent.db.errors import ConflictError, InvalidTransitionError, NotFoundError
from deepcurrent.episodes.models import Episode, EpisodeOutcome, EpisodeStatus, ToolUsage
from deepcurrent.episodes.stores.postgres import PostgresEpisodeStore
from deepcurrent.evolution.models import AggregatedMetrics
from deepcurrent.evolution.stores.postgres import PostgresEvolutionLogStore
from deepcurrent.notes.models import Note
from deepcurrent.notes.stores.postgres import PostgresNoteStore
from deepcurrent.strategy.models import StrategyConfig, StrategyStatus
from deepcurrent.strategy.stores.postgres import PostgresStrategyStore
from deepcurrent.topics.stores.postgres import PostgresTopicStore

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def strategy_store(postgres_pool):
    return PostgresStrategyStore(postgres_pool)


@pytest_asyncio.fixture
async def episode_store(postgres_pool):
    return PostgresEpisodeStore(postgres_pool)


class TestPostgresTopicAndNoteStores:
    """Tests for topics and notes."""

    async def test_topic_round_trip(self, postgres_pool, topic) -> None:
        fetched = await PostgresTopicStore(postgres_pool).get(topic.id)
        assert fetched is not None
        assert fetched.title == topic.title

    async def test_note_create_and_get(self, postgres_pool, topic) -> None:
        store = PostgresNoteStore(postgres_pool)
        note = await store.create(
            Note(topic_id=topic.id, title="Research: q", content="## Findings", type="research")
        )

        fetched = await store.get(note.id)
        assert fetched is not None
        assert fetched.content == "## Findings"
        assert fetched.type == "research"


class TestPostgresStrategyStore:
    """Tests for strategy versioning in PostgreSQL."""

    async def test_versions_and_single_active(self, strategy_store, topic) -> None:
        await strategy_store.create_default(topic.id)
        second = await strategy_store.create_version(
            topic.id, StrategyConfig(search_depth="deep"), parent_version=1
        )

        assert second.version == 2
        assert second.config.search_depth == "deep"
        first = await strategy_store.get_version(topic.id, 1)
        assert first is not None and first.status == StrategyStatus.RETIRED
        active = await strategy_store.get_active(topic.id)
        assert active is not None and active.version == 2

    async def test_concurrent_creates(self, strategy_store, topic) -> None:
        created = await asyncio.gather(
            *(strategy_store.create_default(topic.id) for _ in range(5))
        )

        assert sorted(s.version for s in created) == [1, 2, 3, 4, 5]
        versions = await strategy_store.list_versions(topic.id)
        assert [s.status for s in versions].count(StrategyStatus.ACTIVE) == 1

    async def test_promote_candidate(self, strategy_store, topic) -> None:
        await strategy_store.create_default(topic.id)
        await strategy_store.create_version(
            topic.id, StrategyConfig(), status=StrategyStatus.CANDIDATE, rollout_percentage=20
        )

        promoted = await strategy_store.promote(topic.id, 2)

        assert promoted.status == StrategyStatus.ACTIVE
        assert promoted.rollout_percentage == 100
        active = await strategy_store.get_active(topic.id)
        assert active is not None and active.version == 2

    async def test_unknown_version(self, strategy_store, topic) -> None:
        with pytest.raises(NotFoundError):
            await strategy_store.retire(topic.id, 99)

    async def test_malformed_stored_config_uses_default(
        self, postgres_pool, strategy_store, topic
    ) -> None:
        await strategy_store.create_default(topic.id)
        async with postgres_pool.acquire() as conn:
            await conn.execute(
                "UPDATE strategy_versions SET config = $2 WHERE topic_id = $1",
                topic.id,
                '{"search_depth": 42}',
            )

        active = await strategy_store.get_active(topic.id)
        assert active is not None
        assert active.config == StrategyConfig()


class TestPostgresEpisodeStore:
    """Tests for episodes in PostgreSQL."""

    async def test_lifecycle(self, episode_store, topic) -> None:
        episode = await episode_store.create(
            Episode(topic_id=topic.id, query="q", strategy_version=1)
        )
        await episode_store.update_status(episode.id, EpisodeStatus.RUNNING)

        done = await episode_store.update_status(
            episode.id,
            EpisodeStatus.COMPLETED,
            EpisodeOutcome(
                sources_returned=["https://a", "https://b"],
                followup_count=1,
                tool_usage=[ToolUsage(tool="linkupSearchTool", args={"query": "q"}, result="{}")],
            ),
        )

        assert done.status == EpisodeStatus.COMPLETED
        assert done.sources_returned == ["https://a", "https://b"]
        assert done.tool_usage[0].args == {"query": "q"}
        listed = await episode_store.list_by_strategy_version(topic.id, 1)
        assert [e.id for e in listed] == [episode.id]

    async def test_rejects_regression(self, episode_store, topic) -> None:
        episode = await episode_store.create(
            Episode(topic_id=topic.id, query="q", strategy_version=1)
        )
        await episode_store.update_status(
            episode.id, EpisodeStatus.FAILED, EpisodeOutcome(error_message="boom")
        )

        with pytest.raises(InvalidTransitionError):
            await episode_store.update_status(episode.id, EpisodeStatus.RUNNING)

    async def test_duplicate_and_missing(self, episode_store, topic) -> None:
        episode = await episode_store.create(
            Episode(topic_id=topic.id, query="q", strategy_version=0)
        )
        with pytest.raises(ConflictError):
            await episode_store.create(episode)
        with pytest.raises(NotFoundError):
            await episode_store.update_status(uuid4(), EpisodeStatus.RUNNING)


class TestPostgresEvolutionLogStore:
    """Tests for the evolution audit log in PostgreSQL."""

    async def test_record_and_list(self, postgres_pool, topic) -> None:
        store = PostgresEvolutionLogStore(postgres_pool)
        for version in range(2, 9):
            await store.record(
                topic_id=topic.id,
                from_version=version - 1,
                to_version=version,
                reason=f"Auto-evolved: step {version}",
                before_config={"model": "gpt-4o-mini"},
                after_config={"model": "gpt-4o"},
                metrics=AggregatedMetrics(total_episodes=1),
            )

        recent = await store.list_for_topic(topic.id, limit=5)
        everything = await store.list_for_topic(topic.id)

        assert [e.to_version for e in recent] == [8, 7, 6, 5, 4]
        assert len(everything) == 7
        assert recent[0].changes is not None
        assert recent[0].changes.after == {"model": "gpt-4o"}
