"""Tests for InMemoryStrategyStore."""

import asyncio
from uuid import uuid4

import pytest

from deepcurrent.db.errors import NotFoundError
from deepcurrent.strategy import (
    DEFAULT_STRATEGY_CONFIG,
    StrategyConfig,
    StrategyStatus,
)
from deepcurrent.strategy.stores.inmemory import InMemoryStrategyStore


@pytest.fixture
def store() -> InMemoryStrategyStore:
    return InMemoryStrategyStore()


@pytest.fixture
def topic_id():
    return uuid4()


class TestCreateVersion:
    """Tests for version creation and numbering."""

    async def test_first_version_is_one(self, store, topic_id) -> None:
        strategy = await store.create_default(topic_id)
        assert strategy.version == 1
        assert strategy.status == StrategyStatus.ACTIVE
        assert strategy.config == DEFAULT_STRATEGY_CONFIG
        assert await store.get_active(topic_id) == strategy

    async def test_versions_increment(self, store, topic_id) -> None:
        await store.create_default(topic_id)
        second = await store.create_version(
            topic_id,
            StrategyConfig(search_depth="deep"),
            parent_version=1,
            status=StrategyStatus.CANDIDATE,
            rollout_percentage=20,
        )
        assert second.version == 2
        assert second.parent_version == 1
        assert second.rollout_percentage == 20
        # Candidate does not displace the active version
        active = await store.get_active(topic_id)
        assert active is not None and active.version == 1

    async def test_new_active_retires_previous(self, store, topic_id) -> None:
        await store.create_default(topic_id)
        await store.create_version(topic_id, StrategyConfig(model="gpt-4o"))

        first = await store.get_version(topic_id, 1)
        assert first is not None and first.status == StrategyStatus.RETIRED
        active = await store.get_active(topic_id)
        assert active is not None and active.version == 2

    async def test_topics_numbered_independently(self, store) -> None:
        a, b = uuid4(), uuid4()
        await store.create_default(a)
        await store.create_default(a)
        created = await store.create_default(b)
        assert created.version == 1

    async def test_concurrent_creates_keep_single_active(self, store, topic_id) -> None:
        results = await asyncio.gather(
            *(store.create_default(topic_id) for _ in range(10))
        )

        assert sorted(s.version for s in results) == list(range(1, 11))
        versions = await store.list_versions(topic_id)
        assert [s.status for s in versions].count(StrategyStatus.ACTIVE) == 1

    async def test_list_versions_newest_first(self, store, topic_id) -> None:
        for _ in range(3):
            await store.create_default(topic_id)
        assert [s.version for s in await store.list_versions(topic_id)] == [3, 2, 1]

    async def test_missing_lookups_return_none(self, store, topic_id) -> None:
        assert await store.get_active(topic_id) is None
        assert await store.get_version(topic_id, 1) is None
        assert await store.list_versions(topic_id) == []


class TestLifecycle:
    """Tests for promote, retire and rollout changes."""

    async def test_promote_candidate(self, store, topic_id) -> None:
        await store.create_default(topic_id)
        await store.create_version(
            topic_id, StrategyConfig(), status=StrategyStatus.CANDIDATE, rollout_percentage=20
        )

        promoted = await store.promote(topic_id, 2)

        assert promoted.status == StrategyStatus.ACTIVE
        assert promoted.rollout_percentage == 100
        previous = await store.get_version(topic_id, 1)
        assert previous is not None and previous.status == StrategyStatus.RETIRED

    async def test_promote_active_is_noop(self, store, topic_id) -> None:
        created = await store.create_default(topic_id)
        assert await store.promote(topic_id, 1) == created

    async def test_retire(self, store, topic_id) -> None:
        await store.create_default(topic_id)
        retired = await store.retire(topic_id, 1)
        assert retired.status == StrategyStatus.RETIRED
        assert await store.get_active(topic_id) is None

    async def test_update_rollout(self, store, topic_id) -> None:
        await store.create_default(topic_id)
        updated = await store.update_rollout(topic_id, 1, 50)
        assert updated.rollout_percentage == 50

    async def test_update_rollout_rejects_out_of_range(self, store, topic_id) -> None:
        await store.create_default(topic_id)
        with pytest.raises(ValueError):
            await store.update_rollout(topic_id, 1, 150)

    @pytest.mark.parametrize("operation", ["promote", "retire"])
    async def test_unknown_version_raises(self, store, topic_id, operation: str) -> None:
        with pytest.raises(NotFoundError):
            await getattr(store, operation)(topic_id, 7)
