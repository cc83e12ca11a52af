"""Tests for InMemoryEvolutionLogStore."""

from uuid import uuid4

from deepcurrent.evolution.models import AggregatedMetrics
from deepcurrent.evolution.stores.inmemory import InMemoryEvolutionLogStore


async def _record(store, topic_id, to_version: int):
    return await store.record(
        topic_id=topic_id,
        from_version=to_version - 1,
        to_version=to_version,
        reason=f"Auto-evolved: step {to_version}",
        before_config={"search_depth": "standard"},
        after_config={"search_depth": "deep"},
        metrics=AggregatedMetrics(total_episodes=1),
    )


class TestEvolutionLogStore:
    """Tests for recording and listing evolutions."""

    async def test_record_and_get(self) -> None:
        store = InMemoryEvolutionLogStore()
        entry = await _record(store, uuid4(), 2)

        fetched = await store.get(entry.id)
        assert fetched == entry
        assert fetched.changes is not None
        assert fetched.changes.after == {"search_depth": "deep"}

    async def test_list_newest_first(self) -> None:
        store = InMemoryEvolutionLogStore()
        topic_id = uuid4()
        for version in range(2, 9):
            await _record(store, topic_id, version)
        await _record(store, uuid4(), 2)

        entries = await store.list_for_topic(topic_id)
        assert [e.to_version for e in entries] == [8, 7, 6, 5, 4, 3, 2]

    async def test_list_with_limit(self) -> None:
        store = InMemoryEvolutionLogStore()
        topic_id = uuid4()
        for version in range(2, 9):
            await _record(store, topic_id, version)

        entries = await store.list_for_topic(topic_id, limit=5)
        assert [e.to_version for e in entries] == [8, 7, 6, 5, 4]

    async def test_unknown_topic_is_empty(self) -> None:
        assert await InMemoryEvolutionLogStore().list_for_topic(uuid4()) == []
