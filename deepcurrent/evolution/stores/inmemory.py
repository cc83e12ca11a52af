"""In-memory implementation of EvolutionLogStore."""

from typing import Any
from uuid import UUID

from deepcurrent.evolution.models import AggregatedMetrics, EvolutionChanges, EvolutionLogEntry
from deepcurrent.evolution.store import EvolutionLogStore


class InMemoryEvolutionLogStore(EvolutionLogStore):
    """List-backed EvolutionLogStore for testing and development."""

    def __init__(self) -> None:
        self._entries: list[EvolutionLogEntry] = []

    async def record(
        self,
        topic_id: UUID,
        from_version: int | None,
        to_version: int,
        reason: str,
        before_config: dict[str, Any],
        after_config: dict[str, Any],
        metrics: AggregatedMetrics,
    ) -> EvolutionLogEntry:
        entry = EvolutionLogEntry(
            topic_id=topic_id,
            from_version=from_version,
            to_version=to_version,
            reason=reason,
            changes=EvolutionChanges(
                before=before_config, after=after_config, metrics=metrics
            ),
        )
        self._entries.append(entry)
        return entry

    async def get(self, entry_id: UUID) -> EvolutionLogEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    async def list_for_topic(
        self, topic_id: UUID, limit: int | None = None
    ) -> list[EvolutionLogEntry]:
        # Insertion order breaks ties between identical timestamps
        indexed = [(i, e) for i, e in enumerate(self._entries) if e.topic_id == topic_id]
        indexed.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        entries = [e for _, e in indexed]
        return entries[:limit] if limit is not None else entries
