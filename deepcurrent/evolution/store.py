"""EvolutionLogStore abstract interface."""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID

from deepcurrent.evolution.models import AggregatedMetrics, EvolutionLogEntry


class EvolutionLogStore(ABC):
    """Append-only audit trail of strategy evolutions.

    Entries are inserted once and never updated or deleted.
    """

    @abstractmethod
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
        """Append an evolution entry.

        Args:
            topic_id: Topic whose strategy evolved
            from_version: Version evolved from
            to_version: Version created
            reason: Human-readable reason for the evolution
            before_config: Config payload of the source version
            after_config: Config payload of the new version
            metrics: Metrics the decision was based on

        Returns:
            The stored entry
        """
        pass

    @abstractmethod
    async def get(self, entry_id: UUID) -> EvolutionLogEntry | None:
        """Get an entry by ID."""
        pass

    @abstractmethod
    async def list_for_topic(
        self, topic_id: UUID, limit: int | None = None
    ) -> list[EvolutionLogEntry]:
        """Entries for a topic, newest first, optionally capped to `limit`."""
        pass
