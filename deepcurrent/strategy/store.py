"""StrategyStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from deepcurrent.strategy.models import (
    DEFAULT_STRATEGY_CONFIG,
    Strategy,
    StrategyConfig,
    StrategyStatus,
)


class StrategyStore(ABC):
    """Interface for strategy version persistence.

    Implementations must guarantee, per topic:
        - version numbers are unique and assigned as max + 1 starting at 1
        - at most one version has status ACTIVE at any instant
        - creating an ACTIVE version retires the previously active one
          in the same atomic step
    """

    @abstractmethod
    async def get_active(self, topic_id: UUID) -> Strategy | None:
        """Get the active strategy version for a topic."""
        pass

    @abstractmethod
    async def get_version(self, topic_id: UUID, version: int) -> Strategy | None:
        """Get a specific strategy version."""
        pass

    @abstractmethod
    async def list_versions(self, topic_id: UUID) -> list[Strategy]:
        """List all versions for a topic, newest version first."""
        pass

    @abstractmethod
    async def create_version(
        self,
        topic_id: UUID,
        config: StrategyConfig,
        *,
        parent_version: int | None = None,
        status: StrategyStatus = StrategyStatus.ACTIVE,
        rollout_percentage: int = 100,
    ) -> Strategy:
        """Create the next strategy version for a topic.

        Args:
            topic_id: Owning topic
            config: Configuration snapshot for the new version
            parent_version: Version this one evolved from
            status: Initial status; ACTIVE retires the current active version
            rollout_percentage: Share of traffic for the version

        Returns:
            The created strategy version
        """
        pass

    @abstractmethod
    async def promote(self, topic_id: UUID, version: int) -> Strategy:
        """Make a version active, retiring the current active version.

        Raises:
            NotFoundError: If the version does not exist
        """
        pass

    @abstractmethod
    async def retire(self, topic_id: UUID, version: int) -> Strategy:
        """Retire a version.

        Raises:
            NotFoundError: If the version does not exist
        """
        pass

    @abstractmethod
    async def update_rollout(
        self, topic_id: UUID, version: int, rollout_percentage: int
    ) -> Strategy:
        """Change the rollout percentage of a version.

        Raises:
            NotFoundError: If the version does not exist
        """
        pass

    async def create_default(self, topic_id: UUID) -> Strategy:
        """Create an active version carrying the default configuration."""
        return await self.create_version(topic_id, DEFAULT_STRATEGY_CONFIG)
