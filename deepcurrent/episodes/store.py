"""EpisodeStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from deepcurrent.episodes.models import Episode, EpisodeOutcome, EpisodeStatus


class EpisodeStore(ABC):
    """Interface for episode persistence.

    Implementations enforce the status transition table: updates that
    regress the status or touch a terminal episode raise
    InvalidTransitionError.
    """

    @abstractmethod
    async def create(self, episode: Episode) -> Episode:
        """Persist a new episode."""
        pass

    @abstractmethod
    async def get(self, episode_id: UUID) -> Episode | None:
        """Get an episode by ID."""
        pass

    @abstractmethod
    async def update_status(
        self,
        episode_id: UUID,
        status: EpisodeStatus,
        outcome: EpisodeOutcome | None = None,
    ) -> Episode:
        """Transition an episode and optionally write outcome fields.

        Args:
            episode_id: Episode to update
            status: Target status
            outcome: Outcome fields to write alongside the status

        Returns:
            The updated episode

        Raises:
            NotFoundError: If the episode does not exist
            InvalidTransitionError: If the transition is not allowed
        """
        pass

    @abstractmethod
    async def list_by_strategy_version(
        self, topic_id: UUID, strategy_version: int
    ) -> list[Episode]:
        """All episodes of a topic run against one strategy version."""
        pass

    @abstractmethod
    async def list_by_topic(self, topic_id: UUID, limit: int = 50) -> list[Episode]:
        """Episodes of a topic, newest first."""
        pass
