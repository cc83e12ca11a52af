"""TopicStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from deepcurrent.topics.models import Topic


class TopicStore(ABC):
    """Read access to topics plus a save hook for seeding.

    Topic CRUD lives outside this service; episodes only need lookups.
    """

    @abstractmethod
    async def get(self, topic_id: UUID) -> Topic | None:
        """Get a topic by ID."""
        pass

    @abstractmethod
    async def save(self, topic: Topic) -> Topic:
        """Insert or replace a topic."""
        pass
