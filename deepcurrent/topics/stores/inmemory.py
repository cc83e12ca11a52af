"""In-memory implementation of TopicStore."""

from uuid import UUID

from deepcurrent.topics.models import Topic
from deepcurrent.topics.store import TopicStore


class InMemoryTopicStore(TopicStore):
    """Dict-backed TopicStore for testing and development."""

    def __init__(self) -> None:
        self._topics: dict[UUID, Topic] = {}

    async def get(self, topic_id: UUID) -> Topic | None:
        return self._topics.get(topic_id)

    async def save(self, topic: Topic) -> Topic:
        self._topics[topic.id] = topic
        return topic
