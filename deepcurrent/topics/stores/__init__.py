"""Topic store implementations."""

from deepcurrent.topics.store import TopicStore
from deepcurrent.topics.stores.inmemory import InMemoryTopicStore
from deepcurrent.topics.stores.postgres import PostgresTopicStore

__all__ = ["TopicStore", "InMemoryTopicStore", "PostgresTopicStore"]
