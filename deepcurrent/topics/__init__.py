"""Topics: the research subjects episodes run against."""

from deepcurrent.topics.models import Topic
from deepcurrent.topics.store import TopicStore

__all__ = ["Topic", "TopicStore"]
