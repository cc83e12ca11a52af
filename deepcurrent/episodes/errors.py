"""Episode domain errors.

Raised by the episode controller. The API layer maps them to HTTP errors
when they occur before a stream starts; inside a stream they become an
``error`` event.
"""

from uuid import UUID


class EpisodeError(Exception):
    """Base class for episode errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class EpisodeValidationError(EpisodeError):
    """Raised when an episode request is invalid (e.g. empty query)."""


class TopicNotFoundError(EpisodeError):
    """Raised when the requested topic does not exist."""

    def __init__(self, topic_id: UUID) -> None:
        super().__init__(f"Topic {topic_id} not found")
        self.topic_id = topic_id


class EpisodeNotFoundError(EpisodeError):
    """Raised when an episode lookup fails."""

    def __init__(self, episode_id: UUID) -> None:
        super().__init__(f"Episode {episode_id} not found")
        self.episode_id = episode_id


class AgentExecutionError(EpisodeError):
    """Raised when the research agent fails mid-stream."""


class PersistenceError(EpisodeError):
    """Raised when writing episode state or the result note fails."""
