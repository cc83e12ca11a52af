"""Research episodes: one query run against a snapshot of the active strategy."""

from deepcurrent.episodes.errors import (
    AgentExecutionError,
    EpisodeError,
    EpisodeNotFoundError,
    EpisodeValidationError,
    PersistenceError,
    TopicNotFoundError,
)
from deepcurrent.episodes.models import Episode, EpisodeOutcome, EpisodeStatus, ToolUsage
from deepcurrent.episodes.store import EpisodeStore

__all__ = [
    "AgentExecutionError",
    "Episode",
    "EpisodeError",
    "EpisodeNotFoundError",
    "EpisodeOutcome",
    "EpisodeStatus",
    "EpisodeStore",
    "EpisodeValidationError",
    "PersistenceError",
    "ToolUsage",
    "TopicNotFoundError",
]
