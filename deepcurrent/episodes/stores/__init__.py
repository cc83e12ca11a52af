"""Episode store implementations."""

from deepcurrent.episodes.stores.inmemory import InMemoryEpisodeStore
from deepcurrent.episodes.stores.postgres import PostgresEpisodeStore

__all__ = ["InMemoryEpisodeStore", "PostgresEpisodeStore"]
