"""Evolution log store implementations."""

from deepcurrent.evolution.stores.inmemory import InMemoryEvolutionLogStore
from deepcurrent.evolution.stores.postgres import PostgresEvolutionLogStore

__all__ = ["InMemoryEvolutionLogStore", "PostgresEvolutionLogStore"]
