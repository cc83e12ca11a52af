"""Strategy store implementations."""

from deepcurrent.strategy.stores.inmemory import InMemoryStrategyStore
from deepcurrent.strategy.stores.postgres import PostgresStrategyStore

__all__ = ["InMemoryStrategyStore", "PostgresStrategyStore"]
