"""Strategy evolution: metrics aggregation, decisions and the evolution log."""

from deepcurrent.evolution.aggregator import MetricsAggregator, aggregate
from deepcurrent.evolution.engine import decide, derive_config
from deepcurrent.evolution.models import (
    AggregatedMetrics,
    EpisodeAnalysis,
    EvolutionDecision,
    EvolutionLogEntry,
    Recommendation,
)
from deepcurrent.evolution.store import EvolutionLogStore

__all__ = [
    "AggregatedMetrics",
    "EpisodeAnalysis",
    "EvolutionDecision",
    "EvolutionLogEntry",
    "EvolutionLogStore",
    "MetricsAggregator",
    "Recommendation",
    "aggregate",
    "decide",
    "derive_config",
]
