"""Configuration section models."""

from deepcurrent.config.models.api import APIConfig
from deepcurrent.config.models.evolution import AnalysisQueueConfig, EvolutionConfig
from deepcurrent.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from deepcurrent.config.models.research import AgentConfig, ResearchConfig
from deepcurrent.config.models.storage import PostgresConfig, StorageConfig

__all__ = [
    "APIConfig",
    "AgentConfig",
    "AnalysisQueueConfig",
    "EvolutionConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
    "PostgresConfig",
    "ResearchConfig",
    "StorageConfig",
    "TracingConfig",
]
