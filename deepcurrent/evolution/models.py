"""Evolution domain models: metrics, decisions, analyses and the audit log."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from deepcurrent.strategy.models import StrategyConfig


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class AggregatedMetrics(BaseModel):
    """Outcome averages over all episodes of one (topic, version) pair."""

    model_config = ConfigDict(frozen=True)

    total_episodes: int = Field(default=0, ge=0)
    avg_save_rate: float = Field(default=0.0, ge=0.0)
    avg_followup_count: float = Field(default=0.0, ge=0.0)
    senso_usage_rate: float = Field(default=0.0, ge=0.0, le=1.0)


class Recommendation(str, Enum):
    """Per-episode or per-version recommendation."""

    KEEP = "keep"
    EVOLVE = "evolve"
    ROLLBACK = "rollback"


class EvolutionDecision(BaseModel):
    """Result of the evolution decision engine."""

    model_config = ConfigDict(frozen=True)

    should_evolve: bool
    reason: str
    recommendation: Recommendation
    derived_config: StrategyConfig | None = Field(
        default=None, description="New configuration when evolving"
    )
    metrics: AggregatedMetrics = Field(description="Metrics snapshot the decision was made on")


class EpisodePerformance(BaseModel):
    """Outcome numbers for one episode."""

    model_config = ConfigDict(frozen=True)

    sources_returned: int
    sources_saved: int
    save_rate: float
    followup_count: int
    tool_usage_count: int
    had_error: bool


class EpisodeAnalysis(BaseModel):
    """Heuristic assessment of a single finished episode."""

    model_config = ConfigDict(frozen=True)

    episode_id: UUID
    topic_id: UUID
    strategy_version: int
    performance: EpisodePerformance
    recommendation: Recommendation
    reason: str


class EvolutionChanges(BaseModel):
    """Configuration diff recorded with an evolution."""

    model_config = ConfigDict(frozen=True)

    before: dict[str, Any]
    after: dict[str, Any]
    metrics: AggregatedMetrics


class EvolutionLogEntry(BaseModel):
    """Append-only record of one strategy evolution."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    topic_id: UUID
    from_version: int | None = Field(default=None, description="Version evolved from")
    to_version: int = Field(..., description="Version created")
    reason: str | None = None
    changes: EvolutionChanges | None = None
    created_at: datetime = Field(default_factory=utc_now)
