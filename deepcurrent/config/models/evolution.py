"""Strategy evolution configuration models."""

from pydantic import BaseModel, Field


class AnalysisQueueConfig(BaseModel):
    """Post-episode analysis work queue."""

    workers: int = Field(default=1, ge=1, description="Concurrent analysis workers")
    max_recent_failures: int = Field(
        default=100,
        ge=1,
        description="Failed analysis runs kept for inspection",
    )
    shutdown_timeout_seconds: float = Field(
        default=5.0,
        ge=0.0,
        description="Time allowed to drain queued analyses on shutdown",
    )


class EvolutionConfig(BaseModel):
    """Evolution decision and rollout settings."""

    min_episodes: int = Field(
        default=1,
        ge=1,
        description="Episodes required before a version may evolve",
    )
    candidate_rollout_percentage: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Rollout percentage assigned to evolved candidate versions",
    )
    recent_limit: int = Field(
        default=5,
        ge=1,
        description="Entries returned by the evolutions list when 'recent' is set",
    )
    analysis: AnalysisQueueConfig = Field(
        default_factory=AnalysisQueueConfig,
        description="Analysis queue settings",
    )
