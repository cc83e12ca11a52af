"""Episode domain models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class EpisodeStatus(str, Enum):
    """Lifecycle state of an episode."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (EpisodeStatus.COMPLETED, EpisodeStatus.FAILED)

    def can_transition_to(self, target: "EpisodeStatus") -> bool:
        """Check the status transition table.

        Transitions are monotonic: pending -> running -> completed|failed.
        A pending episode may also fail directly.
        """
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[EpisodeStatus, frozenset[EpisodeStatus]] = {
    EpisodeStatus.PENDING: frozenset({EpisodeStatus.RUNNING, EpisodeStatus.FAILED}),
    EpisodeStatus.RUNNING: frozenset({EpisodeStatus.COMPLETED, EpisodeStatus.FAILED}),
    EpisodeStatus.COMPLETED: frozenset(),
    EpisodeStatus.FAILED: frozenset(),
}


class ToolUsage(BaseModel):
    """One agent tool invocation recorded during an episode."""

    model_config = ConfigDict(frozen=True)

    tool: str = Field(..., description="Tool name")
    args: dict[str, Any] = Field(default_factory=dict, description="Call arguments")
    result: str | None = Field(default=None, description="JSON-encoded tool output")


class Episode(BaseModel):
    """A single research run against one strategy version.

    Outcome fields are written once, when the episode completes.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    topic_id: UUID = Field(..., description="Topic researched")
    query: str = Field(..., min_length=1, description="User research question")
    strategy_version: int = Field(..., ge=0, description="Strategy version snapshot")
    status: EpisodeStatus = Field(default=EpisodeStatus.PENDING, description="Lifecycle state")
    sources_returned: list[str] = Field(
        default_factory=list, description="Ordered source URLs surfaced by search"
    )
    sources_saved: list[str] = Field(
        default_factory=list, description="Sources the user kept"
    )
    followup_count: int = Field(default=0, ge=0, description="Search calls after the first")
    tool_usage: list[ToolUsage] = Field(default_factory=list, description="Ordered tool log")
    senso_search_used: bool = Field(default=False, description="Memory search was used")
    senso_generate_used: bool = Field(default=False, description="Memory generation was used")
    result_note_id: UUID | None = Field(default=None, description="Note produced")
    error_message: str | None = Field(default=None, description="Failure message")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last update time")

    @property
    def save_rate(self) -> float:
        """Fraction of returned sources that were saved; 0 when none returned."""
        if not self.sources_returned:
            return 0.0
        return len(self.sources_saved) / len(self.sources_returned)


class EpisodeOutcome(BaseModel):
    """Outcome fields written together with a terminal status."""

    model_config = ConfigDict(frozen=True)

    sources_returned: list[str] | None = None
    sources_saved: list[str] | None = None
    followup_count: int | None = Field(default=None, ge=0)
    tool_usage: list[ToolUsage] | None = None
    senso_search_used: bool | None = None
    senso_generate_used: bool | None = None
    result_note_id: UUID | None = None
    error_message: str | None = None

    def as_update(self) -> dict[str, Any]:
        """Fields explicitly set on this outcome."""
        return {name: getattr(self, name) for name in self.model_fields_set}
