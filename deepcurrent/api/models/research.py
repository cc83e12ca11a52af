"""Request and response models for research endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from deepcurrent.evolution.models import EvolutionLogEntry


class AskRequest(BaseModel):
    """Body of POST /v1/topics/{topic_id}/ask/stream."""

    query: str = Field(..., description="Research question")


class EvolutionResponse(BaseModel):
    """One strategy evolution as returned by the evolutions list."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    from_version: int | None
    to_version: int
    reason: str
    timestamp: datetime
    changes: dict[str, Any] | None = None

    @classmethod
    def from_entry(cls, entry: EvolutionLogEntry) -> "EvolutionResponse":
        return cls(
            from_version=entry.from_version,
            to_version=entry.to_version,
            reason=entry.reason or "No reason provided",
            timestamp=entry.created_at,
            changes=entry.changes.model_dump(mode="json") if entry.changes else None,
        )
