"""Topic model."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Topic(BaseModel):
    """A research subject owning strategies, episodes and notes."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    title: str = Field(..., min_length=1, description="Display title")
    description: str | None = Field(default=None, description="Free-form description")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
