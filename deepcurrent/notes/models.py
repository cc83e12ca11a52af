"""Note model."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Note(BaseModel):
    """User-facing research artifact."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    topic_id: UUID = Field(..., description="Owning topic")
    title: str = Field(..., description="Note title")
    content: str = Field(..., description="Markdown body")
    type: str | None = Field(default=None, description="Note kind, e.g. 'research'")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
