"""Episode execution configuration models."""

from typing import Literal

from pydantic import BaseModel, Field


class AgentConfig(BaseModel):
    """Research agent capability selection."""

    provider: Literal["scripted"] = Field(
        default="scripted",
        description="Agent implementation backing episodes",
    )
    chunk_delay_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Pause between chunks for the scripted agent",
    )


class ResearchConfig(BaseModel):
    """Episode pipeline configuration."""

    agent: AgentConfig = Field(default_factory=AgentConfig, description="Agent settings")
    stream_buffer_size: int | None = Field(
        default=None,
        gt=0,
        description=(
            "Event channel capacity per episode. None means unbounded; "
            "a full buffer blocks the producer, events are never dropped."
        ),
    )
    note_title_max_length: int = Field(
        default=60,
        gt=0,
        description="Query characters kept in generated note titles",
    )
