"""Chunk types produced by a research agent's stream."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TextDeltaChunk(BaseModel):
    """A fragment of the agent's generated text."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text-delta"] = "text-delta"
    text: str = Field(..., description="Generated text fragment")


class ToolCallChunk(BaseModel):
    """The agent invoked a tool."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool-call"] = "tool-call"
    tool_name: str = Field(..., description="Tool invoked")
    args: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class ToolResultChunk(BaseModel):
    """A tool returned its output."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool-result"] = "tool-result"
    tool_name: str = Field(..., description="Tool that produced the output")
    output: Any = Field(default=None, description="Tool output, any JSON-compatible value")


AgentChunk = Annotated[
    TextDeltaChunk | ToolCallChunk | ToolResultChunk,
    Field(discriminator="type"),
]

agent_chunk_adapter: TypeAdapter[AgentChunk] = TypeAdapter(AgentChunk)
