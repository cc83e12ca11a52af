"""Canonical episode stream events.

Each event serialises to a JSON object with a ``type`` discriminator and
camelCase field names.
"""

from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

StatusPhase = Literal["initializing", "searching", "evaluating", "extracting", "saving"]


class StreamEvent(BaseModel):
    """Base class for events emitted on an episode stream."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    type: str

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible payload with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EpisodeCreatedEvent(StreamEvent):
    type: Literal["episode_created"] = "episode_created"
    episode_id: UUID


class StatusEvent(StreamEvent):
    type: Literal["status"] = "status"
    status: StatusPhase
    message: str
    details: dict[str, Any] | None = None


class PartialEvent(StreamEvent):
    type: Literal["partial"] = "partial"
    content: str


class ToolCallEvent(StreamEvent):
    type: Literal["tool_call"] = "tool_call"
    tool: str
    args: dict[str, Any] = Field(default_factory=dict)


class ToolResultEvent(StreamEvent):
    type: Literal["tool_result"] = "tool_result"
    tool: str
    result: str


class SearchResultsEvent(StreamEvent):
    type: Literal["search_results"] = "search_results"
    query: str
    count: int
    urls: list[str]


class EvaluationSummary(BaseModel):
    """One evaluated search result."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    url: str
    is_relevant: bool
    reason: str


class EvaluationResultsEvent(StreamEvent):
    type: Literal["evaluation_results"] = "evaluation_results"
    evaluated: int
    relevant: int
    results: list[EvaluationSummary]


class LearningExtractedEvent(StreamEvent):
    type: Literal["learning_extracted"] = "learning_extracted"
    learning: str
    follow_up_questions: list[str]


class NoteCreatedEvent(StreamEvent):
    type: Literal["note_created"] = "note_created"
    note_id: UUID
    note_title: str


class CompleteEvent(StreamEvent):
    type: Literal["complete"] = "complete"
    episode_id: UUID
    note_id: UUID


class ErrorEvent(StreamEvent):
    type: Literal["error"] = "error"
    error: str
