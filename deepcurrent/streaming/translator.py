"""Agent chunk to stream event translation.

The translator is synchronous and holds per-episode state: the generated
text, the ordered tool log and the sources surfaced by search. Each
chunk maps to an ordered list of events; nothing is buffered across
chunks.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from deepcurrent.agent.chunks import AgentChunk, TextDeltaChunk, ToolCallChunk, ToolResultChunk
from deepcurrent.episodes.models import ToolUsage
from deepcurrent.observability.logging import get_logger
from deepcurrent.streaming.events import (
    EvaluationResultsEvent,
    EvaluationSummary,
    LearningExtractedEvent,
    PartialEvent,
    SearchResultsEvent,
    StatusEvent,
    StreamEvent,
    ToolCallEvent,
    ToolResultEvent,
)

logger = get_logger(__name__)

SEARCH_TOOL = "linkupSearchTool"
EVALUATE_TOOL = "evaluateResultsBatchTool"
EXTRACT_TOOL = "extractLearningsTool"
MEMORY_SEARCH_TOOL = "sensoSearchTool"
MEMORY_GENERATE_TOOL = "sensoGenerateTool"

MAX_SEARCH_URLS = 5
MAX_EVALUATIONS = 3
MAX_LEARNING_CHARS = 200
MAX_FOLLOW_UP_QUESTIONS = 2


# Expected tool output shapes. Extra keys are ignored.


class _SearchHit(BaseModel):
    url: str | None = None


class _SearchOutput(BaseModel):
    results: list[_SearchHit] = Field(default_factory=list)


class _Evaluation(BaseModel):
    url: str | None = None
    is_relevant: bool | None = Field(default=None, alias="isRelevant")
    reason: str | None = None


class _EvaluationOutput(BaseModel):
    evaluations: list[_Evaluation] = Field(default_factory=list)


class _LearningOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    learning: str = ""
    follow_up_questions: list[str] = Field(default_factory=list, alias="followUpQuestions")


class _PendingCall:
    __slots__ = ("tool", "args", "result")

    def __init__(self, tool: str, args: dict[str, Any]) -> None:
        self.tool = tool
        self.args = args
        self.result: str | None = None


class EventStreamTranslator:
    """Translates agent chunks into canonical stream events."""

    def __init__(self) -> None:
        self._text: list[str] = []
        self._calls: list[_PendingCall] = []
        self._sources: dict[str, None] = {}
        self._search_calls = 0

    @property
    def content(self) -> str:
        """Full generated text so far."""
        return "".join(self._text)

    @property
    def tool_usage(self) -> list[ToolUsage]:
        return [ToolUsage(tool=c.tool, args=c.args, result=c.result) for c in self._calls]

    @property
    def sources_returned(self) -> list[str]:
        """De-duplicated source URLs from search results, in first-seen order."""
        return list(self._sources)

    @property
    def followup_count(self) -> int:
        return max(0, self._search_calls - 1)

    @property
    def senso_search_used(self) -> bool:
        return any(c.tool == MEMORY_SEARCH_TOOL for c in self._calls)

    @property
    def senso_generate_used(self) -> bool:
        return any(c.tool == MEMORY_GENERATE_TOOL for c in self._calls)

    def translate(self, chunk: AgentChunk) -> list[StreamEvent]:
        """Map one agent chunk to its ordered events."""
        if isinstance(chunk, TextDeltaChunk):
            self._text.append(chunk.text)
            return [PartialEvent(content=chunk.text)]
        if isinstance(chunk, ToolCallChunk):
            return self._on_tool_call(chunk)
        if isinstance(chunk, ToolResultChunk):
            return self._on_tool_result(chunk)
        logger.warning("unknown_agent_chunk", chunk_type=type(chunk).__name__)
        return []

    def _on_tool_call(self, chunk: ToolCallChunk) -> list[StreamEvent]:
        args = chunk.args
        self._calls.append(_PendingCall(chunk.tool_name, args))
        events: list[StreamEvent] = [ToolCallEvent(tool=chunk.tool_name, args=args)]

        status = self._status_for_call(chunk.tool_name, args)
        if status is not None:
            events.append(status)
        return events

    def _status_for_call(self, tool: str, args: dict[str, Any]) -> StatusEvent | None:
        query = args.get("query")
        if tool == SEARCH_TOOL:
            self._search_calls += 1
            return StatusEvent(
                status="searching",
                message=f"Searching: {query or 'web'}",
                details={"query": query},
            )
        if tool == EVALUATE_TOOL:
            results = args.get("results")
            count = len(results) if isinstance(results, list) else 0
            return StatusEvent(
                status="evaluating",
                message=f"Evaluating {count} search results...",
                details={"query": query, "resultCount": count},
            )
        if tool == EXTRACT_TOOL:
            result = args.get("result")
            result = result if isinstance(result, dict) else {}
            return StatusEvent(
                status="extracting",
                message=f"Extracting key learnings from: {result.get('title') or 'result'}",
                details={"url": result.get("url")},
            )
        return None

    def _on_tool_result(self, chunk: ToolResultChunk) -> list[StreamEvent]:
        result = json.dumps(chunk.output, default=str)
        call = self._match_call(chunk.tool_name)
        if call is None:
            call = _PendingCall(chunk.tool_name, {})
            self._calls.append(call)
        call.result = result

        events: list[StreamEvent] = [ToolResultEvent(tool=chunk.tool_name, result=result)]
        enrichment = self._enrich(chunk.tool_name, chunk.output, call)
        if enrichment is not None:
            events.append(enrichment)
        return events

    def _match_call(self, tool: str) -> _PendingCall | None:
        for call in self._calls:
            if call.tool == tool and call.result is None:
                return call
        return None

    def _enrich(self, tool: str, output: Any, call: _PendingCall) -> StreamEvent | None:
        try:
            if tool == SEARCH_TOOL:
                return self._search_results(_SearchOutput.model_validate(output), call)
            if tool == EVALUATE_TOOL:
                return _evaluation_results(_EvaluationOutput.model_validate(output))
            if tool == EXTRACT_TOOL:
                return _learning_extracted(_LearningOutput.model_validate(output))
        except ValidationError as e:
            logger.debug("tool_output_enrichment_skipped", tool=tool, error_count=e.error_count())
        return None

    def _search_results(self, output: _SearchOutput, call: _PendingCall) -> SearchResultsEvent:
        urls = [hit.url for hit in output.results if hit.url]
        for url in urls:
            self._sources.setdefault(url, None)
        query = call.args.get("query")
        return SearchResultsEvent(
            query=query if isinstance(query, str) else "unknown",
            count=len(output.results),
            urls=urls[:MAX_SEARCH_URLS],
        )


def _evaluation_results(output: _EvaluationOutput) -> EvaluationResultsEvent:
    evaluations = output.evaluations
    return EvaluationResultsEvent(
        evaluated=len(evaluations),
        relevant=sum(1 for e in evaluations if e.is_relevant is True),
        results=[
            EvaluationSummary(
                url=e.url or "unknown",
                is_relevant=bool(e.is_relevant),
                reason=e.reason or "no reason provided",
            )
            for e in evaluations[:MAX_EVALUATIONS]
        ],
    )


def _learning_extracted(output: _LearningOutput) -> LearningExtractedEvent:
    learning = output.learning
    if len(learning) > MAX_LEARNING_CHARS:
        learning = learning[:MAX_LEARNING_CHARS] + "..."
    return LearningExtractedEvent(
        learning=learning,
        follow_up_questions=output.follow_up_questions[:MAX_FOLLOW_UP_QUESTIONS],
    )
