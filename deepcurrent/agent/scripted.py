"""Scripted research agent for development and testing.

Replays a fixed chunk script, or synthesises a plausible research run
from the runtime context, without calling any external service.
"""

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Any

from deepcurrent.agent.base import AgentRuntimeContext, ResearchAgent
from deepcurrent.agent.chunks import AgentChunk, TextDeltaChunk, ToolCallChunk, ToolResultChunk

SEARCH_TOOL = "linkupSearchTool"
EVALUATE_TOOL = "evaluateResultsBatchTool"
EXTRACT_TOOL = "extractLearningsTool"
MEMORY_SEARCH_TOOL = "sensoSearchTool"

_FOLLOWUPS_BY_DEPTH = {"shallow": 0, "standard": 1, "deep": 2}


class ScriptedResearchAgent(ResearchAgent):
    """Agent that streams scripted chunks.

    Useful for unit testing and local development.
    """

    def __init__(
        self,
        script: Sequence[AgentChunk] | None = None,
        chunk_delay_seconds: float = 0.0,
        results_per_search: int = 3,
        text_chunk_size: int = 40,
    ) -> None:
        """Initialize scripted agent.

        Args:
            script: Chunks to replay; synthesised from the context when None
            chunk_delay_seconds: Pause between chunks
            results_per_search: Search results produced per synthesised search
            text_chunk_size: Characters per synthesised text delta
        """
        self._script = list(script) if script is not None else None
        self._chunk_delay_seconds = chunk_delay_seconds
        self._results_per_search = results_per_search
        self._text_chunk_size = text_chunk_size
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "scripted"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    async def stream(
        self, prompt: str, context: AgentRuntimeContext
    ) -> AsyncIterator[AgentChunk]:
        self._call_history.append({"prompt": prompt, "context": context})
        chunks = self._script if self._script is not None else self._synthesise(context)
        for chunk in chunks:
            if self._chunk_delay_seconds:
                await asyncio.sleep(self._chunk_delay_seconds)
            yield chunk

    def _synthesise(self, context: AgentRuntimeContext) -> list[AgentChunk]:
        chunks: list[AgentChunk] = []
        if context.senso_first:
            chunks.append(ToolCallChunk(tool_name=MEMORY_SEARCH_TOOL, args={"query": context.query}))
            chunks.append(ToolResultChunk(tool_name=MEMORY_SEARCH_TOOL, output={"results": []}))

        followups = _FOLLOWUPS_BY_DEPTH[context.search_depth]
        if context.max_followups is not None:
            followups = min(followups, context.max_followups)

        queries = [context.query] + [
            f"{context.query} (follow-up {n})" for n in range(1, followups + 1)
        ]
        findings: list[str] = []
        for search_index, query in enumerate(queries):
            results = [
                {
                    "title": f"{query} - source {n}",
                    "url": f"https://example.org/{context.topic_id}/{search_index}/{n}",
                    "content": f"Background material on {query}.",
                }
                for n in range(1, self._results_per_search + 1)
            ]
            chunks.append(ToolCallChunk(tool_name=SEARCH_TOOL, args={"query": query}))
            chunks.append(ToolResultChunk(tool_name=SEARCH_TOOL, output={"results": results}))

            if not context.skip_evaluation:
                chunks.append(
                    ToolCallChunk(tool_name=EVALUATE_TOOL, args={"query": query, "results": results})
                )
                chunks.append(
                    ToolResultChunk(
                        tool_name=EVALUATE_TOOL,
                        output={
                            "evaluations": [
                                {"url": r["url"], "isRelevant": True, "reason": "Matches the query"}
                                for r in results
                            ]
                        },
                    )
                )

            top = results[0]
            learning = f"{top['title']} summarises the current state of {query}."
            chunks.append(
                ToolCallChunk(tool_name=EXTRACT_TOOL, args={"query": query, "result": top})
            )
            chunks.append(
                ToolResultChunk(
                    tool_name=EXTRACT_TOOL,
                    output={
                        "learning": learning,
                        "followUpQuestions": [f"What changed recently in {query}?"],
                    },
                )
            )
            findings.append(f"- {learning} ([source]({top['url']}))")

        text = "\n".join([f"## {context.query}", "", "### Key findings", *findings, ""])
        size = self._text_chunk_size
        chunks.extend(
            TextDeltaChunk(text=text[i : i + size]) for i in range(0, len(text), size)
        )
        return chunks
