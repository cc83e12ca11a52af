"""Factories for research domain objects and scripted agent runs."""

from typing import Any
from uuid import UUID, uuid4

from deepcurrent.agent.chunks import AgentChunk, TextDeltaChunk, ToolCallChunk, ToolResultChunk
from deepcurrent.episodes.models import Episode, EpisodeStatus, ToolUsage
from deepcurrent.topics.models import Topic


class TopicFactory:
    """Factory for Topic objects."""

    @staticmethod
    def create(topic_id: UUID | None = None, title: str = "Solid-state batteries") -> Topic:
        return Topic(id=topic_id or uuid4(), title=title, description="Test topic")


class EpisodeFactory:
    """Factory for Episode objects in any lifecycle state."""

    @staticmethod
    def create(
        topic_id: UUID,
        strategy_version: int = 1,
        status: EpisodeStatus = EpisodeStatus.COMPLETED,
        returned: int = 0,
        saved: int = 0,
        followup_count: int = 0,
        tools: list[str] | None = None,
        **kwargs: Any,
    ) -> Episode:
        urls = [f"https://example.org/{n}" for n in range(returned)]
        return Episode(
            topic_id=topic_id,
            query=kwargs.pop("query", "What is new?"),
            strategy_version=strategy_version,
            status=status,
            sources_returned=urls,
            sources_saved=urls[:saved],
            followup_count=followup_count,
            tool_usage=[ToolUsage(tool=t) for t in tools or []],
            **kwargs,
        )


def search_chunks(query: str, urls: list[str]) -> list[AgentChunk]:
    """A search tool call followed by its result."""
    return [
        ToolCallChunk(tool_name="linkupSearchTool", args={"query": query}),
        ToolResultChunk(
            tool_name="linkupSearchTool",
            output={"results": [{"url": url, "title": f"Page {url}"} for url in urls]},
        ),
    ]


def research_script(
    urls: list[str] | None = None,
    text: tuple[str, ...] = ("## Findings\n", "- Batteries got better.\n"),
) -> list[AgentChunk]:
    """One search, one extraction, then generated text."""
    urls = urls if urls is not None else [f"https://example.org/{n}" for n in range(5)]
    chunks = search_chunks("batteries", urls)
    chunks += [
        ToolCallChunk(
            tool_name="extractLearningsTool",
            args={"result": {"title": "Page 0", "url": urls[0] if urls else None}},
        ),
        ToolResultChunk(
            tool_name="extractLearningsTool",
            output={"learning": "Energy density is up.", "followUpQuestions": ["Cost?"]},
        ),
    ]
    chunks += [TextDeltaChunk(text=t) for t in text]
    return chunks
