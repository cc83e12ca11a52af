"""Tests for ScriptedResearchAgent and the agent factory."""

from uuid import uuid4

import pytest

from deepcurrent.agent import create_research_agent
from deepcurrent.agent.base import AgentRuntimeContext
from deepcurrent.agent.chunks import TextDeltaChunk, ToolCallChunk, agent_chunk_adapter
from deepcurrent.agent.scripted import ScriptedResearchAgent
from deepcurrent.config.models.research import AgentConfig
from deepcurrent.strategy.models import StrategyConfig


def _context(**config) -> AgentRuntimeContext:
    return AgentRuntimeContext.from_strategy(
        StrategyConfig(**config),
        strategy_version=1,
        topic_id=uuid4(),
        episode_id=uuid4(),
        query="grid storage",
    )


async def _chunks(agent: ScriptedResearchAgent, context: AgentRuntimeContext) -> list:
    return [chunk async for chunk in agent.stream("prompt", context)]


def _tool_calls(chunks) -> list[str]:
    return [c.tool_name for c in chunks if isinstance(c, ToolCallChunk)]


class TestScriptedResearchAgent:
    """Tests for scripted and synthesised runs."""

    async def test_replays_script(self) -> None:
        script = [TextDeltaChunk(text="a"), TextDeltaChunk(text="b")]
        agent = ScriptedResearchAgent(script=script)

        assert await _chunks(agent, _context()) == script
        assert agent.call_history[0]["prompt"] == "prompt"
        assert agent.provider_name == "scripted"

    async def test_standard_depth_has_one_followup(self) -> None:
        chunks = await _chunks(ScriptedResearchAgent(), _context())

        assert _tool_calls(chunks) == [
            "linkupSearchTool",
            "evaluateResultsBatchTool",
            "extractLearningsTool",
        ] * 2
        text = "".join(c.text for c in chunks if isinstance(c, TextDeltaChunk))
        assert text.startswith("## grid storage")

    async def test_shallow_without_evaluation(self) -> None:
        chunks = await _chunks(
            ScriptedResearchAgent(), _context(search_depth="shallow", skip_evaluation=True)
        )
        assert _tool_calls(chunks) == ["linkupSearchTool", "extractLearningsTool"]

    async def test_max_followups_caps_depth(self) -> None:
        chunks = await _chunks(
            ScriptedResearchAgent(), _context(search_depth="deep", max_followups=1)
        )
        assert _tool_calls(chunks).count("linkupSearchTool") == 2

    async def test_senso_first(self) -> None:
        chunks = await _chunks(ScriptedResearchAgent(), _context(senso_first=True))
        assert _tool_calls(chunks)[0] == "sensoSearchTool"

    async def test_search_urls_unique(self) -> None:
        chunks = await _chunks(
            ScriptedResearchAgent(results_per_search=2), _context(search_depth="deep")
        )
        urls = [
            r["url"]
            for c in chunks
            if getattr(c, "tool_name", None) == "linkupSearchTool" and c.type == "tool-result"
            for r in c.output["results"]
        ]
        assert len(urls) == 6
        assert len(set(urls)) == 6


class TestAgentChunks:
    """Tests for chunk validation."""

    def test_discriminated_by_type(self) -> None:
        chunk = agent_chunk_adapter.validate_python(
            {"type": "tool-call", "tool_name": "linkupSearchTool", "args": {"query": "q"}}
        )
        assert isinstance(chunk, ToolCallChunk)


class TestCreateResearchAgent:
    """Tests for the agent factory."""

    def test_scripted_provider(self) -> None:
        agent = create_research_agent(AgentConfig(provider="scripted"))
        assert isinstance(agent, ScriptedResearchAgent)

    def test_unknown_provider(self) -> None:
        config = AgentConfig.model_construct(provider="openai", chunk_delay_seconds=0.0)
        with pytest.raises(ValueError, match="Unknown research agent provider"):
            create_research_agent(config)
