"""Research agent interface and built-in agents."""

from deepcurrent.agent.base import AgentRuntimeContext, ResearchAgent
from deepcurrent.agent.chunks import AgentChunk, TextDeltaChunk, ToolCallChunk, ToolResultChunk
from deepcurrent.agent.prompt import build_research_prompt
from deepcurrent.agent.scripted import ScriptedResearchAgent
from deepcurrent.config.models.research import AgentConfig


def create_research_agent(config: AgentConfig) -> ResearchAgent:
    """Create a research agent from configuration.

    Args:
        config: Agent configuration

    Returns:
        Configured agent

    Raises:
        ValueError: If the provider is unknown
    """
    if config.provider == "scripted":
        return ScriptedResearchAgent(chunk_delay_seconds=config.chunk_delay_seconds)
    raise ValueError(f"Unknown research agent provider: {config.provider}")


__all__ = [
    "AgentChunk",
    "AgentRuntimeContext",
    "ResearchAgent",
    "ScriptedResearchAgent",
    "TextDeltaChunk",
    "ToolCallChunk",
    "ToolResultChunk",
    "build_research_prompt",
    "create_research_agent",
]
