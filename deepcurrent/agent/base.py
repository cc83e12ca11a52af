"""Research agent capability interface.

The agent performs web search, result evaluation and text generation.
Episodes only depend on its streaming contract: a prompt and a runtime
context in, an ordered async stream of chunks out.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from deepcurrent.agent.chunks import AgentChunk
from deepcurrent.strategy.models import SearchDepth, StrategyConfig, TimeWindow


class AgentRuntimeContext(BaseModel):
    """Per-episode context handed to the agent and its tools."""

    model_config = ConfigDict(frozen=True)

    strategy_version: int = Field(..., description="Strategy version in effect")
    topic_id: UUID
    episode_id: UUID
    query: str
    search_depth: SearchDepth = "standard"
    time_window: TimeWindow = "week"
    senso_first: bool = False
    max_followups: int | None = None
    summary_templates: tuple[str, ...] = ("bullets", "narrative")
    model: str = "gpt-4o-mini"
    parallel_searches: bool = False
    enabled_tools: tuple[str, ...] = ()
    skip_evaluation: bool = False

    @classmethod
    def from_strategy(
        cls,
        config: StrategyConfig,
        *,
        strategy_version: int,
        topic_id: UUID,
        episode_id: UUID,
        query: str,
    ) -> "AgentRuntimeContext":
        """Build a context carrying the strategy knobs."""
        return cls(
            strategy_version=strategy_version,
            topic_id=topic_id,
            episode_id=episode_id,
            query=query,
            search_depth=config.search_depth,
            time_window=config.time_window,
            senso_first=config.senso_first,
            max_followups=config.max_followups,
            summary_templates=config.summary_templates,
            model=config.model,
            parallel_searches=config.parallel_searches,
            enabled_tools=config.enabled_tools,
            skip_evaluation=config.skip_evaluation,
        )


class ResearchAgent(ABC):
    """Abstract interface for research agents."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @abstractmethod
    def stream(self, prompt: str, context: AgentRuntimeContext) -> AsyncIterator[AgentChunk]:
        """Run the agent and stream its chunks in order.

        Args:
            prompt: Research instructions
            context: Episode and strategy context

        Returns:
            Async iterator of text deltas, tool calls and tool results
        """
        pass
