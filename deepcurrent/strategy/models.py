"""Strategy version models.

A strategy version is an immutable, numbered configuration snapshot for
a topic. The configuration itself is an explicit, schema-tagged record
with defaults on every field; stored payloads are validated when a
Strategy is built and fall back to the default config if they cannot be
parsed.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from deepcurrent.observability.logging import get_logger

logger = get_logger(__name__)

SearchDepth = Literal["shallow", "standard", "deep"]
TimeWindow = Literal["day", "week", "month", "all"]

# Model tiers the evolution engine swaps between
FAST_MODEL = "gpt-4o-mini"
STRONG_MODEL = "gpt-4o"

# Short names used in enabled_tools
SEARCH_TOOL_KEY = "linkup"
EVALUATE_TOOL_KEY = "evaluate"
EXTRACT_TOOL_KEY = "extract"

CONFIG_SCHEMA_VERSION = 1


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class StrategyStatus(str, Enum):
    """Lifecycle state of a strategy version."""

    ACTIVE = "active"
    CANDIDATE = "candidate"
    RETIRED = "retired"


class StrategyConfig(BaseModel):
    """Settings controlling how an episode's research is conducted."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    schema_version: int = Field(
        default=CONFIG_SCHEMA_VERSION, description="Config record layout version"
    )
    search_depth: SearchDepth = Field(default="standard", description="Research depth")
    time_window: TimeWindow = Field(default="week", description="Source recency window")
    max_followups: int | None = Field(
        default=None, ge=0, description="Hard cap on follow-up queries"
    )
    senso_first: bool = Field(
        default=False, description="Consult long-term memory before web search"
    )
    skip_evaluation: bool = Field(default=False, description="Skip result evaluation")
    summary_templates: tuple[str, ...] = Field(
        default=("bullets", "narrative"), description="Output styles, in preference order"
    )
    model: str = Field(default=FAST_MODEL, description="Language model used by the agent")
    parallel_searches: bool = Field(
        default=False, description="Run search queries in parallel"
    )
    enabled_tools: tuple[str, ...] = Field(
        default=(SEARCH_TOOL_KEY, EVALUATE_TOOL_KEY, EXTRACT_TOOL_KEY),
        description="Tool steps the agent may use",
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for storage and audit diffs."""
        return self.model_dump(mode="json")


DEFAULT_STRATEGY_CONFIG = StrategyConfig()


def parse_strategy_config(raw: Any) -> StrategyConfig:
    """Validate a stored config payload, falling back to the default.

    Accepts a StrategyConfig, a mapping, or a JSON string.
    """
    if isinstance(raw, StrategyConfig):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        return StrategyConfig.model_validate(raw)
    except (ValueError, ValidationError) as e:
        logger.warning(
            "strategy_config_invalid_using_default",
            error=str(e),
            error_type=type(e).__name__,
        )
        return DEFAULT_STRATEGY_CONFIG


class Strategy(BaseModel):
    """Immutable configuration snapshot for one topic version.

    Status changes produce a new Strategy object; the config of a
    version never changes after creation.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    topic_id: UUID = Field(..., description="Owning topic")
    version: int = Field(..., ge=1, description="Per-topic version number")
    status: StrategyStatus = Field(..., description="Lifecycle state")
    rollout_percentage: int = Field(
        default=100, ge=0, le=100, description="Share of new episodes routed here"
    )
    parent_version: int | None = Field(
        default=None, description="Version this one evolved from"
    )
    config: StrategyConfig = Field(
        default_factory=StrategyConfig, description="Execution settings"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")

    @field_validator("config", mode="wrap")
    @classmethod
    def _fallback_to_default_config(
        cls, value: Any, handler: ValidatorFunctionWrapHandler
    ) -> StrategyConfig:
        if isinstance(value, (str, bytes)):
            return parse_strategy_config(value)
        try:
            return handler(value)
        except ValidationError:
            return parse_strategy_config(value)
