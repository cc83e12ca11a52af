"""Strategy versions: per-topic, immutable execution configurations.

The strategy store owns version numbering and the single-active-version
invariant. Episodes only read the active version.
"""

from deepcurrent.strategy.models import (
    DEFAULT_STRATEGY_CONFIG,
    Strategy,
    StrategyConfig,
    StrategyStatus,
    parse_strategy_config,
)
from deepcurrent.strategy.store import StrategyStore

__all__ = [
    "DEFAULT_STRATEGY_CONFIG",
    "Strategy",
    "StrategyConfig",
    "StrategyStatus",
    "StrategyStore",
    "parse_strategy_config",
]
