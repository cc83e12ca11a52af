"""Tests for the evolution decision engine."""

import pytest

from deepcurrent.evolution.engine import decide, derive_config
from deepcurrent.evolution.models import AggregatedMetrics, Recommendation
from deepcurrent.strategy.models import DEFAULT_STRATEGY_CONFIG, StrategyConfig


def metrics(
    total: int = 3, save: float = 0.5, followups: float = 1.0, senso: float = 0.5
) -> AggregatedMetrics:
    return AggregatedMetrics(
        total_episodes=total,
        avg_save_rate=save,
        avg_followup_count=followups,
        senso_usage_rate=senso,
    )


class TestDecide:
    """Tests for decide."""

    def test_insufficient_data(self) -> None:
        decision = decide(metrics(total=2), DEFAULT_STRATEGY_CONFIG, min_episodes=3)

        assert not decision.should_evolve
        assert decision.recommendation == Recommendation.KEEP
        assert decision.reason == "Insufficient data: need at least 3 episodes (have 2)"
        assert decision.derived_config is None

    def test_no_sources_saved(self) -> None:
        decision = decide(metrics(save=0.0), DEFAULT_STRATEGY_CONFIG)

        assert decision.should_evolve
        assert decision.recommendation == Recommendation.EVOLVE
        assert decision.reason == "No sources saved - immediate evolution needed"
        assert decision.derived_config is not None

    def test_low_save_rate(self) -> None:
        decision = decide(metrics(save=0.45), DEFAULT_STRATEGY_CONFIG)
        assert decision.should_evolve
        assert decision.reason == "Low save rate (45%) - evolving for improvement"

    def test_high_followups(self) -> None:
        decision = decide(metrics(save=0.8, followups=7.0), DEFAULT_STRATEGY_CONFIG)
        assert decision.should_evolve
        assert decision.reason == "High follow-ups (7.0) - optimizing efficiency"

    def test_strong_performance_kept(self) -> None:
        decision = decide(metrics(save=0.75, followups=2.0), DEFAULT_STRATEGY_CONFIG)

        assert not decision.should_evolve
        assert decision.reason == "Strong performance (save rate: 75%, followups: 2.0)"
        assert decision.derived_config is None

    def test_decision_is_deterministic(self) -> None:
        first = decide(metrics(total=3, save=0.8, followups=2.0), DEFAULT_STRATEGY_CONFIG)
        second = decide(metrics(total=3, save=0.8, followups=2.0), DEFAULT_STRATEGY_CONFIG)
        assert first == second
        assert first.reason.startswith("Strong performance")

    def test_decision_carries_its_metrics(self) -> None:
        snapshot = metrics(total=2, save=0.0)
        assert decide(snapshot, DEFAULT_STRATEGY_CONFIG).metrics == snapshot
        assert decide(snapshot, DEFAULT_STRATEGY_CONFIG, min_episodes=5).metrics == snapshot

    def test_boundary_save_rate_is_strong(self) -> None:
        assert not decide(metrics(save=0.6, followups=5.0), DEFAULT_STRATEGY_CONFIG).should_evolve


class TestDeriveConfig:
    """Tests for derive_config adjustments."""

    def test_zero_save_rate(self) -> None:
        derived = derive_config(DEFAULT_STRATEGY_CONFIG, metrics(save=0.0))

        assert derived.model == "gpt-4o"
        assert derived.skip_evaluation is True
        assert derived.enabled_tools == ("linkup", "extract")
        assert derived.search_depth == "deep"
        assert derived.time_window == "month"
        assert derived.parallel_searches is False

    def test_strong_model_downgraded_on_high_save_rate(self) -> None:
        current = StrategyConfig(model="gpt-4o")
        assert derive_config(current, metrics(save=0.8)).model == "gpt-4o-mini"

    def test_evaluation_reenabled(self) -> None:
        current = StrategyConfig(skip_evaluation=True, enabled_tools=("linkup", "extract"))
        derived = derive_config(current, metrics(save=0.65))

        assert derived.skip_evaluation is False
        assert derived.enabled_tools == ("linkup", "evaluate", "extract")

    def test_followups_force_shallow_over_deep(self) -> None:
        derived = derive_config(DEFAULT_STRATEGY_CONFIG, metrics(save=0.2, followups=8.0))

        assert derived.search_depth == "shallow"
        assert derived.max_followups == 3
        assert derived.parallel_searches is True

    @pytest.mark.parametrize(
        ("window", "expected"),
        [("day", "week"), ("week", "month"), ("month", "all"), ("all", "all")],
    )
    def test_time_window_widens(self, window: str, expected: str) -> None:
        current = StrategyConfig(time_window=window)
        assert derive_config(current, metrics(save=0.1)).time_window == expected

    def test_low_senso_usage_enables_senso_first(self) -> None:
        assert derive_config(DEFAULT_STRATEGY_CONFIG, metrics(senso=0.1)).senso_first is True
        assert derive_config(DEFAULT_STRATEGY_CONFIG, metrics(senso=0.5)).senso_first is False

    def test_current_config_unchanged(self) -> None:
        derive_config(DEFAULT_STRATEGY_CONFIG, metrics(save=0.0))
        assert DEFAULT_STRATEGY_CONFIG == StrategyConfig()
