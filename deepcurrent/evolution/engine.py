"""Evolution decision engine.

Pure functions: given aggregated metrics for a strategy version and its
config, decide whether to evolve and derive the next configuration.
"""

from deepcurrent.evolution.models import AggregatedMetrics, EvolutionDecision, Recommendation
from deepcurrent.strategy.models import (
    EVALUATE_TOOL_KEY,
    EXTRACT_TOOL_KEY,
    FAST_MODEL,
    SEARCH_TOOL_KEY,
    STRONG_MODEL,
    StrategyConfig,
    TimeWindow,
)

LOW_SAVE_RATE = 0.6
HIGH_FOLLOWUPS = 5

_WIDER_WINDOW: dict[TimeWindow, TimeWindow] = {
    "day": "week",
    "week": "month",
    "month": "all",
    "all": "all",
}


def decide(
    metrics: AggregatedMetrics,
    current_config: StrategyConfig,
    min_episodes: int = 1,
) -> EvolutionDecision:
    """Decide whether a strategy version should evolve.

    Rules are checked in order and the first match wins.

    Args:
        metrics: Aggregated metrics of the version under review
        current_config: Config of that version, used to derive the next one
        min_episodes: Minimum episodes before a decision is made

    Returns:
        The decision, with a derived config when evolving
    """
    save_rate = metrics.avg_save_rate
    followups = metrics.avg_followup_count

    if metrics.total_episodes < min_episodes:
        return _keep(
            f"Insufficient data: need at least {min_episodes} episodes "
            f"(have {metrics.total_episodes})",
            metrics,
        )
    if save_rate == 0:
        reason = "No sources saved - immediate evolution needed"
    elif save_rate < LOW_SAVE_RATE:
        reason = f"Low save rate ({_percent(save_rate)}%) - evolving for improvement"
    elif followups > HIGH_FOLLOWUPS:
        reason = f"High follow-ups ({followups:.1f}) - optimizing efficiency"
    elif save_rate >= LOW_SAVE_RATE and followups <= HIGH_FOLLOWUPS:
        return _keep(
            f"Strong performance (save rate: {_percent(save_rate)}%, "
            f"followups: {followups:.1f})",
            metrics,
        )
    else:
        reason = (
            "Continuous improvement mode - evolving to optimize "
            f"({metrics.total_episodes} episodes)"
        )

    return EvolutionDecision(
        should_evolve=True,
        reason=reason,
        recommendation=Recommendation.EVOLVE,
        derived_config=derive_config(current_config, metrics),
        metrics=metrics,
    )


def derive_config(current: StrategyConfig, metrics: AggregatedMetrics) -> StrategyConfig:
    """Derive the next configuration from the current one.

    Adjustments are applied in a fixed order. Where two adjustments touch
    the same field the later one wins, so excessive follow-ups force a
    shallow search even when the save rate asks for a deep one.
    """
    save_rate = metrics.avg_save_rate
    followups = metrics.avg_followup_count
    changes: dict = {}

    # Model tier
    if save_rate < 0.5 and current.model == FAST_MODEL:
        changes["model"] = STRONG_MODEL
    elif save_rate > 0.7 and current.model == STRONG_MODEL:
        changes["model"] = FAST_MODEL

    # Search parallelism
    if followups > 6:
        changes["parallel_searches"] = True
    elif save_rate < 0.4:
        changes["parallel_searches"] = False

    # Evaluation step
    if save_rate == 0:
        changes["skip_evaluation"] = True
        changes["enabled_tools"] = (SEARCH_TOOL_KEY, EXTRACT_TOOL_KEY)
    elif save_rate > 0.6 and current.skip_evaluation:
        changes["skip_evaluation"] = False
        changes["enabled_tools"] = (SEARCH_TOOL_KEY, EVALUATE_TOOL_KEY, EXTRACT_TOOL_KEY)

    # Search breadth
    if save_rate < 0.4:
        changes["search_depth"] = "deep"
        changes["time_window"] = _WIDER_WINDOW[current.time_window]
    if followups > HIGH_FOLLOWUPS:
        changes["search_depth"] = "shallow"
        changes["max_followups"] = 3

    if metrics.senso_usage_rate < 0.2:
        changes["senso_first"] = True

    return current.model_copy(update=changes)


def _keep(reason: str, metrics: AggregatedMetrics) -> EvolutionDecision:
    return EvolutionDecision(
        should_evolve=False,
        reason=reason,
        recommendation=Recommendation.KEEP,
        metrics=metrics,
    )


def _percent(rate: float) -> int:
    return round(rate * 100)
