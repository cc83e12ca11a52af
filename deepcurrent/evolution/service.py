"""Post-episode strategy evolution.

After an episode finishes, its outcome is analysed, the metrics of the
strategy version it ran against are aggregated, and, when the decision
engine says so, a new candidate version is created and the evolution is
recorded in the audit log.
"""

from dataclasses import dataclass
from uuid import UUID

from deepcurrent.episodes.errors import EpisodeNotFoundError
from deepcurrent.episodes.models import Episode, EpisodeStatus
from deepcurrent.episodes.store import EpisodeStore
from deepcurrent.evolution.aggregator import MetricsAggregator
from deepcurrent.evolution.engine import decide
from deepcurrent.evolution.models import (
    EpisodeAnalysis,
    EpisodePerformance,
    EvolutionDecision,
    EvolutionLogEntry,
    Recommendation,
)
from deepcurrent.evolution.store import EvolutionLogStore
from deepcurrent.observability.logging import get_logger
from deepcurrent.observability.metrics import EVOLUTION_DECISIONS
from deepcurrent.strategy.models import DEFAULT_STRATEGY_CONFIG, Strategy, StrategyStatus
from deepcurrent.strategy.promotion import ManualPromotionPolicy, PromotionPolicy
from deepcurrent.strategy.store import StrategyStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class EvolutionResult:
    """A new strategy version together with its audit entry."""

    strategy: Strategy
    log_entry: EvolutionLogEntry


def analyze_episode(episode: Episode) -> EpisodeAnalysis:
    """Heuristic assessment of a single episode, first matching rule wins."""
    returned = len(episode.sources_returned)
    save_rate = episode.save_rate
    performance = EpisodePerformance(
        sources_returned=returned,
        sources_saved=len(episode.sources_saved),
        save_rate=save_rate,
        followup_count=episode.followup_count,
        tool_usage_count=len(episode.tool_usage),
        had_error=episode.status == EpisodeStatus.FAILED,
    )

    if performance.had_error:
        recommendation = Recommendation.ROLLBACK
        reason = "Episode failed with errors"
    elif save_rate < 0.3 and returned > 0:
        recommendation = Recommendation.EVOLVE
        reason = f"Low save rate ({round(save_rate * 100)}%) - strategy needs improvement"
    elif episode.followup_count > 10:
        recommendation = Recommendation.EVOLVE
        reason = (
            f"Too many follow-ups ({episode.followup_count}) - strategy may be inefficient"
        )
    elif save_rate > 0.7:
        recommendation = Recommendation.KEEP
        reason = f"High save rate ({round(save_rate * 100)}%) - strategy is performing well"
    else:
        recommendation = Recommendation.KEEP
        reason = "Performance is satisfactory"

    return EpisodeAnalysis(
        episode_id=episode.id,
        topic_id=episode.topic_id,
        strategy_version=episode.strategy_version,
        performance=performance,
        recommendation=recommendation,
        reason=reason,
    )


class StrategyEvolutionService:
    """Runs the feedback loop for finished episodes."""

    def __init__(
        self,
        episode_store: EpisodeStore,
        strategy_store: StrategyStore,
        evolution_log: EvolutionLogStore,
        aggregator: MetricsAggregator | None = None,
        promotion_policy: PromotionPolicy | None = None,
        min_episodes: int = 1,
        candidate_rollout_percentage: int = 20,
    ) -> None:
        self._episode_store = episode_store
        self._strategy_store = strategy_store
        self._evolution_log = evolution_log
        self._aggregator = aggregator or MetricsAggregator(episode_store)
        self._promotion_policy = promotion_policy or ManualPromotionPolicy()
        self._min_episodes = min_episodes
        self._candidate_rollout_percentage = candidate_rollout_percentage

    async def analyze_episode(self, episode_id: UUID) -> EpisodeAnalysis:
        """Load an episode and analyse it.

        Raises:
            EpisodeNotFoundError: If the episode does not exist
        """
        episode = await self._episode_store.get(episode_id)
        if episode is None:
            raise EpisodeNotFoundError(episode_id)
        return analyze_episode(episode)

    async def should_evolve(
        self, topic_id: UUID, strategy_version: int
    ) -> tuple[EvolutionDecision, Strategy | None]:
        """Aggregate a version's episodes and run the decision engine.

        Returns:
            The decision and the strategy version it was computed for,
            or None when that version does not exist (the built-in default)
        """
        metrics = await self._aggregator.aggregate(topic_id, strategy_version)
        strategy = await self._strategy_store.get_version(topic_id, strategy_version)
        current_config = strategy.config if strategy else DEFAULT_STRATEGY_CONFIG

        decision = decide(metrics, current_config, self._min_episodes)
        return decision, strategy

    async def evolve(
        self,
        topic_id: UUID,
        from_strategy: Strategy,
        decision: EvolutionDecision,
    ) -> EvolutionResult:
        """Create a candidate version from a decision and record it.

        The candidate's parent is the version the metrics were measured on,
        and the audit entry records the decision's own metrics snapshot.
        """
        if decision.derived_config is None:
            raise ValueError("Decision has no derived config to evolve to")

        metrics = decision.metrics
        new_strategy = await self._strategy_store.create_version(
            topic_id,
            decision.derived_config,
            parent_version=from_strategy.version,
            status=StrategyStatus.CANDIDATE,
            rollout_percentage=self._candidate_rollout_percentage,
        )
        entry = await self._evolution_log.record(
            topic_id=topic_id,
            from_version=from_strategy.version,
            to_version=new_strategy.version,
            reason=f"Auto-evolved: {decision.reason}",
            before_config=from_strategy.config.to_payload(),
            after_config=decision.derived_config.to_payload(),
            metrics=metrics,
        )
        logger.info(
            "strategy_evolved",
            topic_id=str(topic_id),
            from_version=from_strategy.version,
            to_version=new_strategy.version,
            reason=decision.reason,
        )

        active = await self._strategy_store.get_active(topic_id)
        if self._promotion_policy.should_promote(active, new_strategy, metrics):
            new_strategy = await self._strategy_store.promote(topic_id, new_strategy.version)

        return EvolutionResult(strategy=new_strategy, log_entry=entry)

    async def run_post_episode_analysis(self, episode_id: UUID) -> EvolutionResult | None:
        """Analyse a finished episode and evolve its strategy if warranted.

        Returns:
            The evolution result, or None when no new version was created
        """
        analysis = await self.analyze_episode(episode_id)
        logger.info(
            "episode_analyzed",
            episode_id=str(episode_id),
            topic_id=str(analysis.topic_id),
            strategy_version=analysis.strategy_version,
            recommendation=analysis.recommendation.value,
            reason=analysis.reason,
            save_rate=analysis.performance.save_rate,
        )
        if analysis.recommendation == Recommendation.ROLLBACK:
            # Rollback is reported only; no version change is applied
            logger.warning(
                "episode_rollback_recommended",
                episode_id=str(episode_id),
                topic_id=str(analysis.topic_id),
                strategy_version=analysis.strategy_version,
            )

        decision, strategy = await self.should_evolve(
            analysis.topic_id, analysis.strategy_version
        )
        EVOLUTION_DECISIONS.labels(
            outcome="evolve" if decision.should_evolve else "keep"
        ).inc()

        if not decision.should_evolve:
            logger.info(
                "strategy_kept",
                topic_id=str(analysis.topic_id),
                strategy_version=analysis.strategy_version,
                reason=decision.reason,
            )
            return None

        if strategy is None:
            logger.warning(
                "strategy_evolution_skipped",
                topic_id=str(analysis.topic_id),
                strategy_version=analysis.strategy_version,
                reason="no strategy version to evolve from",
            )
            return None

        return await self.evolve(analysis.topic_id, strategy, decision)
