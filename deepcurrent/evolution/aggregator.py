"""Metrics aggregation over finished episodes."""

from collections.abc import Iterable
from uuid import UUID

from deepcurrent.episodes.models import Episode
from deepcurrent.episodes.store import EpisodeStore
from deepcurrent.evolution.models import AggregatedMetrics

SENSO_TOOLS = frozenset({"sensoSearchTool", "sensoGenerateTool"})


def used_senso(episode: Episode) -> bool:
    """Whether an episode consulted the long-term memory tools."""
    if episode.senso_search_used or episode.senso_generate_used:
        return True
    return any(usage.tool in SENSO_TOOLS for usage in episode.tool_usage)


def aggregate(episodes: Iterable[Episode]) -> AggregatedMetrics:
    """Average outcome metrics over a set of episodes.

    Episodes with no returned sources count as a save rate of 0. An empty
    set yields all zeros.
    """
    episodes = list(episodes)
    total = len(episodes)
    if total == 0:
        return AggregatedMetrics()

    return AggregatedMetrics(
        total_episodes=total,
        avg_save_rate=sum(e.save_rate for e in episodes) / total,
        avg_followup_count=sum(e.followup_count for e in episodes) / total,
        senso_usage_rate=sum(1 for e in episodes if used_senso(e)) / total,
    )


class MetricsAggregator:
    """Aggregates metrics for a (topic, strategy version) pair from the episode store."""

    def __init__(self, episode_store: EpisodeStore) -> None:
        self._episode_store = episode_store

    async def aggregate(self, topic_id: UUID, strategy_version: int) -> AggregatedMetrics:
        episodes = await self._episode_store.list_by_strategy_version(
            topic_id, strategy_version
        )
        return aggregate(episodes)
