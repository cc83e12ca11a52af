"""In-memory implementation of StrategyStore."""

import asyncio
from collections import defaultdict
from uuid import UUID

from deepcurrent.db.errors import NotFoundError
from deepcurrent.observability.logging import get_logger
from deepcurrent.observability.metrics import STRATEGY_VERSIONS_CREATED
from deepcurrent.strategy.models import Strategy, StrategyConfig, StrategyStatus
from deepcurrent.strategy.store import StrategyStore

logger = get_logger(__name__)


class InMemoryStrategyStore(StrategyStore):
    """In-memory implementation of StrategyStore for testing and development.

    Mutations for one topic are serialized with a per-topic lock so that
    version numbering and the single-active invariant hold under
    concurrent episodes.
    """

    def __init__(self) -> None:
        self._versions: dict[UUID, dict[int, Strategy]] = defaultdict(dict)
        self._locks: dict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get_active(self, topic_id: UUID) -> Strategy | None:
        for strategy in self._versions.get(topic_id, {}).values():
            if strategy.status == StrategyStatus.ACTIVE:
                return strategy
        return None

    async def get_version(self, topic_id: UUID, version: int) -> Strategy | None:
        return self._versions.get(topic_id, {}).get(version)

    async def list_versions(self, topic_id: UUID) -> list[Strategy]:
        versions = self._versions.get(topic_id, {})
        return [versions[v] for v in sorted(versions, reverse=True)]

    async def create_version(
        self,
        topic_id: UUID,
        config: StrategyConfig,
        *,
        parent_version: int | None = None,
        status: StrategyStatus = StrategyStatus.ACTIVE,
        rollout_percentage: int = 100,
    ) -> Strategy:
        async with self._locks[topic_id]:
            versions = self._versions[topic_id]
            next_version = max(versions, default=0) + 1
            strategy = Strategy(
                topic_id=topic_id,
                version=next_version,
                status=status,
                rollout_percentage=rollout_percentage,
                parent_version=parent_version,
                config=config,
            )
            if status == StrategyStatus.ACTIVE:
                self._retire_active(versions)
            versions[next_version] = strategy

        STRATEGY_VERSIONS_CREATED.labels(status=status.value).inc()
        logger.info(
            "strategy_version_created",
            topic_id=str(topic_id),
            version=next_version,
            status=status.value,
            parent_version=parent_version,
        )
        return strategy

    async def promote(self, topic_id: UUID, version: int) -> Strategy:
        async with self._locks[topic_id]:
            versions = self._versions[topic_id]
            strategy = self._require(versions, topic_id, version)
            if strategy.status == StrategyStatus.ACTIVE:
                return strategy
            self._retire_active(versions)
            promoted = strategy.model_copy(
                update={"status": StrategyStatus.ACTIVE, "rollout_percentage": 100}
            )
            versions[version] = promoted

        logger.info("strategy_version_promoted", topic_id=str(topic_id), version=version)
        return promoted

    async def retire(self, topic_id: UUID, version: int) -> Strategy:
        async with self._locks[topic_id]:
            versions = self._versions[topic_id]
            strategy = self._require(versions, topic_id, version)
            retired = strategy.model_copy(update={"status": StrategyStatus.RETIRED})
            versions[version] = retired

        logger.info("strategy_version_retired", topic_id=str(topic_id), version=version)
        return retired

    async def update_rollout(
        self, topic_id: UUID, version: int, rollout_percentage: int
    ) -> Strategy:
        if not 0 <= rollout_percentage <= 100:
            raise ValueError("rollout_percentage must be between 0 and 100")
        async with self._locks[topic_id]:
            versions = self._versions[topic_id]
            strategy = self._require(versions, topic_id, version)
            updated = strategy.model_copy(update={"rollout_percentage": rollout_percentage})
            versions[version] = updated
        return updated

    @staticmethod
    def _require(versions: dict[int, Strategy], topic_id: UUID, version: int) -> Strategy:
        strategy = versions.get(version)
        if strategy is None:
            raise NotFoundError(f"Strategy version {version} not found for topic {topic_id}")
        return strategy

    @staticmethod
    def _retire_active(versions: dict[int, Strategy]) -> None:
        for number, existing in versions.items():
            if existing.status == StrategyStatus.ACTIVE:
                versions[number] = existing.model_copy(
                    update={"status": StrategyStatus.RETIRED}
                )
