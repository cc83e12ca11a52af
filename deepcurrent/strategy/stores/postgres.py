"""PostgreSQL implementation of StrategyStore.

Per-topic mutations run in a transaction holding a transaction-scoped
advisory lock keyed on the topic, so concurrent creators observe each
other's version numbers. The partial unique index
``uq_strategy_single_active`` backs the single-active invariant.
"""

import json
from typing import Any
from uuid import UUID

import asyncpg

from deepcurrent.db.errors import ConflictError, ConnectionError, NotFoundError
from deepcurrent.db.pool import PostgresPool
from deepcurrent.observability.logging import get_logger
from deepcurrent.observability.metrics import STRATEGY_VERSIONS_CREATED
from deepcurrent.strategy.models import Strategy, StrategyConfig, StrategyStatus
from deepcurrent.strategy.store import StrategyStore

logger = get_logger(__name__)

_COLUMNS = """
    id, topic_id, version, status, rollout_percentage,
    parent_version, config, created_at
"""


class PostgresStrategyStore(StrategyStore):
    """PostgreSQL implementation of StrategyStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get_active(self, topic_id: UUID) -> Strategy | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_COLUMNS}
                    FROM strategy_versions
                    WHERE topic_id = $1 AND status = 'active'
                    """,
                    topic_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_get_active_strategy_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to get active strategy: {e}", cause=e) from e
        return self._row_to_strategy(row) if row else None

    async def get_version(self, topic_id: UUID, version: int) -> Strategy | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    SELECT {_COLUMNS}
                    FROM strategy_versions
                    WHERE topic_id = $1 AND version = $2
                    """,
                    topic_id,
                    version,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_get_strategy_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to get strategy version: {e}", cause=e) from e
        return self._row_to_strategy(row) if row else None

    async def list_versions(self, topic_id: UUID) -> list[Strategy]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS}
                    FROM strategy_versions
                    WHERE topic_id = $1
                    ORDER BY version DESC
                    """,
                    topic_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_list_strategies_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to list strategy versions: {e}", cause=e) from e
        return [self._row_to_strategy(row) for row in rows]

    async def create_version(
        self,
        topic_id: UUID,
        config: StrategyConfig,
        *,
        parent_version: int | None = None,
        status: StrategyStatus = StrategyStatus.ACTIVE,
        rollout_percentage: int = 100,
    ) -> Strategy:
        try:
            async with self._pool.acquire() as conn, conn.transaction():
                await self._lock_topic(conn, topic_id)
                next_version = await conn.fetchval(
                    """
                    SELECT COALESCE(MAX(version), 0) + 1
                    FROM strategy_versions
                    WHERE topic_id = $1
                    """,
                    topic_id,
                )
                strategy = Strategy(
                    topic_id=topic_id,
                    version=next_version,
                    status=status,
                    rollout_percentage=rollout_percentage,
                    parent_version=parent_version,
                    config=config,
                )
                if status == StrategyStatus.ACTIVE:
                    await self._retire_active(conn, topic_id)
                await conn.execute(
                    """
                    INSERT INTO strategy_versions (
                        id, topic_id, version, status, rollout_percentage,
                        parent_version, config, created_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                    """,
                    strategy.id,
                    strategy.topic_id,
                    strategy.version,
                    strategy.status.value,
                    strategy.rollout_percentage,
                    strategy.parent_version,
                    json.dumps(strategy.config.to_payload()),
                    strategy.created_at,
                )
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(
                f"Concurrent strategy version creation for topic {topic_id}", cause=e
            ) from e
        except asyncpg.PostgresError as e:
            logger.error("postgres_create_strategy_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to create strategy version: {e}", cause=e) from e

        STRATEGY_VERSIONS_CREATED.labels(status=status.value).inc()
        logger.info(
            "strategy_version_created",
            topic_id=str(topic_id),
            version=strategy.version,
            status=status.value,
            parent_version=parent_version,
        )
        return strategy

    async def promote(self, topic_id: UUID, version: int) -> Strategy:
        try:
            async with self._pool.acquire() as conn, conn.transaction():
                await self._lock_topic(conn, topic_id)
                current = await conn.fetchval(
                    """
                    SELECT status FROM strategy_versions
                    WHERE topic_id = $1 AND version = $2
                    """,
                    topic_id,
                    version,
                )
                if current is None:
                    raise NotFoundError(
                        f"Strategy version {version} not found for topic {topic_id}"
                    )
                if current != StrategyStatus.ACTIVE.value:
                    await self._retire_active(conn, topic_id)
                row = await conn.fetchrow(
                    f"""
                    UPDATE strategy_versions
                    SET status = 'active', rollout_percentage = 100
                    WHERE topic_id = $1 AND version = $2
                    RETURNING {_COLUMNS}
                    """,
                    topic_id,
                    version,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_promote_strategy_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to promote strategy version: {e}", cause=e) from e

        logger.info("strategy_version_promoted", topic_id=str(topic_id), version=version)
        return self._row_to_strategy(row)

    async def retire(self, topic_id: UUID, version: int) -> Strategy:
        row = await self._update_returning(
            topic_id,
            version,
            "status = 'retired'",
            (),
            "retire",
        )
        logger.info("strategy_version_retired", topic_id=str(topic_id), version=version)
        return row

    async def update_rollout(
        self, topic_id: UUID, version: int, rollout_percentage: int
    ) -> Strategy:
        if not 0 <= rollout_percentage <= 100:
            raise ValueError("rollout_percentage must be between 0 and 100")
        return await self._update_returning(
            topic_id,
            version,
            "rollout_percentage = $3",
            (rollout_percentage,),
            "update_rollout",
        )

    async def _update_returning(
        self,
        topic_id: UUID,
        version: int,
        assignment: str,
        params: tuple[Any, ...],
        operation: str,
    ) -> Strategy:
        try:
            async with self._pool.acquire() as conn, conn.transaction():
                await self._lock_topic(conn, topic_id)
                row = await conn.fetchrow(
                    f"""
                    UPDATE strategy_versions
                    SET {assignment}
                    WHERE topic_id = $1 AND version = $2
                    RETURNING {_COLUMNS}
                    """,
                    topic_id,
                    version,
                    *params,
                )
        except asyncpg.PostgresError as e:
            logger.error(
                "postgres_strategy_update_error",
                operation=operation,
                topic_id=str(topic_id),
                error=str(e),
            )
            raise ConnectionError(f"Failed to {operation} strategy version: {e}", cause=e) from e
        if row is None:
            raise NotFoundError(f"Strategy version {version} not found for topic {topic_id}")
        return self._row_to_strategy(row)

    @staticmethod
    async def _lock_topic(conn: asyncpg.Connection, topic_id: UUID) -> None:
        await conn.execute(
            "SELECT pg_advisory_xact_lock(hashtext($1))", str(topic_id)
        )

    @staticmethod
    async def _retire_active(conn: asyncpg.Connection, topic_id: UUID) -> None:
        await conn.execute(
            """
            UPDATE strategy_versions
            SET status = 'retired'
            WHERE topic_id = $1 AND status = 'active'
            """,
            topic_id,
        )

    @staticmethod
    def _row_to_strategy(row: asyncpg.Record) -> Strategy:
        # Malformed config payloads fall back to the default config in the model
        return Strategy(
            id=row["id"],
            topic_id=row["topic_id"],
            version=row["version"],
            status=StrategyStatus(row["status"]),
            rollout_percentage=row["rollout_percentage"],
            parent_version=row["parent_version"],
            config=row["config"],
            created_at=row["created_at"],
        )
