"""PostgreSQL implementation of EvolutionLogStore."""

import json
from typing import Any
from uuid import UUID

import asyncpg

from deepcurrent.db.errors import ConnectionError
from deepcurrent.db.pool import PostgresPool
from deepcurrent.evolution.models import AggregatedMetrics, EvolutionChanges, EvolutionLogEntry
from deepcurrent.evolution.store import EvolutionLogStore
from deepcurrent.observability.logging import get_logger

logger = get_logger(__name__)


class PostgresEvolutionLogStore(EvolutionLogStore):
    """PostgreSQL implementation of EvolutionLogStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def record(
        self,
        topic_id: UUID,
        from_version: int | None,
        to_version: int,
        reason: str,
        before_config: dict[str, Any],
        after_config: dict[str, Any],
        metrics: AggregatedMetrics,
    ) -> EvolutionLogEntry:
        entry = EvolutionLogEntry(
            topic_id=topic_id,
            from_version=from_version,
            to_version=to_version,
            reason=reason,
            changes=EvolutionChanges(
                before=before_config, after=after_config, metrics=metrics
            ),
        )
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO strategy_evolution_logs (
                        id, topic_id, from_version, to_version, reason, changes, created_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7)
                    """,
                    entry.id,
                    entry.topic_id,
                    entry.from_version,
                    entry.to_version,
                    entry.reason,
                    json.dumps(entry.changes.model_dump(mode="json")),
                    entry.created_at,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_record_evolution_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to record evolution: {e}", cause=e) from e
        return entry

    async def get(self, entry_id: UUID) -> EvolutionLogEntry | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT id, topic_id, from_version, to_version, reason, changes, created_at
                    FROM strategy_evolution_logs
                    WHERE id = $1
                    """,
                    entry_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_get_evolution_error", entry_id=str(entry_id), error=str(e))
            raise ConnectionError(f"Failed to get evolution: {e}", cause=e) from e
        return self._row_to_entry(row) if row else None

    async def list_for_topic(
        self, topic_id: UUID, limit: int | None = None
    ) -> list[EvolutionLogEntry]:
        try:
            async with self._pool.acquire() as conn:
                # LIMIT NULL means no limit
                rows = await conn.fetch(
                    """
                    SELECT id, topic_id, from_version, to_version, reason, changes, created_at
                    FROM strategy_evolution_logs
                    WHERE topic_id = $1
                    ORDER BY created_at DESC
                    LIMIT $2
                    """,
                    topic_id,
                    limit,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_list_evolutions_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to list evolutions: {e}", cause=e) from e
        return [self._row_to_entry(row) for row in rows]

    @staticmethod
    def _row_to_entry(row: asyncpg.Record) -> EvolutionLogEntry:
        changes = _parse_changes(row["changes"], row["id"])
        return EvolutionLogEntry(
            id=row["id"],
            topic_id=row["topic_id"],
            from_version=row["from_version"],
            to_version=row["to_version"],
            reason=row["reason"],
            changes=changes,
            created_at=row["created_at"],
        )


def _parse_changes(raw: str | None, entry_id: UUID) -> EvolutionChanges | None:
    if not raw:
        return None
    try:
        return EvolutionChanges.model_validate_json(raw)
    except ValueError as e:
        logger.warning("evolution_changes_unparseable", entry_id=str(entry_id), error=str(e))
        return None
