"""PostgreSQL implementation of EpisodeStore."""

import json
from typing import Any
from uuid import UUID

import asyncpg

from deepcurrent.db.errors import (
    ConflictError,
    ConnectionError,
    InvalidTransitionError,
    NotFoundError,
)
from deepcurrent.db.pool import PostgresPool
from deepcurrent.episodes.models import (
    Episode,
    EpisodeOutcome,
    EpisodeStatus,
    ToolUsage,
    utc_now,
)
from deepcurrent.episodes.store import EpisodeStore
from deepcurrent.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, topic_id, query, strategy_version, status,
    sources_returned, sources_saved, followup_count, tool_usage,
    senso_search_used, senso_generate_used, result_note_id,
    error_message, created_at, updated_at
"""

_JSON_FIELDS = frozenset({"sources_returned", "sources_saved", "tool_usage"})


class PostgresEpisodeStore(EpisodeStore):
    """PostgreSQL implementation of EpisodeStore.

    Status updates lock the episode row so the transition check and the
    write happen atomically.
    """

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def create(self, episode: Episode) -> Episode:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO episodes (
                        id, topic_id, query, strategy_version, status,
                        sources_returned, sources_saved, followup_count, tool_usage,
                        senso_search_used, senso_generate_used, result_note_id,
                        error_message, created_at, updated_at
                    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15)
                    """,
                    episode.id,
                    episode.topic_id,
                    episode.query,
                    episode.strategy_version,
                    episode.status.value,
                    json.dumps(episode.sources_returned),
                    json.dumps(episode.sources_saved),
                    episode.followup_count,
                    json.dumps([u.model_dump(mode="json") for u in episode.tool_usage]),
                    episode.senso_search_used,
                    episode.senso_generate_used,
                    episode.result_note_id,
                    episode.error_message,
                    episode.created_at,
                    episode.updated_at,
                )
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(f"Episode {episode.id} already exists", cause=e) from e
        except asyncpg.PostgresError as e:
            logger.error("postgres_create_episode_error", episode_id=str(episode.id), error=str(e))
            raise ConnectionError(f"Failed to create episode: {e}", cause=e) from e
        return episode

    async def get(self, episode_id: UUID) -> Episode | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM episodes WHERE id = $1",
                    episode_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_get_episode_error", episode_id=str(episode_id), error=str(e))
            raise ConnectionError(f"Failed to get episode: {e}", cause=e) from e
        return self._row_to_episode(row) if row else None

    async def update_status(
        self,
        episode_id: UUID,
        status: EpisodeStatus,
        outcome: EpisodeOutcome | None = None,
    ) -> Episode:
        update = outcome.as_update() if outcome else {}
        update.update(status=status.value, updated_at=utc_now())

        assignments = []
        params: list[Any] = [episode_id]
        for column, value in update.items():
            params.append(self._encode(column, value))
            assignments.append(f"{column} = ${len(params)}")

        try:
            async with self._pool.acquire() as conn, conn.transaction():
                current = await conn.fetchval(
                    "SELECT status FROM episodes WHERE id = $1 FOR UPDATE",
                    episode_id,
                )
                if current is None:
                    raise NotFoundError(f"Episode {episode_id} not found")
                if not EpisodeStatus(current).can_transition_to(status):
                    raise InvalidTransitionError(
                        f"Episode {episode_id} cannot move from {current} to {status.value}"
                    )
                row = await conn.fetchrow(
                    f"""
                    UPDATE episodes
                    SET {", ".join(assignments)}
                    WHERE id = $1
                    RETURNING {_COLUMNS}
                    """,
                    *params,
                )
        except asyncpg.PostgresError as e:
            logger.error(
                "postgres_update_episode_error",
                episode_id=str(episode_id),
                status=status.value,
                error=str(e),
            )
            raise ConnectionError(f"Failed to update episode: {e}", cause=e) from e
        return self._row_to_episode(row)

    async def list_by_strategy_version(
        self, topic_id: UUID, strategy_version: int
    ) -> list[Episode]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS}
                    FROM episodes
                    WHERE topic_id = $1 AND strategy_version = $2
                    ORDER BY created_at
                    """,
                    topic_id,
                    strategy_version,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_list_episodes_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to list episodes: {e}", cause=e) from e
        return [self._row_to_episode(row) for row in rows]

    async def list_by_topic(self, topic_id: UUID, limit: int = 50) -> list[Episode]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    f"""
                    SELECT {_COLUMNS}
                    FROM episodes
                    WHERE topic_id = $1
                    ORDER BY created_at DESC
                    LIMIT $2
                    """,
                    topic_id,
                    limit,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_list_episodes_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to list episodes: {e}", cause=e) from e
        return [self._row_to_episode(row) for row in rows]

    @staticmethod
    def _encode(column: str, value: Any) -> Any:
        if column == "tool_usage":
            return json.dumps([u.model_dump(mode="json") for u in value])
        if column in _JSON_FIELDS:
            return json.dumps(value)
        return value

    @staticmethod
    def _row_to_episode(row: asyncpg.Record) -> Episode:
        tool_usage = json.loads(row["tool_usage"]) if row["tool_usage"] else []
        return Episode(
            id=row["id"],
            topic_id=row["topic_id"],
            query=row["query"],
            strategy_version=row["strategy_version"],
            status=EpisodeStatus(row["status"]),
            sources_returned=json.loads(row["sources_returned"]) if row["sources_returned"] else [],
            sources_saved=json.loads(row["sources_saved"]) if row["sources_saved"] else [],
            followup_count=row["followup_count"],
            tool_usage=[ToolUsage(**u) for u in tool_usage],
            senso_search_used=row["senso_search_used"],
            senso_generate_used=row["senso_generate_used"],
            result_note_id=row["result_note_id"],
            error_message=row["error_message"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
