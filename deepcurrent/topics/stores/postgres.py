"""PostgreSQL implementation of TopicStore."""

from uuid import UUID

import asyncpg

from deepcurrent.db.errors import ConnectionError
from deepcurrent.db.pool import PostgresPool
from deepcurrent.observability.logging import get_logger
from deepcurrent.topics.models import Topic
from deepcurrent.topics.store import TopicStore

logger = get_logger(__name__)


class PostgresTopicStore(TopicStore):
    """PostgreSQL implementation of TopicStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def get(self, topic_id: UUID) -> Topic | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT id, title, description, created_at
                    FROM topics
                    WHERE id = $1
                    """,
                    topic_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_get_topic_error", topic_id=str(topic_id), error=str(e))
            raise ConnectionError(f"Failed to get topic: {e}", cause=e) from e
        return Topic(**dict(row)) if row else None

    async def save(self, topic: Topic) -> Topic:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO topics (id, title, description, created_at)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (id) DO UPDATE
                    SET title = EXCLUDED.title, description = EXCLUDED.description
                    """,
                    topic.id,
                    topic.title,
                    topic.description,
                    topic.created_at,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_save_topic_error", topic_id=str(topic.id), error=str(e))
            raise ConnectionError(f"Failed to save topic: {e}", cause=e) from e
        return topic
