"""PostgreSQL implementation of NoteStore."""

from uuid import UUID

import asyncpg

from deepcurrent.db.errors import ConflictError, ConnectionError
from deepcurrent.db.pool import PostgresPool
from deepcurrent.notes.models import Note
from deepcurrent.notes.store import NoteStore
from deepcurrent.observability.logging import get_logger

logger = get_logger(__name__)


class PostgresNoteStore(NoteStore):
    """PostgreSQL implementation of NoteStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def create(self, note: Note) -> Note:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO notes (id, topic_id, title, content, type, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    """,
                    note.id,
                    note.topic_id,
                    note.title,
                    note.content,
                    note.type,
                    note.created_at,
                )
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(f"Note {note.id} already exists", cause=e) from e
        except asyncpg.PostgresError as e:
            logger.error("postgres_create_note_error", note_id=str(note.id), error=str(e))
            raise ConnectionError(f"Failed to create note: {e}", cause=e) from e
        return note

    async def get(self, note_id: UUID) -> Note | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    SELECT id, topic_id, title, content, type, created_at
                    FROM notes
                    WHERE id = $1
                    """,
                    note_id,
                )
        except asyncpg.PostgresError as e:
            logger.error("postgres_get_note_error", note_id=str(note_id), error=str(e))
            raise ConnectionError(f"Failed to get note: {e}", cause=e) from e
        return Note(**dict(row)) if row else None
