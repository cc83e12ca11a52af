"""In-memory implementation of NoteStore."""

from uuid import UUID

from deepcurrent.db.errors import ConflictError
from deepcurrent.notes.models import Note
from deepcurrent.notes.store import NoteStore


class InMemoryNoteStore(NoteStore):
    """Dict-backed NoteStore for testing and development."""

    def __init__(self) -> None:
        self._notes: dict[UUID, Note] = {}

    async def create(self, note: Note) -> Note:
        if note.id in self._notes:
            raise ConflictError(f"Note {note.id} already exists")
        self._notes[note.id] = note
        return note

    async def get(self, note_id: UUID) -> Note | None:
        return self._notes.get(note_id)
