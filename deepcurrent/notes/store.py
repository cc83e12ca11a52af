"""NoteStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from deepcurrent.notes.models import Note


class NoteStore(ABC):
    """Abstract interface for note persistence."""

    @abstractmethod
    async def create(self, note: Note) -> Note:
        """Persist a new note and return it once durable."""
        pass

    @abstractmethod
    async def get(self, note_id: UUID) -> Note | None:
        """Get a note by ID."""
        pass
