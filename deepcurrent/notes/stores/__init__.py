"""Note store implementations."""

from deepcurrent.notes.store import NoteStore
from deepcurrent.notes.stores.inmemory import InMemoryNoteStore
from deepcurrent.notes.stores.postgres import PostgresNoteStore

__all__ = ["NoteStore", "InMemoryNoteStore", "PostgresNoteStore"]
