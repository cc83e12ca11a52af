"""Notes: research artifacts produced by completed episodes."""

from deepcurrent.notes.models import Note
from deepcurrent.notes.store import NoteStore

__all__ = ["Note", "NoteStore"]
