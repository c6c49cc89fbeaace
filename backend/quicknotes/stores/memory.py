"""
QuickNotes Backend — In-Memory Note Store
===========================================

What:  Ephemeral NoteStore backed by a Python list in insertion order.
Who:   Default backend (STORE_BACKEND=memory) and the store used by most tests.

All state lives for the lifetime of the process and is lost on restart.
Only single-process deployments are supported: the id counter is not
shared between workers.
"""

import logging
from typing import List, Optional

from quicknotes.models.note import Note
from quicknotes.stores.base import IdGenerator, TimestampCounterIds

logger = logging.getLogger(__name__)


class InMemoryNoteStore:
    """
    Ordered in-process collection of notes.

    Records are kept in insertion order; list() sorts a copy, so the
    insertion order is always available for breaking created_at ties.
    """

    backend = "memory"

    def __init__(self, id_generator: Optional[IdGenerator] = None):
        self._notes: List[Note] = []
        self._id_generator = id_generator or TimestampCounterIds()

    def new_id(self) -> str:
        return self._id_generator()

    async def list(self) -> List[Note]:
        # sorted() is stable with reverse=True, so walking the insertion
        # order backwards leaves later inserts first among equal timestamps
        return sorted(reversed(self._notes), key=lambda n: n.created_at, reverse=True)

    async def get_by_id(self, note_id: str) -> Optional[Note]:
        index = self._index_of(note_id)
        return None if index is None else self._notes[index]

    async def insert(self, note: Note) -> Note:
        self._notes.append(note)
        logger.debug("Inserted note %s (%d total)", note.id, len(self._notes))
        return note

    async def replace(self, note_id: str, note: Note) -> Optional[Note]:
        index = self._index_of(note_id)
        if index is None:
            return None
        self._notes[index] = note
        return note

    async def remove(self, note_id: str) -> Optional[Note]:
        index = self._index_of(note_id)
        if index is None:
            return None
        removed = self._notes.pop(index)
        logger.debug("Removed note %s (%d left)", note_id, len(self._notes))
        return removed

    def _index_of(self, note_id: str) -> Optional[int]:
        for index, note in enumerate(self._notes):
            if note.id == note_id:
                return index
        return None

    # ── Lifecycle (nothing to open or close) ──────────────────────────────
    async def initialize(self) -> None:
        logger.info("Using in-memory note store (notes are lost on restart)")

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._notes)
