"""
QuickNotes Backend — Note Store Interface
===========================================

What:  The capability set every note store provides, plus the id
       generators stores are built with.
How:   `NoteStore` is a typing.Protocol: InMemoryNoteStore and
       DatabaseNoteStore satisfy it structurally, neither inherits from it.
Who:   NoteService depends on NoteStore only; build_store() picks the
       concrete backend at startup.

Contract shared by both backends:
    list()            newest created_at first; equal timestamps put the
                      later insertion first; [] when empty
    get_by_id(id)     exact match; malformed ids give None, never raise
    insert(note)      stores the record exactly as given
    replace(id, note) full replacement; None if nothing lives at id
    remove(id)        hard delete; returns the removed record or None
    new_id()          next identifier in the backend's key format
"""

import itertools
import time
import uuid
from typing import Callable, List, Optional, Protocol, runtime_checkable

from quicknotes.models.note import Note

IdGenerator = Callable[[], str]


@runtime_checkable
class NoteStore(Protocol):
    """Keyed storage of Note records with a stable enumeration order."""

    backend: str

    async def list(self) -> List[Note]: ...

    async def get_by_id(self, note_id: str) -> Optional[Note]: ...

    async def insert(self, note: Note) -> Note: ...

    async def replace(self, note_id: str, note: Note) -> Optional[Note]: ...

    async def remove(self, note_id: str) -> Optional[Note]: ...

    def new_id(self) -> str: ...

    # ── Lifecycle ─────────────────────────────────────────────────────────
    async def initialize(self) -> None: ...

    async def ping(self) -> None: ...

    async def close(self) -> None: ...


class TimestampCounterIds:
    """
    Ids of the form ``note_<epoch-millis>_<n>``.

    The counter is per instance and strictly increasing, so ids are unique
    within one process. They are not globally unique.
    """

    def __init__(self, clock: Callable[[], float] = time.time, start: int = 1):
        self._clock = clock
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"note_{int(self._clock() * 1000)}_{next(self._counter)}"


def uuid_ids() -> str:
    """String form of a random UUID4."""
    return str(uuid.uuid4())
