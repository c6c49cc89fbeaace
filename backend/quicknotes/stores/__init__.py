# Stores package init
"""
QuickNotes Backend — Note Stores
==================================

Store Inventory:
    - NoteStore (protocol): the list/get_by_id/insert/replace/remove contract
    - InMemoryNoteStore: process-lifetime list (STORE_BACKEND=memory)
    - DatabaseNoteStore: async SQLAlchemy table (STORE_BACKEND=database)

build_store() is the only place that knows which backend is configured.
"""

from typing import Optional

from quicknotes.config import Settings, settings as default_settings
from quicknotes.stores.base import IdGenerator, NoteStore, TimestampCounterIds, uuid_ids
from quicknotes.stores.memory import InMemoryNoteStore

__all__ = [
    "IdGenerator",
    "NoteStore",
    "InMemoryNoteStore",
    "TimestampCounterIds",
    "build_store",
    "uuid_ids",
]


def build_store(
    config: Optional[Settings] = None,
    id_generator: Optional[IdGenerator] = None,
) -> NoteStore:
    """Instantiate the store named by `config.store_backend`."""
    config = config or default_settings
    if config.store_backend == "database":
        from quicknotes.database import build_engine
        from quicknotes.stores.database import DatabaseNoteStore

        return DatabaseNoteStore(
            build_engine(config.database_url, echo=config.db_echo),
            id_generator=id_generator,
        )
    return InMemoryNoteStore(id_generator=id_generator)
