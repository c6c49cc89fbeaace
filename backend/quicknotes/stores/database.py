"""
QuickNotes Backend — Database Note Store
==========================================

What:  Persistent NoteStore on top of async SQLAlchemy.
How:   One AsyncSession per operation; writes run inside session.begin()
       so they commit on success and roll back on error.
Who:   Selected by build_store() when STORE_BACKEND=database.

Identifier handling:
    The native key is a UUID column. Callers only ever see its string
    form. A string that does not parse as a UUID cannot match any row, so
    lookups with it return None instead of raising.

Error handling:
    Every SQLAlchemyError (connection refused, constraint violation, ...)
    is logged with full detail and re-raised as StorageFailure with a
    generic message.

Query plan (list):
    SELECT * FROM notes ORDER BY created_at DESC, pk DESC
    → idx_notes_created_at for the sort, pk for the insertion-order tie-break
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from quicknotes.database import build_session_factory, dispose_engine, init_schema
from quicknotes.database import ping as ping_engine
from quicknotes.exceptions import StorageFailure
from quicknotes.models.note import Note, NoteRow
from quicknotes.stores.base import IdGenerator, uuid_ids

logger = logging.getLogger(__name__)


def parse_native_id(note_id: str) -> Optional[uuid.UUID]:
    """Returns the UUID for `note_id`, or None when it is not a UUID string."""
    try:
        return uuid.UUID(str(note_id))
    except (ValueError, TypeError, AttributeError):
        return None


class DatabaseNoteStore:
    """
    Notes persisted in the `notes` table.

    Args:
        engine: Async engine (see database.build_engine)
        id_generator: Produces new ids; must return UUID strings
    """

    backend = "database"

    def __init__(self, engine: AsyncEngine, id_generator: Optional[IdGenerator] = None):
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        self._id_generator = id_generator or uuid_ids

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def new_id(self) -> str:
        return self._id_generator()

    async def list(self) -> List[Note]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(NoteRow).order_by(NoteRow.created_at.desc(), NoteRow.pk.desc())
                )
                return [row.to_note() for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._failure("list", e) from e

    async def get_by_id(self, note_id: str) -> Optional[Note]:
        native_id = parse_native_id(note_id)
        if native_id is None:
            logger.debug("Malformed note id %r treated as not found", note_id)
            return None
        try:
            async with self._session_factory() as session:
                row = await self._find(session, native_id)
                return None if row is None else row.to_note()
        except SQLAlchemyError as e:
            raise self._failure("get_by_id", e, note_id=note_id) from e

    async def insert(self, note: Note) -> Note:
        native_id = parse_native_id(note.id)
        if native_id is None:
            raise StorageFailure(
                context={"operation": "insert", "reason": "id is not a UUID", "note_id": note.id}
            )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(NoteRow.from_note(note, native_id))
        except SQLAlchemyError as e:
            raise self._failure("insert", e, note_id=note.id) from e
        return note

    async def replace(self, note_id: str, note: Note) -> Optional[Note]:
        native_id = parse_native_id(note_id)
        if native_id is None:
            return None
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await self._find(session, native_id)
                    if row is None:
                        return None
                    row.apply(note)
                return row.to_note()
        except SQLAlchemyError as e:
            raise self._failure("replace", e, note_id=note_id) from e

    async def remove(self, note_id: str) -> Optional[Note]:
        native_id = parse_native_id(note_id)
        if native_id is None:
            return None
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = await self._find(session, native_id)
                    if row is None:
                        return None
                    removed = row.to_note()
                    await session.delete(row)
                return removed
        except SQLAlchemyError as e:
            raise self._failure("remove", e, note_id=note_id) from e

    @staticmethod
    async def _find(session: AsyncSession, native_id: uuid.UUID) -> Optional[NoteRow]:
        result = await session.execute(select(NoteRow).where(NoteRow.id == native_id))
        return result.scalar_one_or_none()

    @staticmethod
    def _failure(operation: str, error: Exception, **context) -> StorageFailure:
        logger.error("Database error during %s: %s", operation, str(error), exc_info=True)
        return StorageFailure(
            context={"operation": operation, "error_type": type(error).__name__, **context}
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────
    async def initialize(self) -> None:
        try:
            await init_schema(self._engine)
        except SQLAlchemyError as e:
            raise self._failure("initialize", e) from e
        logger.info("Database note store ready at %s", self._engine.url.render_as_string(hide_password=True))

    async def ping(self) -> None:
        try:
            await ping_engine(self._engine)
        except SQLAlchemyError as e:
            raise self._failure("ping", e) from e

    async def close(self) -> None:
        await dispose_engine(self._engine)
