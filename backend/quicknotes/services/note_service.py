"""
QuickNotes Backend — Note Service (Validation & Defaulting)
=============================================================

What:  The only component that trims, validates, and defaults note fields.
How:   Maps each CRUD verb onto NoteStore operations and builds the Note
       records the store persists.
Who:   Called by route handlers (through the get_note_service dependency)
       and directly by tests.

Outcomes:
    ┌──────────────┬──────────────────────┬─────────────────────────────┐
    │ Operation    │ Success              │ Failure                     │
    ├──────────────┼──────────────────────┼─────────────────────────────┤
    │ list_all     │ [Note] newest first  │ StorageFailure              │
    │ get_one      │ Note | None          │ StorageFailure              │
    │ create       │ Note                 │ ValidationError, Storage... │
    │ update       │ Note | None          │ ValidationError, Storage... │
    │ delete       │ Note | None          │ StorageFailure              │
    └──────────────┴──────────────────────┴─────────────────────────────┘

    None means "no note with that id" and is a normal outcome, not an error.
    Nothing is retried.

Design Decision:
    NoteService keeps no records between calls. Every operation re-reads
    the store.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from functools import wraps
from typing import Callable, List, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from quicknotes.exceptions import QuickNotesError, StorageFailure, ValidationError
from quicknotes.models.note import Note
from quicknotes.schemas.note import NoteCreate, NoteUpdate
from quicknotes.stores.base import NoteStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_sequence(value: Optional[Sequence[str]]) -> List[str]:
    """Absent / non-sequence (None) becomes []; a sequence is copied as-is."""
    return [] if value is None else list(value)


def parse_update_body(raw: Union[bytes, str]) -> NoteUpdate:
    """
    Raw PUT body → NoteUpdate. Schema errors are reported the same way
    FastAPI's body validation is: "Invalid note data" with loc/msg pairs.
    """
    try:
        return NoteUpdate.from_json(raw)
    except PydanticValidationError as e:
        errors = [
            {"loc": ["body", *(str(part) for part in err.get("loc", ()))], "msg": err.get("msg", "")}
            for err in e.errors()
        ]
        raise ValidationError(message="Invalid note data", context={"errors": errors}) from e


def _storage_guard(operation: str):
    """
    Re-raise QuickNotesError subclasses unchanged; wrap anything else
    coming out of the store in StorageFailure.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except QuickNotesError:
                raise
            except Exception as e:
                logger.error("Unexpected store error in %s: %s", operation, str(e), exc_info=True)
                raise StorageFailure(
                    context={"operation": operation, "error_type": type(e).__name__},
                ) from e

        return wrapper

    return decorator


class NoteService:
    """
    Business rules for notes.

    Args:
        store: Any NoteStore implementation
        clock: Returns the current time; injected so tests control timestamps
    """

    def __init__(self, store: NoteStore, clock: Optional[Clock] = None):
        self.store = store
        self._clock = clock or utc_now

    @_storage_guard("list_all")
    async def list_all(self) -> List[Note]:
        return await self.store.list()

    @_storage_guard("get_one")
    async def get_one(self, note_id: str) -> Optional[Note]:
        return await self.store.get_by_id(note_id)

    @_storage_guard("create")
    async def create(self, data: NoteCreate) -> Note:
        """
        Build and persist a new note.

        Raises:
            ValidationError: title missing or blank after trimming
        """
        if data.title is None or not data.title.strip():
            raise ValidationError(message="Title is required", field="title")

        now = self._clock()
        note = Note(
            id=self.store.new_id(),
            title=data.title.strip(),
            content=data.content if data.content is not None else "",
            tags=normalize_sequence(data.tags),
            attachments=normalize_sequence(data.attachments),
            created_at=now,
            updated_at=now,
        )
        stored = await self.store.insert(note)
        logger.info("Created note %s", stored.id)
        return stored

    @_storage_guard("update")
    async def update(self, note_id: str, data: Union[NoteUpdate, bytes, str]) -> Optional[Note]:
        """
        Merge the fields present in `data` into the stored note.

        `data` is either a parsed NoteUpdate or the raw JSON request body.
        The lookup happens before any validation, parsing included: an
        unknown id is always reported as None, even when the body is
        malformed or wrongly typed.

        Raises:
            ValidationError: body does not match NoteUpdate, or title
                present but null or blank after trimming
        """
        existing = await self.store.get_by_id(note_id)
        if existing is None:
            return None

        if not isinstance(data, NoteUpdate):
            data = parse_update_body(data)

        present = data.model_fields_set
        changes = {}

        if "title" in present:
            if data.title is None or not data.title.strip():
                raise ValidationError(message="Title cannot be empty", field="title")
            changes["title"] = data.title.strip()
        if "content" in present:
            changes["content"] = data.content if data.content is not None else ""
        # Present but not an array means "replace with []", never "keep"
        if "tags" in present:
            changes["tags"] = normalize_sequence(data.tags)
        if "attachments" in present:
            changes["attachments"] = normalize_sequence(data.attachments)

        changes["updated_at"] = max(self._clock(), existing.created_at)

        updated = await self.store.replace(note_id, replace(existing, **changes))
        if updated is not None:
            logger.info("Updated note %s (fields: %s)", note_id, ", ".join(sorted(present)) or "none")
        return updated

    @_storage_guard("delete")
    async def delete(self, note_id: str) -> Optional[Note]:
        removed = await self.store.remove(note_id)
        if removed is not None:
            logger.info("Deleted note %s", note_id)
        return removed
