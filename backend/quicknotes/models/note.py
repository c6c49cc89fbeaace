"""
QuickNotes Backend — Note Record & ORM Row
============================================

What:  `Note`, the canonical record passed between the service and stores,
       and `NoteRow`, its mapping onto the `notes` table.
Who:   Note is built by NoteService and returned by every store.
       NoteRow is only used inside stores.database.

Table Design:
    - pk: internal autoincrement key; records insertion order for the
      tie-break in list() and never leaves the store
    - id: UUID, the store's native identifier, exposed as its string form
    - title: NOT NULL plus a CHECK that it is not blank after trimming
    - tags / attachments: JSON arrays, stored document-style
    - created_at / updated_at: timezone-aware UTC timestamps

    Index on created_at: serves the newest-first listing.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quicknotes.database import Base


@dataclass(frozen=True)
class Note:
    """
    A single note. The field set is closed: nothing else is persisted.

    Invariants (enforced by NoteService):
        - title is trimmed and never empty
        - created_at <= updated_at
        - id never changes after creation
    """

    id: str
    title: str
    content: str = ""
    tags: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def _as_utc(value: datetime) -> datetime:
    # Rows are written in UTC; SQLite drops tzinfo on the way back out
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class NoteRow(Base):
    """ORM mapping of a Note onto the `notes` table."""

    __tablename__ = "notes"

    pk: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Internal insertion-order key; never exposed",
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        unique=True,
        nullable=False,
        comment="Public note identifier",
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    attachments: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When this note was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When this note was last changed (UTC)",
    )

    __table_args__ = (
        CheckConstraint("length(trim(title)) > 0", name="ck_notes_title_not_blank"),
        Index("idx_notes_created_at", "created_at"),
    )

    @classmethod
    def from_note(cls, note: Note, native_id: uuid.UUID) -> "NoteRow":
        return cls(
            id=native_id,
            title=note.title,
            content=note.content,
            tags=list(note.tags),
            attachments=list(note.attachments),
            created_at=_as_utc(note.created_at),
            updated_at=_as_utc(note.updated_at),
        )

    def apply(self, note: Note) -> None:
        """Overwrite every mutable column from `note` (full replacement)."""
        self.title = note.title
        self.content = note.content
        self.tags = list(note.tags)
        self.attachments = list(note.attachments)
        self.created_at = _as_utc(note.created_at)
        self.updated_at = _as_utc(note.updated_at)

    def to_note(self) -> Note:
        return Note(
            id=str(self.id),
            title=self.title,
            content=self.content,
            tags=list(self.tags or []),
            attachments=list(self.attachments or []),
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
        )

    def __repr__(self) -> str:
        return f"<NoteRow(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
