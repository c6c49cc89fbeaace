"""
QuickNotes Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract between client and backend.
How:   FastAPI uses these models to validate request bodies, serialize
       responses, and generate the OpenAPI documentation.
Who:   Request models are handed to NoteService; NoteResponse is returned
       by the routes and parsed again by quicknotes.client.

Serialized record shape (closed field set):
    {
        "id": "note_1705320000000_1",
        "title": "Groceries",
        "content": "milk, eggs",
        "tags": ["home"],
        "attachments": ["list.txt"],
        "createdAt": "2024-01-15T12:00:00Z",
        "updatedAt": "2024-01-15T12:00:00Z"
    }
"""

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quicknotes.models.note import Note


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class _NoteInput(BaseModel):
    """
    Shared fields of the create and update bodies.

    tags / attachments are `list[str] | None`: anything that is not a JSON
    array arrives as None, and NoteService decides what None means for the
    operation. Numbers and booleans inside an array are cast to strings
    ([1, true] → ["1", "true"]); nested arrays or objects are rejected.
    Unknown fields are dropped.
    """

    title: Optional[str] = Field(default=None, description="Note title (trimmed, non-empty)")
    content: Optional[str] = Field(default=None, description="Free text body")
    tags: Optional[List[str]] = Field(default=None, description="Ordered tag list")
    attachments: Optional[List[str]] = Field(
        default=None,
        description="Ordered list of attachment names (names only; files are never uploaded)",
    )

    model_config = ConfigDict(extra="ignore")

    @field_validator("tags", "attachments", mode="before")
    @classmethod
    def non_array_to_none(cls, v: Any) -> Any:
        """Non-array input is not an error; it is treated as 'no sequence'."""
        if not isinstance(v, list):
            return None
        return [_scalar_to_str(item) for item in v]


def _scalar_to_str(item: Any) -> Any:
    if isinstance(item, bool):
        return "true" if item else "false"
    if isinstance(item, (int, float)):
        return str(item)
    return item


class NoteCreate(_NoteInput):
    """Body of POST /api/notes. `title` is required by NoteService."""


class NoteUpdate(_NoteInput):
    """
    Body of PUT /api/notes/{id}. Partial: only fields present in the JSON
    body (pydantic's model_fields_set) overwrite the stored note.

    The route hands NoteService the raw request bytes; they are parsed
    with from_json() only once the note is known to exist.
    """

    @classmethod
    def from_json(cls, raw: Union[bytes, str]) -> "NoteUpdate":
        """Parse and validate a raw JSON body. Raises pydantic.ValidationError."""
        return cls.model_validate_json(raw)


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Full representation of a note. No storage-internal keys are exposed."""

    id: str = Field(description="Unique note identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note body")
    tags: List[str] = Field(description="Ordered tag list")
    attachments: List[str] = Field(description="Ordered attachment names")
    created_at: datetime = Field(alias="createdAt", description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(alias="updatedAt", description="Last update time (UTC ISO 8601)")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_note(cls, note: Note) -> "NoteResponse":
        return cls(
            id=note.id,
            title=note.title,
            content=note.content,
            tags=list(note.tags),
            attachments=list(note.attachments),
            created_at=note.created_at,
            updated_at=note.updated_at,
        )

    def to_note(self) -> Note:
        return Note(
            id=self.id,
            title=self.title,
            content=self.content,
            tags=list(self.tags),
            attachments=list(self.attachments),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class DeleteResponse(BaseModel):
    """Confirmation returned by DELETE /api/notes/{id}."""

    message: str = Field(default="Note deleted successfully")
    id: str = Field(description="Identifier of the deleted note")


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Fields:
        error: Machine-readable code (validation_error, not_found, server_error, ...)
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and store status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Store backend and state, e.g. 'memory:ok'")
    uptime_seconds: float = Field(description="Seconds since service started")
