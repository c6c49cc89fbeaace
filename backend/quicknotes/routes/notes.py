"""
QuickNotes Backend — Notes Route Handlers
===========================================

What:  CRUD endpoints for notes.
How:   Each handler delegates to NoteService and turns a None result into
       NotFoundError; global exception handlers render every error.
Who:   Called by the web client and quicknotes.client.NotesClient.

Endpoints (mounted at /api/notes, and at /api/Notes for the existing
web client):
    GET    ""            list all notes, newest first
    GET    "/{note_id}"  one note
    POST   ""            create (201)
    PUT    "/{note_id}"  partial update
    DELETE "/{note_id}"  delete, returns a confirmation
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from quicknotes.exceptions import NotFoundError
from quicknotes.schemas.note import (
    DeleteResponse,
    ErrorResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from quicknotes.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}
BAD_INPUT = {400: {"description": "Invalid note data", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Storage failure", "model": ErrorResponse}}


def get_note_service(request: Request) -> NoteService:
    """FastAPI dependency: the NoteService built in create_app()."""
    return request.app.state.note_service


@router.get(
    "",
    response_model=List[NoteResponse],
    responses={**SERVER_ERROR},
    summary="List all notes",
    description="Returns every note, newest created first.",
)
async def list_notes(service: NoteService = Depends(get_note_service)) -> List[NoteResponse]:
    notes = await service.list_all()
    return [NoteResponse.from_note(note) for note in notes]


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a single note by ID",
)
async def get_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """
    Unknown and malformed ids both answer 404; ids are never validated
    for format at this layer.
    """
    note = await service.get_one(note_id)
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    return NoteResponse.from_note(note)


@router.post(
    "",
    status_code=201,
    response_model=NoteResponse,
    responses={**BAD_INPUT, **SERVER_ERROR},
    summary="Create a note",
    description=(
        "Creates a note. `title` is required and trimmed; `content` defaults to an "
        "empty string; `tags` and `attachments` default to empty lists, and any "
        "non-array value for them is stored as an empty list."
    ),
)
async def create_note(
    body: NoteCreate,
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    note = await service.create(body)
    return NoteResponse.from_note(note)


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    responses={**BAD_INPUT, **NOT_FOUND, **SERVER_ERROR},
    summary="Update a note",
    description=(
        "Partial update: only fields present in the body replace stored values. "
        "`updatedAt` is refreshed on every successful update. An unknown id "
        "answers 404 whatever the body contains."
    ),
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": NoteUpdate.model_json_schema()}},
        }
    },
)
async def update_note(
    note_id: str,
    request: Request,
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    """
    The body is read raw and validated by NoteService after the lookup,
    so a bad body on a missing note still answers 404. An empty body
    updates nothing but updatedAt.
    """
    raw = await request.body()
    note = await service.update(note_id, raw or b"{}")
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    return NoteResponse.from_note(note)


@router.delete(
    "/{note_id}",
    response_model=DeleteResponse,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    service: NoteService = Depends(get_note_service),
) -> DeleteResponse:
    note = await service.delete(note_id)
    if note is None:
        raise NotFoundError(resource="note", resource_id=note_id)
    return DeleteResponse(id=note.id)
