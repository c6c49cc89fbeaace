"""
QuickNotes — API Client & View-Model
======================================

What:  A typed async client for the notes API and a view-model that keeps
       a local copy of the notes list in step with the server.
How:   NotesClient wraps httpx.AsyncClient and parses responses into
       NoteResponse. NotesViewModel re-fetches the full list after every
       mutation; when that re-fetch fails it patches its local list instead.
Who:   Scripts, UIs, and the integration tests.

Example:
    async with httpx.AsyncClient(base_url="http://localhost:3000") as http:
        vm = NotesViewModel(NotesClient(http))
        await vm.load()
        await vm.add({"title": "Groceries", "tags": parse_tags("home, errands")})
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from quicknotes.schemas.note import NoteResponse

logger = logging.getLogger(__name__)

NOTES_PATH = "/api/notes"


class NotesAPIError(Exception):
    """Non-2xx response from the notes API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


def parse_tags(raw: str) -> List[str]:
    """'a, b,,c ' → ['a', 'b', 'c']"""
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


class NotesClient:
    """
    Thin async wrapper over the HTTP contract.

    Args:
        http: An httpx.AsyncClient whose base_url points at the backend
        path: Collection path (``/api/notes``)
    """

    def __init__(self, http: httpx.AsyncClient, path: str = NOTES_PATH):
        self._http = http
        self._path = path.rstrip("/")

    async def list_notes(self) -> List[NoteResponse]:
        response = await self._http.get(self._path)
        self._raise_for_status(response)
        return [NoteResponse.model_validate(item) for item in response.json()]

    async def get_note(self, note_id: str) -> Optional[NoteResponse]:
        response = await self._http.get(f"{self._path}/{note_id}")
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return NoteResponse.model_validate(response.json())

    async def create_note(self, data: Dict[str, Any]) -> NoteResponse:
        response = await self._http.post(self._path, json=data)
        self._raise_for_status(response)
        return NoteResponse.model_validate(response.json())

    async def update_note(self, note_id: str, data: Dict[str, Any]) -> NoteResponse:
        response = await self._http.put(f"{self._path}/{note_id}", json=data)
        self._raise_for_status(response)
        return NoteResponse.model_validate(response.json())

    async def delete_note(self, note_id: str) -> None:
        response = await self._http.delete(f"{self._path}/{note_id}")
        self._raise_for_status(response)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            message = response.json().get("message", response.reason_phrase)
        except ValueError:
            message = response.text or response.reason_phrase
        raise NotesAPIError(response.status_code, message)


class NotesViewModel:
    """
    Local UI state for a notes screen.

    Attributes:
        notes: Last known list, newest first
        selected_id: Id of the note open in the editor, if any
        search_query: Case-insensitive filter over title and content
        error: Message of the last failed load, else None
        loading: True while load() is running
    """

    def __init__(self, client: NotesClient):
        self.client = client
        self.notes: List[NoteResponse] = []
        self.selected_id: Optional[str] = None
        self.search_query: str = ""
        self.error: Optional[str] = None
        self.loading: bool = False

    @property
    def selected(self) -> Optional[NoteResponse]:
        return next((n for n in self.notes if n.id == self.selected_id), None)

    @property
    def visible_notes(self) -> List[NoteResponse]:
        query = self.search_query.lower()
        return [
            n for n in self.notes
            if query in n.title.lower() or query in n.content.lower()
        ]

    def select(self, note_id: Optional[str]) -> None:
        self.selected_id = note_id

    async def load(self) -> None:
        self.loading = True
        try:
            self.notes = await self.client.list_notes()
            self.error = None
        except (httpx.HTTPError, NotesAPIError) as e:
            logger.warning("Failed to fetch notes: %s", e)
            self.error = str(e)
            self.notes = []
        finally:
            self.loading = False

    async def add(self, data: Dict[str, Any]) -> NoteResponse:
        """Create a note, refresh the list, and select the new note."""
        created = await self.client.create_note(data)
        if not await self._refresh():
            self.notes = [created, *self.notes]
        self.selected_id = created.id
        return created

    async def edit(self, note_id: str, data: Dict[str, Any]) -> NoteResponse:
        updated = await self.client.update_note(note_id, data)
        if not await self._refresh():
            self.notes = [updated if n.id == note_id else n for n in self.notes]
        return updated

    async def remove(self, note_id: str) -> None:
        await self.client.delete_note(note_id)
        if not await self._refresh():
            self.notes = [n for n in self.notes if n.id != note_id]
        if self.selected_id == note_id:
            self.selected_id = None

    async def _refresh(self) -> bool:
        """Re-fetch the list; False when the server could not be read."""
        try:
            self.notes = await self.client.list_notes()
        except (httpx.HTTPError, NotesAPIError) as e:
            logger.warning("Refresh after mutation failed, patching local state: %s", e)
            return False
        return True
