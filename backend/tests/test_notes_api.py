"""
QuickNotes Backend — Notes API Tests
======================================

What:  End-to-end HTTP tests through the FastAPI app (no server needed).
How:   HTTPX AsyncClient with ASGITransport (see conftest.test_client).

What we test:
    ✅ Status codes for every verb, including 400 vs 404 precedence
    ✅ Serialized record shape (camelCase timestamps, closed field set)
    ✅ Error envelope and request-id propagation
    ✅ Storage failures answer a generic 500
"""

from dataclasses import asdict
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from quicknotes.main import create_app
from quicknotes.schemas.note import NoteResponse

RECORD_FIELDS = {"id", "title", "content", "tags", "attachments", "createdAt", "updatedAt"}
NOTE_FIELDS = {"id", "title", "content", "tags", "attachments", "created_at", "updated_at"}


class TestCreateAndRead:

    @pytest.mark.asyncio
    async def test_create_returns_201_with_full_record(self, test_client):
        response = await test_client.post(
            "/api/notes", json={"title": "  Groceries ", "tags": ["home"], "color": "red"}
        )

        assert response.status_code == 201
        body = response.json()
        assert set(body) == RECORD_FIELDS
        assert body["title"] == "Groceries"
        assert body["content"] == ""
        assert body["tags"] == ["home"]
        assert body["attachments"] == []
        assert body["createdAt"] == body["updatedAt"]
        assert body["createdAt"].startswith("2024-01-15T12:00:00")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}])
    async def test_create_without_title_is_400(self, test_client, payload):
        response = await test_client.post("/api/notes", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Title is required"

    @pytest.mark.asyncio
    async def test_create_with_wrong_types_is_400(self, test_client):
        response = await test_client.post("/api/notes", json={"title": 42})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_create_with_malformed_json_is_400(self, test_client):
        response = await test_client.post(
            "/api/notes", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_coerces_non_array_tags(self, test_client):
        response = await test_client.post(
            "/api/notes", json={"title": "T", "tags": "a,b", "attachments": None}
        )
        assert response.status_code == 201
        assert response.json()["tags"] == []
        assert response.json()["attachments"] == []

    @pytest.mark.asyncio
    async def test_get_one(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "One"})).json()

        response = await test_client.get(f"/api/notes/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_get_unknown_is_404(self, test_client):
        response = await test_client.get("/api/notes/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert response.json()["message"] == "Note not found"

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/api/notes")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_legacy_capitalized_path(self, test_client):
        created = await test_client.post("/api/Notes", json={"title": "Legacy"})
        assert created.status_code == 201

        listed = await test_client.get("/api/Notes")
        assert [n["title"] for n in listed.json()] == ["Legacy"]


class TestUpdate:

    @pytest.mark.asyncio
    async def test_partial_update(self, test_client):
        created = (await test_client.post(
            "/api/notes", json={"title": "Old", "content": "body", "tags": ["a"]}
        )).json()

        response = await test_client.put(f"/api/notes/{created['id']}", json={"content": "new"})

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Old"
        assert body["content"] == "new"
        assert body["tags"] == ["a"]
        assert body["createdAt"] == created["createdAt"]
        assert body["updatedAt"] > created["updatedAt"]

    @pytest.mark.asyncio
    async def test_blank_title_is_400(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "Old"})).json()

        response = await test_client.put(f"/api/notes/{created['id']}", json={"title": " "})

        assert response.status_code == 400
        assert response.json()["message"] == "Title cannot be empty"
        assert response.json()["details"] == {"field": "title"}

    @pytest.mark.asyncio
    async def test_unknown_id_is_404_even_with_blank_title(self, test_client):
        response = await test_client.put("/api/notes/missing", json={"title": ""})
        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw_body",
        [
            b'{"tags": ["a", {"x": 1}]}',
            b'{"title": 5}',
            b'{not json',
            b'[1, 2]',
        ],
    )
    async def test_unknown_id_with_bad_body_is_404(self, test_client, raw_body):
        response = await test_client.put(
            "/api/notes/missing", content=raw_body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_wrongly_typed_body_on_existing_note_is_400(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "Old"})).json()

        response = await test_client.put(f"/api/notes/{created['id']}", json={"title": 5})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Invalid note data"
        assert body["details"]["errors"][0]["loc"] == ["body", "title"]
        assert (await test_client.get(f"/api/notes/{created['id']}")).json()["title"] == "Old"

    @pytest.mark.asyncio
    async def test_malformed_json_on_existing_note_is_400(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "Old"})).json()

        response = await test_client.put(
            f"/api/notes/{created['id']}",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_empty_body_only_touches_updated_at(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "Same", "tags": ["t"]})).json()

        response = await test_client.put(f"/api/notes/{created['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Same"
        assert body["tags"] == ["t"]
        assert body["updatedAt"] > created["updatedAt"]

    @pytest.mark.asyncio
    async def test_scalar_tag_items_are_cast_to_strings(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "T"})).json()

        response = await test_client.put(
            f"/api/notes/{created['id']}", json={"tags": ["a", 1, True], "attachments": [2.5]}
        )

        assert response.json()["tags"] == ["a", "1", "true"]
        assert response.json()["attachments"] == ["2.5"]

    @pytest.mark.asyncio
    async def test_non_array_tags_reset(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "T", "tags": ["x"]})).json()

        response = await test_client.put(f"/api/notes/{created['id']}", json={"tags": "x"})

        assert response.json()["tags"] == []


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_then_get_is_404(self, test_client):
        created = (await test_client.post("/api/notes", json={"title": "Bye"})).json()

        response = await test_client.delete(f"/api/notes/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Note deleted successfully", "id": created["id"]}
        assert (await test_client.get(f"/api/notes/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_unknown_is_404(self, test_client):
        response = await test_client.delete("/api/notes/missing")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_scenario(self, test_client):
        a = (await test_client.post("/api/notes", json={"title": "A"})).json()
        b = (await test_client.post("/api/notes", json={"title": "B"})).json()

        listed = (await test_client.get("/api/notes")).json()
        assert [(n["id"], n["title"]) for n in listed] == [(b["id"], "B"), (a["id"], "A")]

        await test_client.delete(f"/api/notes/{a['id']}")

        listed = (await test_client.get("/api/notes")).json()
        assert [n["id"] for n in listed] == [b["id"]]
        assert (await test_client.get(f"/api/notes/{a['id']}")).status_code == 404


class TestClosedFieldSet:
    """Unknown body fields are dropped on the way in and never stored."""

    @pytest.mark.asyncio
    async def test_create_drops_unknown_fields(self, test_client, memory_store):
        response = await test_client.post(
            "/api/notes", json={"title": "A", "owner": "x", "_id": "forged", "color": "red"}
        )

        assert response.status_code == 201
        body = response.json()
        assert set(body) == RECORD_FIELDS
        assert body["id"] != "forged"

        stored = await memory_store.get_by_id(body["id"])
        assert set(asdict(stored)) == NOTE_FIELDS

    @pytest.mark.asyncio
    async def test_update_drops_unknown_fields(self, test_client, memory_store):
        created = (await test_client.post("/api/notes", json={"title": "A"})).json()

        response = await test_client.put(
            f"/api/notes/{created['id']}",
            json={"title": "B", "owner": "y", "id": "other", "createdAt": "1999-01-01T00:00:00Z"},
        )

        assert response.status_code == 200
        body = response.json()
        assert set(body) == RECORD_FIELDS
        assert body["id"] == created["id"]
        assert body["createdAt"] == created["createdAt"]
        assert body["title"] == "B"

        stored = await memory_store.get_by_id(created["id"])
        assert set(asdict(stored)) == NOTE_FIELDS


class TestSerialization:

    @pytest.mark.asyncio
    async def test_round_trip_preserves_every_field(self, test_client, memory_store):
        created = await test_client.post(
            "/api/notes",
            json={"title": "RT", "content": "c", "tags": ["x", "y"], "attachments": ["a.txt"]},
        )

        parsed = NoteResponse.model_validate(created.json()).to_note()

        assert parsed == await memory_store.get_by_id(parsed.id)


class TestPlumbing:

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, test_client):
        response = await test_client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert response.json()["message"] == "Route not found"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/notes", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/api/notes")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["store"] == "memory:ok"

    @pytest.mark.asyncio
    async def test_root_banner(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert "message" in response.json()

    @pytest.mark.asyncio
    async def test_storage_failure_is_generic_500(self, memory_store):
        memory_store.list = AsyncMock(side_effect=RuntimeError("secret backend detail"))
        app = create_app(store=memory_store)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/notes", headers={"X-Request-ID": "rid-1"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "secret" not in response.text
        assert body["request_id"] == "rid-1"

    @pytest.mark.asyncio
    async def test_unhealthy_store_is_503(self, memory_store):
        memory_store.ping = AsyncMock(side_effect=ConnectionError("down"))
        app = create_app(store=memory_store)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
