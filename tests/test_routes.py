"""
StickyShare Backend — HTTP Endpoint Tests
==========================================

What:  JSON API, page routes and health check through the ASGI app.
How:   test_client fixture (httpx + ASGITransport) with the in-memory gateway.
"""

import base64
import re

import pytest

PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


class TestNotesApi:

    @pytest.mark.asyncio
    async def test_create_hello_green_then_list(self, test_client, gateway):
        gateway.seed(content="older")

        response = await test_client.post(
            "/api/notes", data={"content": "Hello", "color": "#dcfce7"}
        )
        assert response.status_code == 201
        created = response.json()
        assert created["content"] == "Hello"
        assert created["color"] == "#dcfce7"
        assert created["image_url"] is None

        listing = await test_client.get("/api/notes")
        body = listing.json()
        assert listing.headers["X-Total-Count"] == "2"
        assert body["total_count"] == 2
        assert body["notes"][0]["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_create_with_image(self, test_client, gateway):
        response = await test_client.post(
            "/api/notes",
            data={"color": "#fce7f3"},
            files={"image": ("pic.png", PNG, "image/png")},
        )
        assert response.status_code == 201
        assert "/note-images/" in response.json()["image_url"]
        assert len(gateway.blobs) == 1

    @pytest.mark.asyncio
    async def test_empty_note_is_400(self, test_client, gateway):
        response = await test_client.post("/api/notes", data={"content": "  "})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["details"]["title"] == "Empty note"
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_unknown_color_is_400(self, test_client):
        response = await test_client.post("/api/notes", data={"content": "x", "color": "red"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_oversized_image_is_400(self, test_client, gateway):
        response = await test_client.post(
            "/api/notes",
            files={"image": ("big.png", b"\x00" * (5 * 1024 * 1024 + 1), "image/png")},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Please select an image smaller than 5MB"
        assert gateway.blobs == {}

    @pytest.mark.asyncio
    async def test_upload_failure_is_502(self, test_client, gateway):
        gateway.fail_on.add("upload")
        response = await test_client.post(
            "/api/notes",
            data={"content": "x"},
            files={"image": ("pic.png", PNG, "image/png")},
        )
        assert response.status_code == 502
        assert response.json()["error"] == "upload_error"
        assert gateway.tables.get("notes", []) == []

    @pytest.mark.asyncio
    async def test_get_and_not_found(self, test_client, gateway):
        row = gateway.seed(content="one", color="#f0fdfa")

        response = await test_client.get(f"/api/notes/{row['id']}")
        assert response.status_code == 200
        assert response.json()["color"] == "#f0fdfa"

        missing = await test_client.get("/api/notes/nope")
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_list_failure_is_502_with_generic_message(self, test_client, gateway):
        gateway.fail_on.add("select")
        response = await test_client.get("/api/notes")
        assert response.status_code == 502
        assert "unavailable" not in response.json()["message"]
        assert response.json()["request_id"]

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, test_client, gateway):
        row = gateway.seed(content="bye")
        assert (await test_client.delete(f"/api/notes/{row['id']}")).status_code == 204
        assert (await test_client.delete(f"/api/notes/{row['id']}")).status_code == 204
        assert gateway.tables["notes"] == []

    @pytest.mark.asyncio
    async def test_share_link_uses_public_origin(self, test_client):
        response = await test_client.get("/api/notes/abc/share")
        assert response.json() == {"note_id": "abc", "url": "http://sticky.test/note/abc"}

    @pytest.mark.asyncio
    async def test_palette(self, test_client):
        body = (await test_client.get("/api/palette")).json()
        assert len(body["colors"]) == 8
        assert body["default"] == "#fef3c7"
        assert body["colors"][1] == {"name": "green", "value": "#dcfce7"}


class TestPages:

    @pytest.mark.asyncio
    async def test_empty_gallery(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert "No notes yet" in response.text

    @pytest.mark.asyncio
    async def test_gallery_lists_notes(self, test_client, gateway):
        row = gateway.seed(content="visible note", color="#e0e7ff")
        response = await test_client.get("/")
        assert "visible note" in response.text
        assert f"http://sticky.test/note/{row['id']}" in response.text

    @pytest.mark.asyncio
    async def test_create_redirects_with_toast(self, test_client, gateway):
        response = await test_client.post("/notes", data={"content": "Hello", "color": "#dcfce7"})
        assert response.status_code == 303
        assert response.headers["location"] == "/?toast=created"

        page = await test_client.get("/?toast=created")
        assert "Note created!" in page.text
        assert "Hello" in page.text

    @pytest.mark.asyncio
    async def test_failed_commit_rerenders_draft(self, test_client, gateway):
        gateway.fail_on.add("upload")
        response = await test_client.post(
            "/notes",
            data={"content": "keep me", "color": "#f3e8ff"},
            files={"image": ("pic.png", PNG, "image/png")},
        )
        assert response.status_code == 502
        assert "keep me" in response.text
        assert 'name="staged_image" value="data:image/png;base64,' in response.text

    @pytest.mark.asyncio
    async def test_staged_image_is_reused_on_resubmit(self, test_client, gateway):
        preview = "data:image/png;base64," + base64.b64encode(PNG).decode()
        response = await test_client.post(
            "/notes",
            data={"content": "", "staged_image": preview, "staged_name": "pic.png"},
        )
        assert response.status_code == 303
        (row,) = gateway.tables["notes"]
        assert row["image_url"].endswith(".png")

    @pytest.mark.asyncio
    async def test_large_staged_image_survives_resubmit(self, test_client, gateway):
        big_png = PNG + b"\x00" * (2 * 1024 * 1024)
        gateway.fail_on.add("upload")
        failed = await test_client.post(
            "/notes",
            data={"content": "big one"},
            files={"image": ("big.png", big_png, "image/png")},
        )
        assert failed.status_code == 502
        staged = re.search(r'name="staged_image" value="([^"]+)"', failed.text).group(1)
        assert len(staged) > 1024 * 1024

        gateway.fail_on.clear()
        response = await test_client.post(
            "/notes",
            data={"content": "big one", "staged_image": staged, "staged_name": "big.png"},
            files={"image": ("", b"", "application/octet-stream")},
        )

        assert response.status_code == 303
        (blob,) = gateway.blobs.values()
        assert blob["content"] == big_png
        (row,) = gateway.tables["notes"]
        assert row["content"] == "big one"

    @pytest.mark.asyncio
    async def test_rejected_new_file_keeps_staged_image(self, test_client, gateway):
        preview = "data:image/png;base64," + base64.b64encode(PNG).decode()
        response = await test_client.post(
            "/notes",
            data={"content": "x", "staged_image": preview, "staged_name": "pic.png"},
            files={"image": ("huge.png", b"\x00" * (5 * 1024 * 1024 + 1), "image/png")},
        )

        assert response.status_code == 400
        assert "Please select an image smaller than 5MB" in response.text
        assert f'name="staged_image" value="{preview}"' in response.text
        assert gateway.blobs == {}

    @pytest.mark.asyncio
    async def test_valid_new_file_replaces_staged_image(self, test_client, gateway):
        preview = "data:image/png;base64," + base64.b64encode(PNG).decode()
        response = await test_client.post(
            "/notes",
            data={"content": "", "staged_image": preview, "staged_name": "pic.png"},
            files={"image": ("cat.gif", b"GIF89a", "image/gif")},
        )

        assert response.status_code == 303
        (blob,) = gateway.blobs.values()
        assert blob["content"] == b"GIF89a"

    @pytest.mark.asyncio
    async def test_removed_staged_image_is_not_uploaded(self, test_client, gateway):
        preview = "data:image/png;base64," + base64.b64encode(PNG).decode()
        response = await test_client.post(
            "/notes",
            data={"content": "text only", "staged_image": preview, "remove_image": "true"},
        )

        assert response.status_code == 303
        assert gateway.blobs == {}

    @pytest.mark.asyncio
    async def test_composer_has_cancel_and_single_submit(self, test_client):
        response = await test_client.get("/")
        assert '<a href="/">Cancel</a>' in response.text
        assert "onsubmit=\"this.querySelector('button[type=submit]').disabled = true\"" in response.text

    @pytest.mark.asyncio
    async def test_note_text_keeps_line_breaks(self, test_client, gateway):
        row = gateway.seed(content="line one\nline two")

        gallery = await test_client.get("/")
        shared = await test_client.get(f"/note/{row['id']}")

        for page in (gallery, shared):
            assert '<p class="note-text" style="white-space: pre-wrap">line one\nline two</p>' in page.text

    @pytest.mark.asyncio
    async def test_empty_submit_is_400(self, test_client, gateway):
        response = await test_client.post("/notes", data={"content": ""})
        assert response.status_code == 400
        assert "Empty note" in response.text
        assert "insert" not in gateway.calls

    @pytest.mark.asyncio
    async def test_delete_redirects(self, test_client, gateway):
        row = gateway.seed(content="bye")
        response = await test_client.post(f"/notes/{row['id']}/delete")
        assert response.status_code == 303
        assert response.headers["location"] == "/?toast=deleted"
        assert gateway.tables["notes"] == []

    @pytest.mark.asyncio
    async def test_shared_query_copies_link(self, test_client):
        response = await test_client.get("/?shared=abc")
        assert "Link copied!" in response.text
        assert '"http://sticky.test/note/abc"' in response.text

    @pytest.mark.asyncio
    async def test_share_view_found(self, test_client, gateway):
        row = gateway.seed(content="shared text", color="#fed7e2")
        response = await test_client.get(f"/note/{row['id']}")
        assert response.status_code == 200
        assert "shared text" in response.text
        assert "Back to Notes" in response.text

    @pytest.mark.asyncio
    async def test_share_view_confirms_copy(self, test_client, gateway):
        row = gateway.seed(content="shared text")
        response = await test_client.get(f"/note/{row['id']}")
        assert 'id="toasts"' in response.text
        assert 'showToast("Link copied!", "Share URL has been copied to your clipboard.")' in response.text
        assert f'data-url="http://sticky.test/note/{row["id"]}"' in response.text

    @pytest.mark.asyncio
    async def test_share_view_not_found(self, test_client):
        response = await test_client.get("/note/does-not-exist")
        assert response.status_code == 404
        assert "Note not found" in response.text


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["gateway"] == "connected"

    @pytest.mark.asyncio
    async def test_unhealthy(self, test_client, gateway):
        gateway.healthy = False
        response = await test_client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"
