"""
StickyShare Backend — Note Service Unit Tests
==============================================

What:  Tests for the create workflow (validate → upload → insert).
How:   Real repository and image service on the in-memory gateway; mocks
       where call order matters.

What we test:
    ✅ Text-only and image notes
    ✅ Empty notes rejected before any network call
    ✅ Oversized image rejected before upload
    ✅ Upload failure creates no note
    ✅ Insert failure after upload leaves the blob and re-raises
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from stickyshare.exceptions import RepositoryError, UploadError, ValidationError
from stickyshare.models.note import DEFAULT_COLOR, NoteColor
from stickyshare.services.note_service import NoteService


class TestCreateNote:

    @pytest.mark.asyncio
    async def test_text_note(self, note_service, repository):
        note = await note_service.create_note(color="#dcfce7", content="Hello")

        assert note.content == "Hello"
        assert note.color is NoteColor.GREEN
        assert note.image_url is None
        assert [n.id for n in await repository.list_notes()] == [note.id]

    @pytest.mark.asyncio
    async def test_default_color(self, note_service):
        note = await note_service.create_note(content="x")
        assert note.color is DEFAULT_COLOR

    @pytest.mark.asyncio
    async def test_image_note_stores_public_url(self, note_service, gateway, sample_image):
        note = await note_service.create_note(image=sample_image)

        assert note.content is None
        assert note.image_url.startswith("http://gateway.test/storage/v1/object/public/note-images/")
        assert len(gateway.blobs) == 1

    @pytest.mark.asyncio
    async def test_whitespace_content_is_stored_as_none(self, note_service, sample_image):
        note = await note_service.create_note(content="   ", image=sample_image)
        assert note.content is None

    @pytest.mark.asyncio
    async def test_empty_note_rejected(self, note_service, gateway):
        with pytest.raises(ValidationError) as exc_info:
            await note_service.create_note(content="  ")
        assert exc_info.value.title == "Empty note"
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_oversized_image_never_uploaded(self, note_service, gateway, make_image):
        with pytest.raises(ValidationError):
            await note_service.create_note(content="x", image=make_image(5 * 1024 * 1024 + 1))
        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_upload_failure_creates_nothing(self, note_service, gateway, sample_image):
        gateway.fail_on.add("upload")
        with pytest.raises(UploadError):
            await note_service.create_note(content="x", image=sample_image)
        assert "insert" not in gateway.calls
        assert gateway.tables.get("notes", []) == []

    @pytest.mark.asyncio
    async def test_insert_failure_after_upload_leaves_blob(self, note_service, gateway, sample_image):
        gateway.fail_on.add("insert")
        with pytest.raises(RepositoryError):
            await note_service.create_note(content="x", image=sample_image)
        assert gateway.calls == ["upload", "insert"]
        assert len(gateway.blobs) == 1


class TestOrchestrationOrder:

    def setup_method(self):
        self.repository = MagicMock()
        self.images = MagicMock()
        self.service = NoteService(self.repository, self.images)

    @pytest.mark.asyncio
    async def test_upload_happens_before_insert(self, sample_image):
        order = []
        self.images.upload = AsyncMock(side_effect=lambda image: order.append("upload") or "http://img")
        self.repository.insert_note = AsyncMock(side_effect=lambda **kw: order.append("insert") or kw)

        result = await self.service.create_note(color=NoteColor.PINK, content="hi", image=sample_image)

        assert order == ["upload", "insert"]
        assert result == {"color": NoteColor.PINK, "content": "hi", "image_url": "http://img"}
        self.images.validate.assert_called_once_with(sample_image)
