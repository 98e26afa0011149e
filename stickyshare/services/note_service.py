"""
StickyShare Backend — Note Service (Create Workflow Orchestrator)
==================================================================

What:  The create-a-note workflow shared by the composer and the JSON API.
How:   Composes ImageService (upload) and NoteRepository (insert).
Who:   Called by NoteComposer.commit() and POST /api/notes.

Orchestration Flow:
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │  Draft   │───▶│  Validate   │───▶│  Upload      │───▶│  Insert  │
    │  fields  │    │  (local)    │    │  (blob store)│    │  (rows)  │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    Validate fails → ValidationError, no network activity
    Upload fails   → UploadError, no note created
    Insert fails   → RepositoryError; an uploaded blob stays orphaned
"""

import logging
from typing import Optional

from stickyshare.exceptions import RepositoryError, ValidationError
from stickyshare.models.note import Note, NoteColor, parse_color
from stickyshare.services.image_service import ImageService, StagedImage
from stickyshare.services.note_repository import NoteRepository

logger = logging.getLogger(__name__)


class NoteService:
    """
    Creates notes end-to-end.

    Stateless: holds the repository and image service, nothing per request.
    """

    def __init__(self, repository: NoteRepository, images: ImageService):
        self.repository = repository
        self.images = images

    async def create_note(
        self,
        color: Optional[NoteColor] = None,
        content: Optional[str] = None,
        image: Optional[StagedImage] = None,
    ) -> Note:
        """
        Validate → upload (if an image is staged) → insert.

        Args:
            color: Palette color; None means the default color.
            content: Note text, may be empty when an image is given.
            image: Staged image to upload first.

        Returns:
            The note as stored by the gateway.

        Raises:
            ValidationError: empty note, bad color, or rejected image.
            UploadError: the image upload failed.
            RepositoryError: the insert failed.
        """
        note_color = parse_color(color)
        has_content = bool(content and content.strip())

        if not has_content and image is None:
            raise ValidationError(
                message="Write something or add an image before saving.",
                field="content",
                title="Empty note",
            )
        if image is not None:
            self.images.validate(image)

        image_url: Optional[str] = None
        if image is not None:
            image_url = await self.images.upload(image)

        try:
            note = await self.repository.insert_note(
                color=note_color,
                content=content if has_content else None,
                image_url=image_url,
            )
        except RepositoryError:
            if image_url:
                # TODO: delete the blob here once the gateway client grows a remove() call
                logger.warning("Insert failed after upload; blob left orphaned: %s", image_url)
            raise

        return note
