"""
StickyShare Backend — Image Upload Service
===========================================

What:  Validates a candidate image, produces a local preview, and uploads the
       original bytes to the gateway's blob store.
How:   Size and content-type checks happen before any network activity.
       Uploads use a time-based key plus a random suffix and the original
       extension, then resolve the object's public URL.
Who:   Called by NoteComposer (validate/preview on attach) and NoteService
       (upload on commit).

Lifecycle of a staged image:
    1. User selects a file → StagedImage(filename, content_type, content)
    2. validate()  → ValidationError if empty, not an image, or > 5MB
    3. preview()   → data: URL shown immediately, never uploaded
    4. upload()    → public URL stored on the note

Each upload creates a new blob. Blobs are never deduplicated or cleaned up,
including when the note insert that follows an upload fails.
"""

import base64
import binascii
import logging
import mimetypes
import re
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stickyshare.config import settings
from stickyshare.exceptions import UploadError, ValidationError
from stickyshare.services.gateway_base import GatewayError, StorageGateway

logger = logging.getLogger(__name__)

# ── Known Image Types ─────────────────────────────────────────────────────
# Preferred extension per MIME type when the filename carries none
IMAGE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/bmp": ".bmp",
}

_DATA_URL_RE = re.compile(r"^data:(?P<type>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class StagedImage:
    """An image selected into a draft but not yet uploaded."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        ext = Path(self.filename or "").suffix.lower()
        if ext:
            return ext
        return IMAGE_EXTENSIONS.get(self.content_type) or mimetypes.guess_extension(self.content_type) or ""


def guess_content_type(filename: str, declared: Optional[str] = None) -> str:
    """Use the declared type when present, else guess from the filename."""
    if declared and declared != "application/octet-stream":
        return declared.lower()
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or "application/octet-stream"


async def stage_upload(upload) -> Optional[StagedImage]:
    """
    Read a multipart upload (FastAPI UploadFile) into a StagedImage.

    Browsers submit an empty, nameless part when no file was picked; that
    counts as "no image".
    """
    if upload is None or not upload.filename:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return StagedImage(
        filename=upload.filename,
        content_type=guess_content_type(upload.filename, upload.content_type),
        content=content,
    )


class ImageService:
    """
    Validation, preview and upload of note images.

    Args:
        gateway: Blob store access.
        bucket: Override settings.images_bucket (tests).
        max_size: Override settings.max_image_size (tests).
    """

    def __init__(
        self,
        gateway: StorageGateway,
        bucket: Optional[str] = None,
        max_size: Optional[int] = None,
    ):
        self.gateway = gateway
        self.bucket = bucket or settings.images_bucket
        self.max_size = max_size if max_size is not None else settings.max_image_size

    @property
    def max_size_mb(self) -> float:
        return self.max_size / (1024 * 1024)

    @property
    def max_preview_length(self) -> int:
        """Upper bound on the length of preview() for an image that passes validate()."""
        # base64 of max_size bytes, plus room for the "data:<type>;base64," prefix
        return 4 * ((self.max_size + 2) // 3) + 256

    def validate(self, image: StagedImage) -> None:
        """
        Reject images that must never reach the network.

        Checks, cheapest first:
            1. Empty file
            2. Size ceiling (exactly max_size passes; one byte more fails)
            3. Content type must be image/*

        Raises:
            ValidationError with a toast-ready title and message.
        """
        if image.size == 0:
            raise ValidationError(
                message="The selected file is empty.",
                field="image",
                title="Empty file",
            )

        if image.size > self.max_size:
            raise ValidationError(
                message=f"Please select an image smaller than {self.max_size_mb:.0f}MB",
                field="image",
                title="File too large",
                context={"max_size": self.max_size, "actual_size": image.size},
            )

        if not image.content_type.startswith("image/"):
            raise ValidationError(
                message=f"'{image.filename}' is not an image.",
                field="image",
                title="Unsupported file",
                context={"content_type": image.content_type},
            )

    def preview(self, image: StagedImage) -> str:
        """Return a data: URL for immediate display. No network activity."""
        encoded = base64.b64encode(image.content).decode("ascii")
        return f"data:{image.content_type};base64,{encoded}"

    def from_preview(self, data_url: str, filename: str = "") -> StagedImage:
        """
        Rebuild a staged image from its preview.

        Lets a re-rendered composer page carry the staged image across a
        failed commit without asking the user to pick it again.

        Raises:
            ValidationError: the value is not a base64 data: URL.
        """
        match = _DATA_URL_RE.match(data_url.strip())
        if not match:
            raise ValidationError(
                message="The staged image could not be read. Please select it again.",
                field="image",
                title="Unsupported file",
            )
        try:
            content = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError(
                message="The staged image could not be read. Please select it again.",
                field="image",
                title="Unsupported file",
            )
        content_type = match.group("type").lower()
        name = filename or f"image{IMAGE_EXTENSIONS.get(content_type, '')}"
        return StagedImage(filename=name, content_type=content_type, content=content)

    def _generate_key(self, extension: str) -> str:
        """
        Collision-resistant object key: <epoch millis>-<8 hex chars><ext>.

        e.g. "1718031234567-3f9a1c2b.png"
        """
        millis = int(time.time() * 1000)
        return f"{millis}-{uuid.uuid4().hex[:8]}{extension}"

    async def upload(self, image: StagedImage) -> str:
        """
        Transmit the original bytes and return the public URL.

        Raises:
            UploadError: the blob store rejected or could not receive the bytes.
        """
        key = self._generate_key(image.extension)
        try:
            await self.gateway.upload(self.bucket, key, image.content, image.content_type)
        except GatewayError as e:
            logger.error("Image upload failed for %s: %s", key, e.message)
            raise UploadError(
                message="Failed to upload the image. Please try again.",
                context={"key": key, **e.context},
            ) from e

        url = self.gateway.public_url(self.bucket, key)
        logger.info("Image uploaded: %s (%d bytes)", key, image.size)
        return url
