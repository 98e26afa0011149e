"""
StickyShare Backend — Gateway Lifecycle & FastAPI Dependencies
===============================================================

What:  Creates the storage gateway client and provides per-request services.
How:   One HttpStorageGateway (wrapping one httpx.AsyncClient) lives on
       `app.state.gateway` for the lifetime of the process; repositories and
       services are thin wrappers built per request on top of it.
Who:   The lifespan handler in main.py (create/close) and route handlers
       via Depends().

Tests swap the gateway by assigning `app.state.gateway` or by overriding
`get_gateway` in `app.dependency_overrides`.
"""

from typing import Annotated

from fastapi import Depends, Request

from stickyshare.config import settings
from stickyshare.services.gateway_base import StorageGateway
from stickyshare.services.hosted_gateway import HttpStorageGateway
from stickyshare.services.image_service import ImageService
from stickyshare.services.note_repository import NoteRepository
from stickyshare.services.note_service import NoteService
from stickyshare.views.notifications import Notifier


# ── Lifecycle Helpers ─────────────────────────────────────────────────────

def create_gateway() -> HttpStorageGateway:
    """
    Build the gateway from settings. The gateway owns its httpx client.

    `gateway_timeout_seconds=None` gives httpx no timeout at all.
    """
    return HttpStorageGateway(
        base_url=settings.gateway_url,
        api_key=settings.gateway_api_key,
        timeout_seconds=settings.gateway_timeout_seconds,
    )


# ── Request Dependencies ──────────────────────────────────────────────────

def get_gateway(request: Request) -> StorageGateway:
    return request.app.state.gateway


def get_repository(gateway: StorageGateway = Depends(get_gateway)) -> NoteRepository:
    return NoteRepository(gateway)


def get_image_service(gateway: StorageGateway = Depends(get_gateway)) -> ImageService:
    return ImageService(gateway)


def get_note_service(
    repository: NoteRepository = Depends(get_repository),
    images: ImageService = Depends(get_image_service),
) -> NoteService:
    return NoteService(repository, images)


def get_notifier() -> Notifier:
    return Notifier()


def get_origin(request: Request) -> str:
    """Origin for share links: PUBLIC_ORIGIN if set, else the request's own."""
    if settings.public_origin:
        return settings.public_origin
    return str(request.base_url).rstrip("/")


Repository = Annotated[NoteRepository, Depends(get_repository)]
Images = Annotated[ImageService, Depends(get_image_service)]
Notes = Annotated[NoteService, Depends(get_note_service)]
Toasts = Annotated[Notifier, Depends(get_notifier)]
Origin = Annotated[str, Depends(get_origin)]
