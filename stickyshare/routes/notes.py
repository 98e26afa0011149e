"""
StickyShare Backend — Notes API Route Handlers
===============================================

What:  JSON API for notes under /api.
How:   Extracts request data, delegates to the repository / NoteService,
       returns schemas. Errors propagate to the global exception handlers.
Who:   Programmatic clients and the page scripts.

Route Inventory:
    GET    /api/notes              list, newest first
    POST   /api/notes              create (multipart: content, color, image)
    GET    /api/notes/{id}         single note
    DELETE /api/notes/{id}         delete (idempotent, 204)
    GET    /api/notes/{id}/share   canonical share link
    GET    /api/palette            the 8 note colors
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Response, UploadFile

from stickyshare.dependencies import Notes, Origin, Repository
from stickyshare.models.note import DEFAULT_COLOR, PALETTE
from stickyshare.schemas.note import (
    ErrorResponse,
    NoteListResponse,
    NoteResponse,
    PaletteColor,
    PaletteResponse,
    ShareLinkResponse,
)
from stickyshare.services.image_service import stage_upload
from stickyshare.views.share import ShareResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Notes"])


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={502: {"description": "Note store unavailable", "model": ErrorResponse}},
    summary="List notes, newest first",
)
async def list_notes(response: Response, repository: Repository) -> NoteListResponse:
    notes = await repository.list_notes()
    response.headers["X-Total-Count"] = str(len(notes))
    return NoteListResponse(
        notes=[NoteResponse.from_note(note) for note in notes],
        total_count=len(notes),
    )


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteResponse,
    responses={
        400: {"description": "Empty note, unknown color, or rejected image", "model": ErrorResponse},
        502: {"description": "Upload or insert failed", "model": ErrorResponse},
    },
    summary="Create a note",
    description=(
        "Create a note with text and/or an image (max 5MB) in one of the 8 palette colors. "
        "The image is uploaded first; its public URL is stored on the note."
    ),
)
async def create_note(
    notes: Notes,
    content: str = Form(default="", description="Note text"),
    color: str = Form(default="", description="Palette color (hex); empty for the default"),
    image: Optional[UploadFile] = File(default=None, description="Optional image, max 5MB"),
) -> NoteResponse:
    staged = await stage_upload(image)
    logger.info(
        "Create note request: %d chars, image=%s",
        len(content),
        f"{staged.filename} ({staged.size} bytes)" if staged else "none",
    )
    note = await notes.create_note(color=color, content=content, image=staged)
    return NoteResponse.from_note(note)


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={
        404: {"description": "Note not found", "model": ErrorResponse},
        502: {"description": "Note store unavailable", "model": ErrorResponse},
    },
    summary="Get a single note by ID",
)
async def get_note(note_id: str, response: Response, repository: Repository) -> NoteResponse:
    note = await repository.get_note(note_id)
    # Notes are immutable after creation
    response.headers["Cache-Control"] = "private, max-age=3600"
    return NoteResponse.from_note(note)


@router.delete(
    "/notes/{note_id}",
    status_code=204,
    responses={502: {"description": "Note store unavailable", "model": ErrorResponse}},
    summary="Delete a note",
)
async def delete_note(note_id: str, repository: Repository) -> Response:
    await repository.delete_note(note_id)
    return Response(status_code=204)


@router.get(
    "/notes/{note_id}/share",
    response_model=ShareLinkResponse,
    summary="Canonical share link for a note",
)
async def share_link(note_id: str, repository: Repository, origin: Origin) -> ShareLinkResponse:
    resolver = ShareResolver(repository, origin)
    return ShareLinkResponse(note_id=note_id, url=resolver.share_url(note_id))


@router.get("/palette", response_model=PaletteResponse, summary="Available note colors")
async def palette() -> PaletteResponse:
    return PaletteResponse(
        colors=[PaletteColor(name=color.label, value=color.value) for color in PALETTE],
        default=DEFAULT_COLOR.value,
    )
