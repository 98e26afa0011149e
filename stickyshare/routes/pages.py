"""
StickyShare Backend — Page Routes
==================================

What:  Server-rendered pages: the gallery with its composer, and the
       single-note share view.
How:   Each request builds its own view objects (Gallery, NoteComposer,
       ShareResolver, Notifier) and renders a Jinja2 template with them.
       Successful writes redirect (303) back to the gallery with a short
       toast code in the query string; failures re-render in place with
       the draft intact.

Route Inventory:
    GET  /                    gallery + composer (?toast=created|deleted, ?shared={id})
    POST /notes               composer commit (multipart form)
    POST /notes/{id}/delete   delete a note
    GET  /note/{id}           share view
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import UploadFile

from stickyshare.dependencies import Images, Notes, Origin, Repository, Toasts
from stickyshare.exceptions import ValidationError
from stickyshare.models.note import DEFAULT_COLOR, PALETTE
from stickyshare.services.image_service import stage_upload
from stickyshare.views.composer import Draft, NoteComposer
from stickyshare.views.gallery import Gallery
from stickyshare.views.notifications import Notifier
from stickyshare.views.share import PageClipboard, ShareResolver, ShareState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"], include_in_schema=False)

_BASE_DIR = Path(__file__).resolve().parents[1]
templates = Jinja2Templates(directory=str(_BASE_DIR / "templates"))

# Toasts that must survive a post/redirect/get round trip
TOAST_CODES = {
    "created": ("Note created!", "Your note has been saved successfully."),
    "deleted": ("Note deleted", "Your note has been removed."),
}


def _render_gallery(
    request: Request,
    gallery: Gallery,
    resolver: ShareResolver,
    notifier: Notifier,
    draft: Optional[Draft] = None,
    clipboard_text: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request=request,
        name="index.html",
        context={
            "gallery": gallery,
            "share_urls": {note.id: resolver.share_url(note.id) for note in gallery.notes},
            "palette": PALETTE,
            "draft": draft or Draft(),
            "default_color": DEFAULT_COLOR,
            "toasts": notifier.toasts,
            "clipboard_text": clipboard_text,
        },
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    repository: Repository,
    origin: Origin,
    notifier: Toasts,
    toast: Optional[str] = None,
    shared: Optional[str] = None,
):
    if toast in TOAST_CODES:
        notifier.success(*TOAST_CODES[toast])

    gallery = Gallery(repository, notifier)
    await gallery.load()

    resolver = ShareResolver(repository, origin, notifier)
    clipboard_text = None
    if shared:
        clipboard = PageClipboard()
        resolver.copy_link(shared, clipboard)
        clipboard_text = clipboard.text

    return _render_gallery(request, gallery, resolver, notifier, clipboard_text=clipboard_text)


@router.post("/notes", response_class=HTMLResponse)
async def create_note(
    request: Request,
    repository: Repository,
    notes: Notes,
    images: Images,
    origin: Origin,
    notifier: Toasts,
):
    """
    Replay the submitted form through a composer and commit it.

    Form fields: content, color, image (file), staged_image / staged_name
    (the preview carried over from an earlier failed submit), remove_image.

    The staged image is attached first; a new file then replaces it only
    if it passes validation.
    """
    # staged_image holds a whole base64 image, well past Starlette's 1MB field default
    form = await request.form(max_part_size=images.max_preview_length)
    content = str(form.get("content") or "")
    color = str(form.get("color") or "")
    staged_image = str(form.get("staged_image") or "")
    staged_name = str(form.get("staged_name") or "")
    remove_image = str(form.get("remove_image") or "").lower() in ("true", "on", "1")
    image = form.get("image")

    gallery = Gallery(repository, notifier)
    composer = NoteComposer(notes, images, notifier, on_created=gallery.prepend)
    draft = composer.open()
    composer.set_content(content)
    staged_ok = composer.set_color(color)

    if staged_image and not remove_image:
        try:
            staged_ok = composer.attach_image(images.from_preview(staged_image, staged_name)) and staged_ok
        except ValidationError as e:
            notifier.from_exception(e)
            staged_ok = False

    upload = await stage_upload(image) if isinstance(image, UploadFile) else None
    if upload is not None:
        staged_ok = composer.attach_image(upload) and staged_ok

    note = None
    if staged_ok:
        note = await composer.commit()
    if note is not None:
        return RedirectResponse(url="/?toast=created", status_code=303)

    # Refused or failed: show the gallery again with the draft as submitted
    await gallery.load()
    resolver = ShareResolver(repository, origin, notifier)
    status_code = 502 if staged_ok and draft.has_payload else 400
    return _render_gallery(request, gallery, resolver, notifier, draft=draft, status_code=status_code)


@router.post("/notes/{note_id}/delete", response_class=HTMLResponse)
async def delete_note(
    request: Request,
    note_id: str,
    repository: Repository,
    origin: Origin,
    notifier: Toasts,
):
    gallery = Gallery(repository, notifier)
    if await gallery.delete(note_id):
        return RedirectResponse(url="/?toast=deleted", status_code=303)

    await gallery.load()
    resolver = ShareResolver(repository, origin, notifier)
    return _render_gallery(request, gallery, resolver, notifier, status_code=502)


@router.get("/note/{note_id}", response_class=HTMLResponse)
async def shared_note(
    request: Request,
    note_id: str,
    repository: Repository,
    origin: Origin,
    notifier: Toasts,
):
    resolver = ShareResolver(repository, origin, notifier)
    view = await resolver.resolve(note_id)
    return templates.TemplateResponse(
        request=request,
        name="note.html",
        context={"view": view, "toasts": notifier.toasts},
        status_code=404 if view.state is ShareState.NOT_FOUND else 200,
    )
