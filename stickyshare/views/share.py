"""
StickyShare Backend — Share Resolver
=====================================

What:  Builds share links and resolves a shared note id into a renderable view.
How:   `{origin}/note/{id}` links; resolve() never raises. "No such note" and
       "gateway unreachable" both render as not-found but are logged at
       different levels.
Who:   GET /note/{id}, the gallery's share action, GET /api/notes/{id}/share.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol
from urllib.parse import quote

from stickyshare.exceptions import NotFoundError, RepositoryError
from stickyshare.models.note import Note
from stickyshare.services.note_repository import NoteRepository
from stickyshare.views.notifications import Notifier

logger = logging.getLogger(__name__)

SHARE_PATH = "/note/"


class Clipboard(Protocol):
    def write_text(self, text: str) -> None: ...


class PageClipboard:
    """
    Clipboard for server-rendered pages.

    Holds the text; the page template hands it to the browser's
    navigator.clipboard on load.
    """

    def __init__(self) -> None:
        self.text: Optional[str] = None

    def write_text(self, text: str) -> None:
        self.text = text


class ShareState(str, Enum):
    LOADING = "loading"
    FOUND = "found"
    NOT_FOUND = "not_found"


@dataclass
class SharedNoteView:
    note_id: str
    state: ShareState = ShareState.LOADING
    note: Optional[Note] = None
    share_url: str = ""


class ShareResolver:
    def __init__(self, repository: NoteRepository, origin: str, notifier: Optional[Notifier] = None):
        self.repository = repository
        self.origin = origin.rstrip("/")
        self.notifier = notifier or Notifier()

    def share_url(self, note_id: str) -> str:
        return f"{self.origin}{SHARE_PATH}{quote(note_id, safe='')}"

    async def resolve(self, note_id: str) -> SharedNoteView:
        view = SharedNoteView(note_id=note_id, share_url=self.share_url(note_id))
        try:
            view.note = await self.repository.get_note(note_id)
        except NotFoundError:
            logger.info("Shared note %s does not exist", note_id)
            view.state = ShareState.NOT_FOUND
            return view
        except RepositoryError as e:
            logger.error("Shared note %s could not be fetched: %s | Context: %s", note_id, e.message, e.context)
            view.state = ShareState.NOT_FOUND
            return view

        view.state = ShareState.FOUND
        return view

    def copy_link(self, note_id: str, clipboard: Clipboard) -> str:
        """Copy the share link. Fire-and-forget: not retried, never raises."""
        url = self.share_url(note_id)
        try:
            clipboard.write_text(url)
        except Exception as e:
            logger.warning("Clipboard write failed for %s: %s", note_id, str(e))
            return url
        self.notifier.success("Link copied!", "Share URL has been copied to your clipboard.")
        return url
