"""
StickyShare Backend — Note Composer (Draft State Machine)
==========================================================

What:  Manages the in-progress note until it is committed or discarded.
How:   Three states with explicit transitions; every failure lands back in
       DRAFTING with the draft untouched.

State Machine:
    IDLE ──open──▶ DRAFTING ──commit──▶ COMMITTING ──success──▶ IDLE
                     │  ▲                    │
                     │  └──────failure───────┘
                     └──cancel──▶ IDLE

    edit (content | image | color) keeps DRAFTING.
    commit is refused while the draft is empty, and raises
    ComposerStateError while COMMITTING (no double submit).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from stickyshare.exceptions import ComposerStateError, StickyShareError, ValidationError
from stickyshare.models.note import DEFAULT_COLOR, Note, NoteColor, parse_color
from stickyshare.services.image_service import ImageService, StagedImage
from stickyshare.services.note_service import NoteService
from stickyshare.views.notifications import Notifier

logger = logging.getLogger(__name__)


class ComposerState(str, Enum):
    IDLE = "idle"
    DRAFTING = "drafting"
    COMMITTING = "committing"


@dataclass
class Draft:
    """The unsaved note. Never persisted."""

    content: str = ""
    image: Optional[StagedImage] = None
    image_preview: Optional[str] = None
    selected_color: NoteColor = field(default=DEFAULT_COLOR)

    @property
    def has_payload(self) -> bool:
        return bool(self.content.strip()) or self.image is not None


class NoteComposer:
    """
    Draft authoring state machine.

    Args:
        note_service: Runs the upload + insert on commit.
        images: Validates and previews images as they are attached.
        notifier: Receives toasts for every user-visible outcome.
        on_created: Called with the new note after a successful commit
            (the gallery's prepend).
    """

    def __init__(
        self,
        note_service: NoteService,
        images: ImageService,
        notifier: Notifier,
        on_created: Optional[Callable[[Note], None]] = None,
    ):
        self.note_service = note_service
        self.images = images
        self.notifier = notifier
        self.on_created = on_created
        self.state = ComposerState.IDLE
        self.draft: Optional[Draft] = None

    def _require(self, action: str, *allowed: ComposerState) -> None:
        if self.state not in allowed:
            raise ComposerStateError(action=action, state=self.state.value)

    # ── Transitions ───────────────────────────────────────────────────────

    def open(self) -> Draft:
        self._require("open", ComposerState.IDLE)
        self.draft = Draft()
        self.state = ComposerState.DRAFTING
        return self.draft

    def cancel(self) -> None:
        self._require("cancel", ComposerState.DRAFTING)
        self.draft = None
        self.state = ComposerState.IDLE

    def set_content(self, content: str) -> None:
        self._require("edit", ComposerState.DRAFTING)
        self.draft.content = content or ""

    def set_color(self, color) -> bool:
        """Pick a palette color. Unknown colors are refused with a toast."""
        self._require("edit", ComposerState.DRAFTING)
        try:
            self.draft.selected_color = parse_color(color)
        except ValidationError as e:
            self.notifier.from_exception(e)
            return False
        return True

    def attach_image(self, image: StagedImage) -> bool:
        """
        Validate then preview an image. A rejected image leaves the draft as it was.

        Returns:
            True when the image was staged.
        """
        self._require("edit", ComposerState.DRAFTING)
        try:
            self.images.validate(image)
        except ValidationError as e:
            self.notifier.from_exception(e)
            return False
        self.draft.image = image
        self.draft.image_preview = self.images.preview(image)
        return True

    def remove_image(self) -> None:
        self._require("edit", ComposerState.DRAFTING)
        self.draft.image = None
        self.draft.image_preview = None

    @property
    def can_commit(self) -> bool:
        return self.state is ComposerState.DRAFTING and self.draft.has_payload

    async def commit(self) -> Optional[Note]:
        """
        Upload the staged image (if any), then insert the note.

        Returns:
            The created note, or None when the commit was refused or failed.
            In both cases the composer stays in DRAFTING with the draft intact.

        Raises:
            ComposerStateError: called while IDLE or already COMMITTING.
        """
        self._require("commit", ComposerState.DRAFTING)
        draft = self.draft
        if not draft.has_payload:
            self.notifier.error("Empty note", "Write something or add an image before saving.")
            return None

        # Set before the first await so a second commit() sees the gate
        self.state = ComposerState.COMMITTING
        try:
            note = await self.note_service.create_note(
                color=draft.selected_color,
                content=draft.content,
                image=draft.image,
            )
        except StickyShareError as e:
            self.state = ComposerState.DRAFTING
            logger.warning("Commit failed (%s): %s", type(e).__name__, e.message)
            self.notifier.from_exception(e, title="Could not save note")
            return None

        self.draft = None
        self.state = ComposerState.IDLE
        if self.on_created is not None:
            self.on_created(note)
        self.notifier.success("Note created!", "Your note has been saved successfully.")
        return note
