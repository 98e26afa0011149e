"""
StickyShare Backend — Note Repository
======================================

What:  The four note operations, on top of the storage gateway's record store.
How:   Translates GatewayError into RepositoryError, "no row" into NotFoundError,
       and gateway rows into Note models.
Who:   Used by NoteService (insert), Gallery (list/delete), ShareResolver (get)
       and the JSON API.

Operations:
    list_notes()   → all notes, created_at DESC
    insert_note()  → gateway assigns id and created_at
    delete_note()  → idempotent; a missing id is not an error
    get_note()     → NotFoundError vs RepositoryError are kept distinct
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from stickyshare.config import settings
from stickyshare.exceptions import NotFoundError, RepositoryError, ValidationError
from stickyshare.models.note import Note, NoteColor, parse_color
from stickyshare.services.gateway_base import GatewayError, StorageGateway

logger = logging.getLogger(__name__)


class NoteRepository:
    """
    Record-store access for notes.

    Stateless apart from the gateway handle and table name; one instance can
    serve every request.
    """

    def __init__(self, gateway: StorageGateway, table: Optional[str] = None):
        self.gateway = gateway
        self.table = table or settings.notes_table

    def _to_note(self, row: Dict[str, Any]) -> Note:
        try:
            return Note.model_validate(row)
        except PydanticValidationError as e:
            logger.error("Gateway returned a malformed note row: %s", str(e))
            raise RepositoryError(
                message="The note store returned data we could not read.",
                context={"row_keys": sorted(row.keys())},
            ) from e

    async def list_notes(self) -> List[Note]:
        """
        Fetch every note, newest first.

        Raises:
            RepositoryError: transport or service failure. Callers keep their
                previous list untouched.
        """
        try:
            rows = await self.gateway.select(
                self.table, order_by="created_at", descending=True
            )
        except GatewayError as e:
            logger.error("Gateway error listing notes: %s", e.message)
            raise RepositoryError(
                message="Could not load notes. Please try again.",
                context=e.context,
            ) from e

        notes = [self._to_note(row) for row in rows]
        logger.debug("Listed %d notes", len(notes))
        return notes

    async def insert_note(
        self,
        color: NoteColor,
        content: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> Note:
        """
        Insert a new note; the gateway assigns `id` and `created_at`.

        Raises:
            ValidationError: neither content nor image_url is present.
            RepositoryError: the insert failed. Nothing was created locally.
        """
        if not (content and content.strip()) and not image_url:
            raise ValidationError(
                message="A note needs some text or an image.",
                field="content",
                title="Empty note",
            )

        values: Dict[str, Any] = {
            "content": content if content and content.strip() else None,
            "image_url": image_url,
            "color": parse_color(color).value,
        }
        try:
            row = await self.gateway.insert(self.table, values)
        except GatewayError as e:
            logger.error("Gateway error inserting note: %s", e.message)
            raise RepositoryError(
                message="Could not save your note. Please try again.",
                context=e.context,
            ) from e

        note = self._to_note(row)
        logger.info("Note inserted: %s (color=%s, image=%s)", note.id, note.color.value, bool(image_url))
        return note

    async def delete_note(self, note_id: str) -> None:
        """
        Delete a note by id.

        Deleting an id that does not exist succeeds silently.

        Raises:
            RepositoryError: the gateway could not be reached or refused.
        """
        try:
            removed = await self.gateway.delete(self.table, filters={"id": note_id})
        except GatewayError as e:
            logger.error("Gateway error deleting note %s: %s", note_id, e.message)
            raise RepositoryError(
                message="Could not delete the note. Please try again.",
                context={"note_id": note_id, **e.context},
            ) from e

        if removed:
            logger.info("Note deleted: %s", note_id)
        else:
            logger.debug("Delete for %s matched no rows", note_id)

    async def get_note(self, note_id: str) -> Note:
        """
        Fetch one note by id.

        Raises:
            NotFoundError: the gateway answered and has no such note.
            RepositoryError: the gateway could not be reached or failed.
        """
        try:
            row = await self.gateway.select_one(self.table, filters={"id": note_id})
        except GatewayError as e:
            logger.error("Gateway error fetching note %s: %s", note_id, e.message)
            raise RepositoryError(
                message="Could not retrieve the note. Please try again.",
                context={"note_id": note_id, **e.context},
            ) from e

        if row is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return self._to_note(row)
