"""
StickyShare Backend — Gallery View State
=========================================

What:  Owns the displayed list of persisted notes.
How:   The list only changes on confirmed server results: a successful load
       replaces it, a confirmed delete removes one entry, a committed note is
       prepended. Failures leave it exactly as it was.
Who:   Built per page render; handed to the composer as its on_created target.
"""

import logging
from typing import List, Optional

from stickyshare.exceptions import RepositoryError
from stickyshare.models.note import Note
from stickyshare.services.note_repository import NoteRepository
from stickyshare.views.notifications import Notifier

logger = logging.getLogger(__name__)


class Gallery:
    def __init__(self, repository: NoteRepository, notifier: Notifier):
        self.repository = repository
        self.notifier = notifier
        self.notes: List[Note] = []
        # True until the first load resolves, success or failure
        self.loading = True
        self.load_failed = False

    @property
    def is_empty(self) -> bool:
        return not self.loading and not self.notes

    def find(self, note_id: str) -> Optional[Note]:
        return next((note for note in self.notes if note.id == note_id), None)

    async def load(self) -> bool:
        """Fetch the list. On failure the previous list is kept."""
        try:
            notes = await self.repository.list_notes()
        except RepositoryError as e:
            self.notifier.from_exception(e, title="Could not load notes")
            self.load_failed = True
            return False
        finally:
            self.loading = False

        self.notes = notes
        self.load_failed = False
        return True

    async def delete(self, note_id: str) -> bool:
        """Delete remotely, then drop the local copy. Failure keeps it."""
        try:
            await self.repository.delete_note(note_id)
        except RepositoryError as e:
            self.notifier.from_exception(e, title="Could not delete note")
            return False

        self.notes = [note for note in self.notes if note.id != note_id]
        self.notifier.success("Note deleted", "Your note has been removed.")
        return True

    def prepend(self, note: Note) -> None:
        """Add a freshly created note in front of everything else."""
        self.notes = [note] + [n for n in self.notes if n.id != note.id]
