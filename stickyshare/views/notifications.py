"""
StickyShare Backend — Toast Notifications
==========================================

What:  Collects transient user-visible notifications raised by the views.
How:   Plain in-memory list; the page template renders whatever was pushed
       during the request. Nothing flows back into business logic.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

from stickyshare.exceptions import StickyShareError, ValidationError

logger = logging.getLogger(__name__)


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str
    variant: ToastVariant = ToastVariant.DEFAULT


class Notifier:
    """Fire-and-forget toast sink, one per page render."""

    def __init__(self) -> None:
        self.toasts: List[Toast] = []

    def success(self, title: str, description: str) -> None:
        self.toasts.append(Toast(title, description))

    def error(self, title: str, description: str) -> None:
        self.toasts.append(Toast(title, description, ToastVariant.DESTRUCTIVE))

    def from_exception(self, exc: StickyShareError, title: str = "Something went wrong") -> None:
        """Turn an application error into a destructive toast."""
        if isinstance(exc, ValidationError):
            title = exc.title
        logger.debug("Toast for %s: %s", type(exc).__name__, exc.message)
        self.error(title, exc.message)

    def clear(self) -> None:
        self.toasts.clear()
