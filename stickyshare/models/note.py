"""
StickyShare Backend — Note Record Model
========================================

What:  The shape of a row in the gateway's `notes` table, plus the color palette.
How:   Pydantic model parsed straight from the JSON the gateway returns.
Who:   Produced by NoteRepository; consumed by views, templates and API schemas.

Table contract (owned by the hosted service, not by this application):
    id          uuid        default gen_random_uuid()
    content     text        nullable
    image_url   text        nullable
    color       text        not null
    created_at  timestamptz default now()

A note is never updated in place: it is inserted once and later deleted.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from stickyshare.exceptions import ValidationError


class NoteColor(str, Enum):
    """The fixed 8-color palette. The first entry is the composer default."""

    YELLOW = "#fef3c7"
    GREEN = "#dcfce7"
    PINK = "#fce7f3"
    BLUE = "#e0e7ff"
    PURPLE = "#f3e8ff"
    ROSE = "#fed7e2"
    ORANGE = "#fef2e2"
    TEAL = "#f0fdfa"

    @property
    def label(self) -> str:
        return self.name.lower()


PALETTE = tuple(NoteColor)
DEFAULT_COLOR = PALETTE[0]


def parse_color(value) -> NoteColor:
    """
    Map user input onto the palette.

    Accepts a NoteColor, a hex value in any case, or None/"" for the default.
    Raises ValidationError for anything outside the 8 palette entries.
    """
    if isinstance(value, NoteColor):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_COLOR
    try:
        return NoteColor(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            message=(
                f"Color '{value}' is not in the palette. "
                f"Allowed: {', '.join(c.value for c in PALETTE)}"
            ),
            field="color",
            title="Unknown color",
            context={"color": str(value)},
        )


class Note(BaseModel):
    """
    A persisted sticky note.

    Invariant: non-empty `content` OR a non-null `image_url`. The gateway does
    not enforce this; NoteRepository.insert_note() does, before submission.
    """

    id: str = Field(description="Opaque identifier assigned by the gateway")
    content: Optional[str] = Field(default=None, description="Note text")
    image_url: Optional[str] = Field(default=None, description="Public URL of the uploaded image")
    color: NoteColor = Field(description="Palette color chosen at creation")
    created_at: datetime = Field(description="Insert time assigned by the gateway")

    model_config = {"frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # Gateways may hand back integer or UUID ids; we only ever treat them as text
        return str(v)

    @field_validator("color", mode="before")
    @classmethod
    def normalize_color(cls, v):
        return v.lower() if isinstance(v, str) else v

    @property
    def has_content(self) -> bool:
        return bool(self.content and self.content.strip())

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, color='{self.color.value}', created_at='{self.created_at}')>"
