"""
StickyShare Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the JSON API contract.
How:   FastAPI uses these models to serialize responses and generate the
       OpenAPI documentation.
Who:   Used by route handlers as return types.

Schemas are separate from the Note record model so the API can add or hide
fields without touching what the gateway stores.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from stickyshare.models.note import Note


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """Full representation of a note."""

    id: str = Field(description="Unique note identifier")
    content: Optional[str] = Field(default=None, description="Note text")
    image_url: Optional[str] = Field(default=None, description="Public URL of the note image")
    color: str = Field(description="Palette color (hex)")
    created_at: datetime = Field(description="When the note was created (UTC ISO 8601)")

    @classmethod
    def from_note(cls, note: Note) -> "NoteResponse":
        return cls(
            id=note.id,
            content=note.content,
            image_url=note.image_url,
            color=note.color.value,
            created_at=note.created_at,
        )


class NoteListResponse(BaseModel):
    """All notes, newest first."""

    notes: List[NoteResponse] = Field(description="Notes ordered by created_at descending")
    total_count: int = Field(description="Number of notes returned")


class ShareLinkResponse(BaseModel):
    """
    Canonical share link for a note.

    Format: {origin}/note/{id}. No query parameters, no signing, no expiry.
    """

    note_id: str = Field(description="Note identifier")
    url: str = Field(description="Shareable URL resolving to the single-note view")


class PaletteColor(BaseModel):
    name: str
    value: str


class PaletteResponse(BaseModel):
    """The fixed 8-color palette; `default` is what a new draft starts with."""

    colors: List[PaletteColor]
    default: str


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models: one error format across all endpoints
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Please select an image smaller than 5MB",
            "details": {"field": "image", "max_size": 5242880},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and gateway status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    gateway: str = Field(description="Storage gateway connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
