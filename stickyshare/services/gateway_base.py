"""
StickyShare Backend — Abstract Storage Gateway Interface
=========================================================

What:  Abstract base class for the hosted record + blob service.
How:   Concrete implementations inherit from StorageGateway and speak the
       provider's wire protocol. Everything above this layer (repository,
       image uploads, health check) talks only to this interface.
Who:   Implemented by HttpStorageGateway; replaced by an in-memory double in tests.

Contract consumed (not defined) by this application:
    Record store:  filtered/sorted select, insert-returning, delete by filter,
                   select-one with "maybe none" semantics.
    Blob store:    named upload and public-URL resolution.

Atomicity of each insert/delete is whatever the gateway guarantees; this
application adds no locking or transactions on top.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class GatewayError(Exception):
    """
    Low-level gateway failure (transport error, non-2xx status, bad body).

    Callers translate this into RepositoryError or UploadError; it never
    reaches a route handler directly.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body

    @property
    def context(self) -> Dict[str, Any]:
        ctx: Dict[str, Any] = {"gateway_error": self.message}
        if self.status_code is not None:
            ctx["status_code"] = self.status_code
        if self.body:
            ctx["body"] = self.body
        return ctx


class StorageGateway(ABC):
    """
    Interface to the hosted storage service.

    Filters are equality matches: ``{"id": "abc"}`` selects rows whose
    ``id`` column equals ``"abc"``.
    """

    # ── Record Store ──────────────────────────────────────────────────────

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Return matching rows, optionally ordered and limited."""
        ...

    @abstractmethod
    async def insert(self, table: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert one row and return it as stored.

        The returned row includes gateway-assigned columns (id, created_at).
        """
        ...

    @abstractmethod
    async def delete(self, table: str, *, filters: Dict[str, Any]) -> int:
        """Delete matching rows. Returns how many rows were removed."""
        ...

    async def select_one(
        self, table: str, *, filters: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Return the first matching row, or None when nothing matches."""
        rows = await self.select(table, filters=filters, limit=1)
        return rows[0] if rows else None

    # ── Blob Store ────────────────────────────────────────────────────────

    @abstractmethod
    async def upload(
        self, bucket: str, key: str, content: bytes, content_type: str
    ) -> None:
        """Store `content` under `key`. Existing keys are not overwritten."""
        ...

    @abstractmethod
    def public_url(self, bucket: str, key: str) -> str:
        """Return the publicly resolvable URL of an uploaded object."""
        ...

    # ── Health ────────────────────────────────────────────────────────────

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the gateway answers; never raises."""
        ...

    async def aclose(self) -> None:
        """Release network resources. Called during application shutdown."""
        return None
