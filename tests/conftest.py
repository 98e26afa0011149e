"""
StickyShare Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── gateway: InMemoryGateway (records + blobs in dicts, no network)
    ├── repository / images / note_service: real services on that gateway
    ├── notifier: toast sink
    ├── sample_image: a tiny PNG as a StagedImage
    └── test_client: HTTPX AsyncClient bound to the app, using `gateway`
"""

import itertools
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Before any stickyshare import: settings are read once at import time
os.environ["GATEWAY_URL"] = "http://gateway.test"
os.environ["GATEWAY_API_KEY"] = "test-key-not-real"
os.environ["PUBLIC_ORIGIN"] = "http://sticky.test"
os.environ["LOG_LEVEL"] = "WARNING"

from stickyshare.services.gateway_base import GatewayError, StorageGateway  # noqa: E402
from stickyshare.services.image_service import ImageService, StagedImage  # noqa: E402
from stickyshare.services.note_repository import NoteRepository  # noqa: E402
from stickyshare.services.note_service import NoteService  # noqa: E402
from stickyshare.views.notifications import Notifier  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-Memory Gateway
# ══════════════════════════════════════════════════════════════════════════

class InMemoryGateway(StorageGateway):
    """
    Dict-backed StorageGateway.

    Assigns ids and strictly increasing created_at values on insert. Set
    `fail_on` to an operation name ("select", "insert", "delete", "upload")
    to make that operation raise GatewayError.
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.blobs: Dict[str, Dict[str, Any]] = {}
        self.fail_on: set = set()
        self.calls: List[str] = []
        self.healthy = True
        self._clock = itertools.count()
        self._epoch = datetime(2024, 6, 1, tzinfo=timezone.utc)

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise GatewayError(f"{operation} failed", status_code=503, body="unavailable")

    async def select(self, table, *, filters=None, order_by=None, descending=False, limit=None):
        self._maybe_fail("select")
        rows = [
            dict(row) for row in self.tables.get(table, [])
            if all(str(row.get(k)) == str(v) for k, v in (filters or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda row: row[order_by], reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def insert(self, table, values):
        self._maybe_fail("insert")
        row = {
            "id": str(uuid.uuid4()),
            "created_at": (self._epoch + timedelta(seconds=next(self._clock))).isoformat(),
            **values,
        }
        self.tables.setdefault(table, []).append(row)
        return dict(row)

    async def delete(self, table, *, filters):
        self._maybe_fail("delete")
        rows = self.tables.get(table, [])
        keep = [r for r in rows if not all(str(r.get(k)) == str(v) for k, v in filters.items())]
        self.tables[table] = keep
        return len(rows) - len(keep)

    async def upload(self, bucket, key, content, content_type):
        self._maybe_fail("upload")
        self.blobs[f"{bucket}/{key}"] = {"content": content, "content_type": content_type}

    def public_url(self, bucket, key):
        return f"http://gateway.test/storage/v1/object/public/{bucket}/{key}"

    async def health_check(self):
        return self.healthy

    def seed(self, table: str = "notes", **values) -> Dict[str, Any]:
        """Insert a row synchronously (test setup)."""
        row = {
            "id": str(uuid.uuid4()),
            "created_at": (self._epoch + timedelta(seconds=next(self._clock))).isoformat(),
            "content": None,
            "image_url": None,
            "color": "#fef3c7",
            **values,
        }
        self.tables.setdefault(table, []).append(row)
        return row


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def repository(gateway) -> NoteRepository:
    return NoteRepository(gateway, table="notes")


@pytest.fixture
def images(gateway) -> ImageService:
    return ImageService(gateway, bucket="note-images", max_size=5_242_880)


@pytest.fixture
def note_service(repository, images) -> NoteService:
    return NoteService(repository, images)


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def sample_png_bytes() -> bytes:
    """Smallest useful PNG: signature + IHDR chunk header (not decodable, but typed)."""
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"


@pytest.fixture
def sample_image(sample_png_bytes) -> StagedImage:
    return StagedImage(filename="photo.png", content_type="image/png", content=sample_png_bytes)


@pytest.fixture
def make_image():
    """Factory for StagedImages of an exact size."""
    def _make(size: int, content_type: str = "image/jpeg", filename: str = "big.jpg") -> StagedImage:
        return StagedImage(filename=filename, content_type=content_type, content=b"\x00" * size)
    return _make


@pytest_asyncio.fixture
async def test_client(gateway):
    """
    HTTPX AsyncClient talking to the app in-process via ASGITransport.

    The app's gateway is the test's InMemoryGateway.
    """
    from stickyshare.main import app

    app.state.gateway = gateway
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.state.gateway = None
