"""
StickyShare Backend — Application Package Initializer
=====================================================

What: Marks the `stickyshare` directory as a Python package.
Who:  Used by uvicorn (`stickyshare.main:app`), pytest, and every module import.

Architecture Note:
    ┌─────────────────────────────────────┐
    │      Routes (Pages + JSON API)      │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Views (Composer, Gallery, Share)  │  ← UI state, toasts
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Repository, uploads, create flow
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Pydantic
    ├─────────────────────────────────────┤
    │    Storage Gateway (hosted, HTTP)   │  ← Records + public blobs
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
