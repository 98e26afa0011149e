# Middleware package init
"""
StickyShare Backend — Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    The request ID is set first so the logging middleware and the exception
    handlers can include it.
"""
